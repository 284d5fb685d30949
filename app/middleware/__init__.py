"""
LearnLoop Backend - Middleware Package
======================================

Cross-cutting concerns applied to every request, plus the auth gate
dependency used by protected routes.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Access Log] → [GZip] → [CORS] → Route

"""
