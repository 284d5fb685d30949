"""
LearnLoop Backend - API Routes Package
======================================

Route Inventory (all under API_PREFIX, default /api/v1, except health):
    - auth.py:     /auth/register, /auth/login, /auth/google-login,
                   /auth/logout, /auth/current-user, /auth/update-profile,
                   /auth/stats
    - tasks.py:    /tasks CRUD + /tasks/{id}/toggle
    - notes.py:    /notes summarization CRUD (multipart)
    - learning.py: /ai learning guides
    - files.py:    /files/{path} stored uploads
    - health.py:   GET /health

Routes are thin: parse the request, call one service, wrap the result in
the response envelope. Business rules live in app.services.
"""
