"""
LearnLoop Backend - Services Layer
==================================

Business rules between the routes and the database. Each service is a
plain class with a module-level singleton; methods take the request's
AsyncSession explicitly and never commit (get_db_session does).

Service Inventory:
    - AuthService:     registration, local and Google login, profile updates
    - TaskService:     owner-scoped task CRUD and toggle
    - NoteService:     upload → extract → store → summarize → persist
    - LearningService: AI roadmap generation and guide listing
    - StatsService:    per-user counters
    - GeminiService:   LLMService implementation backed by Google Gemini
    - FileService:     upload validation, local storage, cleanup
"""
