# Middleware package init
"""
NoteNest Backend - Middleware Package
=======================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation ID for logs and error bodies
    2. Logging: one access line per request, with duration and status
    3. CORS: FastAPI's CORSMiddleware

Authentication is NOT middleware here: the access guard is a dependency
composed explicitly onto each protected route (see routes/dependencies.py),
so public routes need no exclusion list.
"""
