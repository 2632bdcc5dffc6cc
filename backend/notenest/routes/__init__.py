# Routes package init
"""
NoteNest Backend - API Routes Package
=======================================

Route Inventory:
    - auth.py:    POST   /api/auth/register       (public)
                  POST   /api/auth/login          (public)
    - notes.py:   GET    /api/notes
                  GET    /api/notes/{id}
                  POST   /api/notes
                  PUT    /api/notes/{id}
                  DELETE /api/notes/{id}
    - images.py:  POST   /api/notes/{id}/images
                  DELETE /api/images/{id}
    - health.py:  GET    /health                  (public)

Routes stay thin: they read the request, resolve the caller through the
access guard dependency, call a service, and shape the response.
"""
