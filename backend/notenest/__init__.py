"""
NoteNest Backend - Application Package Initializer
==================================================

What: Marks the `notenest` directory as a Python package.
Who:  Imported by uvicorn (`notenest.main:app`), pytest, and `python -m notenest`.

Architecture Note:
    The backend is layered the same way top to bottom:

    ┌─────────────────────────────────────┐
    │     Routes (API Layer) + Guard      │  ← HTTP concerns, bearer auth
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Auth, notes, images, tokens
    ├─────────────────────────────────────┤
    │  Models & Schemas │ File Storage    │  ← SQLAlchemy + Pydantic │ disk
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services never import FastAPI request objects; they receive a database
    session per call and a FileStorage at construction, so each layer can be
    exercised on its own in tests.
"""

__version__ = "1.0.0"
