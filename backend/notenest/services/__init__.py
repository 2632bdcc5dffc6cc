# Services package init
"""
NoteNest Backend - Services Layer
===================================

What:  Business logic between routes (HTTP) and persistence (database, disk).

Service Inventory:
    - TokenService:  issues and verifies identity tokens (JWT)
    - AccessGuard:   turns an Authorization header into Identity or Denial
    - AuthService:   registration and login
    - NoteService:   owner-scoped note CRUD, file cleanup on delete
    - ImageService:  bounded uploads, ownership checks, file/row consistency
    - FileStorage:   put/delete/exists over the upload directory

Services receive the database session on each call and never touch FastAPI
request objects.
"""
