"""Pydantic request/response models for the NoteNest API."""
