"""Pydantic models shared by the editor, the core and the HTTP service."""
