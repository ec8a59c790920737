"""
asgi.py -- ASGI entry point for the CV registry.

Run with:  uvicorn asgi:app --reload

JWT_SECRET and DATABASE_URL must be set in the environment (or .env);
importing the app without them raises a pydantic ValidationError.
"""

from api.main import app

__all__ = ["app"]
