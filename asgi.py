"""
asgi.py -- ASGI entry point for the guardian service.

Run with:  uvicorn asgi:app --reload
"""

from api.main import app

__all__ = ["app"]
