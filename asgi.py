"""
asgi.py -- ASGI entry point for Jobly.

Run with:  uvicorn asgi:app --reload
           uvicorn asgi:app --host 0.0.0.0 --port 8000   (with SECRET_KEY set)
"""

from api.main import app

__all__ = ["app"]
