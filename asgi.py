"""
ASGI entry point.

The credential verifier belongs to the deployment; without one wired in,
POST /auth/login answers 503 and /health reports "degraded".

Run with:
    uvicorn asgi:app --reload
"""

from app import create_app

app = create_app()
