"""API routers for the preview FastAPI application."""

from . import logs, preview, status

__all__ = [
    "logs",
    "preview",
    "status",
]
