"""HTTP API for City Mobility."""

from .routes import router

__all__ = ["router"]
