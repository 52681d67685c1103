"""searchchat HTTP server (FastAPI)."""

from .app import create_api, require_context

__all__ = ["create_api", "require_context"]
