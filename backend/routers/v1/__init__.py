"""API v1 Route modules."""

from backend.routers.v1 import pay

__all__ = ["pay"]
