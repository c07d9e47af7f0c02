# (c) Copyright Datacraft, 2026
"""Gateway server for development and integration tests."""
from .router import create_app, router

__all__ = ["create_app", "router"]
