"""Service composition for media-gc."""

from .container import CleanupServices, build_services

__all__ = ["CleanupServices", "build_services"]
