"""media-gc: conservative cleanup of media left behind by deleted posts.

The reference scanner decides whether an attachment still appears to be used;
the deletion coordinator and queue processor apply those verdicts either
synchronously or through a lock-protected background queue.
"""

from .services.container import CleanupServices, build_services

__all__ = ["CleanupServices", "build_services"]
