"""Database models and utilities for the content store."""

from .db_models import (
    Base,
    CommentModel,
    OptionModel,
    PostMetaModel,
    PostModel,
    ScheduledEventModel,
    TermMetaModel,
    TransientModel,
)

__all__ = [
    "Base",
    "CommentModel",
    "OptionModel",
    "PostMetaModel",
    "PostModel",
    "ScheduledEventModel",
    "TermMetaModel",
    "TransientModel",
]
