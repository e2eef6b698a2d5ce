"""Regular expressions used to spot media IDs inside stored text.

Patterns stick to the POSIX ERE subset (no lookarounds, no ``\\b``) so the
same string works with SQLAlchemy's ``regexp_match`` on SQLite (Python
``re``), PostgreSQL (``~``) and MySQL (``REGEXP``).
"""

from __future__ import annotations

_REGEX_SPECIAL = frozenset("\\.+*?[^]$(){}|")

NON_DIGIT_OR_END = "([^0-9]|$)"


def quote_for_sql_regex(raw: str) -> str:
    """Escape ``raw`` so it is matched literally inside an ERE pattern."""

    return "".join(f"\\{char}" if char in _REGEX_SPECIAL else char for char in raw)


def numeric_boundary_pattern(media_id: int) -> str:
    """Match ``media_id`` as a whole number: ``12`` hits ``id:12,`` but not ``120``."""

    return f"(^|[^0-9]){int(media_id)}{NON_DIGIT_OR_END}"


def content_reference_pattern(media_id: int) -> str:
    """Alternation of the markup forms editors use to embed an attachment.

    Covers the editor image class, the attachment CSS class, block JSON
    ``"id":N``, ``data-id="N"`` attributes and ``N`` as a delimited entry of a
    gallery shortcode ``ids="..."`` list.
    """

    media = str(int(media_id))
    quoted = quote_for_sql_regex
    parts = [
        quoted(f"wp-image-{media}") + NON_DIGIT_OR_END,
        quoted(f"attachment_{media}") + NON_DIGIT_OR_END,
        quoted(f'"id":{media}') + NON_DIGIT_OR_END,
        quoted(f'data-id="{media}"'),
        quoted('ids="') + '([^"]*[^0-9"])?' + quoted(media) + '([^0-9"][^"]*)?"',
    ]
    return "(" + "|".join(parts) + ")"


__all__ = [
    "content_reference_pattern",
    "numeric_boundary_pattern",
    "quote_for_sql_regex",
]
