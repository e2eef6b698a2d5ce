"""Reachability scan for attachments owned by deleted posts."""

from .patterns import content_reference_pattern, numeric_boundary_pattern, quote_for_sql_regex
from .reference_scanner import ReferenceScanner, ScanSession

__all__ = [
    "ReferenceScanner",
    "ScanSession",
    "content_reference_pattern",
    "numeric_boundary_pattern",
    "quote_for_sql_regex",
]
