"""
Utility functions for flowpatch.

This module contains low-level helpers used across the system.
No domain logic should live here.
"""

from flowpatch.utils.text import normalize_text, extract_host, host_matches
from flowpatch.utils.helpers import utc_now, serialized_size, percentile

__all__ = [
    "normalize_text",
    "extract_host",
    "host_matches",
    "utc_now",
    "serialized_size",
    "percentile",
]
