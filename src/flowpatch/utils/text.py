from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit

_HOST_RE = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,63}(?::\d+)?(?:/.*)?$"
)


def normalize_text(text: str) -> str:
    """
    Normalizes text for case- and whitespace-insensitive comparison.
    """
    text = text.lower()
    text = re.sub(r"\s+", " ", text)
    return text.strip()


def extract_host(value: str) -> Optional[str]:
    """
    Return the hostname of a URL or bare hostname, or None when the
    value does not look like either.
    """
    candidate = value.strip().lower()
    if not candidate or " " in candidate:
        return None

    if "://" not in candidate and not candidate.startswith("//"):
        if not _HOST_RE.match(candidate):
            return None
        candidate = f"//{candidate}"

    try:
        return urlsplit(candidate).hostname or None
    except ValueError:
        # malformed netloc, e.g. an unbalanced IPv6 bracket
        return None


def host_matches(host: str, pattern: str) -> bool:
    """
    Match ``host`` against ``example.com`` (exact) or ``*.example.com``
    (any subdomain).
    """
    pattern = pattern.strip().lower()
    if pattern.startswith("*."):
        return host.endswith(pattern[1:])
    return host == pattern
