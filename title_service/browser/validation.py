"""
Purpose:
- Validate the raw `url` query parameter before any browser work happens.
- Enforce the optional hostname allowlist from settings.

Rules run in order and the first failure wins; the reason strings are part of
the public API (they are returned verbatim as the 400 error message).
"""

from __future__ import annotations
from typing import Iterable, Optional
from urllib.parse import urlsplit, SplitResult
from .schema import UrlValidation

MAX_URL_LENGTH = 2048
ALLOWED_SCHEMES = ("http", "https")

MISSING_URL = "Missing 'url' parameter"
URL_TOO_LONG = f"URL too long (max {MAX_URL_LENGTH} characters)"
INVALID_URL = "Invalid URL format"
SCHEME_NOT_ALLOWED = "Only HTTP(S) URLs are allowed"
HOST_NOT_ALLOWED = "Host not in allowed list"

def _split(raw: str) -> SplitResult:
    parts = urlsplit(raw)
    if parts.scheme.lower() in ALLOWED_SCHEMES and not parts.netloc:
        # browsers read "http:host" and "http:/host" as "http://host"
        rest = raw[len(parts.scheme) + 1:].lstrip("/\\")
        if rest:
            parts = urlsplit(f"{parts.scheme}://{rest}")
    return parts

def _parse(raw: str) -> Optional[SplitResult]:
    try:
        parts = _split(raw.strip())
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    if not parts.scheme:
        return None
    if any(ch.isspace() for ch in parts.netloc):
        return None
    # http(s) URLs must carry a host; opaque schemes (mailto:, ftp:) are judged by scheme below
    if parts.scheme.lower() in ALLOWED_SCHEMES and not parts.hostname:
        return None
    return parts

def is_host_allowed(hostname: str, allowed_hosts: Iterable[str]) -> bool:
    """Exact, case-insensitive hostname membership."""
    return (hostname or "").lower() in {h.lower() for h in allowed_hosts}

def validate_url(raw: Optional[str], allowed_hosts: Iterable[str] = ()) -> UrlValidation:
    if not raw:
        return UrlValidation(valid=False, error=MISSING_URL)

    if len(raw) > MAX_URL_LENGTH:
        return UrlValidation(valid=False, error=URL_TOO_LONG)

    parts = _parse(raw)
    if parts is None:
        return UrlValidation(valid=False, error=INVALID_URL)

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return UrlValidation(valid=False, error=SCHEME_NOT_ALLOWED)

    allowed = list(allowed_hosts)
    if allowed and not is_host_allowed(parts.hostname or "", allowed):
        return UrlValidation(valid=False, error=HOST_NOT_ALLOWED)

    return UrlValidation(valid=True)
