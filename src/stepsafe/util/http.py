"""
Helpers for logging HTTP failures without leaking credentials.
"""

from __future__ import annotations

import re

import requests

_KEY_PATTERN = re.compile(r"(key=)[^&\s]+", re.IGNORECASE)


def redact_url(url: str) -> str:
    return _KEY_PATTERN.sub(r"\1***", url or "")


def format_request_exception(exc: requests.RequestException) -> str:
    """Describe a requests failure with status code and a redacted URL."""
    response = getattr(exc, "response", None)
    request = getattr(exc, "request", None)
    url = getattr(response, "url", None) or getattr(request, "url", None) or ""
    status = getattr(response, "status_code", None)
    message = redact_url(str(exc))
    parts = [type(exc).__name__]
    if status is not None:
        parts.append(f"status={status}")
    if url:
        parts.append(f"url={redact_url(url)}")
    parts.append(message)
    return " ".join(parts)
