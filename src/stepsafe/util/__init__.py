"""
Shared utility helpers for filesystem, strings, HTTP errors and time calculations.
"""

from .filesystem import ensure_directory, file_lock, read_json_file, safe_unlink, write_text_file
from .http import format_request_exception, redact_url
from .text import slugify
from .time import utc_now, is_file_stale, get_local_now, yesterday_of, hour_of, hour_after

__all__ = [
    "ensure_directory",
    "file_lock",
    "read_json_file",
    "safe_unlink",
    "write_text_file",
    "format_request_exception",
    "redact_url",
    "slugify",
    "utc_now",
    "is_file_stale",
    "get_local_now",
    "yesterday_of",
    "hour_of",
    "hour_after",
]
