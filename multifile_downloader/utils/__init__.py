"""Utility helpers for URL resolution and logging."""

from multifile_downloader.utils.url import (
    UrlKind,
    classify_url,
    extract_domain,
    filename_from_url,
    require_valid_url,
    resolve_url,
    validate_url,
)
from multifile_downloader.utils.log import setup_logging, log

__all__ = [
    "UrlKind",
    "classify_url",
    "extract_domain",
    "filename_from_url",
    "require_valid_url",
    "resolve_url",
    "validate_url",
    "setup_logging",
    "log",
]
