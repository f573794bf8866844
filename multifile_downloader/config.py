"""
Configuration constants for the multi-file page downloader.
"""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULT_OUTPUT = str(Path.home() / "Downloads" / "mp4_downloads")
# The credentials file path can also be supplied via MFD_CREDENTIALS_FILE
DEFAULT_CREDENTIALS_FILE = os.environ.get(
    "MFD_CREDENTIALS_FILE",
    str(Path.home() / "Downloads" / "download_mp4_credentials_file.txt"),
)
DEFAULT_SELECTION = "all"

# ---------------------------------------------------------------------------
# HTTP tuning
# ---------------------------------------------------------------------------
REQUEST_TIMEOUT = 30
MAX_RETRIES = 3

# Chunk size for streaming downloads to disk (512 KiB)
STREAM_CHUNK = 524288

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

PAGE_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}

# Sent in addition to PAGE_HEADERS when the page is fetched with a session
AUTH_PAGE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

# ---------------------------------------------------------------------------
# Forum login (vBulletin-style)
# ---------------------------------------------------------------------------
LOGIN_URL_TEMPLATE = "https://{domain}/login.php"
LOGIN_USERNAME_FIELD = "vb_login_username"
LOGIN_PASSWORD_FIELD = "vb_login_password"
LOGIN_EXTRA_FIELDS = {"do": "login", "cookieuser": "1"}
LOGIN_SUCCESS_MARKER = "Thank you for logging in"

# Content-validation markers for forum thread pages.  Each entry is a
# group of alternatives; a group passes when any of its strings occurs.
CONTENT_MARKERS: tuple[tuple[str, ...], ...] = (
    ("showthread",),
    ("postbit", "post_"),
)

# ---------------------------------------------------------------------------
# Credentials file
# ---------------------------------------------------------------------------
CREDENTIALS_HEADER = (
    "# MP4 files downloader | Multifile downloader - Credentials File\n"
    "# Format: domain|username|password|description\n"
    "# Example: example.com|myuser|mypass|My page Account\n"
    "# Lines starting with # are comments and will be ignored\n"
)
CREDENTIALS_SEPARATOR = "|"
