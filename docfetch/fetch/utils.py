import re
from datetime import datetime
from urllib.parse import urlparse
from zoneinfo import ZoneInfo
from docfetch.core.config import settings

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_WHITESPACE_RE = re.compile(r"\s")

def now_timestamp_str(tz_name: str = None) -> str:
    """Current wall-clock time in the configured zone, e.g. '2025-10-27 14:30:00'"""
    return datetime.now(ZoneInfo(tz_name or settings.TIMEZONE)).strftime(TIMESTAMP_FORMAT)

def is_well_formed_url(url: str) -> bool:
    """
    Absolute URL check: scheme and host present, no embedded whitespace.
    """
    if not url or not isinstance(url, str) or _WHITESPACE_RE.search(url):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)

def is_allowed_source_url(url: str, marker: str = None) -> bool:
    """
    Coarse allow-list check for document sources.

    The marker only has to appear somewhere in the URL, so
    'https://evil.example/?q=docs.google.com' passes as well.
    """
    marker = settings.ALLOWED_URL_MARKER if marker is None else marker
    return is_well_formed_url(url) and marker in url
