"""URL canonicalization and item-scope filtering.

The canonical form of a URL (scheme + host + path, no query, no fragment) is
the only identity the crawler uses for deduplication, so two links that differ
only in tracking parameters collapse into the same key.
"""

import logging
import re
from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from harvester.site_profile import SiteProfile

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = {"http", "https"}

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(value: Optional[str]) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


def _strip(raw: str) -> Optional[str]:
    parts = urlsplit(raw)
    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES or not parts.hostname:
        return None
    # Reading the port raises ValueError when it is non-numeric or out of range
    _ = parts.port
    return urlunsplit((scheme, parts.netloc.lower(), parts.path or "/", "", ""))


def canonicalize(raw: Optional[str], base_url: Optional[str] = None) -> Optional[str]:
    """Reduce a URL to scheme + host + path.

    Args:
        raw: URL or relative reference as found on the page
        base_url: Page URL to resolve relative references against

    Returns:
        Canonical URL, or None if the input cannot be parsed as an
        http(s) URL even after truncating at the first '?'
    """
    if not raw:
        return None
    raw = raw.strip()
    if not raw:
        return None

    try:
        absolute = urljoin(base_url, raw) if base_url else raw
        return _strip(absolute)
    except ValueError as e:
        logger.debug(f"Unparseable URL {raw!r}: {e}")

    # Fallback: drop everything from the first '?' (and any fragment) and retry.
    # urlsplit itself only rejects a malformed authority, which truncation
    # cannot repair, so with it this retry ends in None; the success path
    # serves parsers that also reject malformed queries.
    truncated = raw.split("?", 1)[0].split("#", 1)[0]
    try:
        absolute = urljoin(base_url, truncated) if base_url else truncated
        return _strip(absolute)
    except ValueError:
        return None


def _host_without_www(host: str) -> str:
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


def is_in_scope_item(url: Optional[str], profile: SiteProfile) -> bool:
    """Decide whether a canonical URL looks like an item page of the profile's site.

    A URL is excluded when its host differs (ignoring 'www.'), when its
    first path segment is on the profile's deny-list, or when its path is
    shallower than ``profile.min_path_depth``.
    """
    if not url:
        return False
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return False

    if not host or _host_without_www(host) != profile.host:
        return False

    segments = [segment for segment in parts.path.split("/") if segment]
    if len(segments) < profile.min_path_depth:
        return False

    if segments[0].lower() in profile.blocked_first_segments:
        return False

    return True
