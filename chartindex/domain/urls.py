"""
Building retrieval URLs for chart archives.

resolve_url() is a two step strategy: first a URL-aware join of the base
location and the archive file name; if the base cannot be parsed as a URL the
join degrades to a plain path join instead of failing the whole operation.
"""

from __future__ import annotations

import logging
import os
import posixpath
import re
from urllib.parse import SplitResult, quote, urlsplit, urlunsplit

from .errors import UrlJoinDegraded

logger = logging.getLogger(__name__)


_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")

# Characters that may appear unescaped in a URL path (RFC 3986 pchar + "/").
# "%" is kept so existing escapes survive the round trip.
_PATH_SAFE = "/%:@!$&'()*+,;=~"


def _clean_join(*elements: str) -> str:
    """
    Join path elements with "/" and clean the result.

    Empty elements are ignored; the result has no duplicate slashes, no "."
    segments and resolved ".." segments. An empty input gives "".
    """
    parts = [e for e in elements if e]
    if not parts:
        return ""
    cleaned = posixpath.normpath("/".join(parts))
    # normpath keeps a leading "//" (POSIX allows it to be special).
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def _parse_base(base_url: str) -> SplitResult:
    if _CONTROL_RE.search(base_url):
        raise UrlJoinDegraded(base_url, "invalid control character in URL")
    if base_url.startswith(":"):
        raise UrlJoinDegraded(base_url, "missing protocol scheme")
    if _BAD_ESCAPE_RE.search(base_url):
        raise UrlJoinDegraded(base_url, "invalid URL escape")

    try:
        parts = urlsplit(base_url)
        # Accessing port validates it.
        parts.port
    except ValueError as e:
        raise UrlJoinDegraded(base_url, str(e)) from e

    if not parts.scheme and not parts.netloc:
        first_segment = parts.path.split("/", 1)[0]
        if ":" in first_segment:
            raise UrlJoinDegraded(base_url, "first path segment in URL cannot contain colon")
    return parts


def url_join(base_url: str, *paths: str) -> str:
    """
    Join path segments onto the path component of base_url.

    Query and fragment of the base are kept. Raises UrlJoinDegraded if the
    base is not a parseable URL.
    """
    parts = _parse_base(base_url)
    path = quote(_clean_join(parts.path, *paths), safe=_PATH_SAFE)
    return urlunsplit(parts._replace(path=path))


def path_join(base: str, *paths: str) -> str:
    """Plain path join, used when the base location is not a URL."""
    return _clean_join(base, *paths)


def resolve_url(base_url: str, filename: str) -> str:
    """
    Compute the retrieval URL of an archive under a base location.

    Only the base name of filename is used. Returns "" when base_url is not
    configured.
    """
    if not base_url:
        return ""

    name = os.path.basename(filename)
    try:
        return url_join(base_url, name)
    except UrlJoinDegraded as e:
        logger.debug(f"URL join degraded to path join: {e}")
        return path_join(base_url, name)
