"""
Exceptions raised by the chart index.

All of them derive from CatalogError so callers can catch the whole family,
while ParseError / InvalidVersion / InvalidMetadata are also ValueErrors and
NotFound is a LookupError for callers that only care about the builtin kind.
"""

from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    """Base class for every error raised by the chart index."""


class ParseError(CatalogError, ValueError):
    """The serialized index is not valid YAML or does not have the index shape."""


class InvalidVersion(CatalogError, ValueError):
    """A version string could not be parsed as a semantic version."""

    def __init__(self, version: object, reason: Optional[str] = None):
        self.version = version
        self.reason = reason
        message = f"invalid semantic version {version!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidMetadata(CatalogError, ValueError):
    """Chart metadata is missing a field the index needs (e.g. the name)."""


class NotFound(CatalogError, LookupError):
    """The requested chart name/version is not present in the index."""

    def __init__(self, name: str, version: str):
        self.name = name
        self.version = version
        super().__init__(f"chart {name} version {version} not found in index")


class UrlJoinDegraded(CatalogError):
    """
    A base location could not be parsed as a URL.

    Raised by url_join() and always handled by resolve_url(), which falls back
    to a plain path join. It never reaches callers of the catalog.
    """

    def __init__(self, base_url: str, reason: str):
        self.base_url = base_url
        self.reason = reason
        super().__init__(f"cannot join onto {base_url!r}: {reason}")
