"""
Versioned index of published charts.

The Catalog keeps, per chart name, the list of published versions with their
metadata, digest and retrieval URLs, and reads/writes it as index.yaml.
"""

from chartindex.domain.catalog import Catalog
from chartindex.domain.errors import (
    CatalogError,
    InvalidMetadata,
    InvalidVersion,
    NotFound,
    ParseError,
)
from chartindex.domain.models import ChartMetadata, ChartVersion, IndexFile, Maintainer

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "CatalogError",
    "ChartMetadata",
    "ChartVersion",
    "IndexFile",
    "InvalidMetadata",
    "InvalidVersion",
    "Maintainer",
    "NotFound",
    "ParseError",
]
