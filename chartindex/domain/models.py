"""
Pydantic models for the chart index.

This module defines the data that makes up an index document:
- Chart metadata as published by chart authors
- Version records (metadata + digest + retrieval URLs + creation time)
- The index file itself (apiVersion, entries, generated)

Field names are snake_case in Python and keep the camelCase keys of the
index.yaml format as aliases. Every model accepts unknown keys so documents
written by newer or other producers survive a decode/encode round trip.

Required vs. optional fields:
- ChartMetadata: only ``version`` is required.
- ChartVersion: nothing is required; a missing ``version`` decodes as "".
- IndexFile: nothing is required; a missing ``entries`` is an empty index.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Timestamps from other producers may carry nanoseconds; datetime keeps micros.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")

# Index bookkeeping on a record; never taken from incoming chart metadata.
_INDEX_FIELDS = {"created", "removed", "digest", "mirror_urls", "primary_urls"}
_INDEX_KEYS = _INDEX_FIELDS | {"urls", "s3urls"}


def _coerce_scalar_to_str(value: Any) -> Any:
    # YAML turns unquoted 1.0 into a float and 2 into an int.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _coerce_items_to_str(value: Any) -> Any:
    if isinstance(value, list):
        return [_coerce_scalar_to_str(item) for item in value]
    return value


def _trim_fraction(value: Any) -> Any:
    if isinstance(value, str):
        return _FRACTION_RE.sub(r"\1", value)
    return value


# ---------------------------------------------------------------------------
# Chart Metadata Models
# ---------------------------------------------------------------------------


class Maintainer(BaseModel):
    """A person responsible for a chart."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    email: Optional[str] = None
    url: Optional[str] = None

    @field_validator("name", "email", "url", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        return _coerce_scalar_to_str(value)


class ChartMetadata(BaseModel):
    """
    Descriptive metadata of a chart version.

    The index treats everything except ``name`` and ``version`` as opaque and
    stores it verbatim.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(
        default="",
        description="Chart name; the key of the chart in the index entries.",
    )
    version: str = Field(
        description="Semantic version of the chart.",
    )
    description: Optional[str] = None
    home: Optional[str] = None
    sources: Optional[List[str]] = None
    keywords: Optional[List[str]] = None
    maintainers: Optional[List[Maintainer]] = None
    engine: Optional[str] = None
    icon: Optional[str] = None
    api_version: Optional[str] = Field(default=None, alias="apiVersion")
    condition: Optional[str] = None
    tags: Optional[str] = None
    app_version: Optional[str] = Field(default=None, alias="appVersion")
    deprecated: Optional[bool] = None
    tiller_version: Optional[str] = Field(default=None, alias="tillerVersion")
    annotations: Optional[Dict[str, Any]] = None
    kube_version: Optional[str] = Field(default=None, alias="kubeVersion")

    @field_validator(
        "name",
        "version",
        "description",
        "home",
        "engine",
        "icon",
        "api_version",
        "condition",
        "tags",
        "app_version",
        "tiller_version",
        "kube_version",
        mode="before",
    )
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        return _coerce_scalar_to_str(value)

    @field_validator("sources", "keywords", mode="before")
    @classmethod
    def _items_to_str(cls, value: Any) -> Any:
        return _coerce_items_to_str(value)


# ---------------------------------------------------------------------------
# Index Models
# ---------------------------------------------------------------------------


class ChartVersion(ChartMetadata):
    """
    One published version of a chart.

    Records are immutable: replacing a version in the index swaps in a new
    ChartVersion instead of editing the old one.

    Serialized inline in the index: the metadata fields sit next to
    ``created``, ``digest``, ``urls`` and ``s3urls``.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    # Records decoded from other producers may lack a version; such records
    # sort last and are reported by add_or_replace.
    version: str = Field(
        default="",
        description="Semantic version of the chart.",
    )
    created: Optional[datetime] = Field(
        default=None,
        description="When this record was added to the index.",
    )
    removed: Optional[bool] = None
    digest: Optional[str] = Field(
        default=None,
        description="Opaque content digest of the chart archive.",
    )
    mirror_urls: List[str] = Field(
        default_factory=list,
        alias="urls",
        description="Retrieval URLs under the mirror (public) base location.",
    )
    primary_urls: List[str] = Field(
        default_factory=list,
        alias="s3urls",
        description="Retrieval URLs under the primary (storage) base location.",
    )

    @field_validator("created", mode="before")
    @classmethod
    def _trim_created(cls, value: Any) -> Any:
        return _trim_fraction(value)

    @field_validator("mirror_urls", "primary_urls", mode="before")
    @classmethod
    def _null_urls(cls, value: Any) -> Any:
        return [] if value is None else _coerce_items_to_str(value)

    @field_validator("digest", mode="before")
    @classmethod
    def _digest_to_str(cls, value: Any) -> Any:
        return _coerce_scalar_to_str(value)

    @classmethod
    def from_metadata(
        cls,
        metadata: ChartMetadata,
        *,
        created: datetime,
        digest: str,
        primary_urls: List[str],
        mirror_urls: List[str],
    ) -> "ChartVersion":
        fields = {
            key: value
            for key, value in metadata.model_dump(exclude_none=True).items()
            if key not in _INDEX_KEYS
        }
        fields.update(
            created=created,
            digest=digest,
            primary_urls=list(primary_urls),
            mirror_urls=list(mirror_urls),
        )
        return cls(**fields)

    @property
    def metadata(self) -> ChartMetadata:
        """The chart metadata part of this record, without index bookkeeping."""
        data = self.model_dump(exclude=_INDEX_FIELDS, exclude_none=True)
        return ChartMetadata(**data)


class IndexFile(BaseModel):
    """
    The whole index document.

    Persisted as: <DATA_DIR>/index.yaml
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_version: str = Field(
        default="v1",
        alias="apiVersion",
        description="Index format version.",
    )
    entries: Dict[str, List[ChartVersion]] = Field(
        default_factory=dict,
        description="Chart name -> published versions of that chart.",
    )
    generated: Optional[datetime] = Field(
        default=None,
        description="When this index was generated.",
    )
    public_keys: Optional[List[str]] = Field(
        default=None,
        alias="publicKeys",
    )

    @field_validator("entries", mode="before")
    @classmethod
    def _normalize_entries(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {
                str(name): ([] if versions is None else versions)
                for name, versions in value.items()
            }
        return value

    @field_validator("generated", mode="before")
    @classmethod
    def _trim_generated(cls, value: Any) -> Any:
        return _trim_fraction(value)
