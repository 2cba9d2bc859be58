"""
The in-memory chart index and its mutation / serialization operations.

A Catalog has exactly one owner and does no locking of its own. Code that
shares an index between threads goes through an IndexStore, which serializes
every load-mutate-save cycle.
"""

from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple, Union

from semver import Version

from chartindex.data.codec import decode_index, encode_index
from .errors import InvalidMetadata, InvalidVersion, NotFound
from .models import ChartMetadata, ChartVersion, IndexFile
from .urls import resolve_url
from .versions import (
    is_constraint,
    matches_constraint,
    parse_version,
    try_parse_version,
    versions_equal,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _sorted_versions(versions: List[ChartVersion]) -> List[ChartVersion]:
    """
    Order records newest first.

    Records with equal versions keep their relative order; records whose
    version does not parse go last, also in their original order.
    """
    parsed: List[Tuple[Version, ChartVersion]] = []
    unparsed: List[ChartVersion] = []
    for record in versions:
        parsed_version = try_parse_version(record.version)
        if parsed_version is None:
            unparsed.append(record)
        else:
            parsed.append((parsed_version, record))

    # list.sort is stable, also with reverse=True.
    parsed.sort(key=lambda item: item[0], reverse=True)
    return [record for _, record in parsed] + unparsed


class Catalog:
    """
    Index of published chart versions.

    Wraps an IndexFile model and keeps its invariants: a chart name is only
    present once a version was added for it, and no two records of a chart
    have semantically equal versions.
    """

    def __init__(self, index: Optional[IndexFile] = None):
        self.index = index if index is not None else IndexFile()

    @classmethod
    def new(cls) -> "Catalog":
        """Return an empty catalog."""
        return cls(IndexFile(generated=_utcnow()))

    # -- read access ----------------------------------------------------------

    @property
    def entries(self) -> Dict[str, List[ChartVersion]]:
        return self.index.entries

    def names(self) -> List[str]:
        return list(self.index.entries)

    def versions(self, name: str) -> List[ChartVersion]:
        """Records of a chart in index order (empty if the chart is unknown)."""
        return list(self.index.entries.get(name, []))

    def __contains__(self, name: object) -> bool:
        return name in self.index.entries

    def __len__(self) -> int:
        return len(self.index.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.index.entries)

    def has(self, name: str, version: str) -> bool:
        """
        True if the chart has a record for this version.

        Versions are compared semantically; stored versions that do not parse
        only match by exact string.
        """
        target = try_parse_version(version)
        for record in self.index.entries.get(name, []):
            if record.version == version:
                return True
            if target is None:
                continue
            stored = try_parse_version(record.version)
            if stored is not None and versions_equal(stored, target):
                return True
        return False

    def get(self, name: str, version: str = "") -> ChartVersion:
        """
        Look up a record of a chart.

        With no version the highest stable (non-prerelease) version is
        returned. A plain version returns the semantically equal record; an
        expression such as ">=1.0.0, <2.0.0" returns the highest match.
        Raises NotFound if nothing matches.
        """
        versions = self.index.entries.get(name)
        if not versions:
            raise NotFound(name, version or "latest")

        target: Optional[Version] = None
        if version and not is_constraint(version):
            target = parse_version(version)

        best: Optional[Tuple[Version, ChartVersion]] = None
        for record in versions:
            candidate = try_parse_version(record.version)
            if candidate is None:
                continue
            if not version:
                if candidate.prerelease:
                    continue
            elif target is not None:
                if not versions_equal(candidate, target):
                    continue
            elif not matches_constraint(candidate, version):
                continue

            if best is None or candidate > best[0]:
                best = (candidate, record)

        if best is None:
            raise NotFound(name, version or "latest")
        return best[1]

    # -- mutation -------------------------------------------------------------

    def add_or_replace(
        self,
        metadata: ChartMetadata,
        filename: str,
        primary_base_url: str = "",
        mirror_base_url: str = "",
        digest: str = "",
    ) -> ChartVersion:
        """
        Add a chart version, replacing a semantically equal one if present.

        Retrieval URLs are built from the base name of ``filename`` under each
        configured base location; the mirror base defaults to the primary base.
        The replaced record keeps its position, a new version is appended.

        Raises InvalidMetadata / InvalidVersion without touching the index if
        the metadata has no name, its version does not parse, or a stored
        version of the chart does not parse.
        """
        name = metadata.name
        if not name:
            raise InvalidMetadata("chart metadata has no name")
        chart_semver = parse_version(metadata.version)

        if not mirror_base_url:
            mirror_base_url = primary_base_url

        record = ChartVersion.from_metadata(
            metadata,
            created=_utcnow(),
            digest=digest,
            primary_urls=[resolve_url(primary_base_url, filename)],
            mirror_urls=[resolve_url(mirror_base_url, filename)],
        )

        versions = self.index.entries.get(name)
        if versions is None:
            self.index.entries[name] = [record]
            return record

        for i, existing in enumerate(versions):
            try:
                existing_semver = parse_version(existing.version)
            except InvalidVersion as e:
                raise InvalidVersion(
                    existing.version,
                    f"stored version of chart {name} is not a semantic version",
                ) from e

            if versions_equal(chart_semver, existing_semver):
                versions[i] = record
                return record

        versions.append(record)
        return record

    def delete(self, name: str, version: str) -> ChartVersion:
        """
        Remove a chart version and return the removed record.

        Unlike add_or_replace, the version must match the stored string
        exactly ("1.0" does not delete "1.0.0"). Only the first match is
        removed. Raises NotFound if there is no such record.
        """
        versions = self.index.entries.get(name)
        if versions:
            for i, record in enumerate(versions):
                if record.version == version:
                    del versions[i]
                    return record

        raise NotFound(name, version)

    def sort_entries(self) -> None:
        """Sort every chart's records by descending semantic version."""
        for versions in self.index.entries.values():
            versions[:] = _sorted_versions(versions)

    def merge(self, other: "Catalog") -> None:
        """
        Add the records of another catalog that this one does not have.

        Records already present here (by has()) win over the other catalog.
        """
        for name, versions in other.entries.items():
            for record in versions:
                if not self.has(name, record.version):
                    self.index.entries.setdefault(name, []).append(record)

    # -- serialization --------------------------------------------------------

    def encode(self) -> bytes:
        """Serialize to an index.yaml document."""
        return encode_index(self.index)

    def reader(self) -> io.BytesIO:
        """The encoded index as a readable byte stream."""
        return io.BytesIO(self.encode())

    @classmethod
    def decode(cls, data: Union[bytes, str]) -> "Catalog":
        """
        Parse an index.yaml document into a new catalog.

        Each chart's records come back sorted newest first. Raises ParseError
        on malformed input.
        """
        catalog = cls(decode_index(data))
        catalog.sort_entries()
        return catalog

    @classmethod
    def read_from(cls, stream: BinaryIO) -> "Catalog":
        return cls.decode(stream.read())
