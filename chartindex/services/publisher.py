"""
Publishing and unpublishing chart versions in the index.

The chart archive itself is uploaded/removed by whatever transport the caller
uses; this service only keeps the index in step with it.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from chartindex.core.config import IndexSettings
from chartindex.domain.models import ChartMetadata, ChartVersion
from chartindex.services.digest import digest_file
from chartindex.storage.index_store import IndexStore

logger = logging.getLogger(__name__)


class ChartPublisher:
    """Records chart versions in an IndexStore using the configured base URLs."""

    def __init__(self, store: IndexStore, settings: IndexSettings):
        self.store = store
        self.settings = settings

    def publish(
        self,
        metadata: ChartMetadata,
        archive_path: Union[str, Path],
        digest: Optional[str] = None,
    ) -> ChartVersion:
        """
        Add or replace the index record for a chart archive.

        Args:
            metadata: Chart metadata (name and version are required)
            archive_path: Path of the archive; only its file name ends up in the URLs
            digest: Archive digest; computed from the file when not given

        Returns:
            The record now stored in the index
        """
        if digest is None:
            digest = digest_file(archive_path)

        record = self.store.add_or_replace(
            metadata,
            str(archive_path),
            primary_base_url=self.settings.primary_base_url,
            mirror_base_url=self.settings.mirror_base_url,
            digest=digest,
        )
        logger.info(
            f"Published {record.name} {record.version} "
            f"(urls={record.mirror_urls}, s3urls={record.primary_urls})"
        )
        return record

    def unpublish(self, name: str, version: str) -> ChartVersion:
        """Remove a chart version from the index and return the removed record."""
        record = self.store.delete(name, version)
        logger.info(f"Unpublished {name} {version}")
        return record
