from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

from chartindex.domain.catalog import Catalog
from chartindex.domain.models import ChartMetadata, ChartVersion


class IndexStore(ABC):
    """
    Abstract base class for where the index document lives.

    Implementations serialize access: edit() holds the store's lock for the
    whole load-mutate-save cycle, so a Catalog is never shared between
    threads.
    """

    @abstractmethod
    def load(self) -> Catalog:
        """Read the index (an empty catalog if none was saved yet)."""
        pass

    @abstractmethod
    def save(self, catalog: Catalog) -> None:
        """Persist the index."""
        pass

    @abstractmethod
    @contextmanager
    def edit(self) -> Iterator[Catalog]:
        """
        Load the index, yield it for mutation and save it afterwards.

        Nothing is saved if the block raises.
        """
        pass

    def add_or_replace(
        self,
        metadata: ChartMetadata,
        filename: str,
        primary_base_url: str = "",
        mirror_base_url: str = "",
        digest: str = "",
    ) -> ChartVersion:
        with self.edit() as catalog:
            return catalog.add_or_replace(
                metadata,
                filename,
                primary_base_url=primary_base_url,
                mirror_base_url=mirror_base_url,
                digest=digest,
            )

    def delete(self, name: str, version: str) -> ChartVersion:
        with self.edit() as catalog:
            return catalog.delete(name, version)
