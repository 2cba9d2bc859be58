import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from chartindex.domain.catalog import Catalog
from chartindex.storage.index_store import IndexStore

logger = logging.getLogger(__name__)


class FileIndexStore(IndexStore):
    """Keeps the index as a YAML file on the local file system."""

    def __init__(self, index_path: Path):
        self._index_path = Path(index_path)
        self._lock = threading.RLock()

    @property
    def index_path(self) -> Path:
        return self._index_path

    def load(self) -> Catalog:
        with self._lock:
            if not self._index_path.exists():
                logger.debug(f"No index at {self._index_path}, starting empty")
                return Catalog.new()

            logger.debug(f"Loading index from {self._index_path}")
            return Catalog.decode(self._index_path.read_bytes())

    def save(self, catalog: Catalog) -> None:
        data = catalog.encode()
        with self._lock:
            self._index_path.parent.mkdir(parents=True, exist_ok=True)

            # Write next to the target and rename so readers never see a
            # half written index.
            fd, tmp_name = tempfile.mkstemp(
                dir=self._index_path.parent,
                prefix=f".{self._index_path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, self._index_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

            logger.info(
                f"Saved index with {len(catalog)} charts to {self._index_path} "
                f"({len(data)} bytes)"
            )

    @contextmanager
    def edit(self) -> Iterator[Catalog]:
        with self._lock:
            catalog = self.load()
            yield catalog
            self.save(catalog)
