from typing import Optional

from chartindex.core.config import IndexSettings, load_settings
from chartindex.services.publisher import ChartPublisher
from chartindex.storage.file_index_store import FileIndexStore
from chartindex.storage.index_store import IndexStore

_settings: Optional[IndexSettings] = None
_index_store: Optional[IndexStore] = None
_publisher: Optional[ChartPublisher] = None

def get_settings() -> IndexSettings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings

def get_index_store() -> IndexStore:
    global _index_store
    if _index_store is None:
        _index_store = FileIndexStore(get_settings().index_path)
    return _index_store

def get_publisher() -> ChartPublisher:
    global _publisher
    if _publisher is None:
        _publisher = ChartPublisher(get_index_store(), get_settings())
    return _publisher

def reset_dependencies() -> None:
    """Forget the cached instances so the next call re-reads the environment."""
    global _settings, _index_store, _publisher
    _settings = None
    _index_store = None
    _publisher = None
