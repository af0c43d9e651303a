import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from .collection import Collection
from ..storage.locks import RWLock
from ..errors import DatabaseClosedError


logger = logging.getLogger(__name__)


class Database:
    """
    Registry of collections stored under one root directory.

    Each collection lives in ``<root>/<name>.col``. Exactly one
    ``Collection`` is built per name; every caller asking for the same name
    gets that instance.
    """

    SUFFIX = ".col"

    def __init__(self, root_path: Union[str, Path]):
        self._root = Path(root_path)
        self._root.mkdir(parents=True, exist_ok=True)
        self._lock = RWLock()
        self._closed = False
        self.collections: Dict[str, Collection] = {}
        logger.info("opened database at %s", self._root)

    @classmethod
    def from_config(cls, settings=None) -> "Database":
        """Open the database at the configured data path (colstore.toml)."""
        from ..config import load_settings
        settings = settings or load_settings()
        return cls(settings.data_path)

    @property
    def root_path(self) -> Path:
        return self._root

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self):
        # caller holds self._lock
        if self._closed:
            raise DatabaseClosedError(f"Database at '{self._root}' is closed")

    def collection(self, name: str) -> Collection:
        if not isinstance(name, str) or not name:
            raise ValueError("Collection name must be a non-empty string")

        with self._lock.read():
            self._ensure_open()
            col = self.collections.get(name)
        if col is not None:
            return col

        with self._lock.write():
            self._ensure_open()
            # another thread may have created it between the two locks
            col = self.collections.get(name)
            if col is None:
                col = Collection(name, self._root / f"{name}{self.SUFFIX}")
                self.collections[name] = col
                logger.info("created collection '%s'", name)
        return col

    def collection_names(self) -> List[str]:
        with self._lock.read():
            return list(self.collections)

    def close(self):
        with self._lock.write():
            if self._closed:
                return
            self._closed = True
            for col in self.collections.values():
                col.close()
            self.collections.clear()
        logger.info("closed database at %s", self._root)

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None
