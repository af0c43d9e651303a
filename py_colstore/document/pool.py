import time
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from .collection import Collection
from .store import Database
from ..errors import PoolClosedError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoolStats:
    path: str
    connected: bool
    closed: bool
    active_operations: int
    total_operations: int


class DatabasePool:
    """
    Reuses one Database across many operations.

    Meant for long-running hosts (servers, workers) that would otherwise
    reopen the same root directory for every request.
    """

    def __init__(self, path: str, lazy_connect: bool = True):
        if not isinstance(path, str) or not path:
            raise ValueError("Database path must be a non-empty string")
        self._path = path
        self._db: Optional[Database] = None
        self._closed = False
        self._active = 0
        self._total = 0
        self._lock = threading.Lock()

        if not lazy_connect:
            with self._lock:
                self._ensure_connection()

    @classmethod
    def from_config(cls, settings=None, lazy_connect: bool = True) -> "DatabasePool":
        from ..config import load_settings
        settings = settings or load_settings()
        return cls(settings.data_path, lazy_connect=lazy_connect)

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_connected(self) -> bool:
        return self._db is not None

    @property
    def active_operations(self) -> int:
        return self._active

    @property
    def total_operations(self) -> int:
        return self._total

    def stats(self) -> PoolStats:
        with self._lock:
            return PoolStats(
                path=self._path,
                connected=self._db is not None,
                closed=self._closed,
                active_operations=self._active,
                total_operations=self._total,
            )

    def _ensure_connection(self) -> Database:
        # caller holds self._lock
        if self._closed:
            raise PoolClosedError("Pool is closed")
        if self._db is None:
            self._db = Database(self._path)
        return self._db

    @contextmanager
    def database(self) -> Iterator[Database]:
        with self._lock:
            db = self._ensure_connection()
            self._active += 1
            self._total += 1
        try:
            yield db
        finally:
            with self._lock:
                self._active -= 1

    @contextmanager
    def collection(self, name: str) -> Iterator[Collection]:
        with self.database() as db:
            yield db.collection(name)

    def close(self):
        with self._lock:
            if self._closed:
                return
            self._closed = True
            db, self._db = self._db, None
        if db is not None:
            db.close()
        logger.info("closed pool for %s", self._path)

    def close_gracefully(self, timeout: float = 5.0, poll_interval: float = 0.01):
        """Wait for in-flight operations to finish, then close."""
        deadline = time.monotonic() + timeout
        while self.active_operations > 0:
            if time.monotonic() > deadline:
                raise TimeoutError(
                    f"Graceful shutdown timeout: {self.active_operations} operations still active"
                )
            time.sleep(poll_interval)
        self.close()

    def __enter__(self) -> "DatabasePool":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close_gracefully()
