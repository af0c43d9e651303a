import os
import json
import logging
import threading

from pathlib import Path
from typing import Any, Iterable, List


logger = logging.getLogger(__name__)


class CollectionFile:
    """
    JSON Lines file backing one collection.

    Inserts are appended and fsync'd; updates and deletes go through
    ``rewrite``, which truncates the file and writes every document again.
    All writes are serialized by ``self.lock``.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.lock = threading.Lock()
        self._loaded = self._read_lines()
        self.f = open(self.path, 'r+', encoding="utf-8", newline="\n")

    def _read_lines(self) -> List[Any]:
        values: List[Any] = []
        skipped = 0
        # binary, so a line that is not valid UTF-8 is skipped on its own
        with open(self.path, 'a+b') as f:
            f.seek(0)
            for raw in f:
                if not raw.strip():
                    continue
                try:
                    values.append(json.loads(raw.decode("utf-8")))
                except (UnicodeDecodeError, json.JSONDecodeError):
                    skipped += 1
        if skipped:
            logger.debug("skipped %d malformed line(s) in %s", skipped, self.path)
        return values

    def load(self) -> List[Any]:
        """Values parsed when the file was opened, in file order."""
        return list(self._loaded)

    @staticmethod
    def dumps(doc: dict) -> str:
        return json.dumps(doc, ensure_ascii=False)

    def append(self, doc: dict):
        line = self.dumps(doc) + "\n"
        with self.lock:
            self.f.seek(0, os.SEEK_END)
            self.f.write(line)
            self._sync()
        logger.debug("appended 1 document to %s", self.path)

    def rewrite(self, docs: Iterable[dict]):
        lines = [self.dumps(d) + "\n" for d in docs]
        with self.lock:
            self.f.seek(0)
            self.f.truncate()
            self.f.writelines(lines)
            self._sync()
        logger.debug("rewrote %s with %d document(s)", self.path, len(lines))

    def _sync(self):
        self.f.flush()
        os.fsync(self.f.fileno())

    @property
    def closed(self) -> bool:
        return self.f.closed

    def close(self):
        with self.lock:
            if not self.f.closed:
                self.f.close()
