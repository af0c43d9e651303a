"""
Handle-based function table for foreign hosts.

Every function mirrors one core operation, takes opaque integer handles and
JSON text, and returns plain values: a handle, an id, JSON array text, or a
1/0 flag. Null or unknown handles are rejected with a failure return, never
an exception.
"""

from __future__ import annotations

import itertools
import json
import logging
import threading
from typing import Any

from .document.collection import Collection
from .document.store import Database
from .errors import CollectionClosedError, ColStoreError

logger = logging.getLogger(__name__)


class HandleTable:
    """Maps opaque integer handles to live objects. Handle 0 is never issued."""

    def __init__(self):
        self._objects: dict[int, Any] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def add(self, obj: Any) -> int:
        with self._lock:
            handle = next(self._ids)
            self._objects[handle] = obj
            return handle

    def get(self, handle: int | None, kind: type) -> Any | None:
        if not handle:
            return None
        with self._lock:
            obj = self._objects.get(handle)
        return obj if isinstance(obj, kind) else None

    def release(self, handle: int | None, kind: type) -> bool:
        if not handle:
            return False
        with self._lock:
            if not isinstance(self._objects.get(handle), kind):
                return False
            del self._objects[handle]
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)


handles = HandleTable()


def _dump_docs(docs: list) -> str:
    return json.dumps(docs, ensure_ascii=False)


def _text(s: str | None) -> str:
    # a null string arrives as the empty string
    return "" if s is None else str(s)


def open_database(path: str | None) -> int | None:
    if not path:
        return None
    try:
        db = Database(path)
    except OSError as e:
        logger.warning("failed to open database at %r: %s", path, e)
        return None
    return handles.add(db)


def get_collection(db_handle: int | None, name: str | None) -> int | None:
    db = handles.get(db_handle, Database)
    if db is None:
        return None
    try:
        col = db.collection(_text(name))
    except (OSError, ValueError, ColStoreError) as e:
        logger.warning("failed to get collection %r: %s", name, e)
        return None
    return handles.add(col)


def insert(col_handle: int | None, json_text: str | None) -> str | None:
    col = handles.get(col_handle, Collection)
    if col is None or json_text is None:
        return None
    try:
        return col.insert(json.loads(json_text))
    except (json.JSONDecodeError, ColStoreError, OSError) as e:
        logger.warning("insert failed: %s", e)
        return None


def find_all(col_handle: int | None) -> str | None:
    col = handles.get(col_handle, Collection)
    if col is None:
        return None
    try:
        return _dump_docs(col.find_all())
    except CollectionClosedError as e:
        logger.warning("find_all failed: %s", e)
        return None


def find(col_handle: int | None, field: str | None, value: str | None) -> str | None:
    col = handles.get(col_handle, Collection)
    if col is None:
        return None
    try:
        return _dump_docs(col.find(_text(field), _text(value)))
    except CollectionClosedError as e:
        logger.warning("find failed: %s", e)
        return None


def find_op(
    col_handle: int | None,
    field: str | None,
    value: str | None,
    operator: str | None,
) -> str | None:
    col = handles.get(col_handle, Collection)
    if col is None:
        return None
    try:
        docs = col.find_with_operator(_text(field), _text(value), _text(operator))
    except CollectionClosedError as e:
        logger.warning("find_op failed: %s", e)
        return None
    return _dump_docs(docs)


def update_field(
    col_handle: int | None,
    doc_id: str | None,
    field: str | None,
    value_json: str | None,
) -> int:
    col = handles.get(col_handle, Collection)
    if col is None or value_json is None:
        return 0
    try:
        value = json.loads(value_json)
    except json.JSONDecodeError:
        logger.warning("failed to parse update JSON for %r", doc_id)
        return 0
    try:
        return 1 if col.update_field(_text(doc_id), _text(field), value) else 0
    except (OSError, ColStoreError) as e:
        logger.warning("update failed: %s", e)
        return 0


def delete(col_handle: int | None, doc_id: str | None) -> int:
    col = handles.get(col_handle, Collection)
    if col is None:
        return 0
    try:
        return 1 if col.delete_by_id(_text(doc_id)) else 0
    except (OSError, ColStoreError) as e:
        logger.warning("delete failed: %s", e)
        return 0


def db_free(db_handle: int | None) -> None:
    # collections handed out earlier keep their own handles
    handles.release(db_handle, Database)


def col_free(col_handle: int | None) -> None:
    handles.release(col_handle, Collection)


def str_free(text: str | None) -> None:
    # returned strings are ordinary Python objects; kept for table parity
    return None
