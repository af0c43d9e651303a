import copy
import json
import uuid
import logging
from pathlib import Path
from typing import Any, List
from ..storage.colfile import CollectionFile
from ..storage.locks import RWLock
from ..errors import CollectionClosedError, InvalidDocumentError
from .query import field_equals, field_matches


logger = logging.getLogger(__name__)


def _normalize(value: Any) -> Any:
    # memory holds exactly what the file will hold once reloaded
    try:
        return json.loads(CollectionFile.dumps(value))
    except (TypeError, ValueError) as e:
        raise InvalidDocumentError(f"Value is not JSON-serializable: {e}") from e


class Collection:
    """
    A named, ordered set of documents backed by one JSON Lines file.

    Reads share ``self._data_lock``; insert, update and delete hold it
    exclusively while they touch the list. File writes are serialized by the
    file's own writer lock. The two locks are taken one after the other,
    never nested in the mutating paths, so the order of two concurrent inserts
    in the file may differ from their order in memory.

    Every value parsed from the file is kept, objects or not, so a rewrite
    never drops a line that loaded successfully. Only objects can be matched,
    updated or deleted.
    """

    def __init__(self, name: str, file_path: Path):
        self._name = name
        self._file_path = Path(file_path)
        self._file = CollectionFile(self._file_path)
        self._data_lock = RWLock()
        self._docs: List[Any] = self._file.load()
        logger.debug("loaded %d document(s) into collection '%s'", len(self._docs), name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def closed(self) -> bool:
        return self._file.closed

    def _ensure_open(self):
        if self._file.closed:
            raise CollectionClosedError(f"Collection '{self._name}' is closed")

    def insert(self, doc: dict) -> str:
        """
        Insert a new document into the collection.

        The document is copied and tagged with a fresh ``_id`` (any existing
        one is overwritten). The line is on disk before the document becomes
        visible to readers.

        :param doc: the document to insert
        :return: the generated ``_id``
        :raises InvalidDocumentError: if ``doc`` is not a dict with string
            keys and JSON values
        """
        self._ensure_open()
        if not isinstance(doc, dict):
            raise InvalidDocumentError(
                f"Document must be a JSON object, got {type(doc).__name__}"
            )
        if not all(isinstance(k, str) for k in doc):
            raise InvalidDocumentError("Document keys must be strings")

        doc_id = str(uuid.uuid4())
        stored = _normalize(doc)
        stored["_id"] = doc_id

        self._file.append(stored)

        with self._data_lock.write():
            self._docs.append(stored)

        return doc_id

    def find_all(self) -> List[Any]:
        self._ensure_open()
        with self._data_lock.read():
            return copy.deepcopy(self._docs)

    def find(self, field: str, value: str) -> List[dict]:
        """Documents whose ``field`` is a string equal to ``value``."""
        self._ensure_open()
        with self._data_lock.read():
            return [copy.deepcopy(d) for d in self._docs if field_equals(d, field, value)]

    def find_with_operator(self, field: str, value: str, operator: str) -> List[dict]:
        """
        Documents whose ``field`` matches ``value`` under ``operator``.

        Strings support ``=``/``==``/``eq``, ``like``/``LIKE``/``contains``,
        ``starts_with`` and ``ends_with``; numbers support only the equality
        operators, compared by their JSON rendering. Unknown operators match
        nothing.
        """
        self._ensure_open()
        with self._data_lock.read():
            return [
                copy.deepcopy(d)
                for d in self._docs
                if field_matches(d, field, value, operator)
            ]

    def count(self) -> int:
        self._ensure_open()
        with self._data_lock.read():
            return len(self._docs)

    def update_field(self, doc_id: str, field: str, value: Any) -> bool:
        """
        Set ``field`` to ``value`` on the document with the given ``_id``.

        Returns False, without touching the file, when no document matches.
        On a match the whole collection is persisted; an ``OSError`` from that
        step propagates and the in-memory change stays in place.
        """
        self._ensure_open()
        if not isinstance(field, str):
            raise InvalidDocumentError("Field name must be a string")
        value = _normalize(value)

        updated = False
        with self._data_lock.write():
            for doc in self._docs:
                if isinstance(doc, dict) and doc.get("_id") == doc_id:
                    doc[field] = value
                    updated = True
                    break

        if not updated:
            return False
        self.persist()
        return True

    def delete_by_id(self, doc_id: str) -> bool:
        self._ensure_open()
        removed = False
        with self._data_lock.write():
            for i, doc in enumerate(self._docs):
                if isinstance(doc, dict) and doc.get("_id") == doc_id:
                    del self._docs[i]
                    removed = True
                    break

        if not removed:
            return False
        self.persist()
        return True

    def persist(self):
        """Truncate the file and write every document back, in order."""
        self._ensure_open()
        with self._data_lock.read():
            self._file.rewrite(self._docs)

    def close(self):
        self._file.close()

    def __repr__(self):
        return f"<Collection name={self._name!r} path={str(self._file_path)!r}>"
