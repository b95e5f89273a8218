"""Document store: named collections of JSON-like records keyed by id.

Concurrency model is last-write-wins per document. There is no
transaction spanning several documents.
"""

import copy
import json
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Optional, Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Predicate = Callable[[dict], bool]
Listener = Callable[[list[dict]], None]


class StoreError(Exception):
    """Raised when the store cannot be read or written."""


class WriteResult(BaseModel):
    ok: bool
    doc_id: str
    message: str = ""


class DocumentStore(Protocol):
    def subscribe(self, collection: str,
                  predicate: Optional[Predicate] = None) -> Iterator[list[dict]]: ...

    def snapshot(self, collection: str,
                 predicate: Optional[Predicate] = None) -> list[dict]: ...

    def write(self, collection: str, doc_id: str, fields: dict) -> WriteResult: ...

    def delete(self, collection: str, doc_id: str) -> WriteResult: ...


# ─── Subscription ─────────────────────────────────────────────────────────────

class Subscription:
    """Snapshots of one collection, starting with the current one.

    Iterating drains the snapshots queued so far and stops; iterate again
    after further writes to receive the new ones. close() detaches it.
    """

    def __init__(self, store: "MemoryStore", collection: str,
                 predicate: Optional[Predicate]):
        self._store = store
        self._collection = collection
        self._predicate = predicate
        self._pending: list[list[dict]] = [store.snapshot(collection, predicate)]
        self.closed = False
        store._listeners.setdefault(collection, []).append(self._on_change)

    def _on_change(self, docs: list[dict]) -> None:
        if self._predicate is not None:
            docs = [d for d in docs if self._predicate(d)]
        self._pending.append(docs)

    def __iter__(self) -> Iterator[list[dict]]:
        while self._pending:
            yield self._pending.pop(0)

    def close(self) -> None:
        if self.closed:
            return
        listeners = self._store._listeners.get(self._collection, [])
        if self._on_change in listeners:
            listeners.remove(self._on_change)
        self._pending.clear()
        self.closed = True


# ─── In-memory store ──────────────────────────────────────────────────────────

class MemoryStore:
    """In-process store. Listeners are called synchronously after each change."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict]] = {}
        self._listeners: dict[str, list[Listener]] = {}

    def collections(self) -> list[str]:
        return sorted(self._collections)

    def snapshot(self, collection: str,
                 predicate: Optional[Predicate] = None) -> list[dict]:
        """Copies of all documents, in id order."""
        docs = self._collections.get(collection, {})
        out = [copy.deepcopy(docs[k]) for k in sorted(docs)]
        if predicate is not None:
            out = [d for d in out if predicate(d)]
        return out

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    def listen(self, collection: str, callback: Listener) -> Callable[[], None]:
        """Registers a callback for every new snapshot. Returns the unsubscribe function."""
        self._listeners.setdefault(collection, []).append(callback)

        def unsubscribe() -> None:
            listeners = self._listeners.get(collection, [])
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    def subscribe(self, collection: str,
                  predicate: Optional[Predicate] = None) -> Subscription:
        return Subscription(self, collection, predicate)

    def write(self, collection: str, doc_id: str, fields: dict) -> WriteResult:
        """Creates or replaces a document (last write wins)."""
        if not doc_id:
            raise StoreError(f"Document id missing for collection '{collection}'")
        if not isinstance(fields, dict):
            raise StoreError(f"Document {collection}/{doc_id} must be a mapping")
        doc = copy.deepcopy(fields)
        doc["id"] = doc_id
        existed = doc_id in self._collections.get(collection, {})
        self._collections.setdefault(collection, {})[doc_id] = doc
        self._changed(collection)
        logger.debug(f"{'Replaced' if existed else 'Created'} {collection}/{doc_id}")
        return WriteResult(ok=True, doc_id=doc_id,
                           message="replaced" if existed else "created")

    def delete(self, collection: str, doc_id: str) -> WriteResult:
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            return WriteResult(ok=False, doc_id=doc_id,
                               message=f"{collection}/{doc_id} not found")
        del docs[doc_id]
        self._changed(collection)
        logger.debug(f"Deleted {collection}/{doc_id}")
        return WriteResult(ok=True, doc_id=doc_id, message="deleted")

    def _changed(self, collection: str) -> None:
        docs = self.snapshot(collection)
        for callback in list(self._listeners.get(collection, [])):
            callback(copy.deepcopy(docs))


# ─── JSON file store ──────────────────────────────────────────────────────────

class JsonFileStore(MemoryStore):
    """MemoryStore persisted as one JSON file per collection.

    data/
      scheduleEvents.json   {"EV-001": {...}, ...}
      courses.json
      ...
    """

    def __init__(self, data_dir: Path) -> None:
        super().__init__()
        self.data_dir = Path(data_dir)
        self._load_all()

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _load_all(self) -> None:
        if not self.data_dir.exists():
            return
        for path in sorted(self.data_dir.glob("*.json")):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
            except json.JSONDecodeError as e:
                raise StoreError(f"Corrupt collection file {path}: {e}") from e
            if not isinstance(raw, dict):
                raise StoreError(f"Collection file {path} must hold an object keyed by id")
            self._collections[path.stem] = raw
            logger.debug(f"Loaded {len(raw)} document(s) from {path}")

    def _flush(self, collection: str) -> None:
        path = self._path(collection)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self._collections.get(collection, {}), f,
                          indent=2, ensure_ascii=False, default=str)
        except OSError as e:
            raise StoreError(f"Cannot write {path}: {e}") from e

    def write(self, collection: str, doc_id: str, fields: dict) -> WriteResult:
        result = super().write(collection, doc_id, fields)
        self._flush(collection)
        return result

    def delete(self, collection: str, doc_id: str) -> WriteResult:
        result = super().delete(collection, doc_id)
        if result.ok:
            self._flush(collection)
        return result
