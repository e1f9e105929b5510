from __future__ import annotations

import copy
import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Any, Callable

"""
Simple JSON document store.

Documents are plain JSON-serializable dicts grouped into named collections
(`users`, `events`, `bookings`):
- Each document gets a storage-assigned primary key under `id` (uuid4 hex).
- With a `base_dir`, every collection is persisted as `<base_dir>/<name>.json`
  and rewritten via a temporary file + atomic replace on each change.
- With `base_dir=None` the store is memory only (tests, throwaway demos).

All operations hold one re-entrant lock, and reads hand out deep copies, so
callers can never mutate stored state by accident.
"""

logger = logging.getLogger(__name__)

Document = dict[str, Any]
Predicate = Callable[[Document], bool]


def new_document_id() -> str:
    return uuid.uuid4().hex


class DocumentStore:
    """A collection-of-documents store, optionally persisted to disk."""

    def __init__(self, base_dir: Path | None = None):
        self._base_dir = base_dir
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, Document]] = {}

    @property
    def base_dir(self) -> Path | None:
        return self._base_dir

    def _path(self, name: str) -> Path | None:
        if self._base_dir is None:
            return None
        return self._base_dir / f"{name}.json"

    def _collection(self, name: str) -> dict[str, Document]:
        """Return the live mapping for `name`, loading it from disk on first use."""
        docs = self._collections.get(name)
        if docs is not None:
            return docs

        docs = {}
        path = self._path(name)
        if path is not None and path.exists():
            payload = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(payload, list):
                raise ValueError(f"Invalid collection file {path}; expected a JSON list.")
            docs = {str(d["id"]): d for d in payload}
            logger.debug("Loaded %d documents from %s", len(docs), path)
        self._collections[name] = docs
        return docs

    def _flush(self, name: str) -> None:
        path = self._path(name)
        if path is None:
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        payload = list(self._collections.get(name, {}).values())
        tmp.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)

    def insert(self, collection: str, doc: Document) -> Document:
        """Store a copy of `doc` under a fresh primary key and return it."""
        return self.insert_many(collection, [doc])[0]

    def insert_unless(self, collection: str, doc: Document, conflict: Predicate) -> Document | None:
        """Insert `doc` only if no stored document matches `conflict`.

        The check and the write happen under one lock hold. Returns the stored
        copy, or None when a conflicting document already exists.
        """
        with self._lock:
            if self.find_one(collection, conflict) is not None:
                return None
            return self.insert(collection, doc)

    def insert_many(self, collection: str, docs: list[Document]) -> list[Document]:
        """Store every document or none of them.

        The collection is written once; if that write fails, the in-memory state
        is rolled back and the error propagates.
        """
        with self._lock:
            live = self._collection(collection)
            stored: list[Document] = []
            for doc in docs:
                item = copy.deepcopy(doc)
                item["id"] = new_document_id()
                stored.append(item)

            for item in stored:
                live[item["id"]] = item
            try:
                self._flush(collection)
            except Exception:
                for item in stored:
                    live.pop(item["id"], None)
                raise
            return copy.deepcopy(stored)

    def get(self, collection: str, doc_id: str) -> Document | None:
        with self._lock:
            doc = self._collection(collection).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def find(self, collection: str, predicate: Predicate | None = None) -> list[Document]:
        """Return copies of matching documents in insertion order."""
        with self._lock:
            docs = self._collection(collection).values()
            return [copy.deepcopy(d) for d in docs if predicate is None or predicate(d)]

    def find_one(self, collection: str, predicate: Predicate) -> Document | None:
        with self._lock:
            for doc in self._collection(collection).values():
                if predicate(doc):
                    return copy.deepcopy(doc)
            return None

    def replace(self, collection: str, doc_id: str, doc: Document) -> Document:
        """Overwrite an existing document (its `id` is kept).

        Raises:
            KeyError: If no document has `doc_id`.
        """
        with self._lock:
            live = self._collection(collection)
            if doc_id not in live:
                raise KeyError(doc_id)
            previous = live[doc_id]
            item = copy.deepcopy(doc)
            item["id"] = doc_id
            live[doc_id] = item
            try:
                self._flush(collection)
            except Exception:
                live[doc_id] = previous
                raise
            return copy.deepcopy(item)

    def replace_unless(self, collection: str, doc_id: str, doc: Document, conflict: Predicate) -> Document | None:
        """Like `replace`, but returns None instead when another document matches `conflict`."""
        with self._lock:
            if self.find_one(collection, lambda d: d["id"] != doc_id and conflict(d)) is not None:
                return None
            return self.replace(collection, doc_id, doc)

    def delete(self, collection: str, doc_id: str) -> Document | None:
        """Remove a document; returns it, or None when it did not exist."""
        with self._lock:
            live = self._collection(collection)
            doc = live.pop(doc_id, None)
            if doc is None:
                return None
            try:
                self._flush(collection)
            except Exception:
                live[doc_id] = doc
                raise
            return doc
