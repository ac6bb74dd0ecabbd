"""
Contains the ``MemoryDocumentStore`` class, an in-process document store with live queries. Used by the test suite
and when running AppSync without a Firebase project (``APPSYNC_BACKEND=memory``).
"""

from __future__ import annotations

import copy
import logging
import threading
from datetime import datetime
from typing import Dict, List

from appsync import helpers
from appsync.store.base import (DocumentSnapshot, DocumentStore, ErrorCallback, ListenerRegistration, Query,
                                SnapshotCallback)


class MemoryListener(ListenerRegistration):
    """
    A live query registered with a ``MemoryDocumentStore``.
    """

    def __init__(self, store: MemoryDocumentStore, query: Query, on_snapshot: SnapshotCallback,
                 on_error: ErrorCallback):
        self.store: MemoryDocumentStore = store
        self.query: Query = query
        self.on_snapshot: SnapshotCallback = on_snapshot
        self.on_error: ErrorCallback = on_error
        self.active: bool = True

    def remove(self) -> None:
        self.active = False
        self.store.remove_listener(self)


class MemoryDocumentStore(DocumentStore):
    """
    Stores documents in dictionaries keyed by collection path. Every write re-runs the live queries registered against
    the written collection and delivers a fresh snapshot to each, before the write returns.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}
        self.listeners: List[MemoryListener] = []
        self._lock = threading.RLock()
        self._fail_next: Exception | None = None

    # TEST HOOKS -------------------------------------------------------------------------------------------------------

    def fail_next(self, error: Exception) -> None:
        """
        Make the next add, set or delete call raise ``error``.
        """
        self._fail_next = error

    def break_listeners(self, collection: str, error: Exception) -> None:
        """
        Deliver ``error`` to every listener on ``collection``, as though snapshot delivery had failed.
        """
        for listener in self._listeners_for(collection):
            listener.on_error(error)

    def documents(self, collection: str) -> Dict[str, dict]:
        """
        A copy of the documents stored in ``collection``.
        """
        with self._lock:
            return copy.deepcopy(self.collections.get(collection, {}))

    # DOCUMENT STORE ---------------------------------------------------------------------------------------------------

    def listen(self, query: Query, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> ListenerRegistration:
        listener = MemoryListener(self, query, on_snapshot, on_error)
        logging.debug('Memory store: listening on {}'.format(query))
        with self._lock:
            self.listeners.append(listener)
            listener.on_snapshot(self._run_query(query))
        return listener

    def remove_listener(self, listener: MemoryListener) -> None:
        with self._lock:
            if listener in self.listeners:
                self.listeners.remove(listener)

    def add_document(self, collection: str, fields: dict) -> str:
        self._check_failure()
        document_id = helpers.get_uuid()
        with self._lock:
            self.collections.setdefault(collection, {})[document_id] = copy.deepcopy(fields)
            self._notify(collection)
        return document_id

    def set_document(self, collection: str, document_id: str, fields: dict) -> None:
        self._check_failure()
        with self._lock:
            self.collections.setdefault(collection, {})[document_id] = copy.deepcopy(fields)
            self._notify(collection)

    def delete_document(self, collection: str, document_id: str) -> None:
        self._check_failure()
        with self._lock:
            self.collections.get(collection, {}).pop(document_id, None)
            self._notify(collection)

    # INTERNAL ---------------------------------------------------------------------------------------------------------

    def _check_failure(self) -> None:
        error, self._fail_next = self._fail_next, None
        if error is not None:
            raise error

    def _listeners_for(self, collection: str) -> List[MemoryListener]:
        with self._lock:
            return [listener for listener in self.listeners if listener.query.collection == collection]

    def _run_query(self, query: Query) -> List[DocumentSnapshot]:
        documents = self.collections.get(query.collection, {})
        matches = [
            DocumentSnapshot(document_id, copy.deepcopy(data))
            for document_id, data in documents.items()
            if all(field in data and data[field] == value for field, value in query.filters)
        ]
        if query.order_by:
            # Documents missing the order field are excluded, as Firestore does.
            matches = [doc for doc in matches if query.order_by in doc.data]
            matches.sort(key=lambda doc: _order_key(doc.data[query.order_by]))
        return matches

    def _notify(self, collection: str) -> None:
        # Called with the lock held so snapshots reach each listener in write order.
        for listener in self._listeners_for(collection):
            snapshot = self._run_query(listener.query)
            if listener.active:
                listener.on_snapshot(snapshot)


def _order_key(value) -> tuple:
    """
    Sort key giving the same ordering across value types as Firestore: numbers, then timestamps, then strings.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return 0, value
    if isinstance(value, datetime):
        return 1, helpers.DateUtil.to_utc(value)
    if isinstance(value, str):
        return 2, value
    return 3, repr(value)
