"""
Contains the ``Subscription`` class, the handle returned when a list of notes or folders is opened.
"""

from __future__ import annotations

from typing import Callable

from appsync.store.base import ListenerRegistration, Query


class Subscription:
    """
    A live subscription to one logical collection. Moves through the states::

        UNSUBSCRIBED -> SUBSCRIBING -> STREAMING <-> ERROR -> UNSUBSCRIBED

    A delivery error moves the subscription to ``ERROR`` without closing it; the next snapshot returns it to
    ``STREAMING``. Only closing the subscription moves it back to ``UNSUBSCRIBED``.
    """

    UNSUBSCRIBED: str = 'unsubscribed'
    SUBSCRIBING: str = 'subscribing'
    STREAMING: str = 'streaming'
    ERROR: str = 'error'

    #: Note lists (top-level or a folder's notes).
    KIND_NOTES: str = 'notes'
    #: A user's folder list.
    KIND_FOLDERS: str = 'folders'

    def __init__(self, kind: str, target: tuple, query: Query, parser: Callable):
        """
        :param kind: the local list this subscription feeds, either ``KIND_NOTES`` or ``KIND_FOLDERS``.
        :param target: identifies the logical collection, e.g. ``('folder-notes', folder_id)``.
        :param query: the query streamed from the store.
        :param parser: turns ``(document_id, data)`` into ``Ok`` or ``Skipped``.
        """
        self.kind: str = kind
        self.target: tuple = target
        self.query: Query = query
        self.parser: Callable = parser
        self.state: str = Subscription.UNSUBSCRIBED
        self.registration: ListenerRegistration | None = None
        #: Number of snapshots applied so far.
        self.snapshots: int = 0
        #: Number of documents left out of the most recent snapshot.
        self.skipped: int = 0
        #: The most recent delivery error, if any.
        self.last_error: Exception | None = None
        self.closed: bool = False

    @property
    def is_open(self) -> bool:
        return not self.closed

    def __repr__(self):
        return 'Subscription({}, state={})'.format(':'.join(self.target), self.state)
