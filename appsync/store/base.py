"""
Contains the ``DocumentStore`` interface through which AppSync talks to the document database, along with the small
value types passed across it.

Documents live in named collections. Notes are stored either in the top-level ``notes`` collection or in a folder's
``folders/{folderId}/notes`` sub-collection; folders are stored in ``folders``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, List

#: Top-level notes collection
NOTES: str = 'notes'
#: Folders collection
FOLDERS: str = 'folders'


def notes_path() -> str:
    """
    Path of the top-level notes collection.
    """
    return NOTES


def folder_notes_path(folder_id: str) -> str:
    """
    Path of the notes sub-collection of a folder.

    :param folder_id: the id of the folder.
    """
    return '{}/{}/{}'.format(FOLDERS, folder_id, NOTES)


class DocumentSnapshot:
    """
    A single document as delivered by the store.
    """

    def __init__(self, id: str, data: dict):
        self.id: str = id
        self.data: dict = data

    def __repr__(self):
        return 'DocumentSnapshot({!r}, {!r})'.format(self.id, self.data)


class Query:
    """
    A live query against a collection: equality filters, optionally ordered ascending by one field.
    """

    def __init__(self, collection: str, filters: List[tuple[str, Any]] | None = None, order_by: str | None = None):
        """
        :param collection: the collection path.
        :param filters: a list of ``(field, value)`` equality filters.
        :param order_by: field to order results by, ascending.
        """
        self.collection: str = collection
        self.filters: List[tuple[str, Any]] = filters or []
        self.order_by: str | None = order_by

    def __repr__(self):
        return 'Query({!r}, filters={!r}, order_by={!r})'.format(self.collection, self.filters, self.order_by)


class ListenerRegistration(ABC):
    """
    Returned by :py:meth:`DocumentStore.listen`. Removing it stops snapshot delivery.
    """

    @abstractmethod
    def remove(self) -> None:
        pass


SnapshotCallback = Callable[[List[DocumentSnapshot]], None]
ErrorCallback = Callable[[Exception], None]


class DocumentStore(ABC):
    """
    The operations AppSync consumes from the document database. Implementations may deliver callbacks on any thread.
    """

    @abstractmethod
    def listen(self, query: Query, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> ListenerRegistration:
        """
        Start streaming the documents matching ``query``. ``on_snapshot`` receives the full set of matching documents
        each time it changes; ``on_error`` receives delivery failures.
        """

    @abstractmethod
    def add_document(self, collection: str, fields: dict) -> str:
        """
        Create a document with a backend-assigned id.

        :return: the id of the new document.
        """

    @abstractmethod
    def set_document(self, collection: str, document_id: str, fields: dict) -> None:
        """
        Overwrite a document. Fields not present in ``fields`` are removed.
        """

    @abstractmethod
    def delete_document(self, collection: str, document_id: str) -> None:
        """
        Delete a document. Deleting a document which doesn't exist is not an error.
        """

    def close(self) -> None:
        """
        Release any connection held by the store.
        """
