"""
Contains the ``FirestoreDocumentStore`` class, which implements ``DocumentStore`` on top of the
`google-cloud-firestore <https://pypi.org/project/google-cloud-firestore/>`_ client.
"""

from __future__ import annotations

import logging

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2.credentials import Credentials

from appsync.store.base import (DocumentSnapshot, DocumentStore, ErrorCallback, ListenerRegistration, Query,
                                SnapshotCallback)


class FirestoreListener(ListenerRegistration):
    """
    Wraps the ``Watch`` returned by ``on_snapshot``.
    """

    def __init__(self, watch):
        self.watch = watch

    def remove(self) -> None:
        self.watch.unsubscribe()


class FirestoreDocumentStore(DocumentStore):
    """
    Talks to Cloud Firestore. Snapshot callbacks are delivered on the client's watch thread.
    """

    def __init__(self, client: firestore.Client):
        """
        :param client: an authenticated Firestore client.
        """
        self.client: firestore.Client = client

    @staticmethod
    def connect(project_id: str, id_token: str) -> FirestoreDocumentStore:
        """
        Create a store which talks to Firestore as the signed in user, so the project's security rules apply.

        :param project_id: the Firebase project id.
        :param id_token: the ID token of the signed in user.
        """
        credentials = Credentials(token=id_token)
        return FirestoreDocumentStore(firestore.Client(project=project_id, credentials=credentials))

    def _query(self, query: Query):
        ref = self.client.collection(query.collection)
        for field, value in query.filters:
            ref = ref.where(filter=FieldFilter(field, '==', value))
        if query.order_by:
            ref = ref.order_by(query.order_by, direction=firestore.Query.ASCENDING)
        return ref

    def listen(self, query: Query, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> ListenerRegistration:
        # noinspection PyUnusedLocal
        def callback(docs, changes, read_time):
            try:
                snapshot = [DocumentSnapshot(doc.id, doc.to_dict() or {}) for doc in docs]
            except Exception as e:
                on_error(e)
                return
            on_snapshot(snapshot)

        logging.debug('Firestore: listening on {}'.format(query))
        return FirestoreListener(self._query(query).on_snapshot(callback))

    def add_document(self, collection: str, fields: dict) -> str:
        update_time, ref = self.client.collection(collection).add(fields)
        return ref.id

    def set_document(self, collection: str, document_id: str, fields: dict) -> None:
        self.client.collection(collection).document(document_id).set(fields)

    def delete_document(self, collection: str, document_id: str) -> None:
        self.client.collection(collection).document(document_id).delete()

    def close(self) -> None:
        self.client.close()
