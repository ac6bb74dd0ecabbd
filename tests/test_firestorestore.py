from unittest import mock

from google.cloud import firestore

from appsync.store.base import Query
from appsync.store.firestore import FirestoreDocumentStore


class FakeDocument:
    def __init__(self, id, data):
        self.id = id
        self.data = data

    def to_dict(self):
        return self.data


class TestFirestoreDocumentStore:

    @staticmethod
    def _store():
        client = mock.MagicMock()
        return client, FirestoreDocumentStore(client)

    def test_listen_builds_query(self):
        client, store = self._store()
        ref = client.collection.return_value
        store.listen(Query('folders', filters=[('uid', 'u1')]), lambda docs: None, lambda e: None)
        client.collection.assert_called_once_with('folders')
        field_filter = ref.where.call_args[1]['filter']
        assert (field_filter.field_path, field_filter.op_string, field_filter.value) == ('uid', '==', 'u1')
        ref.where.return_value.on_snapshot.assert_called_once()

    def test_listen_orders_ascending(self):
        client, store = self._store()
        ref = client.collection.return_value
        store.listen(Query('notes', order_by='timestamp'), lambda docs: None, lambda e: None)
        ref.order_by.assert_called_once_with('timestamp', direction=firestore.Query.ASCENDING)

    def test_snapshot_conversion(self):
        client, store = self._store()
        snapshots = []
        errors = []
        store.listen(Query('notes'), snapshots.append, errors.append)
        callback = client.collection.return_value.on_snapshot.call_args[0][0]

        callback([FakeDocument('a', {'title': 'A'}), FakeDocument('b', None)], [], None)
        assert [(doc.id, doc.data) for doc in snapshots[0]] == [('a', {'title': 'A'}), ('b', {})]

        broken = mock.Mock()
        broken.to_dict.side_effect = RuntimeError('bad payload')
        callback([broken], [], None)
        assert len(snapshots) == 1
        assert str(errors[0]) == 'bad payload'

    def test_remove_unsubscribes(self):
        client, store = self._store()
        registration = store.listen(Query('notes'), lambda docs: None, lambda e: None)
        registration.remove()
        client.collection.return_value.on_snapshot.return_value.unsubscribe.assert_called_once_with()

    def test_mutations(self):
        client, store = self._store()
        collection = client.collection.return_value
        collection.add.return_value = (None, mock.Mock(id='new-id'))
        assert store.add_document('notes', {'title': 'A'}) == 'new-id'
        collection.add.assert_called_once_with({'title': 'A'})

        store.set_document('notes', 'n1', {'title': 'B'})
        collection.document.assert_called_with('n1')
        collection.document.return_value.set.assert_called_once_with({'title': 'B'})

        store.delete_document('folders', 'f1')
        collection.document.return_value.delete.assert_called_once_with()

        store.close()
        client.close.assert_called_once_with()
