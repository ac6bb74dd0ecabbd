from datetime import datetime, timedelta, timezone

import pytest

from appsync.errors import MutationError, SubscriptionError, SyncDeliveryError
from appsync.notes.controller import NoteController
from appsync.notes.model.folder import Folder
from appsync.notes.model.note import Note
from appsync.notes.subscription import Subscription
from appsync.store import base
from appsync.store.memory import MemoryDocumentStore


class TestNoteController:
    T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)

    @pytest.fixture
    def store(self):
        return MemoryDocumentStore()

    @pytest.fixture
    def controller(self, store):
        controller = NoteController(store)
        yield controller
        controller.shutdown()

    @staticmethod
    def _note_fields(title: str, hours: int = 0) -> dict:
        return {
            'title': title,
            'content': title + ' content',
            'timestamp': TestNoteController.T0 + timedelta(hours=hours)
        }

    # SUBSCRIPTIONS ----------------------------------------------------------------------------------------------------

    def test_open_notes_streams(self, controller, store):
        store.set_document(base.NOTES, 'n1', self._note_fields('First'))
        subscription = controller.open_notes()
        assert subscription.state == Subscription.STREAMING
        assert subscription.snapshots == 1
        assert [note.id for note in controller.notes] == ['n1']
        assert controller.subscriptions == [subscription]

    def test_add_note_appears_once(self, controller):
        controller.open_notes()
        before = datetime.now(timezone.utc)
        success, note_id = controller.add_note('T', 'C').result()
        assert success is True
        matching = [note for note in controller.notes if note.id == note_id]
        assert len(matching) == 1
        assert matching[0].title == 'T'
        assert matching[0].content == 'C'
        assert matching[0].timestamp >= before

    def test_malformed_document_is_skipped(self, controller, store):
        store.set_document(base.NOTES, 'good1', self._note_fields('Good 1', 1))
        store.set_document(base.NOTES, 'bad', {'title': 'No content', 'timestamp': TestNoteController.T0})
        store.set_document(base.NOTES, 'good2', self._note_fields('Good 2', 2))
        subscription = controller.open_notes()
        assert [note.id for note in controller.notes] == ['good1', 'good2']
        assert subscription.skipped == 1
        assert subscription.state == Subscription.STREAMING

    def test_out_of_range_timestamp_is_skipped(self, controller, store):
        store.set_document(base.NOTES, 'good', self._note_fields('Good'))
        store.set_document(base.NOTES, 'early', dict(title='E', content='C', timestamp='0001-01-01T00:00:00+01:00'))
        store.set_document(base.NOTES, 'late', dict(title='L', content='C', timestamp='9999-12-31T23:00:00-05:00'))
        subscription = controller.open_notes()
        assert [note.id for note in controller.notes] == ['good']
        assert subscription.skipped == 2
        assert subscription.state == Subscription.STREAMING

        controller.add_note('T', 'C').result()
        assert [note.title for note in controller.notes] == ['Good', 'T']
        assert subscription.skipped == 2

    def test_malformed_folder_is_skipped(self, controller, store):
        store.set_document(base.FOLDERS, 'f1', {'name': 'Work', 'uid': 'u1'})
        store.set_document(base.FOLDERS, 'broken', {'uid': 'u1'})
        store.set_document(base.FOLDERS, 'f2', {'name': 'Home', 'uid': 'u1'})
        subscription = controller.open_folders('u1')
        assert sorted(folder.id for folder in controller.folders) == ['f1', 'f2']
        assert subscription.skipped == 1
        assert subscription.state == Subscription.STREAMING

    def test_update_note_replaces_without_duplicate(self, controller, store):
        store.set_document(base.NOTES, 'n1', self._note_fields('Old'))
        controller.open_notes()
        original = controller.notes[0]
        success, note_id = controller.update_note(original.edited('New', 'New content')).result()
        assert (success, note_id) == (True, 'n1')
        assert len(controller.notes) == 1
        updated = controller.notes[0]
        assert updated.id == 'n1'
        assert (updated.title, updated.content) == ('New', 'New content')
        assert updated.timestamp == original.timestamp

    def test_update_overwrites_every_field(self, controller, store):
        store.set_document(base.NOTES, 'n1', dict(self._note_fields('Old'), extra='field'))
        controller.open_notes()
        controller.update_note(controller.notes[0].edited('Old', '')).result()
        assert store.documents(base.NOTES)['n1'] == {'title': 'Old', 'content': '',
                                                     'timestamp': TestNoteController.T0}

    def test_delete_note(self, controller, store):
        store.set_document(base.NOTES, 'n1', self._note_fields('One'))
        controller.open_notes()
        success, data = controller.delete_note(controller.notes[0]).result()
        assert success is True
        assert controller.notes == ()

    def test_delete_missing_folder_is_idempotent(self, controller):
        success, data = controller.delete_folder(Folder('does-not-exist', 'Gone')).result()
        assert success is True
        assert data == 'does-not-exist'

    def test_switch_folders(self, controller, store):
        folder_a = Folder('a', 'A')
        folder_b = Folder('b', 'B')
        store.set_document(base.folder_notes_path('a'), 'a1', self._note_fields('A1'))
        store.set_document(base.folder_notes_path('b'), 'b2', self._note_fields('B2', 2))
        store.set_document(base.folder_notes_path('b'), 'b1', self._note_fields('B1', 1))

        first = controller.open_notes(folder_a)
        assert [note.id for note in controller.notes] == ['a1']
        controller.close(first)
        controller.open_notes(folder_b)
        assert [note.id for note in controller.notes] == ['b1', 'b2']

        # Writes to the closed folder no longer reach the list.
        store.set_document(base.folder_notes_path('a'), 'a2', self._note_fields('A2', 3))
        assert [note.id for note in controller.notes] == ['b1', 'b2']
        assert first.state == Subscription.UNSUBSCRIBED

    def test_replace_subscription(self, controller, store):
        store.set_document(base.folder_notes_path('b'), 'b1', self._note_fields('B1'))
        first = controller.open_notes(Folder('a', 'A'))
        second = controller.open_notes(Folder('b', 'B'), replace=True)
        assert first.closed is True
        assert controller.subscriptions == [second]
        assert [note.id for note in controller.notes] == ['b1']
        assert len(store.listeners) == 1

    def test_second_open_without_replace_fails(self, controller, store):
        controller.open_notes(Folder('a', 'A'))
        with pytest.raises(SubscriptionError):
            controller.open_notes(Folder('b', 'B'))
        assert len(store.listeners) == 1

    def test_notes_and_folders_are_independent(self, controller, store):
        store.set_document(base.FOLDERS, 'f1', {'name': 'Mine', 'uid': 'u1'})
        store.set_document(base.FOLDERS, 'f2', {'name': 'Theirs', 'uid': 'u2'})
        controller.open_notes()
        controller.open_folders('u1')
        assert controller.folders == (Folder('f1', 'Mine'),)
        assert len(controller.subscriptions) == 2

    def test_close_empties_list_and_is_idempotent(self, controller, store):
        store.set_document(base.NOTES, 'n1', self._note_fields('One'))
        subscription = controller.open_notes()
        controller.close(subscription)
        controller.close(subscription)
        assert controller.notes == ()
        assert controller.subscriptions == []
        assert store.listeners == []

    def test_open_without_store(self):
        controller = NoteController()
        with pytest.raises(SubscriptionError):
            controller.open_notes()
        success, error = controller.add_note('T', 'C').result()
        assert success is False
        assert isinstance(error, MutationError)
        controller.shutdown()

    def test_observers(self, controller):
        seen = []
        remove = controller.observe(lambda kind, records: seen.append((kind, len(records))))
        controller.open_notes()
        controller.add_note('T', 'C').result()
        remove()
        controller.add_note('T2', 'C2').result()
        assert seen == [(Subscription.KIND_NOTES, 0), (Subscription.KIND_NOTES, 1)]

    def test_dispatch_is_used(self, store):
        dispatched = []
        controller = NoteController(store, dispatch=dispatched.append)
        controller.open_notes()
        assert controller.notes == ()
        assert len(dispatched) == 1
        store.set_document(base.NOTES, 'n1', self._note_fields('One'))
        for fn in dispatched:
            fn()
        assert [note.id for note in controller.notes] == ['n1']
        controller.shutdown()

    # ERRORS -----------------------------------------------------------------------------------------------------------

    def test_mutation_failure_resolves_future(self, controller, store):
        controller.open_notes()
        store.fail_next(ConnectionError('offline'))
        success, error = controller.add_note('T', 'C').result()
        assert success is False
        assert isinstance(error, MutationError)
        assert error.operation == 'add_note'
        assert error.collection == base.NOTES
        assert isinstance(error.cause, ConnectionError)
        assert controller.notes == ()

    def test_delivery_error_keeps_subscription(self, controller, store):
        subscription = controller.open_notes()
        store.break_listeners(base.NOTES, RuntimeError('stream reset'))
        assert subscription.state == Subscription.ERROR
        assert isinstance(subscription.last_error, SyncDeliveryError)
        assert subscription.is_open is True

        controller.add_note('T', 'C').result()
        assert subscription.state == Subscription.STREAMING
        assert len(controller.notes) == 1

    def test_add_folder_tags_owner(self, controller, store):
        success, folder_id = controller.add_folder('Work', 'u1').result()
        assert success is True
        assert store.documents(base.FOLDERS)[folder_id] == {'name': 'Work', 'uid': 'u1'}

    def test_use_store_closes_subscriptions(self, controller, store):
        subscription = controller.open_notes()
        other = MemoryDocumentStore()
        controller.use_store(other)
        assert subscription.closed is True
        assert store.listeners == []
        assert controller.store is other
