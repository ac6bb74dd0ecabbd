"""
This is the note synchronisation controller. It owns the live subscriptions to the document store, mirrors the
delivered snapshots into the ``notes`` and ``folders`` lists, and issues create, update and delete requests against the
same collections. It is used by the GUI and the CLI through :py:class:`appsync.context.AppContext`.

Mutations and subscriptions are decoupled: a mutation's future completes once the backend acknowledges the write,
but the list only changes when the subscription's next snapshot arrives.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Dict, List

from appsync.errors import MutationError, SubscriptionError, SyncDeliveryError
from appsync.helpers import run_now
from appsync.notes.model.folder import Folder
from appsync.notes.model.note import Note
from appsync.notes.model.record import partition
from appsync.notes.subscription import Subscription
from appsync.store import base
from appsync.store.base import DocumentSnapshot, DocumentStore, Query


class NoteController:
    """
    Synchronises notes and folders with the document store.
    """

    def __init__(self,
                 store: DocumentStore | None = None,
                 dispatch: Callable[[Callable], None] = run_now,
                 executor: Executor | None = None):
        """
        Create the controller.

        :param store: the document store. May be attached later with :py:meth:`use_store`.
        :param dispatch: called with a zero-argument function for every snapshot or error delivered by the store. The
            GUI passes a function which runs it on the Qt thread.
        :param executor: runs mutation requests. A thread pool owned by the controller is created if not given.
        """
        self.store: DocumentStore | None = store
        self.dispatch: Callable[[Callable], None] = dispatch
        self._owns_executor: bool = executor is None
        self.executor: Executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix='appsync-mutation')
        self._notes: tuple = ()
        self._folders: tuple = ()
        self._open: Dict[str, Subscription] = {}
        self._observers: List[Callable] = []
        self._lock = threading.RLock()

    # LISTS ------------------------------------------------------------------------------------------------------------

    @property
    def notes(self) -> tuple:
        """
        The notes in the most recent snapshot of the open notes subscription, oldest first.
        """
        return self._notes

    @property
    def folders(self) -> tuple:
        """
        The folders in the most recent snapshot of the open folders subscription.
        """
        return self._folders

    def observe(self, callback: Callable[[str, tuple], None]) -> Callable[[], None]:
        """
        Register a function called with ``(kind, records)`` every time the notes or folders list is replaced.

        :param callback: the observer.
        :return: a function which removes the observer.
        """
        self._observers.append(callback)

        def remove():
            if callback in self._observers:
                self._observers.remove(callback)

        return remove

    def use_store(self, store: DocumentStore | None) -> None:
        """
        Switch to a different document store, e.g. after a new user signs in. Open subscriptions are closed first.
        """
        self.close_all()
        self.store = store

    # SUBSCRIPTIONS ----------------------------------------------------------------------------------------------------

    @property
    def subscriptions(self) -> List[Subscription]:
        """
        The subscriptions which are currently open.
        """
        with self._lock:
            return list(self._open.values())

    def open_notes(self, folder: Folder | None = None, replace: bool = False) -> Subscription:
        """
        Start streaming notes, ordered by timestamp ascending. Streams the top-level notes collection, or the notes of
        ``folder`` if given.

        :param folder: the folder whose notes to stream.
        :param replace: close an open notes subscription instead of failing.
        :return: the subscription handle. Pass it to :py:meth:`close` when the list is no longer shown.
        """
        if folder is None:
            target = ('notes',)
            collection = base.notes_path()
        else:
            target = ('folder-notes', folder.id)
            collection = base.folder_notes_path(folder.id)
        query = Query(collection, order_by='timestamp')
        return self._open_subscription(Subscription(Subscription.KIND_NOTES, target, query, Note.from_document),
                                       replace)

    def open_folders(self, uid: str, replace: bool = False) -> Subscription:
        """
        Start streaming the folders which belong to a user.

        :param uid: the id of the user.
        :param replace: close an open folders subscription instead of failing.
        :return: the subscription handle.
        """
        query = Query(base.FOLDERS, filters=[('uid', uid)])
        return self._open_subscription(Subscription(Subscription.KIND_FOLDERS, ('folders', uid), query,
                                                    Folder.from_document),
                                       replace)

    def close(self, subscription: Subscription) -> None:
        """
        Stop a subscription. Its list is emptied. Closing a subscription twice has no effect.

        :param subscription: the handle returned by one of the ``open_`` methods.
        """
        with self._lock:
            if subscription.closed:
                return
            subscription.closed = True
            if self._open.get(subscription.kind) is subscription:
                del self._open[subscription.kind]
        if subscription.registration is not None:
            subscription.registration.remove()
            subscription.registration = None
        subscription.state = Subscription.UNSUBSCRIBED
        logging.debug('Closed subscription {}'.format(subscription))
        self._replace(subscription.kind, ())

    def close_all(self) -> None:
        """
        Close every open subscription.
        """
        for subscription in self.subscriptions:
            self.close(subscription)

    def _open_subscription(self, subscription: Subscription, replace: bool) -> Subscription:
        if self.store is None:
            raise SubscriptionError('No document store connected')
        with self._lock:
            current = self._open.get(subscription.kind)
            if current is not None and not replace:
                raise SubscriptionError('A {} subscription is already open ({}). Close it first.'.format(
                    subscription.kind, current))
        if current is not None:
            self.close(current)
        with self._lock:
            self._open[subscription.kind] = subscription

        subscription.state = Subscription.SUBSCRIBING
        logging.debug('Opening subscription {}'.format(subscription))

        def on_snapshot(documents: List[DocumentSnapshot]):
            self.dispatch(lambda: self._apply_snapshot(subscription, documents))

        def on_error(error: Exception):
            self.dispatch(lambda: self._apply_error(subscription, error))

        registration = self.store.listen(subscription.query, on_snapshot, on_error)
        if subscription.closed:
            registration.remove()
        else:
            subscription.registration = registration
        return subscription

    def _apply_snapshot(self, subscription: Subscription, documents: List[DocumentSnapshot]) -> None:
        if subscription.closed:
            return
        records, skipped = partition(subscription.parser(doc.id, doc.data) for doc in documents)
        for skip in skipped:
            logging.debug('Skipped document {} in {}: {}'.format(skip.document_id, subscription.query.collection,
                                                                 skip.reason))
        subscription.skipped = len(skipped)
        subscription.snapshots += 1
        subscription.state = Subscription.STREAMING
        self._replace(subscription.kind, tuple(records))

    @staticmethod
    def _apply_error(subscription: Subscription, error: Exception) -> None:
        if subscription.closed:
            return
        subscription.state = Subscription.ERROR
        subscription.last_error = SyncDeliveryError('Error fetching {}: {}'.format(subscription.query.collection,
                                                                                   error))
        logging.warning(str(subscription.last_error))

    def _replace(self, kind: str, records: tuple) -> None:
        if kind == Subscription.KIND_NOTES:
            self._notes = records
        else:
            self._folders = records
        for observer in list(self._observers):
            observer(kind, records)

    # MUTATIONS --------------------------------------------------------------------------------------------------------

    def add_note(self, title: str, content: str, folder: Folder | None = None) -> Future:
        """
        Create a note with the current time as its timestamp. Title and content are not validated here.

        :param title: the title of the note.
        :param content: the content of the note.
        :param folder: the folder to add the note to, or None for the top-level notes collection.
        :return: a future resolving to ``(True, document_id)`` or ``(False, MutationError)``.
        """
        note = Note(id='', title=title, content=content)
        collection = NoteController._notes_collection(folder)
        return self._submit('add_note', collection, '', 'add_document', collection, note.to_document())

    def update_note(self, note: Note, folder: Folder | None = None) -> Future:
        """
        Overwrite a stored note with ``note``. Every field is replaced.

        :param note: the replacement note. Its id identifies the document.
        :param folder: the folder containing the note, or None for the top-level notes collection.
        :return: a future resolving to ``(True, document_id)`` or ``(False, MutationError)``.
        """
        collection = NoteController._notes_collection(folder)
        return self._submit('update_note', collection, note.id,
                            'set_document', collection, note.id, note.to_document())

    def delete_note(self, note: Note, folder: Folder | None = None) -> Future:
        """
        Delete a note. Deleting a note which no longer exists succeeds.

        :param note: the note to delete.
        :param folder: the folder containing the note, or None for the top-level notes collection.
        :return: a future resolving to ``(True, document_id)`` or ``(False, MutationError)``.
        """
        collection = NoteController._notes_collection(folder)
        return self._submit('delete_note', collection, note.id, 'delete_document', collection, note.id)

    def add_folder(self, name: str, uid: str) -> Future:
        """
        Create a folder owned by a user. The name is not validated here.

        :param name: the name of the folder.
        :param uid: the id of the user who owns the folder.
        :return: a future resolving to ``(True, document_id)`` or ``(False, MutationError)``.
        """
        fields = Folder(id='', name=name).to_document(owner_uid=uid)
        return self._submit('add_folder', base.FOLDERS, '', 'add_document', base.FOLDERS, fields)

    def delete_folder(self, folder: Folder) -> Future:
        """
        Delete a folder. Deleting a folder which no longer exists succeeds.

        :param folder: the folder to delete.
        :return: a future resolving to ``(True, document_id)`` or ``(False, MutationError)``.
        """
        return self._submit('delete_folder', base.FOLDERS, folder.id,
                            'delete_document', base.FOLDERS, folder.id)

    @staticmethod
    def _notes_collection(folder: Folder | None) -> str:
        return base.notes_path() if folder is None else base.folder_notes_path(folder.id)

    def _submit(self, operation: str, collection: str, document_id: str, method: str, *args) -> Future:
        def run() -> tuple[bool, str] | tuple[bool, MutationError]:
            try:
                if self.store is None:
                    raise SubscriptionError('No document store connected')
                result = getattr(self.store, method)(*args)
            except Exception as e:
                error = MutationError(operation, collection, document_id, e)
                logging.critical(str(error))
                return False, error
            new_id = result if isinstance(result, str) else document_id
            logging.debug('{} on {} succeeded: {}'.format(operation, collection, new_id))
            return True, new_id

        return self.executor.submit(run)

    def shutdown(self) -> None:
        """
        Close every subscription and wait for outstanding mutations to finish.
        """
        self.close_all()
        if self._owns_executor:
            self.executor.shutdown(wait=True)
