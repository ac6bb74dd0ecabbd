"""
Contains the ``AppContext`` class. One context is created when the process starts and is passed to every view and
command; nothing else creates services. Closing the context tears the services down.
"""

from __future__ import annotations

import logging
from typing import Callable

from appsync import config
from appsync.auth.controller import AuthController
from appsync.auth.provider import FirebaseIdentityProvider, IdentityProvider, MemoryIdentityProvider
from appsync.auth.session import SessionHandle
from appsync.helpers import run_now
from appsync.notes.controller import NoteController
from appsync.store.base import DocumentStore
from appsync.store.memory import MemoryDocumentStore


class AppContext:
    """
    Holds the identity provider, the session controller and the note controller for the lifetime of the process.
    """

    def __init__(self,
                 provider: IdentityProvider,
                 store: DocumentStore | None = None,
                 store_factory: Callable[[SessionHandle], DocumentStore] | None = None,
                 dispatch: Callable[[Callable], None] = run_now,
                 settings: dict | None = None):
        """
        :param provider: the identity provider.
        :param store: the document store, if it doesn't depend on the signed in user.
        :param store_factory: creates a document store for a signed in user. Used when ``store`` is None.
        :param dispatch: runs backend callbacks on the UI thread.
        :param settings: user settings, as loaded by :py:func:`appsync.config.load_settings`.
        """
        self.settings: dict = settings if settings is not None else config.load_settings()
        self.provider: IdentityProvider = provider
        self.store_factory = store_factory
        self.auth: AuthController = AuthController(provider, dispatch)
        self.notes: NoteController = NoteController(store, dispatch)
        self._remove_session_callback = self.auth.subscribe(self._session_changed)
        self.closed: bool = False

    @staticmethod
    def create(settings: dict | None = None, dispatch: Callable[[Callable], None] = run_now) -> AppContext:
        """
        Build the context for the backend configured by ``APPSYNC_BACKEND``.

        :param settings: user settings. Loaded from file if not given.
        :param dispatch: runs backend callbacks on the UI thread.
        """
        if config.BACKEND == 'firestore':
            if not config.FIREBASE_API_KEY or not config.FIREBASE_PROJECT_ID:
                raise ValueError('FIREBASE_API_KEY and FIREBASE_PROJECT_ID must be set to use the firestore backend.')
            logging.info('Using Firebase project {}'.format(config.FIREBASE_PROJECT_ID))
            # Imported here so the Firestore client is only loaded when it is used.
            from appsync.store.firestore import FirestoreDocumentStore

            # TODO: refresh the ID token before it expires (after one hour) and reconnect the store.
            return AppContext(FirebaseIdentityProvider(config.FIREBASE_API_KEY),
                              store_factory=lambda session: FirestoreDocumentStore.connect(
                                  config.FIREBASE_PROJECT_ID, session.id_token),
                              dispatch=dispatch,
                              settings=settings)
        logging.info('Using the in-memory backend. Data is lost when AppSync exits.')
        return AppContext(MemoryIdentityProvider(), store=MemoryDocumentStore(), dispatch=dispatch, settings=settings)

    def start(self) -> SessionHandle | None:
        """
        Restore the session from the previous run, if any.
        """
        return self.provider.restore()

    def _session_changed(self, session: SessionHandle | None) -> None:
        if session is not None and session.email:
            self.settings['last_email'] = session.email
        if self.store_factory is None:
            if session is None:
                self.notes.close_all()
            return
        previous = self.notes.store
        self.notes.use_store(None if session is None else self.store_factory(session))
        if previous is not None:
            previous.close()

    def close(self) -> None:
        """
        Close every subscription, wait for outstanding mutations and stop listening to the identity provider.
        """
        if self.closed:
            return
        self.closed = True
        self._remove_session_callback()
        self.auth.close()
        self.notes.shutdown()
        if self.notes.store is not None:
            self.notes.store.close()
        logging.debug('Context closed')

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
