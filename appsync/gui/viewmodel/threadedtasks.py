"""
Contains classes which move work from the backend's threads onto the Qt thread.
"""

from __future__ import annotations

from concurrent.futures import Future
from typing import Callable

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from appsync.errors import AppSyncError


# noinspection PyUnresolvedReferences
class Dispatcher(QObject):
    """
    Runs functions on the thread this object lives on (the Qt thread). Snapshot and session callbacks arrive on the
    store's and provider's threads and are passed through here before they touch any widget.
    """

    #: Functions to run are emitted to this signal.
    call_signal = pyqtSignal(object)

    def __init__(self):
        super().__init__()
        self.call_signal.connect(self._run)

    @staticmethod
    def _run(fn: Callable) -> None:
        fn()

    def __call__(self, fn: Callable) -> None:
        self.call_signal.emit(fn)


# noinspection PyUnresolvedReferences
class LogRelay(QObject):
    """
    Collects log messages from any thread and re-emits them on the Qt thread.
    """

    #: Log messages are emitted to this signal.
    log_signal = pyqtSignal(str)

    def __call__(self, message: str) -> None:
        self.log_signal.emit(message)


def on_mutation_done(future: Future, dispatch: Callable, cb: Callable[[str], None]) -> None:
    """
    Report the failure of a mutation to ``cb`` on the Qt thread. Successful mutations are reflected by the next
    snapshot, so nothing is reported for them.

    :param future: the future returned by one of the ``NoteController`` mutation methods.
    :param dispatch: the dispatcher.
    :param cb: called with the error message if the mutation failed.
    """
    def done(f: Future):
        success, data = f.result()
        if not success:
            dispatch(lambda: cb(str(data)))

    future.add_done_callback(done)


# noinspection PyUnresolvedReferences
class AuthTask(QThread):
    """
    Runs one request to the identity provider (sign up, log in, log out or restoring the previous session) off the Qt
    thread. Session changes caused by the request reach the views through the ``Dispatcher``.
    """

    #: ``(success, message)`` is sent to this signal when the request completes.
    result_signal = pyqtSignal(bool, str)

    def __init__(self, request: Callable[[], tuple[bool, str]]):
        """
        :param request: the request to run. Returns ``(success, message)`` like the session controller's methods. It
            must not touch any widget.
        """
        super().__init__()
        self.request: Callable[[], tuple[bool, str]] = request
        self.success: bool | None = None
        self.data: str = ''

    def run(self):
        try:
            self.success, self.data = self.request()
        except AppSyncError as e:
            self.success, self.data = False, str(e)
        self.result_signal.emit(self.success, self.data)


def is_busy(task: QThread | None) -> bool:
    return task is not None and task.isRunning()
