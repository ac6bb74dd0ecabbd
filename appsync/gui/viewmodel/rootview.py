"""
Contains the ``RootView`` class, the main window. It shows the sign up or log in form while no user is signed in, and
the folder and note lists once a user is.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QActionGroup, QCloseEvent
from PyQt6.QtWidgets import QDockWidget, QMainWindow, QPlainTextEdit, QStackedWidget

from appsync import config, helpers
from appsync.auth.session import SessionHandle
from appsync.context import AppContext
from appsync.gui.viewmodel.authviews import LogInView, SignUpView
from appsync.gui.viewmodel.folderlistview import FolderListView
from appsync.gui.viewmodel.noteslistview import NotesListView
from appsync.gui.viewmodel.threadedtasks import AuthTask, LogRelay
from appsync.notes.model.folder import Folder


# noinspection PyUnresolvedReferences
class RootView(QMainWindow):
    """
    View controller for the main window.
    """

    PAGE_SIGN_UP: int = 0
    PAGE_LOG_IN: int = 1
    PAGE_FOLDERS: int = 2
    PAGE_NOTES: int = 3

    def __init__(self, context: AppContext, log_relay: LogRelay, *args, **kwargs):
        """
        :param context: the application context.
        :param log_relay: source of log messages for the log pane.
        """
        super().__init__(*args, **kwargs)
        self.context: AppContext = context
        self.setWindowTitle(helpers.APP_NAME)
        self.resize(480, 720)

        self.stack = QStackedWidget()
        self.sign_up_view = SignUpView(context.auth, lambda: self.stack.setCurrentIndex(RootView.PAGE_LOG_IN))
        self.log_in_view = LogInView(context.auth, lambda: self.stack.setCurrentIndex(RootView.PAGE_SIGN_UP),
                                     context.settings.get('last_email', ''))
        self.folder_view = FolderListView(context, self.open_folder, self.show_status)
        self.notes_view = NotesListView(context, self.show_folders, self.show_status)
        for view in [self.sign_up_view, self.log_in_view, self.folder_view, self.notes_view]:
            self.stack.addWidget(view)
        self.setCentralWidget(self.stack)

        self.txt_log_display = QPlainTextEdit()
        self.txt_log_display.setReadOnly(True)
        self.log_dock = QDockWidget('Log', self)
        self.log_dock.setWidget(self.txt_log_display)
        self.log_dock.hide()
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.log_dock)
        log_relay.log_signal.connect(self.display_log)

        self.bootstrap_menu()
        self.restore_task: AuthTask | None = None
        self._remove_session_callback = context.auth.subscribe(self.handle_session)

    def bootstrap_menu(self) -> None:
        """
        Build the View menu: toggle the log pane and choose the logging level.
        """
        view_menu = self.menuBar().addMenu('View')
        view_menu.addAction(self.log_dock.toggleViewAction())
        level_menu = view_menu.addMenu('Log Level')
        group = QActionGroup(self)
        for level in helpers.LOG_LEVELS:
            action = QAction(level.title(), self)
            action.setCheckable(True)
            action.setChecked(level == self.context.settings.get('log_level'))
            action.triggered.connect(lambda checked, lvl=level: self.set_logging_level(lvl))
            group.addAction(action)
            level_menu.addAction(action)
        quit_action = self.menuBar().addAction('Quit')
        quit_action.triggered.connect(self.close)

    def restore_session(self) -> None:
        """
        Restore the previous run's session on a worker thread. The session callback shows the folder list if one
        is found.
        """
        self.statusBar().showMessage('Restoring session...')
        self.restore_task = AuthTask(lambda: (self.context.start() is not None, ''))
        self.restore_task.result_signal.connect(lambda success, data: self.statusBar().clearMessage())
        self.restore_task.start()

    def handle_session(self, session: SessionHandle | None) -> None:
        """
        Switch between the authentication forms and the folder list as the user signs in and out.
        """
        if session is None:
            self.notes_view.unmount()
            self.folder_view.unmount()
            self.stack.setCurrentIndex(RootView.PAGE_LOG_IN if self.context.settings.get('last_email')
                                       else RootView.PAGE_SIGN_UP)
            return
        self.show_folders()

    def show_folders(self) -> None:
        self.folder_view.mount()
        self.stack.setCurrentIndex(RootView.PAGE_FOLDERS)

    def open_folder(self, folder: Folder) -> None:
        self.notes_view.mount(folder)
        self.stack.setCurrentIndex(RootView.PAGE_NOTES)

    def show_status(self, message: str) -> None:
        self.statusBar().showMessage(message, 5000)

    def display_log(self, message: str) -> None:
        self.txt_log_display.appendPlainText(message)

    def set_logging_level(self, level: str) -> None:
        """
        Change the logging level and save it.
        """
        logging.getLogger().setLevel(helpers.LOG_LEVELS[level])
        self.context.settings['log_level'] = level
        config.save_settings(self.context.settings)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.quit_gracefully()
        event.accept()

    def quit_gracefully(self) -> None:
        """
        Wait for any outstanding session request, then save settings and tear down the context.
        """
        for task in [self.restore_task, self.sign_up_view.task, self.log_in_view.task, self.folder_view.task]:
            if task is not None:
                task.wait()
        self._remove_session_callback()
        self.notes_view.close_view()
        self.folder_view.close_view()
        config.save_settings(self.context.settings)
        self.context.close()
