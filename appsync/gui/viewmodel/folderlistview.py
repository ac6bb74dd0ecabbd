"""
Contains the ``FolderListView`` class, which lists the signed in user's folders.
"""

from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (QHBoxLayout, QLabel, QLineEdit, QListWidget, QListWidgetItem, QMessageBox, QPushButton,
                             QVBoxLayout, QWidget)

from appsync.context import AppContext
from appsync.gui.viewmodel import threadedtasks
from appsync.notes.model.folder import Folder
from appsync.notes.subscription import Subscription


# noinspection PyUnresolvedReferences
class FolderListView(QWidget):
    """
    Shows the user's folders and lets them add, delete and open folders, or log out.
    """

    def __init__(self, context: AppContext, open_folder: Callable[[Folder], None], show_status: Callable[[str], None],
                 *args, **kwargs):
        """
        :param context: the application context.
        :param open_folder: called with a folder when the user opens it.
        :param show_status: called with messages for the status bar.
        """
        super().__init__(*args, **kwargs)
        self.context: AppContext = context
        self.open_folder: Callable[[Folder], None] = open_folder
        self.show_status: Callable[[str], None] = show_status
        self.subscription: Subscription | None = None
        self.task: threadedtasks.AuthTask | None = None
        self._remove_observer = context.notes.observe(self.handle_list_changed)

        layout = QVBoxLayout(self)
        header = QHBoxLayout()
        header.addWidget(QLabel('<h2>My Folders</h2>'))
        header.addStretch()
        self.btn_logout = QPushButton('Log Out')
        self.btn_logout.clicked.connect(self.handle_logout)
        header.addWidget(self.btn_logout)
        layout.addLayout(header)

        self.lst_folders = QListWidget()
        self.lst_folders.itemDoubleClicked.connect(self.handle_open)
        layout.addWidget(self.lst_folders)

        footer = QHBoxLayout()
        self.txt_folder_name = QLineEdit()
        self.txt_folder_name.setPlaceholderText('New Folder Name')
        self.txt_folder_name.returnPressed.connect(self.handle_add)
        footer.addWidget(self.txt_folder_name)
        self.btn_add = QPushButton('Add')
        self.btn_add.clicked.connect(self.handle_add)
        footer.addWidget(self.btn_add)
        self.btn_delete = QPushButton('Delete')
        self.btn_delete.clicked.connect(self.handle_delete)
        footer.addWidget(self.btn_delete)
        layout.addLayout(footer)

    def mount(self) -> None:
        """
        Open the folder subscription for the signed in user.
        """
        session = self.context.auth.current_session
        if session is None:
            return
        self.unmount()
        self.subscription = self.context.notes.open_folders(session.uid)

    def unmount(self) -> None:
        """
        Close the folder subscription.
        """
        if self.subscription is not None:
            self.context.notes.close(self.subscription)
            self.subscription = None

    def handle_list_changed(self, kind: str, records: tuple) -> None:
        if kind != Subscription.KIND_FOLDERS:
            return
        self.lst_folders.clear()
        for folder in records:
            item = QListWidgetItem(folder.name)
            item.setData(Qt.ItemDataRole.UserRole, folder)
            self.lst_folders.addItem(item)

    def selected_folder(self) -> Folder | None:
        item = self.lst_folders.currentItem()
        return None if item is None else item.data(Qt.ItemDataRole.UserRole)

    def handle_add(self) -> None:
        """
        Add a folder if a name has been entered and a user is signed in.
        """
        name = self.txt_folder_name.text().strip()
        session = self.context.auth.current_session
        if session is None or not name:
            return
        future = self.context.notes.add_folder(name, session.uid)
        threadedtasks.on_mutation_done(future, self.context.notes.dispatch, self.show_status)
        self.txt_folder_name.clear()

    def handle_delete(self) -> None:
        folder = self.selected_folder()
        if folder is None:
            return
        action = QMessageBox.question(self, 'Delete Folder', 'Delete the folder "{}"?'.format(folder.name))
        if action != QMessageBox.StandardButton.Yes:
            return
        future = self.context.notes.delete_folder(folder)
        threadedtasks.on_mutation_done(future, self.context.notes.dispatch, self.show_status)

    def handle_open(self, item: QListWidgetItem) -> None:
        self.open_folder(item.data(Qt.ItemDataRole.UserRole))

    def handle_logout(self) -> None:
        """
        Log out on a worker thread. The session callback switches back to the authentication forms.
        """
        if threadedtasks.is_busy(self.task):
            return
        self.context.auth.clear_error()
        self.btn_logout.setEnabled(False)
        self.task = threadedtasks.AuthTask(self.context.auth.log_out)
        self.task.result_signal.connect(self.handle_logout_result)
        self.task.start()

    def handle_logout_result(self, success: bool, data: str) -> None:
        self.btn_logout.setEnabled(True)
        if not success:
            self.show_status(data)

    def close_view(self) -> None:
        self.unmount()
        self._remove_observer()
