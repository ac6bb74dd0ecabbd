"""
Contains the ``NotesListView`` class, which lists the notes in a folder (or the top-level notes), and the
``NoteEditDialog`` used to edit a note.
"""

from __future__ import annotations

import html

from typing import Callable

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (QApplication, QDialog, QDialogButtonBox, QFormLayout, QHBoxLayout, QLabel, QLineEdit,
                             QListWidget, QListWidgetItem, QPlainTextEdit, QPushButton, QSplitter, QTextBrowser,
                             QVBoxLayout, QWidget)

from appsync import helpers
from appsync.context import AppContext
from appsync.gui.viewmodel import threadedtasks
from appsync.helpers import DateUtil
from appsync.notes.model.folder import Folder
from appsync.notes.model.note import Note
from appsync.notes.subscription import Subscription


class NoteEditDialog(QDialog):
    """
    Edits the title and content of a note.
    """

    def __init__(self, note: Note, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.note: Note = note
        self.setWindowTitle('Edit Note')
        layout = QFormLayout(self)
        self.txt_title = QLineEdit(note.title)
        self.txt_content = QPlainTextEdit(note.content)
        layout.addRow('Title', self.txt_title)
        layout.addRow('Content', self.txt_content)
        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    def edited_note(self) -> Note:
        """
        The replacement note, keeping the original id and timestamp.
        """
        return self.note.edited(self.txt_title.text(), self.txt_content.toPlainText())


# noinspection PyUnresolvedReferences
class NotesListView(QWidget):
    """
    Shows the notes of one folder, oldest first, with a preview of the selected note. Notes can be added, edited,
    deleted and shared (copied to the clipboard).
    """

    def __init__(self, context: AppContext, go_back: Callable, show_status: Callable[[str], None], *args, **kwargs):
        """
        :param context: the application context.
        :param go_back: called when the user returns to the folder list.
        :param show_status: called with messages for the status bar.
        """
        super().__init__(*args, **kwargs)
        self.context: AppContext = context
        self.go_back: Callable = go_back
        self.show_status: Callable[[str], None] = show_status
        self.folder: Folder | None = None
        self.subscription: Subscription | None = None
        self._remove_observer = context.notes.observe(self.handle_list_changed)

        layout = QVBoxLayout(self)
        header = QHBoxLayout()
        self.btn_back = QPushButton('< Folders')
        self.btn_back.clicked.connect(self.handle_back)
        header.addWidget(self.btn_back)
        self.lbl_folder = QLabel()
        header.addWidget(self.lbl_folder)
        header.addStretch()
        layout.addLayout(header)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        self.lst_notes = QListWidget()
        self.lst_notes.currentItemChanged.connect(self.handle_selection)
        self.lst_notes.itemDoubleClicked.connect(lambda item: self.handle_edit())
        splitter.addWidget(self.lst_notes)
        self.txt_preview = QTextBrowser()
        splitter.addWidget(self.txt_preview)
        layout.addWidget(splitter)

        actions = QHBoxLayout()
        self.btn_edit = QPushButton('Edit')
        self.btn_edit.clicked.connect(self.handle_edit)
        self.btn_share = QPushButton('Share')
        self.btn_share.clicked.connect(self.handle_share)
        self.btn_delete = QPushButton('Delete')
        self.btn_delete.clicked.connect(self.handle_delete)
        for button in [self.btn_edit, self.btn_share, self.btn_delete]:
            actions.addWidget(button)
        actions.addStretch()
        layout.addLayout(actions)

        self.txt_title = QLineEdit()
        self.txt_title.setPlaceholderText('Note Title')
        self.txt_content = QPlainTextEdit()
        self.txt_content.setPlaceholderText('Note Content')
        self.txt_content.setMaximumHeight(100)
        self.btn_add = QPushButton('Add Note')
        self.btn_add.clicked.connect(self.handle_add)
        layout.addWidget(self.txt_title)
        layout.addWidget(self.txt_content)
        layout.addWidget(self.btn_add)

    def mount(self, folder: Folder | None) -> None:
        """
        Show the notes of ``folder``, or the top-level notes if None. The previous subscription is closed first.
        """
        self.unmount()
        self.folder = folder
        self.lbl_folder.setText('<h2>{}</h2>'.format(html.escape(folder.name) if folder else 'My Notes'))
        self.subscription = self.context.notes.open_notes(folder)

    def unmount(self) -> None:
        if self.subscription is not None:
            self.context.notes.close(self.subscription)
            self.subscription = None
        self.txt_preview.clear()

    def handle_list_changed(self, kind: str, records: tuple) -> None:
        if kind != Subscription.KIND_NOTES:
            return
        selected = self.selected_note()
        self.lst_notes.clear()
        for note in records:
            item = QListWidgetItem('{}\n{}'.format(note.title, DateUtil.display(note.timestamp)))
            item.setData(Qt.ItemDataRole.UserRole, note)
            self.lst_notes.addItem(item)
            if selected is not None and note.id == selected.id:
                self.lst_notes.setCurrentItem(item)

    def selected_note(self) -> Note | None:
        item = self.lst_notes.currentItem()
        return None if item is None else item.data(Qt.ItemDataRole.UserRole)

    def handle_selection(self, current: QListWidgetItem | None, previous: QListWidgetItem | None) -> None:
        if current is None:
            self.txt_preview.clear()
            return
        note = current.data(Qt.ItemDataRole.UserRole)
        self.txt_preview.setHtml('<h3>{}</h3>{}'.format(html.escape(note.title),
                                                        helpers.markdown_to_html(note.content)))

    def _track(self, future) -> None:
        threadedtasks.on_mutation_done(future, self.context.notes.dispatch, self.show_status)

    def handle_add(self) -> None:
        """
        Add a note if both a title and content have been entered.
        """
        title = self.txt_title.text()
        content = self.txt_content.toPlainText()
        if not title or not content:
            return
        self._track(self.context.notes.add_note(title, content, self.folder))
        self.txt_title.clear()
        self.txt_content.clear()

    def handle_edit(self) -> None:
        note = self.selected_note()
        if note is None:
            return
        dialog = NoteEditDialog(note, self)
        if dialog.exec() == QDialog.DialogCode.Accepted:
            self._track(self.context.notes.update_note(dialog.edited_note(), self.folder))

    def handle_delete(self) -> None:
        note = self.selected_note()
        if note is None:
            return
        self._track(self.context.notes.delete_note(note, self.folder))

    def handle_share(self) -> None:
        note = self.selected_note()
        if note is None:
            return
        QApplication.clipboard().setText('{}\n\n{}'.format(note.title, note.content))
        self.show_status('Copied "{}" to the clipboard.'.format(note.title))

    def handle_back(self) -> None:
        self.unmount()
        self.go_back()

    def close_view(self) -> None:
        self.unmount()
        self._remove_observer()
