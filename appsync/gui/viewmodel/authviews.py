"""
Contains the ``SignUpView`` and ``LogInView`` classes, shown while no user is signed in.
"""

from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import QLabel, QLineEdit, QPushButton, QVBoxLayout, QWidget

from appsync.auth.controller import AuthController
from appsync.gui.viewmodel import threadedtasks


class AuthView(QWidget):
    """
    Common layout of the sign up and log in forms: a title, the form fields, a submit button, an error label and a
    button to switch to the other form.
    """

    def __init__(self, auth: AuthController, toggle_screen: Callable, title: str, submit_text: str, toggle_text: str,
                 *args, **kwargs):
        """
        :param auth: the session controller.
        :param toggle_screen: called to switch between the sign up and log in forms.
        """
        super().__init__(*args, **kwargs)
        self.auth: AuthController = auth
        self.toggle_screen: Callable = toggle_screen
        self.task: threadedtasks.AuthTask | None = None

        self.form_layout = QVBoxLayout(self)
        self.form_layout.setSpacing(20)
        self.lbl_title = QLabel(title)
        title_font = QFont()
        title_font.setPointSize(24)
        self.lbl_title.setFont(title_font)
        self.lbl_title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.form_layout.addWidget(self.lbl_title)

        self.setup_fields()

        self.btn_submit = QPushButton(submit_text)
        self.btn_submit.setDefault(True)
        self.btn_submit.clicked.connect(self.submit)
        self.form_layout.addWidget(self.btn_submit)

        self.lbl_error = QLabel()
        self.lbl_error.setStyleSheet('color: red;')
        self.lbl_error.setWordWrap(True)
        self.form_layout.addWidget(self.lbl_error)

        self.btn_toggle = QPushButton(toggle_text)
        self.btn_toggle.setFlat(True)
        self.btn_toggle.clicked.connect(self.handle_toggle)
        self.form_layout.addWidget(self.btn_toggle)
        self.form_layout.addStretch()

    def setup_fields(self) -> None:
        pass

    @staticmethod
    def _line_edit(placeholder: str, password: bool = False) -> QLineEdit:
        edit = QLineEdit()
        edit.setPlaceholderText(placeholder)
        if password:
            edit.setEchoMode(QLineEdit.EchoMode.Password)
        return edit

    def request(self) -> Callable[[], tuple[bool, str]]:
        """
        Read the form and build the request to send to the session controller.

        :return: a function which runs the request without touching any widget.
        """
        return lambda: (False, '')

    def submit(self) -> None:
        """
        Clear the previous error and send the form's request on a worker thread.
        """
        if threadedtasks.is_busy(self.task):
            return
        self.auth.clear_error()
        self.lbl_error.clear()
        self.btn_submit.setEnabled(False)
        self.task = threadedtasks.AuthTask(self.request())
        self.task.result_signal.connect(self.handle_result)
        self.task.start()

    def handle_result(self, success: bool, data: str) -> None:
        """
        Display the outcome of the request sent by :py:meth:`submit`.

        :param success: True if the request succeeded.
        :param data: the message returned for the request.
        """
        self.btn_submit.setEnabled(True)
        self.lbl_error.setText('' if success else self.auth.last_error or data)

    def handle_toggle(self) -> None:
        """
        Clear any previous error and switch to the other form.
        """
        self.auth.clear_error()
        self.lbl_error.clear()
        self.toggle_screen()


class SignUpView(AuthView):
    """
    Lets a new user create an account.
    """

    def __init__(self, auth: AuthController, toggle_screen: Callable, *args, **kwargs):
        super().__init__(auth, toggle_screen, 'Sign Up', 'Create Account', 'Already have an account? Log In',
                         *args, **kwargs)

    def setup_fields(self) -> None:
        self.txt_username = self._line_edit('Username')
        self.txt_email = self._line_edit('Email')
        self.txt_password = self._line_edit('Password (min {} chars)'.format(AuthController.MIN_PASSWORD_LENGTH),
                                            password=True)
        for widget in [self.txt_username, self.txt_email, self.txt_password]:
            self.form_layout.addWidget(widget)

    def request(self) -> Callable[[], tuple[bool, str]]:
        username, email, password = self.txt_username.text(), self.txt_email.text(), self.txt_password.text()
        return lambda: self.auth.sign_up(username, email, password)


class LogInView(AuthView):
    """
    Lets an existing user log in.
    """

    def __init__(self, auth: AuthController, toggle_screen: Callable, last_email: str = '', *args, **kwargs):
        super().__init__(auth, toggle_screen, 'Log In', 'Log In', "Don't have an account? Sign Up", *args, **kwargs)
        self.txt_email.setText(last_email)

    def setup_fields(self) -> None:
        self.txt_email = self._line_edit('Email')
        self.txt_password = self._line_edit('Password', password=True)
        self.form_layout.addWidget(self.txt_email)
        self.form_layout.addWidget(self.txt_password)

    def request(self) -> Callable[[], tuple[bool, str]]:
        email, password = self.txt_email.text(), self.txt_password.text()
        return lambda: self.auth.log_in(email, password)

    def handle_result(self, success: bool, data: str) -> None:
        super().handle_result(success, data)
        if success:
            self.txt_password.clear()
