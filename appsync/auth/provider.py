"""
Contains the ``IdentityProvider`` interface and its implementations:

- ``FirebaseIdentityProvider`` - email/password accounts in Firebase Authentication, through its REST API.
- ``MemoryIdentityProvider`` - in-process accounts, used by the test suite and when running without a Firebase project.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, List

import keyring
import keyring.errors
import requests

from appsync import helpers
from appsync.auth.session import SessionHandle

SessionCallback = Callable[[SessionHandle | None], None]


class ProviderError(Exception):
    """
    The identity provider rejected a request. ``message`` is suitable for showing to the user.
    """

    def __init__(self, message: str, code: str = ''):
        super().__init__(message)
        self.message: str = message
        self.code: str = code

    def __str__(self):
        return self.message


class IdentityProvider(ABC):
    """
    The operations AppSync consumes from the identity provider. Session changes are published to the callbacks
    registered with :py:meth:`on_session_change`, possibly from another thread.
    """

    def __init__(self):
        self._session: SessionHandle | None = None
        self._callbacks: List[SessionCallback] = []
        self._lock = threading.RLock()

    @property
    def current_session(self) -> SessionHandle | None:
        return self._session

    def on_session_change(self, callback: SessionCallback) -> Callable[[], None]:
        """
        Register a callback for session changes. The callback is called straight away with the cached session.

        :param callback: called with the new session, or None when signed out.
        :return: a function which removes the callback.
        """
        with self._lock:
            self._callbacks.append(callback)
        callback(self._session)

        def remove():
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return remove

    def _set_session(self, session: SessionHandle | None) -> None:
        with self._lock:
            self._session = session
            callbacks = list(self._callbacks)
        for callback in callbacks:
            callback(session)

    def restore(self) -> SessionHandle | None:
        """
        Restore the session cached from a previous run, if there is one.
        """
        return self._session

    @abstractmethod
    def create_account(self, email: str, password: str) -> SessionHandle:
        """
        Create an account and sign it in.

        :raises ProviderError: if the account couldn't be created.
        """

    @abstractmethod
    def sign_in(self, email: str, password: str) -> SessionHandle:
        """
        Sign in to an existing account.

        :raises ProviderError: if the credentials are rejected.
        """

    @abstractmethod
    def sign_out(self) -> None:
        """
        Sign out of the current session.

        :raises ProviderError: if signing out fails.
        """


class FirebaseIdentityProvider(IdentityProvider):
    """
    Firebase Authentication (email/password) through the Identity Toolkit and Secure Token REST APIs. The refresh token
    is kept in the system keyring so the session survives restarts.
    """

    IDENTITY_URL: str = 'https://identitytoolkit.googleapis.com/v1/accounts:{}'
    TOKEN_URL: str = 'https://securetoken.googleapis.com/v1/token'
    KEYRING_SERVICE: str = helpers.APP_NAME
    KEYRING_TOKEN: str = 'REFRESH-TOKEN'
    TIMEOUT: int = 30

    #: Friendly messages for the error codes returned by Firebase Authentication.
    ERROR_MESSAGES: Dict[str, str] = {
        'EMAIL_EXISTS': 'The email address is already in use by another account.',
        'EMAIL_NOT_FOUND': 'There is no account with this email address.',
        'INVALID_PASSWORD': 'The password is invalid.',
        'INVALID_LOGIN_CREDENTIALS': 'The email address or password is incorrect.',
        'INVALID_EMAIL': 'The email address is badly formatted.',
        'WEAK_PASSWORD': 'The password is too weak.',
        'MISSING_PASSWORD': 'A password is required.',
        'USER_DISABLED': 'This account has been disabled.',
        'TOO_MANY_ATTEMPTS_TRY_LATER': 'Too many attempts. Try again later.',
        'TOKEN_EXPIRED': 'Your session has expired. Please log in again.',
        'INVALID_REFRESH_TOKEN': 'Your session has expired. Please log in again.',
    }

    def __init__(self, api_key: str, remember: bool = True, session: requests.Session | None = None):
        """
        :param api_key: the Firebase project's web API key.
        :param remember: if True, the refresh token is stored in the keyring.
        :param session: the ``requests`` session to use.
        """
        super().__init__()
        self.api_key: str = api_key
        self.remember: bool = remember
        self.http: requests.Session = session or requests.Session()

    @staticmethod
    def _error_message(response: requests.Response) -> tuple[str, str]:
        try:
            message = response.json()['error']['message']
        except (ValueError, KeyError, TypeError):
            return '', 'Unexpected response from the identity provider (HTTP {}).'.format(response.status_code)
        # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
        code, _, detail = message.partition(' : ')
        code = code.strip()
        friendly = FirebaseIdentityProvider.ERROR_MESSAGES.get(code, detail.strip() or code.replace('_', ' ').title())
        return code, friendly

    def _post(self, url: str, **kwargs) -> dict:
        try:
            response = self.http.post(url, params={'key': self.api_key}, timeout=FirebaseIdentityProvider.TIMEOUT,
                                      **kwargs)
        except requests.RequestException as e:
            raise ProviderError('Could not reach the identity provider: {}'.format(e))
        if response.status_code != 200:
            code, message = FirebaseIdentityProvider._error_message(response)
            raise ProviderError(message, code)
        return response.json()

    def _accounts(self, endpoint: str, email: str, password: str) -> SessionHandle:
        data = self._post(FirebaseIdentityProvider.IDENTITY_URL.format(endpoint), json={
            'email': email,
            'password': password,
            'returnSecureToken': True
        })
        session = SessionHandle(uid=data['localId'], email=data.get('email', email), id_token=data['idToken'],
                                refresh_token=data['refreshToken'])
        self._remember(session.refresh_token)
        self._set_session(session)
        return session

    def _remember(self, refresh_token: str) -> None:
        if not self.remember:
            return
        try:
            keyring.set_password(FirebaseIdentityProvider.KEYRING_SERVICE, FirebaseIdentityProvider.KEYRING_TOKEN,
                                 refresh_token)
        except keyring.errors.KeyringError as e:
            logging.warning('Could not store session in keyring: {}'.format(e))

    def create_account(self, email: str, password: str) -> SessionHandle:
        return self._accounts('signUp', email, password)

    def sign_in(self, email: str, password: str) -> SessionHandle:
        return self._accounts('signInWithPassword', email, password)

    def sign_out(self) -> None:
        if self.remember:
            try:
                keyring.delete_password(FirebaseIdentityProvider.KEYRING_SERVICE,
                                        FirebaseIdentityProvider.KEYRING_TOKEN)
            except keyring.errors.PasswordDeleteError:
                pass
            except keyring.errors.KeyringError as e:
                raise ProviderError('Could not remove the stored session: {}'.format(e))
        self._set_session(None)

    def restore(self) -> SessionHandle | None:
        """
        Exchange the refresh token stored in the keyring for a new ID token and publish the restored session. A
        rejected or missing token leaves the user signed out.
        """
        if not self.remember:
            return None
        try:
            refresh_token = keyring.get_password(FirebaseIdentityProvider.KEYRING_SERVICE,
                                                 FirebaseIdentityProvider.KEYRING_TOKEN)
        except keyring.errors.KeyringError as e:
            logging.warning('Could not read session from keyring: {}'.format(e))
            return None
        if not refresh_token:
            return None

        try:
            tokens = self._post(FirebaseIdentityProvider.TOKEN_URL, data={
                'grant_type': 'refresh_token',
                'refresh_token': refresh_token
            })
            lookup = self._post(FirebaseIdentityProvider.IDENTITY_URL.format('lookup'),
                                json={'idToken': tokens['id_token']})
        except ProviderError as e:
            logging.info('Stored session could not be restored: {}'.format(e))
            return None

        users = lookup.get('users') or [{}]
        session = SessionHandle(uid=tokens['user_id'], email=users[0].get('email', ''), id_token=tokens['id_token'],
                                refresh_token=tokens['refresh_token'])
        self._remember(session.refresh_token)
        self._set_session(session)
        return session


class MemoryIdentityProvider(IdentityProvider):
    """
    Keeps accounts in memory. Passwords must be at least 6 characters, as in Firebase.
    """

    MIN_PASSWORD_LENGTH: int = 6

    def __init__(self):
        super().__init__()
        self.accounts: Dict[str, tuple[str, str]] = {}
        self.calls: List[tuple] = []
        self._reject_next: ProviderError | None = None

    def reject_next(self, message: str, code: str = '') -> None:
        """
        Make the next call fail with a ``ProviderError``.
        """
        self._reject_next = ProviderError(message, code)

    def _check_rejection(self) -> None:
        error, self._reject_next = self._reject_next, None
        if error is not None:
            raise error

    def create_account(self, email: str, password: str) -> SessionHandle:
        self.calls.append(('create_account', email, password))
        self._check_rejection()
        if email in self.accounts:
            raise ProviderError(FirebaseIdentityProvider.ERROR_MESSAGES['EMAIL_EXISTS'], 'EMAIL_EXISTS')
        if len(password) < MemoryIdentityProvider.MIN_PASSWORD_LENGTH:
            raise ProviderError(FirebaseIdentityProvider.ERROR_MESSAGES['WEAK_PASSWORD'], 'WEAK_PASSWORD')
        uid = helpers.get_uuid()
        self.accounts[email] = (password, uid)
        session = SessionHandle(uid=uid, email=email, id_token='memory-' + uid)
        self._set_session(session)
        return session

    def sign_in(self, email: str, password: str) -> SessionHandle:
        self.calls.append(('sign_in', email, password))
        self._check_rejection()
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise ProviderError(FirebaseIdentityProvider.ERROR_MESSAGES['INVALID_LOGIN_CREDENTIALS'],
                                'INVALID_LOGIN_CREDENTIALS')
        session = SessionHandle(uid=account[1], email=email, id_token='memory-' + account[1])
        self._set_session(session)
        return session

    def sign_out(self) -> None:
        self.calls.append(('sign_out',))
        self._check_rejection()
        self._set_session(None)
