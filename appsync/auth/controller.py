"""
This is the session controller. It holds the current session and the last authentication error, and mediates sign up,
log in and log out requests to the identity provider. Views observe it through :py:meth:`AuthController.subscribe`.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from appsync.auth.provider import IdentityProvider, ProviderError
from appsync.auth.session import SessionHandle
from appsync.errors import AuthError, ValidationError
from appsync.helpers import run_now


class AuthController:
    """
    Wraps the identity provider.
    """

    #: Minimum password length accepted when signing up.
    MIN_PASSWORD_LENGTH: int = 8

    def __init__(self, provider: IdentityProvider, dispatch: Callable[[Callable], None] = run_now):
        """
        :param provider: the identity provider.
        :param dispatch: called with a zero-argument function for every session change published by the provider.
        """
        self.provider: IdentityProvider = provider
        self.dispatch: Callable[[Callable], None] = dispatch
        self.current_session: SessionHandle | None = None
        self.last_error: str | None = None
        self._subscribers: List[Callable] = []
        self._remove_provider_callback = provider.on_session_change(
            lambda session: self.dispatch(lambda: self._session_changed(session)))

    def _session_changed(self, session: SessionHandle | None) -> None:
        previous = self.current_session
        self.current_session = session
        if (previous is None) == (session is None) and (session is None or previous.uid == session.uid):
            return
        if session is None:
            logging.info('Signed out')
        else:
            logging.info('Signed in as {}'.format(session.email or session.uid))
        for subscriber in list(self._subscribers):
            subscriber(session)

    def subscribe(self, callback: Callable[[SessionHandle | None], None]) -> Callable[[], None]:
        """
        Register a function called whenever the user signs in, signs out or switches account. It is called once
        straight away with the current session.

        :param callback: called with the new session, or None when signed out.
        :return: a function which removes the subscription.
        """
        self._subscribers.append(callback)
        callback(self.current_session)

        def remove():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return remove

    def clear_error(self) -> None:
        """
        Clear ``last_error``. Call before starting a new attempt; a successful attempt doesn't clear it.
        """
        self.last_error = None

    def _fail(self, prefix: str, error: ProviderError) -> tuple[bool, str]:
        auth_error = AuthError('{}: {}'.format(prefix, error))
        self.last_error = str(auth_error)
        logging.warning(self.last_error)
        return False, self.last_error

    def sign_up(self, username: str, email: str, password: str) -> tuple[bool, str]:
        """
        Create an account. The session itself changes through the subscription, not through this return value.

        :param username: the user's chosen name. Not stored by the identity provider.
        :param email: the email address for the account.
        :param password: the password; must be at least :py:attr:`MIN_PASSWORD_LENGTH` characters.

        :returns:

            -success (:py:class:`bool`) - true if the provider accepted the request.

            -data (:py:class:`str`) - error message on failure, or success message.

        :raises ValidationError: if the password is too short. The provider is not contacted.
        """
        if len(password) < AuthController.MIN_PASSWORD_LENGTH:
            error = ValidationError('Password must be at least {} characters.'.format(
                AuthController.MIN_PASSWORD_LENGTH))
            self.last_error = str(error)
            raise error
        try:
            self.provider.create_account(email, password)
        except ProviderError as e:
            return self._fail('Sign up error', e)
        logging.debug('Account created for {} ({})'.format(email, username))
        return True, 'Account created.'

    def log_in(self, email: str, password: str) -> tuple[bool, str]:
        """
        Sign in to an existing account.

        :returns:

            -success (:py:class:`bool`) - true if the provider accepted the credentials.

            -data (:py:class:`str`) - error message on failure, or success message.

        """
        try:
            self.provider.sign_in(email, password)
        except ProviderError as e:
            return self._fail('Log in error', e)
        return True, 'Logged in.'

    def log_out(self) -> tuple[bool, str]:
        """
        Sign out. A failure is reported in ``last_error`` only.

        :returns:

            -success (:py:class:`bool`) - true if signed out.

            -data (:py:class:`str`) - error message on failure, or success message.

        """
        try:
            self.provider.sign_out()
        except ProviderError as e:
            return self._fail('Sign out error', e)
        return True, 'Logged out.'

    def close(self) -> None:
        """
        Stop listening to the identity provider.
        """
        self._remove_provider_callback()
        self._subscribers.clear()
