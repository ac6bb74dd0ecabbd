import pytest

from appsync.auth.controller import AuthController
from appsync.auth.provider import MemoryIdentityProvider
from appsync.auth.session import SessionHandle
from appsync.errors import ValidationError
from appsync.notes.controller import NoteController
from appsync.notes.subscription import Subscription
from appsync.store.memory import MemoryDocumentStore


class TestAuthController:

    @pytest.fixture
    def provider(self):
        return MemoryIdentityProvider()

    @pytest.fixture
    def auth(self, provider):
        controller = AuthController(provider)
        yield controller
        controller.close()

    def test_short_password_never_reaches_provider(self, auth, provider):
        for password in ['', 'a', 'short', '1234567']:
            with pytest.raises(ValidationError):
                auth.sign_up('user', 'user@example.com', password)
            assert auth.last_error is not None
        assert provider.calls == []
        assert auth.current_session is None

    def test_sign_up_calls_provider_once(self, auth, provider):
        success, data = auth.sign_up('user', 'user@example.com', 'longenough1')
        assert success is True
        assert provider.calls == [('create_account', 'user@example.com', 'longenough1')]
        assert auth.current_session is not None
        assert auth.current_session.email == 'user@example.com'

    def test_provider_rejection_sets_error(self, auth, provider):
        provider.reject_next('The email address is already in use by another account.', 'EMAIL_EXISTS')
        success, data = auth.sign_up('user', 'user@example.com', 'longenough1')
        assert success is False
        assert auth.last_error == 'Sign up error: The email address is already in use by another account.'
        assert data == auth.last_error
        assert auth.current_session is None

    def test_error_is_not_cleared_on_success(self, auth):
        success, data = auth.log_in('nobody@example.com', 'whatever123')
        assert success is False
        assert auth.last_error.startswith('Log in error: ')

        auth.sign_up('user', 'user@example.com', 'longenough1')
        assert auth.last_error is not None
        auth.clear_error()
        assert auth.last_error is None

    def test_log_in_and_out(self, auth, provider):
        provider.create_account('user@example.com', 'longenough1')
        provider.sign_out()
        assert auth.current_session is None

        success, data = auth.log_in('user@example.com', 'longenough1')
        assert success is True
        assert auth.current_session.email == 'user@example.com'

        success, data = auth.log_out()
        assert success is True
        assert auth.current_session is None

    def test_log_out_failure_is_reported_only(self, auth, provider):
        auth.sign_up('user', 'user@example.com', 'longenough1')
        provider.reject_next('Network unavailable')
        success, data = auth.log_out()
        assert success is False
        assert auth.last_error == 'Sign out error: Network unavailable'
        assert auth.current_session is not None

    def test_subscribe_fires_immediately_and_on_transitions(self, auth, provider):
        seen = []
        remove = auth.subscribe(seen.append)
        assert seen == [None]

        auth.sign_up('user', 'one@example.com', 'longenough1')
        provider.create_account('two@example.com', 'longenough2')
        auth.log_out()
        remove()
        auth.log_in('one@example.com', 'longenough1')

        assert [None if s is None else s.email for s in seen] == [None, 'one@example.com', 'two@example.com', None]

    def test_duplicate_session_is_not_republished(self, auth, provider):
        seen = []
        auth.subscribe(seen.append)
        session = SessionHandle(uid='u1', email='user@example.com')
        provider._set_session(session)
        provider._set_session(SessionHandle(uid='u1', email='user@example.com', id_token='refreshed'))
        assert seen == [None, session]
        assert auth.current_session.id_token == 'refreshed'

    def test_subscribe_sees_cached_session(self, provider):
        provider.create_account('user@example.com', 'longenough1')
        auth = AuthController(provider)
        seen = []
        auth.subscribe(seen.append)
        assert seen[0].email == 'user@example.com'
        auth.close()

    def test_sign_up_scenario(self, auth, provider):
        store = MemoryDocumentStore()
        notes = NoteController(store)
        with pytest.raises(ValidationError):
            auth.sign_up('user', 'user@example.com', 'short')
        assert provider.calls == []
        assert auth.current_session is None

        auth.clear_error()
        success, data = auth.sign_up('user', 'user@example.com', 'longenough1')
        assert success is True
        assert len(provider.calls) == 1
        assert auth.current_session is not None

        subscription = notes.open_folders(auth.current_session.uid)
        assert subscription.state == Subscription.STREAMING
        notes.shutdown()
