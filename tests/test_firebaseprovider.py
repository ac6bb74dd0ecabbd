from unittest import mock

import keyring.errors
import pytest
import requests

from appsync.auth.provider import FirebaseIdentityProvider, ProviderError


def _response(status: int, body) -> mock.Mock:
    response = mock.Mock()
    response.status_code = status
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


SIGN_IN_BODY = {
    'localId': 'u1',
    'email': 'user@example.com',
    'idToken': 'id-token',
    'refreshToken': 'refresh-token'
}


class TestFirebaseIdentityProvider:
    KEYRING = 'appsync.auth.provider.keyring'

    @pytest.fixture
    def http(self):
        return mock.Mock(spec=requests.Session)

    def test_sign_in(self, http):
        http.post.return_value = _response(200, SIGN_IN_BODY)
        provider = FirebaseIdentityProvider('api-key', session=http)
        seen = []
        provider.on_session_change(seen.append)

        with mock.patch(TestFirebaseIdentityProvider.KEYRING) as mock_keyring:
            session = provider.sign_in('user@example.com', 'longenough1')
            mock_keyring.set_password.assert_called_once_with('AppSync', 'REFRESH-TOKEN', 'refresh-token')

        assert session.uid == 'u1'
        assert session.id_token == 'id-token'
        assert provider.current_session == session
        assert seen == [None, session]
        args, kwargs = http.post.call_args
        assert args[0] == 'https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword'
        assert kwargs['params'] == {'key': 'api-key'}
        assert kwargs['json'] == {'email': 'user@example.com', 'password': 'longenough1', 'returnSecureToken': True}

    def test_create_account_uses_sign_up(self, http):
        http.post.return_value = _response(200, SIGN_IN_BODY)
        provider = FirebaseIdentityProvider('api-key', remember=False, session=http)
        provider.create_account('user@example.com', 'longenough1')
        assert http.post.call_args[0][0].endswith('accounts:signUp')

    def test_error_messages(self, http):
        provider = FirebaseIdentityProvider('api-key', remember=False, session=http)
        cases = [
            ({'error': {'message': 'EMAIL_EXISTS'}}, 'EMAIL_EXISTS',
             'The email address is already in use by another account.'),
            ({'error': {'message': 'WEAK_PASSWORD : Password should be at least 6 characters'}}, 'WEAK_PASSWORD',
             'The password is too weak.'),
            ({'error': {'message': 'SOMETHING_NEW : Details here'}}, 'SOMETHING_NEW', 'Details here'),
            ({'error': {'message': 'OPERATION_NOT_ALLOWED'}}, 'OPERATION_NOT_ALLOWED', 'Operation Not Allowed'),
            (ValueError('not json'), '', 'Unexpected response from the identity provider (HTTP 400).'),
        ]
        for body, code, message in cases:
            http.post.return_value = _response(400, body)
            with pytest.raises(ProviderError) as e:
                provider.sign_in('user@example.com', 'longenough1')
            assert e.value.code == code
            assert str(e.value) == message
        assert provider.current_session is None

    def test_network_failure(self, http):
        http.post.side_effect = requests.ConnectionError('unreachable')
        provider = FirebaseIdentityProvider('api-key', remember=False, session=http)
        with pytest.raises(ProviderError) as e:
            provider.sign_in('user@example.com', 'longenough1')
        assert 'Could not reach the identity provider' in str(e.value)

    def test_sign_out_forgets_token(self, http):
        http.post.return_value = _response(200, SIGN_IN_BODY)
        provider = FirebaseIdentityProvider('api-key', session=http)
        with mock.patch(TestFirebaseIdentityProvider.KEYRING) as mock_keyring:
            mock_keyring.errors = keyring.errors
            provider.sign_in('user@example.com', 'longenough1')
            mock_keyring.delete_password.side_effect = keyring.errors.PasswordDeleteError()
            provider.sign_out()
            mock_keyring.delete_password.assert_called_once_with('AppSync', 'REFRESH-TOKEN')
        assert provider.current_session is None

    def test_restore(self, http):
        http.post.side_effect = [
            _response(200, {'id_token': 'new-id', 'refresh_token': 'new-refresh', 'user_id': 'u1'}),
            _response(200, {'users': [{'localId': 'u1', 'email': 'user@example.com'}]}),
        ]
        provider = FirebaseIdentityProvider('api-key', session=http)
        with mock.patch(TestFirebaseIdentityProvider.KEYRING) as mock_keyring:
            mock_keyring.get_password.return_value = 'stored-refresh'
            session = provider.restore()
            mock_keyring.set_password.assert_called_once_with('AppSync', 'REFRESH-TOKEN', 'new-refresh')

        assert session.uid == 'u1'
        assert session.email == 'user@example.com'
        assert provider.current_session == session
        token_call = http.post.call_args_list[0]
        assert token_call[0][0] == FirebaseIdentityProvider.TOKEN_URL
        assert token_call[1]['data'] == {'grant_type': 'refresh_token', 'refresh_token': 'stored-refresh'}

    def test_restore_without_token(self, http):
        provider = FirebaseIdentityProvider('api-key', session=http)
        with mock.patch(TestFirebaseIdentityProvider.KEYRING) as mock_keyring:
            mock_keyring.get_password.return_value = None
            assert provider.restore() is None
        http.post.assert_not_called()

    def test_restore_rejected_token(self, http):
        http.post.return_value = _response(400, {'error': {'message': 'INVALID_REFRESH_TOKEN'}})
        provider = FirebaseIdentityProvider('api-key', session=http)
        with mock.patch(TestFirebaseIdentityProvider.KEYRING) as mock_keyring:
            mock_keyring.get_password.return_value = 'stale'
            assert provider.restore() is None
        assert provider.current_session is None
