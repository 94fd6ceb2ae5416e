"""
Transport-level tests for ApiClient with a mocked session.
"""
import json
from unittest import mock

import pytest
import requests

from apiclient import (
    ApiClient, ApiError, ErrorKind, FileTokenStore, MemoryTokenStore,
    MessagesApi, AuthApi,
)

BASE_URL = 'http://farm.test/api'


def make_response(status_code, payload=None, content=None):
    response = requests.Response()
    response.status_code = status_code
    if content is None:
        content = json.dumps(payload).encode() if payload is not None else b''
    response._content = content
    return response


@pytest.fixture
def session():
    return mock.Mock()


@pytest.fixture
def client(session):
    return ApiClient(BASE_URL, MemoryTokenStore('abc123'), session=session)


class TestRequest:

    def test_get_sends_no_body(self, client, session):
        session.request.return_value = make_response(200, [{'id': '1'}])

        result = client.request('/messages', require_auth=True)

        assert result == [{'id': '1'}]
        kwargs = session.request.call_args.kwargs
        assert kwargs['method'] == 'GET'
        assert kwargs['url'] == f'{BASE_URL}/messages'
        assert kwargs['json'] is None
        assert kwargs['headers']['Authorization'] == 'Bearer abc123'
        assert kwargs['timeout'] == 30

    def test_post_sends_json_body(self, client, session):
        session.request.return_value = make_response(201, {'success': True})

        client.request('/messages', method='POST', body={'subject': 'Hi'})

        kwargs = session.request.call_args.kwargs
        assert kwargs['json'] == {'subject': 'Hi'}
        assert 'Authorization' not in kwargs['headers']

    def test_missing_token_fails_before_network(self, session):
        client = ApiClient(BASE_URL, MemoryTokenStore(), session=session)

        with pytest.raises(ApiError) as excinfo:
            client.request('/messages', require_auth=True)

        assert excinfo.value.kind == ErrorKind.MISSING_CREDENTIAL
        assert excinfo.value.message == 'No access token available'
        session.request.assert_not_called()

    def test_empty_body_returns_none(self, client, session):
        session.request.return_value = make_response(204)

        assert client.request('/messages/1', method='DELETE') is None

    @pytest.mark.parametrize('status_code, kind', [
        (400, ErrorKind.VALIDATION),
        (401, ErrorKind.UNAUTHORIZED),
        (403, ErrorKind.FORBIDDEN),
        (404, ErrorKind.NOT_FOUND),
        (500, ErrorKind.SERVER),
        (502, ErrorKind.SERVER),
    ])
    def test_status_code_maps_to_kind(self, client, session, status_code, kind):
        session.request.return_value = make_response(status_code, {'error': 'Nope'})

        with pytest.raises(ApiError) as excinfo:
            client.request('/messages')

        assert excinfo.value.kind == kind
        assert excinfo.value.message == 'Nope'
        assert excinfo.value.status_code == status_code

    def test_detail_used_when_no_error_field(self, client, session):
        session.request.return_value = make_response(405, {'detail': 'Method "PATCH" not allowed.'})

        with pytest.raises(ApiError) as excinfo:
            client.request('/messages', method='PATCH')

        assert excinfo.value.message == 'Method "PATCH" not allowed.'

    def test_non_json_error_falls_back_to_status(self, client, session):
        session.request.return_value = make_response(502, content=b'<html>Bad Gateway</html>')

        with pytest.raises(ApiError) as excinfo:
            client.request('/messages')

        assert excinfo.value.message == 'API Error: 502'

    def test_connection_error(self, client, session):
        session.request.side_effect = requests.exceptions.ConnectionError('refused')

        with pytest.raises(ApiError) as excinfo:
            client.request('/messages')

        assert excinfo.value.kind == ErrorKind.NETWORK

    def test_timeout(self, client, session):
        session.request.side_effect = requests.exceptions.Timeout()

        with pytest.raises(ApiError) as excinfo:
            client.request('/messages')

        assert excinfo.value.kind == ErrorKind.NETWORK

    def test_base_url_from_environment(self, monkeypatch):
        monkeypatch.setenv('FARM_API_URL', 'https://farm.example.com/api/')

        assert ApiClient().base_url == 'https://farm.example.com/api'


class TestResources:

    def test_update_status_rejects_unknown_status_locally(self, client, session):
        with pytest.raises(ApiError) as excinfo:
            MessagesApi(client).update_status('1', 'archived')

        assert excinfo.value.kind == ErrorKind.VALIDATION
        session.request.assert_not_called()

    def test_update_status_sends_value(self, client, session):
        session.request.return_value = make_response(200, {'success': True})

        MessagesApi(client).update_status('42', 'replied')

        kwargs = session.request.call_args.kwargs
        assert kwargs['method'] == 'PUT'
        assert kwargs['url'] == f'{BASE_URL}/messages/42/status'
        assert kwargs['json'] == {'status': 'replied'}

    def test_get_all_query_string(self, client, session):
        session.request.return_value = make_response(200, [])

        MessagesApi(client).get_all(status='new', search='feed')

        assert session.request.call_args.kwargs['url'] == (
            f'{BASE_URL}/messages?status=new&search=feed'
        )

    def test_login_stores_token_and_logout_clears_it(self, session):
        store = MemoryTokenStore()
        client = ApiClient(BASE_URL, store, session=session)
        session.request.return_value = make_response(
            200, {'access': 'new-token', 'refresh': 'r', 'user': {}}
        )
        auth = AuthApi(client)

        auth.login('admin@farm.test', 'secret')
        assert store.get() == 'new-token'

        auth.logout()
        assert store.get() is None


class TestFileTokenStore:

    def test_round_trip(self, tmp_path):
        store = FileTokenStore(tmp_path / 'auth' / 'token.json')

        assert store.get() is None
        store.set('stored-token')
        assert FileTokenStore(tmp_path / 'auth' / 'token.json').get() == 'stored-token'

        store.clear()
        assert store.get() is None
        store.clear()

    def test_corrupt_file_means_no_token(self, tmp_path):
        path = tmp_path / 'token.json'
        path.write_text('not json')

        assert FileTokenStore(path).get() is None
