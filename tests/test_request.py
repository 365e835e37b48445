from unittest import mock

import msgspec
import pytest
import requests

from labelcamp_api import ApiRequestError, Request
from labelcamp_api.request import flatten_query


def _http_response(status: int = 200, body: bytes = b'', headers=None, reason: str = 'OK'):
    r = mock.Mock(spec=requests.Response)
    r.status_code = status
    r.ok = status < 400
    r.content = body
    r.text = body.decode()
    r.reason = reason
    r.headers = headers if headers is not None else {'Content-Type': 'application/vnd.api+json'}
    r.url = 'https://api.labelcamp.io/artists/1'
    return r


@pytest.fixture
def http():
    return mock.Mock(spec=requests.Session)


@pytest.fixture
def transport(http) -> Request:
    return Request(http_session=http)


class TestFlattenQuery:
    def test_nested(self):
        assert flatten_query({'filter': {'status': 'active'}}) == [('filter[status]', 'active')]

    def test_lists_and_scalars(self):
        assert flatten_query({'filter': {'id': [1, 2]}, 'page': {'size': 50}, 'sort': 'name'}) == [
            ('filter[id][0]', '1'),
            ('filter[id][1]', '2'),
            ('page[size]', '50'),
            ('sort', 'name'),
        ]

    def test_bools_and_none(self):
        assert flatten_query({'filter': {'active': True, 'child': False, 'name': None}}) == [
            ('filter[active]', 'true'),
            ('filter[child]', 'false'),
        ]

    def test_empty_filter(self):
        assert flatten_query({'filter': {}}) == []


class TestRequest:
    def test_get_with_query(self, transport, http):
        http.request.return_value = _http_response(body=b'{"data": {"type": "artists", "id": "1"}}')

        response = transport.api('get', '/artists/1', headers={'Authorization': 'Bearer t'},
                                 query={'filter': {'name': 'Jane'}})

        http.request.assert_called_once_with(
            'GET',
            'https://api.labelcamp.io/artists/1',
            headers={'Authorization': 'Bearer t'},
            timeout=30.0,
            params=[('filter[name]', 'Jane')],
        )
        assert response.body == {'data': {'type': 'artists', 'id': '1'}}
        assert response.status == 200
        assert response.url == 'https://api.labelcamp.io/artists/1'
        assert response.headers == {'Content-Type': 'application/vnd.api+json'}

    def test_post_json_body(self, transport, http):
        http.request.return_value = _http_response(status=201, body=b'{"data": {"type": "artists", "id": "2"}}')
        doc = {'data': {'type': 'artists', 'attributes': {'name': 'Jane'}}}

        response = transport.api('POST', '/artists', json=doc)

        _, kwargs = http.request.call_args
        assert msgspec.json.decode(kwargs['data']) == doc
        assert kwargs['headers']['Content-Type'] == 'application/vnd.api+json'
        assert 'params' not in kwargs
        assert response.status == 201

    def test_empty_body(self, transport, http):
        http.request.return_value = _http_response(status=204, body=b'')
        assert transport.api('DELETE', '/tracks/1').body is None

    def test_headers_case_insensitive(self, transport, http):
        http.request.return_value = _http_response(body=b'{}', headers={'Content-Type': 'application/vnd.api+json'})
        response = transport.api('GET', '/quotas')
        assert response.headers['content-type'] == 'application/vnd.api+json'
        assert response.headers['CONTENT-TYPE'] == 'application/vnd.api+json'

    def test_not_modified_raises(self, transport, http):
        http.request.return_value = _http_response(status=304, body=b'', reason='Not Modified')

        with pytest.raises(ApiRequestError) as exc_info:
            transport.api('GET', '/currencies', headers={'If-None-Match': '"abc"'})

        assert exc_info.value.status == 304
        assert exc_info.value.body is None

    def test_non_json_body(self, transport, http):
        http.request.return_value = _http_response(body=b'plain text', headers={'Content-Type': 'text/plain'})
        assert transport.api('GET', '/quotas').body == 'plain text'

    def test_absolute_url(self, transport, http):
        http.request.return_value = _http_response(body=b'{}')
        transport.api('GET', 'https://example.com/next')
        assert http.request.call_args[0][1] == 'https://example.com/next'

    def test_base_url_with_path(self, http):
        http.request.return_value = _http_response(body=b'{}')
        Request(base_url='https://sandbox.example.com/api/v1', http_session=http).api('GET', '/labels')
        assert http.request.call_args[0][1] == 'https://sandbox.example.com/api/v1/labels'

    def test_error_raises(self, transport, http):
        http.request.return_value = _http_response(
            status=422,
            body=b'{"errors": [{"status": "422", "title": "Invalid", "detail": "name can\'t be blank"}]}',
            reason='Unprocessable Entity',
        )

        with pytest.raises(ApiRequestError) as exc_info:
            transport.api('POST', '/artists', json={'data': {'type': 'artists'}})

        error = exc_info.value
        assert error.status == 422
        assert error.body['errors'][0]['title'] == 'Invalid'
        assert "name can't be blank" in str(error)
        assert not error.has_expired_token()

    def test_expired_token_error(self, transport, http):
        http.request.return_value = _http_response(
            status=401,
            body=b'{"error": "invalid_token", "error_description": "The access token expired"}',
            reason='Unauthorized',
        )

        with pytest.raises(ApiRequestError) as exc_info:
            transport.api('GET', '/users/1')

        assert exc_info.value.has_expired_token()
        assert 'The access token expired' in str(exc_info.value)

    def test_network_errors_propagate(self, transport, http):
        http.request.side_effect = requests.ConnectionError('unreachable')
        with pytest.raises(requests.ConnectionError):
            transport.api('GET', '/users/1')


class TestExpiredTokenPredicate:
    @pytest.mark.parametrize('status, body', [
        (401, None),
        (400, {'error': 'invalid_token'}),
        (403, {'errors': [{'code': 'expired_token'}]}),
        (400, {'errors': [{'detail': 'Access token has expired'}]}),
    ])
    def test_expired(self, status, body):
        assert ApiRequestError('x', status=status, body=body).has_expired_token()

    @pytest.mark.parametrize('status, body', [
        (403, {'errors': [{'detail': 'Forbidden'}]}),
        (404, None),
        (500, 'upstream error'),
    ])
    def test_not_expired(self, status, body):
        assert not ApiRequestError('x', status=status, body=body).has_expired_token()
