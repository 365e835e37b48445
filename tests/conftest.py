import os
from typing import Any

import keyring
import keyring.credentials
import pytest

from labelcamp_api import ApiRequestError, LabelcampAPI, Response, Session


class FakeRequest:
    """
    Transport double: records every call and replays queued outcomes in order.
    """
    def __init__(self):
        self.calls = []
        self.outcomes = []

    def queue(self, outcome):
        self.outcomes.append(outcome)
        return self

    def api(self, method, uri, headers=None, query=None, json=None):
        self.calls.append(dict(method=method, uri=uri, headers=dict(headers or {}), query=query, json=json))
        outcome = self.outcomes.pop(0) if self.outcomes else ok_response()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeSession:
    def __init__(self, token: str = 'old-token', refresh_result: bool = True, new_token: str = 'new-token'):
        self.token = token
        self.refresh_result = refresh_result
        self.new_token = new_token
        self.refresh_calls = 0

    def get_access_token(self) -> str:
        return self.token

    def refresh_access_token(self) -> bool:
        self.refresh_calls += 1
        if self.refresh_result:
            self.token = self.new_token
        return self.refresh_result


def ok_response(body: Any = None, status: int = 200, url: str = 'https://api.labelcamp.io/x') -> Response:
    if body is None:
        body = {'data': []}
    return Response(body=body, headers={'Content-Type': 'application/vnd.api+json'}, status=status, url=url)


def expired_error(status: int = 401) -> ApiRequestError:
    return ApiRequestError('token expired', status=status, body={'errors': [{'code': 'invalid_token'}]})


@pytest.fixture
def fake_request() -> FakeRequest:
    return FakeRequest()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(fake_request) -> LabelcampAPI:
    return LabelcampAPI(request=fake_request).set_access_token('static-token')


@pytest.fixture
def refreshing_client(fake_request, fake_session) -> LabelcampAPI:
    return LabelcampAPI(options={'auto_refresh': True}, session=fake_session, request=fake_request)


def _get_keyring_credential(name, kind) -> keyring.credentials.Credential:
    cred = keyring.get_credential(name, None)
    if cred is None:
        raise ValueError(f'Please configure your {kind} in keyring under credential name "{name}"')
    return cred


@pytest.fixture(scope="session")
def live_client() -> LabelcampAPI:
    if not os.getenv('LABELCAMP_LIVE_TESTS'):
        pytest.skip('LABELCAMP_LIVE_TESTS is not set')
    app = _get_keyring_credential('labelcamp-app:https://api.labelcamp.io', 'Labelcamp OAuth client')
    login = _get_keyring_credential('api.labelcamp.io', 'Labelcamp Login')
    session = Session(app.username, app.password)
    if not session.request_access_token(login.username, login.password):
        raise ValueError('Unable to login to Labelcamp with provided credentials')
    return LabelcampAPI(options={'auto_refresh': True}, session=session)
