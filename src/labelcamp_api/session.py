from __future__ import annotations

import logging
import time
from typing import Optional

import msgspec
import requests

from . import _urls as urls
from ._json_schemas.base import TokenResponse


__all__ = ['Session']

logger = logging.getLogger(__name__)


class Session:
    """
    Holds the OAuth2 tokens for a Labelcamp account and performs token exchanges.

    The same Session may be shared with a LabelcampAPI client, which reads the current
    access token on every request and asks the Session to refresh it when it expires.
    """
    def __init__(
            self,
            client_id: str = '',
            client_secret: str = '',
            *,
            token_url: str = urls.TOKEN_URL,
            http_session: Optional[requests.Session] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self._http: requests.Session = http_session if http_session is not None else requests.Session()
        self._access_token: str = ''
        self._refresh_token: str = ''
        self._expiration_time: float = 0.0
        self._scope: str = ''

    def __repr__(self):
        return f'Session(client_id={self.client_id!r}, has_token={bool(self._access_token)})'

    def get_access_token(self) -> str:
        return self._access_token

    def set_access_token(self, access_token: str) -> Session:
        self._access_token = access_token
        return self

    def get_refresh_token(self) -> str:
        return self._refresh_token

    def set_refresh_token(self, refresh_token: str) -> Session:
        self._refresh_token = refresh_token
        return self

    def get_token_expiration(self) -> float:
        """
        :return: Epoch seconds at which the access token expires, 0 if unknown
        """
        return self._expiration_time

    def get_scope(self) -> list[str]:
        return self._scope.split() if self._scope else []

    def _token_payload(self, grant_type: str, **fields: str) -> dict[str, str]:
        payload = dict(grant_type=grant_type, **fields)
        if self.client_id:
            payload['client_id'] = self.client_id
        if self.client_secret:
            payload['client_secret'] = self.client_secret
        return payload

    def _exchange(self, payload: dict[str, str]) -> Optional[TokenResponse]:
        r = self._http.post(self.token_url, data=payload, headers=dict(accept='application/json'))
        if not r.ok:
            logger.warning('Token exchange (%s) failed, Response %s', payload['grant_type'], r.status_code)
            return None
        try:
            token = msgspec.json.decode(r.content, type=TokenResponse)
        except (msgspec.DecodeError, msgspec.ValidationError) as e:
            logger.warning('Token exchange (%s) returned an unreadable body: %s', payload['grant_type'], e)
            return None
        if not token.access_token:
            return None
        return token

    def _install(self, token: TokenResponse) -> None:
        self._access_token = token.access_token
        # not every server rotates the refresh token
        if token.refresh_token:
            self._refresh_token = token.refresh_token
        if token.expires_in is not None:
            self._expiration_time = time.time() + token.expires_in
        if token.scope is not None:
            self._scope = token.scope

    def request_access_token(self, username: str, password: str) -> bool:
        """
        Log in with account credentials (OAuth2 password grant).

        :param username: Account login
        :param password: Account password
        :return: True if an access token was obtained
        """
        token = self._exchange(self._token_payload('password', username=username, password=password))
        if token is None:
            return False
        self._install(token)
        return True

    def refresh_access_token(self, refresh_token: Optional[str] = None) -> bool:
        """
        Exchange the refresh token for a new access token.

        :param refresh_token: Refresh token to use, default the stored one
        :return: True if a new access token is installed and returned by get_access_token
        """
        refresh_token = refresh_token or self._refresh_token
        if not refresh_token:
            logger.warning('Cannot refresh access token, no refresh token available')
            return False
        token = self._exchange(self._token_payload('refresh_token', refresh_token=refresh_token))
        if token is None:
            return False
        if not token.refresh_token:
            token.refresh_token = refresh_token
        self._install(token)
        logger.info('Access token refreshed')
        return True
