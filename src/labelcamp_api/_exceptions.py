from __future__ import annotations

from typing import Any, Optional

import requests


__all__ = [
    'LabelcampAPIException',
    'ApiRequestError',
    'MalformedResourceError',
    'TokenRefreshError',
    'UnsupportedOperationError',
]

# error codes servers put in an OAuth or JSON:API error body for a dead token
_EXPIRED_TOKEN_CODES = ('invalid_token', 'expired_token', 'token_expired')


class LabelcampAPIException(Exception):
    """
    Base exception for all errors raised by this package.

    Attributes:
        response -- request response, if the error came from an HTTP exchange
    """
    def __init__(self, message: str, response: Optional[requests.Response] = None):
        self.response = response
        super().__init__(message)


class ApiRequestError(LabelcampAPIException):
    """
    Exception thrown if an API request returned a non-ok code.

    Attributes:
        status -- HTTP status code
        body -- decoded error body (dict for JSON bodies, else raw text)
    """
    def __init__(
            self,
            message: str,
            response: Optional[requests.Response] = None,
            status: Optional[int] = None,
            body: Any = None,
    ):
        super().__init__(message, response=response)
        if status is None and response is not None:
            status = response.status_code
        self.status = status
        self.body = body

    def _error_entries(self) -> list:
        if not isinstance(self.body, dict):
            return []
        entries = [self.body]
        errors = self.body.get('errors')
        if isinstance(errors, list):
            entries.extend(e for e in errors if isinstance(e, dict))
        return entries

    def has_expired_token(self) -> bool:
        """
        Does this error signal an expired or invalid access token?

        True for a 401 status, or for an error body carrying a well-known token error code
        (``error`` for OAuth style bodies, ``code`` for JSON:API error objects).
        """
        if self.status == 401:
            return True
        for entry in self._error_entries():
            for key in ('error', 'code'):
                if str(entry.get(key, '')).lower() in _EXPIRED_TOKEN_CODES:
                    return True
            detail = str(entry.get('detail', '') or entry.get('error_description', '')).lower()
            if 'token' in detail and 'expired' in detail:
                return True
        return False


class MalformedResourceError(LabelcampAPIException, ValueError):
    """
    Raised when resource input (e.g. a relationship entry missing type or id) cannot be
    turned into a JSON:API document. Never retried.
    """


class TokenRefreshError(LabelcampAPIException):
    """Raised when the access token could not be refreshed during a request."""


class UnsupportedOperationError(LabelcampAPIException):
    """Raised when an endpoint does not offer the requested action."""
