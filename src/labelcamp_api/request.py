from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import urljoin

import msgspec
import requests
from requests.structures import CaseInsensitiveDict

from . import _urls as urls
from ._exceptions import ApiRequestError
from ._json_schemas.base import ErrorDocument


__all__ = ['Request', 'Response', 'flatten_query']

logger = logging.getLogger(__name__)


class Response(msgspec.Struct):
    """
    Full result of an API call.
    """
    body: Any
    # case-insensitive lookup, as on requests responses
    headers: Mapping[str, str]
    status: int
    url: str


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def flatten_query(params: Mapping[str, Any], prefix: str = '') -> list[tuple[str, str]]:
    """
    Flatten nested query parameters into bracketed keys.

    ``{'filter': {'status': 'active'}}`` becomes ``[('filter[status]', 'active')]``
    and lists get indexed keys, ``filter[id][0]``. None values are skipped.
    """
    flat = []
    for k, v in params.items():
        key = f'{prefix}[{k}]' if prefix else str(k)
        if v is None:
            continue
        if isinstance(v, Mapping):
            flat.extend(flatten_query(v, key))
        elif isinstance(v, (list, tuple)):
            flat.extend(flatten_query({str(i): e for i, e in enumerate(v)}, key))
        else:
            flat.append((key, _query_value(v)))
    return flat


def _decode_body(r: requests.Response) -> Any:
    if not r.content:
        return None
    try:
        return msgspec.json.decode(r.content)
    except msgspec.DecodeError:
        return r.text


def _error_message(method: str, url: str, r: requests.Response, body: Any) -> str:
    message = None
    if isinstance(body, dict):
        try:
            message = msgspec.convert(body, type=ErrorDocument).message()
        except msgspec.ValidationError:
            message = None
    if not message:
        message = r.reason or 'Request failed'
    return f'{method} {url} failed, Response {r.status_code}: {message}'


class Request:
    """
    HTTP transport for the Labelcamp API.

    Timeouts and connection handling are those of the underlying ``requests.Session``,
    pass your own ``http_session`` to mount adapters with retry policies.
    """
    def __init__(
            self,
            base_url: str = urls.API_BASE_URL,
            timeout: Optional[float] = 30.0,
            http_session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._session: requests.Session = http_session if http_session is not None else requests.Session()

    def __repr__(self):
        return f'Request(base_url={self.base_url!r}, timeout={self.timeout})'

    def _get_url(self, uri: str) -> str:
        if uri.startswith('http://') or uri.startswith('https://'):
            return uri
        # forward slash is necessary so the base path is appended to, not replaced
        return urljoin(self.base_url.rstrip('/') + '/', uri.lstrip('/'))

    def api(
            self,
            method: str,
            uri: str,
            headers: Optional[Mapping[str, str]] = None,
            query: Optional[Mapping[str, Any]] = None,
            json: Any = None,
    ) -> Response:
        """
        Send a request to the API.

        :param method: HTTP verb
        :param uri: Path relative to base_url, or absolute URL
        :param headers: Request headers
        :param query: Query string parameters, nested mappings allowed
        :param json: Request body, encoded as JSON
        :return: Response with decoded body
        :raises ApiRequestError: on a non-2xx response
        """
        url = self._get_url(uri)
        kwargs: dict[str, Any] = dict(headers=dict(headers or {}), timeout=self.timeout)
        if query is not None:
            kwargs['params'] = flatten_query(query)
        if json is not None:
            kwargs['data'] = msgspec.json.encode(json)
            kwargs['headers'].setdefault('Content-Type', urls.JSON_API_CONTENT_TYPE)

        logger.debug('%s %s', method.upper(), url)
        r = self._session.request(method.upper(), url, **kwargs)
        body = _decode_body(r)

        # only 2xx is success, a 304 Not Modified raises too
        if not 200 <= r.status_code < 300:
            message = _error_message(method.upper(), url, r, body)
            raise ApiRequestError(message, response=r, status=r.status_code, body=body)

        return Response(body=body, headers=CaseInsensitiveDict(r.headers), status=r.status_code, url=r.url)
