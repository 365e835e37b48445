from __future__ import annotations

import logging
import os
from typing import Annotated, Any, Mapping, Optional, Union

import msgspec
import pandas as pd
from cachetools import TTLCache

from . import _urls as urls
from ._exceptions import ApiRequestError, TokenRefreshError
from .api_provider import ReferenceApiProvider, ResourceApiProvider
from .catalog import create_providers
from .frame import resources_to_df
from .request import Request, Response
from .resource import build_resource
from .session import Session


__all__ = ['ClientOptions', 'LabelcampAPI']

logger = logging.getLogger(__name__)

# Cache reference data (currencies, languages...) for one hour
REFERENCE_CACHE_TIME = 3600  # sec


def _env_flag(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in ('1', 'true', 'yes', 'on')


class ClientOptions(msgspec.Struct, frozen=True, forbid_unknown_fields=True):
    auto_refresh: bool = False
    reference_cache_ttl: Annotated[float, msgspec.Meta(gt=0)] = REFERENCE_CACHE_TIME

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> ClientOptions:
        """
        Validate option values.

        :raises ValueError: on unknown option names or values of the wrong type
        """
        try:
            return msgspec.convert(dict(values), type=cls)
        except msgspec.ValidationError as e:
            raise ValueError(f'Invalid client options: {e}') from None

    @classmethod
    def from_env(cls) -> ClientOptions:
        """
        Read options from LABELCAMP_AUTO_REFRESH and LABELCAMP_REFERENCE_CACHE_TTL.
        """
        ttl = os.getenv('LABELCAMP_REFERENCE_CACHE_TTL')
        return cls.from_mapping(dict(
            auto_refresh=_env_flag(os.getenv('LABELCAMP_AUTO_REFRESH')),
            reference_cache_ttl=float(ttl) if ttl else REFERENCE_CACHE_TIME,
        ))


class LabelcampAPI:
    """
    Client for the Labelcamp API.

    Every call goes through api_request, which authenticates the request, refreshes an
    expired access token at most once when auto_refresh is on, and keeps the full response
    as the last response. An instance holds that last response and shares the Session
    token, so it must not be used by concurrent callers: use one client per thread or
    serialize access.

    Resource endpoints are attributes, e.g. ``api.artists.get('1')`` or
    ``api.tracks.create(document)``.
    """
    def __init__(
            self,
            options: Union[ClientOptions, Mapping[str, Any], None] = None,
            session: Optional[Session] = None,
            request: Optional[Request] = None,
    ):
        self._access_token: str = ''
        self._last_response: Optional[Response] = None
        self._reference_cache: Optional[TTLCache] = None
        self._providers: dict[str, ResourceApiProvider] = {}
        self.options = ClientOptions()
        if options is not None:
            self.set_options(options)
        self._session = session
        self._request = request if request is not None else Request()
        self._reference_cache = TTLCache(maxsize=256, ttl=self.options.reference_cache_ttl)
        self._providers = create_providers(self, self._reference_cache)
        for name, provider in self._providers.items():
            setattr(self, name, provider)

    def __repr__(self):
        return f'LabelcampAPI(options={self.options!r}, session={self._session!r})'

    # region Configuration

    def set_access_token(self, access_token: str) -> LabelcampAPI:
        """
        Set a static access token, used when no Session is configured.
        """
        self._access_token = access_token
        return self

    def set_options(self, options: Union[ClientOptions, Mapping[str, Any]]) -> LabelcampAPI:
        """
        Merge options into the current ones.

        A new reference_cache_ttl replaces the reference data cache, dropping cached entries.

        :param options: ClientOptions or a mapping of option names to values
        :return: self
        :raises ValueError: on unknown option names or values of the wrong type
        """
        if isinstance(options, ClientOptions):
            options = msgspec.structs.asdict(options)
        self.options = ClientOptions.from_mapping({**msgspec.structs.asdict(self.options), **dict(options)})
        if self._reference_cache is not None and self._reference_cache.ttl != self.options.reference_cache_ttl:
            self._reference_cache = TTLCache(maxsize=256, ttl=self.options.reference_cache_ttl)
            for provider in self._providers.values():
                if isinstance(provider, ReferenceApiProvider):
                    provider.set_cache(self._reference_cache)
        return self

    def set_session(self, session: Optional[Session]) -> LabelcampAPI:
        self._session = session
        return self

    @property
    def session(self) -> Optional[Session]:
        return self._session

    # endregion

    # region Dispatch

    def auth_headers(self, headers: Optional[Mapping[str, str]] = None) -> dict[str, str]:
        """
        Add authorization headers.

        :param headers: Additional headers to merge with the authorization headers
        :return: Authorization headers, merged over the passed ones
        """
        headers = dict(headers or {})
        access_token = self._session.get_access_token() if self._session is not None else self._access_token
        if access_token:
            headers.update({
                'Authorization': f'Bearer {access_token}',
                'Content-Type': urls.JSON_API_CONTENT_TYPE,
            })
        return headers

    def _send(
            self,
            method: str,
            uri: str,
            parameters: Mapping[str, Any],
            headers: Optional[Mapping[str, str]],
    ) -> Response:
        options: dict[str, Any] = dict(headers=self.auth_headers(headers))
        if 'filter' in parameters:
            options['query'] = parameters
        elif parameters:
            options['json'] = parameters
        return self._request.api(method, uri, **options)

    def _refresh_token(self) -> None:
        if self._session is None:
            raise TokenRefreshError('Could not refresh access token, no session configured.')
        logger.info('Access token expired, refreshing')
        if not self._session.refresh_access_token():
            raise TokenRefreshError('Could not refresh access token.')

    def api_request(
            self,
            method: str,
            uri: str,
            parameters: Optional[Mapping[str, Any]] = None,
            headers: Optional[Mapping[str, str]] = None,
    ) -> Response:
        """
        Send a request to the Labelcamp API, refreshing the access token as needed.

        Parameters containing a 'filter' key go to the query string, other non-empty
        parameters are sent as the JSON body.

        :param method: HTTP method
        :param uri: API path, e.g. '/artists/1'
        :param parameters: Query string parameters or JSON body
        :param headers: Additional request headers
        :return: Response (body, headers, status, url), also kept as last response
        :raises ApiRequestError: if the API returns an error
        :raises TokenRefreshError: if the access token expired and could not be refreshed
        """
        parameters = parameters if parameters is not None else {}
        max_refreshes = 1 if self.options.auto_refresh else 0
        refreshes = 0
        while True:
            try:
                response = self._send(method, uri, parameters, headers)
            except ApiRequestError as e:
                if refreshes >= max_refreshes or not e.has_expired_token():
                    raise
                try:
                    self._refresh_token()
                except TokenRefreshError as refresh_error:
                    raise refresh_error from None
                refreshes += 1
                continue
            self._last_response = response
            return response

    def get_last_response(self) -> Optional[Response]:
        """
        Get the latest full response from the API.

        :return: Response with body, headers, status and the requested url, None before the first call
        """
        return self._last_response

    # endregion

    # region Resources

    def get_resource(
            self,
            type_: str,
            id_: str = '',
            attributes: Optional[Mapping[str, Any]] = None,
            relationships: Optional[Mapping[str, Any]] = None,
    ) -> dict:
        """
        Build a JSON:API resource document.

        :param type_: Resource type
        :param id_: Resource id, empty for a new resource
        :param attributes: Resource attributes
        :param relationships: To-one ({type, id}) or to-many (sequence of {type, id}) relationships
        :return: Document dict
        """
        return build_resource(type_, id_, attributes, relationships)

    def provider(self, name: str) -> ResourceApiProvider:
        try:
            return self._providers[name]
        except KeyError:
            raise ValueError(f'Unknown resource endpoint {name}') from None

    def get_df(self, name: str, **kwargs) -> pd.DataFrame:
        """
        Fetch a resource collection as a DataFrame.

        :param name: Endpoint name, e.g. 'artists'
        :param kwargs: Arguments to the endpoint get method (filter_, page...)
        :return: DataFrame with one row per resource
        """
        return resources_to_df(self.provider(name).get(**kwargs))

    def clear_reference_cache(self) -> None:
        self._reference_cache.clear()

    # endregion
