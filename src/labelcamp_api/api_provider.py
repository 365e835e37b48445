from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Mapping, AbstractSet

import msgspec
from cachetools import TTLCache

from ._exceptions import UnsupportedOperationError
from .request import flatten_query
from .resource import build_resource

if TYPE_CHECKING:
    # avoid circular import
    from .labelcamp import LabelcampAPI


__all__ = ['ApiProvider', 'ResourceApiProvider', 'ReferenceApiProvider', 'ALL_ACTIONS']

ALL_ACTIONS = frozenset({'get', 'create', 'update', 'delete'})


class ApiProvider:
    """
    Base class for all resource endpoints.
    Child classes should implement their own methods using the query_api method to drive the query.
    """
    def __init__(self, _client: LabelcampAPI):
        self._client = _client

    def query_api(
            self,
            method: str,
            uri: str,
            parameters: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Dispatch a call through the client and return the response body.

        The full response stays available from the client's get_last_response.

        :param method: HTTP verb
        :param uri: API path
        :param parameters: Query parameters (when containing 'filter') or JSON body
        :return: Decoded response body
        """
        response = self._client.api_request(method, uri, parameters)
        return response.body


class ResourceApiProvider(ApiProvider):
    """
    Get/create/update/delete access to one resource collection, e.g. ``/artists``.
    """
    def __init__(
            self,
            _client: LabelcampAPI,
            path: str,
            *,
            type_: Optional[str] = None,
            actions: AbstractSet[str] = ALL_ACTIONS,
            filterable: bool = True,
    ):
        super().__init__(_client)
        self.path = path.strip('/')
        self.type_ = type_ if type_ is not None else self.path
        self.actions = frozenset(actions)
        self.filterable = filterable

    def __repr__(self):
        return f'{type(self).__name__}(path={self.path!r}, actions={sorted(self.actions)})'

    def _check(self, action: str):
        if action not in self.actions:
            raise UnsupportedOperationError(f'Endpoint /{self.path} does not support {action}')

    def uri(self, id_: str = '') -> str:
        return f'/{self.path}/{id_}' if id_ else f'/{self.path}'

    def _get_parameters(self, filter_: Optional[Mapping[str, Any]], page: Optional[Mapping[str, Any]]) -> dict:
        if not self.filterable:
            if filter_ or page:
                raise UnsupportedOperationError(f'Endpoint /{self.path} does not accept filter or page parameters')
            return {}
        # always send a filter key so the parameters go to the query string
        parameters: dict[str, Any] = {'filter': dict(filter_ or {})}
        if page:
            parameters['page'] = dict(page)
        return parameters

    def get(
            self,
            id_: str = '',
            filter_: Optional[Mapping[str, Any]] = None,
            page: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """
        Fetch one resource by id, or the collection when id is empty.

        :param id_: Resource id
        :param filter_: JSON:API filter values, e.g. {'name': 'Jane'}
        :param page: JSON:API page values, e.g. {'number': 2, 'size': 50}
        :return: Response document
        """
        self._check('get')
        return self.query_api('GET', self.uri(id_), self._get_parameters(filter_, page))

    def create(self, parameters: Mapping[str, Any]) -> Any:
        self._check('create')
        return self.query_api('POST', self.uri(), parameters)

    def update(self, id_: str, parameters: Mapping[str, Any]) -> Any:
        self._check('update')
        if not id_:
            raise ValueError(f'An id is required to update a resource of /{self.path}')
        return self.query_api('PUT', self.uri(id_), parameters)

    def delete(self, id_: str) -> None:
        self._check('delete')
        if not id_:
            raise ValueError(f'An id is required to delete a resource of /{self.path}')
        self.query_api('DELETE', self.uri(id_))

    def build(
            self,
            id_: str = '',
            attributes: Optional[Mapping[str, Any]] = None,
            relationships: Optional[Mapping[str, Any]] = None,
    ) -> dict:
        """
        Build a JSON:API document for this resource type.
        """
        return build_resource(self.type_, id_, attributes, relationships)

    def create_resource(
            self,
            attributes: Optional[Mapping[str, Any]] = None,
            relationships: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        return self.create(self.build('', attributes, relationships))

    def update_resource(
            self,
            id_: str,
            attributes: Optional[Mapping[str, Any]] = None,
            relationships: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        return self.update(id_, self.build(id_, attributes, relationships))


class ReferenceApiProvider(ResourceApiProvider):
    """
    Read-only access to reference data (currencies, languages...) that rarely changes.

    Results are cached per client for ClientOptions.reference_cache_ttl seconds.
    A cached result does not replace the client's last response.
    Each call returns its own copy, the cache holds the encoded document.
    """
    def __init__(self, _client: LabelcampAPI, path: str, *, cache: TTLCache, **kwargs):
        kwargs.setdefault('actions', frozenset({'get'}))
        super().__init__(_client, path, **kwargs)
        self._cache = cache

    def set_cache(self, cache: TTLCache) -> None:
        self._cache = cache

    def get(
            self,
            id_: str = '',
            filter_: Optional[Mapping[str, Any]] = None,
            page: Optional[Mapping[str, Any]] = None,
            *,
            no_cache: bool = False,
            force_refresh: bool = False,
    ) -> Any:
        """
        Fetch reference data, from cache when available.

        :param id_: Resource id
        :param filter_: JSON:API filter values
        :param page: JSON:API page values
        :param no_cache: Disable use of caching, default False
        :param force_refresh: Force expiration of current cache key for this query, default False
        :return: Response document
        """
        key = (self.uri(id_), tuple(flatten_query({'filter': filter_ or {}, 'page': page or {}})))
        if force_refresh:
            # remove key from cache if present
            self._cache.pop(key, None)
        if no_cache:
            return super().get(id_, filter_, page)
        try:
            return msgspec.json.decode(self._cache[key])
        except KeyError:
            pass
        body = super().get(id_, filter_, page)
        self._cache[key] = msgspec.json.encode(body)
        return body
