"""
The Labelcamp resource endpoints and the actions each one offers.

See https://developer.labelcamp.io/resources for the attributes and relationships
accepted by each resource type.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple, FrozenSet, Optional

from cachetools import TTLCache

from .api_provider import ALL_ACTIONS, ReferenceApiProvider, ResourceApiProvider

if TYPE_CHECKING:
    # avoid circular import
    from .labelcamp import LabelcampAPI


__all__ = ['ResourceSpec', 'RESOURCES', 'create_providers']

GET = frozenset({'get'})
GET_CREATE = frozenset({'get', 'create'})
GET_CREATE_UPDATE = frozenset({'get', 'create', 'update'})
GET_CREATE_DELETE = frozenset({'get', 'create', 'delete'})


class ResourceSpec(NamedTuple):
    name: str
    path: str
    actions: FrozenSet[str] = ALL_ACTIONS
    filterable: bool = True
    reference: bool = False
    type_: Optional[str] = None


RESOURCES = (
    ResourceSpec('users', 'users'),
    ResourceSpec('dsps', 'dsps', GET),
    ResourceSpec('playlists', 'playlists', GET, filterable=False),
    ResourceSpec('artists', 'artists', GET_CREATE_UPDATE),
    ResourceSpec('tracks', 'tracks'),
    ResourceSpec('companies', 'companies', GET_CREATE_UPDATE),
    ResourceSpec('continents', 'continents', GET, filterable=False, reference=True),
    ResourceSpec('currencies', 'currencies', GET, filterable=False, reference=True),
    ResourceSpec('distributors', 'distributors', GET),
    ResourceSpec('distributor_price_codes', 'distributor-price-codes', GET),
    ResourceSpec('distributor_product_sub_genres', 'distributor-product-sub-genres', GET),
    ResourceSpec('dsp_states', 'dsp-states', GET_CREATE),
    ResourceSpec('genders', 'genders', GET, filterable=False, reference=True),
    ResourceSpec('groups', 'groups'),
    ResourceSpec('import_tasks', 'import-tasks', GET_CREATE),
    ResourceSpec('labels', 'labels'),
    ResourceSpec('languages', 'languages', GET, filterable=False, reference=True),
    ResourceSpec('offers', 'offers'),
    ResourceSpec('products', 'products'),
    ResourceSpec('product_genres', 'product-genres', GET, filterable=False, reference=True),
    ResourceSpec('product_types', 'product-types', GET, filterable=False, reference=True),
    ResourceSpec('quotas', 'quotas', GET, filterable=False),
    ResourceSpec('records', 'records'),
    ResourceSpec('retails', 'retails', GET, filterable=False),
    ResourceSpec('rights', 'rights'),
    ResourceSpec('send_tasks', 'send-tasks', GET_CREATE_UPDATE),
    ResourceSpec('send_task_factories', 'send-task-factories', GET_CREATE),
    ResourceSpec('spotify_artists', 'spotify-artists', GET),
    ResourceSpec('tags', 'tags', GET, filterable=False),
    ResourceSpec('territories', 'territories', GET, reference=True),
    ResourceSpec('track_offers', 'track-offers'),
    ResourceSpec('track_videos', 'track-videos'),
    ResourceSpec('videos', 'videos'),
    ResourceSpec('webhooks', 'webhooks', GET_CREATE_DELETE, filterable=False),
    ResourceSpec('apple_artists', 'apple-artists', GET_CREATE, filterable=False),
    ResourceSpec('availabilities', 'availabilities'),
    ResourceSpec('booklets', 'booklet', frozenset({'create'}), filterable=False, type_='booklets'),
    ResourceSpec('customisations', 'customisations', GET, filterable=False),
    ResourceSpec('dsp_tags', 'dsp-tags', GET),
    ResourceSpec('dsp_upload_identifications', 'dsp-upload-identifications', GET),
)


def create_providers(client: LabelcampAPI, cache: TTLCache) -> dict[str, ResourceApiProvider]:
    """
    Instantiate one provider per resource endpoint for a client.

    :param client: Client the providers dispatch through
    :param cache: Cache shared by the reference data providers
    :return: Providers by attribute name
    """
    providers = {}
    for spec in RESOURCES:
        kwargs = dict(type_=spec.type_, actions=spec.actions, filterable=spec.filterable)
        if spec.reference:
            providers[spec.name] = ReferenceApiProvider(client, spec.path, cache=cache, **kwargs)
        else:
            providers[spec.name] = ResourceApiProvider(client, spec.path, **kwargs)
    return providers
