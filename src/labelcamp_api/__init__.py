from ._exceptions import (
    LabelcampAPIException,
    ApiRequestError,
    MalformedResourceError,
    TokenRefreshError,
    UnsupportedOperationError,
)
from .labelcamp import ClientOptions, LabelcampAPI
from .request import Request, Response
from .resource import (
    ResourceIdentifier,
    ResourceObject,
    ToManyRelationship,
    ToOneRelationship,
    build_resource,
    relationship_from_input,
)
from .session import Session

__all__ = [
    'LabelcampAPI',
    'ClientOptions',
    'Session',
    'Request',
    'Response',
    'ResourceIdentifier',
    'ResourceObject',
    'ToOneRelationship',
    'ToManyRelationship',
    'build_resource',
    'relationship_from_input',
    'LabelcampAPIException',
    'ApiRequestError',
    'MalformedResourceError',
    'TokenRefreshError',
    'UnsupportedOperationError',
]
