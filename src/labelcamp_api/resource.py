"""
JSON:API resource documents for create and update requests.

Relationship input is classified exactly once, in :func:`relationship_from_input`.
A mapping with non-empty ``type`` and ``id`` is a to-one relationship, anything else
is read as an ordered sequence of identifiers (to-many).
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

import msgspec

from ._exceptions import MalformedResourceError


__all__ = [
    'ResourceIdentifier',
    'ToOneRelationship',
    'ToManyRelationship',
    'Relationship',
    'ResourceObject',
    'relationship_from_input',
    'build_resource',
]


class ResourceIdentifier(msgspec.Struct, frozen=True):
    type: str
    id: str

    def __post_init__(self):
        if not self.type or not self.id:
            raise MalformedResourceError(f'Resource identifier is missing type or id: {self!r}')

    @classmethod
    def from_input(cls, value: Any) -> ResourceIdentifier:
        if isinstance(value, ResourceIdentifier):
            return value
        if not isinstance(value, Mapping):
            raise MalformedResourceError(
                f'Resource identifier must be a mapping with type and id, got {type(value).__name__}'
            )
        type_ = value.get('type')
        id_ = value.get('id')
        if not type_ or id_ is None or id_ == '':
            raise MalformedResourceError(f'Resource identifier is missing type or id: {dict(value)!r}')
        return cls(type=str(type_), id=str(id_))


class ToOneRelationship(msgspec.Struct, frozen=True, tag='to_one'):
    data: ResourceIdentifier

    def to_dict(self) -> dict:
        return {'data': msgspec.to_builtins(self.data)}


class ToManyRelationship(msgspec.Struct, frozen=True, tag='to_many'):
    data: tuple[ResourceIdentifier, ...] = ()

    def to_dict(self) -> dict:
        return {'data': [msgspec.to_builtins(i) for i in self.data]}


Relationship = Union[ToOneRelationship, ToManyRelationship]


def _is_to_one(value: Any) -> bool:
    return isinstance(value, Mapping) and bool(value.get('type')) and bool(value.get('id'))


def relationship_from_input(value: Any) -> Relationship:
    """
    Convert caller relationship input into a typed relationship.

    :param value: Relationship object, resource identifier, ``{type, id}`` mapping,
        or a sequence of identifier-like values
    :return: ToOneRelationship or ToManyRelationship
    :raises MalformedResourceError: if a to-many element lacks type or id, or the input is not iterable
    """
    if isinstance(value, ToOneRelationship):
        ResourceIdentifier.from_input(value.data)
        return value
    if isinstance(value, ToManyRelationship):
        for ident in value.data:
            ResourceIdentifier.from_input(ident)
        return value
    if isinstance(value, ResourceIdentifier):
        return ToOneRelationship(data=value)
    if _is_to_one(value):
        return ToOneRelationship(data=ResourceIdentifier.from_input(value))
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise MalformedResourceError(f'Cannot read relationship from {type(value).__name__} value')
    if isinstance(value, Mapping):
        # a mapping that is not a complete identifier, iterating it would yield its keys
        raise MalformedResourceError(f'Resource identifier is missing type or id: {dict(value)!r}')
    return ToManyRelationship(data=tuple(ResourceIdentifier.from_input(v) for v in value))


class ResourceObject(msgspec.Struct):
    """
    A resource to be sent to the server. ``id`` stays empty for resources not yet created.
    """
    type: str
    id: str = ''
    attributes: dict[str, Any] = {}
    relationships: dict[str, Relationship] = {}

    def set_attribute(self, name: str, value: Any) -> ResourceObject:
        self.attributes[name] = value
        return self

    def set_relationship(self, name: str, relationship: Any) -> ResourceObject:
        self.relationships[name] = relationship_from_input(relationship)
        return self

    def to_document(self) -> dict:
        data: dict[str, Any] = {'type': self.type}
        if self.id:
            data['id'] = self.id
        if self.attributes:
            data['attributes'] = dict(self.attributes)
        if self.relationships:
            data['relationships'] = {name: r.to_dict() for name, r in self.relationships.items()}
        return {'data': data}


def build_resource(
        type_: str,
        id_: str = '',
        attributes: Optional[Mapping[str, Any]] = None,
        relationships: Optional[Mapping[str, Any]] = None,
) -> dict:
    """
    Build the JSON:API document for a create or update request.

    Example::

        build_resource('artists', attributes={'name': 'Jane'}, relationships={'label': {'type': 'labels', 'id': '9'}})
        # {'data': {'type': 'artists', 'attributes': {'name': 'Jane'},
        #           'relationships': {'label': {'data': {'type': 'labels', 'id': '9'}}}}}

    :param type_: Resource type, e.g. 'artists'
    :param id_: Resource id, empty for a resource the server has not created yet
    :param attributes: Attribute values, copied verbatim
    :param relationships: Relationship inputs by name (see relationship_from_input)
    :return: Document dict ready for JSON encoding
    """
    resource = ResourceObject(type=type_, id=str(id_) if id_ else '')
    for name, value in (attributes or {}).items():
        resource.set_attribute(name, value)
    for name, value in (relationships or {}).items():
        resource.set_relationship(name, value)
    return resource.to_document()
