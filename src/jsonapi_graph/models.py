"""
Classes in :py:mod:`jsonapi_graph.models` are the canonical records a schema is
normalized into, together with the value objects returned by the query helpers.
"""

import dataclasses
import types
import typing

from .interfaces import FieldResolver, FieldSerializer, TargetTypeResolver
from .types import JSONObject

EMPTY_MAPPING: typing.Mapping[str, typing.Any] = types.MappingProxyType({})


@dataclasses.dataclass(frozen=True)
class FieldSpec:
    """
    :py:class:`FieldSpec` describes how a single attribute of a resource type is
    coerced, resolved and serialized.

    :param Optional[str] kind: a coercion tag such as ``"string"``, ``"date"`` or ``"type"``.
    :param bool read_only: the attribute is never written to a wire resource.
    :param bool always_declared: set for fields declared with the ``"type"`` shorthand.
    :param Optional[FieldSerializer] serialize: a hook applied on serialization.
    :param Optional[FieldResolver] resolve: a hook applied on deserialization.
    :param Mapping[str, Any] extra: unrecognized keys of the source declaration.
    """

    kind: typing.Optional[str] = None
    read_only: bool = False
    always_declared: bool = False
    serialize: typing.Optional[FieldSerializer] = None
    resolve: typing.Optional[FieldResolver] = None
    extra: typing.Mapping[str, typing.Any] = dataclasses.field(
        default_factory=lambda: EMPTY_MAPPING
    )


@dataclasses.dataclass(frozen=True)
class RelationshipSpec:
    """
    :py:class:`RelationshipSpec` describes a relationship of a resource type.
    The target is either a fixed type name or computed from the attributes of
    the owning object.

    :param Optional[str] target_type: the fixed type name of the related resources.
    :param Optional[TargetTypeResolver] dynamic_target: computes the type name when
        there is no fixed one.
    :param bool read_only: the relationship is never written to a wire resource.
    :param Mapping[str, Any] extra: unrecognized keys of the source declaration.
    """

    target_type: typing.Optional[str] = None
    dynamic_target: typing.Optional[TargetTypeResolver] = None
    read_only: bool = False
    extra: typing.Mapping[str, typing.Any] = dataclasses.field(
        default_factory=lambda: EMPTY_MAPPING
    )

    def resolve_target(self, attrs: JSONObject) -> typing.Optional[str]:
        if self.target_type:
            return self.target_type
        if self.dynamic_target is not None:
            return self.dynamic_target(attrs)
        return None


@dataclasses.dataclass(frozen=True)
class TypeConfig:
    """
    :py:class:`TypeConfig` is the canonical form of one schema entry.

    :param str name: the key the entry was declared under.
    :param Tuple[str, ...] types: the wire type names the entry accepts, canonical one first.
    :param bool polymorphic: the entry was declared with a set of type names.
    :param Mapping[str, FieldSpec] fields: attribute declarations.
    :param Mapping[str, RelationshipSpec] relationships: relationship declarations.
    """

    name: str
    types: typing.Tuple[str, ...]
    polymorphic: bool = False
    fields: typing.Mapping[str, FieldSpec] = dataclasses.field(
        default_factory=lambda: EMPTY_MAPPING
    )
    relationships: typing.Mapping[str, RelationshipSpec] = dataclasses.field(
        default_factory=lambda: EMPTY_MAPPING
    )

    @property
    def type(self) -> str:
        return self.types[0]

    def matches(self, wire_type: typing.Any) -> bool:
        if self.polymorphic:
            return wire_type in self.types
        return wire_type in (self.type, self.name)


@dataclasses.dataclass
class ParsedQuery:
    """
    The outcome of :py:func:`jsonapi_graph.query.parse_query_arg`.

    :param str url: the path, followed by the encoded query string if any.
    :param Optional[str] id: the first segment that looks like a resource id.
    :param Dict[str, Any] params: the query parameters.
    :param List[str] keys: the path segments other than the id.
    """

    url: str
    id: typing.Optional[str] = None
    params: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)
    keys: typing.List[str] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class TypeMap:
    type: typing.Optional[str]
    relationships: typing.List[str] = dataclasses.field(default_factory=list)
