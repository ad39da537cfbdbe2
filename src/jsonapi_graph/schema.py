"""
:py:mod:`jsonapi_graph.schema` turns a loosely shaped schema declaration into
an immutable table of :py:class:`TypeConfig` records.

Synopsis
--------

.. code-block:: python

   from jsonapi_graph.schema import parse_schema

   schema = parse_schema(
       {
           "todos": {
               "fields": {
                   "title": "string",
                   "created": {"type": "date", "read_only": True},
               },
               "relationships": {
                   "user": "users",
                   "comments": {"type": "comments"},
               },
           },
           "users": {},
       }
   )

   schema["todos"].relationships["user"].target_type  # "users"

"""

import collections.abc
import logging
import types
import typing

from .models import FieldSpec, RelationshipSpec, TypeConfig

logger = logging.getLogger(__name__)

TYPE_FIELD_SHORTHAND = "type"


def _pop_first(
    entry: typing.MutableMapping[str, typing.Any], *keys: str, default: typing.Any = None
) -> typing.Any:
    value = default
    found = False
    for key in keys:
        if key in entry:
            v = entry.pop(key)
            if not found:
                value = v
                found = True
    return value


def _parse_field(name: str, entry: typing.Any) -> typing.Optional[FieldSpec]:
    if isinstance(entry, FieldSpec):
        return entry
    if isinstance(entry, str):
        return FieldSpec(kind=entry, always_declared=(entry == TYPE_FIELD_SHORTHAND))
    if not isinstance(entry, collections.abc.Mapping):
        logger.debug("skipping field %r: unsupported declaration %r", name, entry)
        return None

    rest = dict(entry)
    return FieldSpec(
        kind=_pop_first(rest, "type", "kind"),
        read_only=bool(_pop_first(rest, "read_only", "readOnly", default=False)),
        always_declared=bool(_pop_first(rest, "always_declared", default=False)),
        serialize=_pop_first(rest, "serialize"),
        resolve=_pop_first(rest, "resolve"),
        extra=types.MappingProxyType(rest),
    )


def _parse_relationship(name: str, entry: typing.Any) -> typing.Optional[RelationshipSpec]:
    if isinstance(entry, RelationshipSpec):
        return entry
    if isinstance(entry, str):
        return RelationshipSpec(target_type=entry)
    if not isinstance(entry, collections.abc.Mapping):
        logger.debug("skipping relationship %r: unsupported declaration %r", name, entry)
        return None

    rest = dict(entry)
    return RelationshipSpec(
        target_type=_pop_first(rest, "type", "target_type"),
        dynamic_target=_pop_first(rest, "get_type", "dynamic_target"),
        read_only=bool(_pop_first(rest, "read_only", "readOnly", default=False)),
        extra=types.MappingProxyType(rest),
    )


T = typing.TypeVar("T")


def _parse_members(
    declarations: typing.Any,
    parse: typing.Callable[[str, typing.Any], typing.Optional[T]],
) -> typing.Mapping[str, T]:
    result: typing.Dict[str, T] = {}
    if isinstance(declarations, collections.abc.Mapping):
        for name, entry in declarations.items():
            member = parse(name, entry)
            if member is not None:
                result[name] = member
    return types.MappingProxyType(result)


def _parse_type_config(name: str, entry: typing.Mapping[str, typing.Any]) -> TypeConfig:
    declared = entry.get("type")
    if isinstance(declared, (list, tuple)):
        polymorphic = bool(declared)
        type_names = tuple(declared) if declared else (name,)
    else:
        polymorphic = False
        type_names = (declared or name,)

    return TypeConfig(
        name=name,
        types=type_names,
        polymorphic=polymorphic,
        fields=_parse_members(entry.get("fields"), _parse_field),
        relationships=_parse_members(entry.get("relationships"), _parse_relationship),
    )


class Schema(collections.abc.Mapping):
    """
    An immutable mapping from schema keys to :py:class:`TypeConfig` records.

    Besides the key lookup it maintains an index from wire type names to the
    entries that accept them, which is what deserialization uses to find the
    field declarations for a wire resource.
    """

    _configs: typing.Mapping[str, TypeConfig]
    _by_wire_type: typing.Mapping[str, typing.Tuple[TypeConfig, ...]]

    def __getitem__(self, key: str) -> TypeConfig:
        return self._configs[key]

    def __iter__(self) -> typing.Iterator[str]:
        return iter(self._configs)

    def __len__(self) -> int:
        return len(self._configs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(k) for k in self._configs)})"

    def for_wire_type(self, wire_type: typing.Any) -> typing.Sequence[TypeConfig]:
        try:
            return self._by_wire_type.get(wire_type, ())
        except TypeError:
            # unhashable wire type
            return ()

    def __init__(self, configs: typing.Iterable[TypeConfig] = ()):
        self._configs = types.MappingProxyType({c.name: c for c in configs})
        index: typing.Dict[str, typing.List[TypeConfig]] = {}
        for config in self._configs.values():
            accepted = config.types if config.polymorphic else (config.type, config.name)
            for wire_type in dict.fromkeys(accepted):
                index.setdefault(wire_type, []).append(config)
        self._by_wire_type = types.MappingProxyType({k: tuple(v) for k, v in index.items()})


def parse_schema(config: typing.Any = None) -> Schema:
    """
    Normalizes a schema declaration.  Malformed entries are skipped rather than
    reported, so the result is always usable.

    :param Any config: a mapping from type names to type declarations, or a :py:class:`Schema`.
    :return: the normalized :py:class:`Schema`.
    """
    if isinstance(config, Schema):
        return config
    if not isinstance(config, collections.abc.Mapping):
        if config is not None:
            logger.debug("ignoring schema declaration of type %s", type(config).__name__)
        return Schema()

    configs: typing.List[TypeConfig] = []
    for name, entry in config.items():
        if isinstance(entry, TypeConfig):
            configs.append(entry)
        elif isinstance(entry, collections.abc.Mapping):
            configs.append(_parse_type_config(name, entry))
        else:
            logger.debug("skipping type %r: unsupported declaration %r", name, entry)
    return Schema(configs)
