"""
Computes which resource types a query or a payload touches, by walking
relationship chains through a :py:class:`Schema`.  The result is what a cache
layer keys its invalidation on.
"""

import collections.abc
import typing

from .models import ParsedQuery, TypeMap
from .schema import Schema


def resolve_type_chain(keys: typing.Sequence[str], schema: Schema) -> typing.List[str]:
    """
    Resolves a path such as ``["todos", "user", "comments"]`` into the types
    along it: the schema entry of the first segment, then the target of each
    relationship named by the following segments.

    Resolution stops at the first segment that does not name a relationship of
    the current type.  When nothing resolves, the first segment is returned
    as-is so that schema-less clients still get a type.
    """
    chain: typing.List[str] = []
    config = None

    for i, key in enumerate(keys):
        if i == 0:
            config = schema.get(key)
            if config is None:
                break
            chain.append(config.type)
        else:
            if config is None:
                break
            rel = config.relationships.get(key)
            if rel is None or not rel.target_type:
                break
            chain.append(rel.target_type)
            config = schema.get(rel.target_type)

    return chain if chain else list(keys[:1])


def merge_payload_types(
    type_: typing.Optional[str],
    payload: typing.Any,
    schema: Schema,
    types: typing.List[str],
) -> None:
    """
    Appends to ``types`` the target type of every relationship present in
    ``payload``, descending into nested related objects.
    """
    if isinstance(payload, (list, tuple)):
        for item in payload:
            merge_payload_types(type_, item, schema, types)
        return
    if not isinstance(payload, collections.abc.Mapping):
        return

    config = schema.get(type_) if type_ is not None else None
    if config is None:
        return

    for name, rel in config.relationships.items():
        value = payload.get(name)
        if not value:
            continue
        target = rel.resolve_target(payload)
        if target is None:
            continue
        types.append(target)
        merge_payload_types(target, value, schema, types)


def _include_paths(include: typing.Any) -> typing.Iterator[typing.List[str]]:
    values = include if isinstance(include, (list, tuple)) else [include]
    for value in values:
        if not isinstance(value, str):
            continue
        for path in value.split(","):
            path = path.strip()
            if path:
                yield path.split(".")


def resolve_query_type_map(
    query: ParsedQuery,
    schema: Schema,
    payload: typing.Any = None,
) -> TypeMap:
    """
    Computes the base type a query addresses and every related type reachable
    through its ``include`` parameter and, when given, the relationships
    present in a mutation payload.

    :param ParsedQuery query: the parsed query.
    :param Schema schema: the normalized schema.
    :param Any payload: the application-side object about to be sent.
    :return: a :py:class:`TypeMap` whose ``relationships`` are free of duplicates.
    """
    chain = resolve_type_chain(query.keys, schema)
    base_type = chain.pop() if chain else None
    relationships: typing.List[str] = list(chain)

    include = query.params.get("include") if query.params else None
    if include and base_type is not None:
        for segments in _include_paths(include):
            relationships.extend(resolve_type_chain([base_type, *segments], schema)[1:])

    if payload is not None:
        merge_payload_types(base_type, payload, schema, relationships)

    return TypeMap(
        type=base_type,
        relationships=list(dict.fromkeys(relationships)),
    )
