"""
:py:mod:`jsonapi_graph.serializer` converts between application objects and
wire documents.

Synopsis
--------

.. code-block:: python

   from jsonapi_graph import Serializer

   serializer = Serializer(
       schema={
           "todos": {
               "fields": {"created": "date"},
               "relationships": {"user": "users"},
           },
       }
   )

   serializer.serialize("todos", {"id": 1, "title": "Clean", "user": {"id": 2}})
   # {'data': {'type': 'todos', 'id': '1',
   #           'attributes': {'title': 'Clean'},
   #           'relationships': {'user': {'data': {'type': 'users', 'id': '2'}}}}}

   serializer.deserialize(
       {
           "data": {
               "type": "todos",
               "id": "1",
               "attributes": {"title": "Clean"},
               "relationships": {"user": {"data": {"type": "users", "id": "2"}}},
           },
           "included": [{"type": "users", "id": "2", "attributes": {"name": "Steve"}}],
       }
   )
   # {'data': {'id': '1', 'title': 'Clean', 'user': {'id': '2', 'name': 'Steve'}}}

"""

import collections.abc
import logging
import typing

from .builders import ResourceBuilder, ResourceRefBuilder
from .coercion import coerce_value
from .exceptions import InvalidStructureError
from .models import TypeConfig
from .schema import Schema, parse_schema
from .types import JSONObject, MutableJSONObject

logger = logging.getLogger(__name__)

ResourceKey = typing.Tuple[str, str]

UNPROCESSABLE_ENTITY_STATUS = "422"


def _resource_key(ref: JSONObject) -> ResourceKey:
    # ids compare by their string form, so 1 and "1" address the same resource
    return (str(ref.get("type")), str(ref.get("id")))


class Serializer:
    """
    Serializes application objects into wire documents and deserializes wire
    documents into flattened object graphs, guided by a schema.

    :param Any schema: a schema declaration or a :py:class:`Schema`; normalized once here.
    :param str type_key: an attribute that, when present on an object being
        serialized, overrides the resource type it is serialized as.
    """

    _schema: Schema
    _type_key: str

    @property
    def schema(self) -> Schema:
        return self._schema

    def _build_resource(
        self, type_: typing.Optional[str], attrs: typing.Any
    ) -> typing.Optional[ResourceBuilder]:
        if attrs is None:
            return None
        if not isinstance(attrs, collections.abc.Mapping):
            raise InvalidStructureError(
                f"attributes of {type_!r} must be a mapping, got {type(attrs).__name__}"
            )

        attrs = dict(attrs)
        override = attrs.pop(self._type_key, None)
        if override:
            type_ = override

        builder = ResourceBuilder(type_)
        if "id" in attrs:
            id_ = attrs.pop("id")
            if id_ is not None:
                builder.set_id(str(id_))

        config = self._schema.get(type_) if type_ is not None else None
        if config is None:
            logger.debug("no schema for %r; passing attributes through", type_)
            builder.always_emit_attributes = True
            builder.set_attributes(attrs)
            return builder

        self._build_relationships(builder, config, attrs)

        snapshot = dict(attrs)
        for name, field in config.fields.items():
            if field.read_only:
                attrs.pop(name, None)
            elif name in attrs and field.serialize is not None:
                attrs[name] = field.serialize(attrs[name], snapshot)

        builder.set_attributes(attrs)
        return builder

    def _build_relationships(
        self,
        builder: ResourceBuilder,
        config: TypeConfig,
        attrs: typing.MutableMapping[str, typing.Any],
    ) -> None:
        for name, rel in config.relationships.items():
            if name not in attrs:
                continue
            value = attrs.pop(name)
            target = rel.resolve_target(attrs)
            if rel.read_only:
                continue
            if isinstance(value, (list, tuple)):
                to_many = builder.to_many_relationship(name)
                for item in value:
                    ref = self._build_ref(target, item)
                    if ref is not None:
                        to_many.append(ref)
            else:
                builder.to_one_relationship(name).set(self._build_ref(target, value))

    def _build_ref(
        self, type_: typing.Optional[str], value: typing.Any
    ) -> typing.Optional[ResourceRefBuilder]:
        if value is None:
            return None
        if not isinstance(value, collections.abc.Mapping):
            value = {"id": value}
        builder = self._build_resource(type_, value)
        assert builder is not None
        return builder.ref()

    def parse_resource(
        self, type_: typing.Optional[str], attrs: typing.Any
    ) -> typing.Optional[MutableJSONObject]:
        """
        Builds a wire resource from an application object.

        Declared relationships are moved out of the attributes into resource
        linkages, read-only fields are dropped and ``serialize`` hooks applied.
        Types absent from the schema pass their attributes through untouched.
        """
        builder = self._build_resource(type_, attrs)
        return builder() if builder is not None else None

    def parse_relationship(
        self, type_: typing.Optional[str], value: typing.Any
    ) -> typing.Optional[MutableJSONObject]:
        """
        Builds a resource identifier ``{"type": ..., "id": ...}`` from a
        related object, or from a bare id.
        """
        ref = self._build_ref(type_, value)
        return ref() if ref is not None else None

    def serialize(self, type_: str, attrs: typing.Any) -> MutableJSONObject:
        """
        Wraps one object, or a list of them, into a wire document.

        :param str type_: the resource type.
        :param Any attrs: a mapping, a sequence of mappings, or ``None``.
        :return: the document.
        """
        if attrs is None:
            return {"type": type_, "data": None}
        if isinstance(attrs, (list, tuple)):
            return {"data": [self.parse_resource(type_, item) for item in attrs]}
        return {"data": self.parse_resource(type_, attrs)}

    def _normalize_errors(self, document: JSONObject) -> typing.Optional[JSONObject]:
        error = document.get("error")
        if error:
            if isinstance(error, collections.abc.Mapping):
                return document
            logger.debug("normalizing error document: %r", error)
            return {
                "error": {
                    "status": str(document.get("status") or 400),
                    "title": error,
                    "message": error,
                },
            }

        errors = document.get("errors")
        if isinstance(errors, (list, tuple)):
            for entry in errors:
                status = entry.get("status") if isinstance(entry, collections.abc.Mapping) else None
                if status != UNPROCESSABLE_ENTITY_STATUS:
                    return {"error": entry}
            return {"errors": errors}

        return None

    def _apply_fields(
        self, config: TypeConfig, bag: MutableJSONObject, record: JSONObject
    ) -> None:
        wire_type = record.get("type")

        for name, field in config.fields.items():
            if field.kind == "type":
                bag[name] = coerce_value(
                    bag.get(name), "type", {"parent_type": wire_type, "field": field}
                )

        for name, field in config.fields.items():
            if field.kind == "type":
                continue
            if name not in bag and field.resolve is None:
                continue
            value = bag.get(name)
            if field.kind:
                value = coerce_value(value, field.kind, {"parent_type": wire_type, "field": field})
            if field.resolve is not None:
                value = field.resolve(value, bag, record)
            bag[name] = value

    def _flatten(self, record: typing.Any) -> MutableJSONObject:
        if not isinstance(record, collections.abc.Mapping):
            raise InvalidStructureError(
                f"resource must be a mapping, got {type(record).__name__}"
            )

        bag: MutableJSONObject = {"id": record.get("id")}
        attributes = record.get("attributes")
        if isinstance(attributes, collections.abc.Mapping):
            bag.update(attributes)
        meta = record.get("meta")
        if meta is not None:
            bag["meta"] = meta

        for config in self._schema.for_wire_type(record.get("type")):
            self._apply_fields(config, bag, record)
        return bag

    def _link(
        self,
        record: JSONObject,
        bag: MutableJSONObject,
        lookup: typing.Mapping[ResourceKey, MutableJSONObject],
    ) -> None:
        relationships = record.get("relationships")
        if not isinstance(relationships, collections.abc.Mapping):
            return

        for name, rel in relationships.items():
            if not isinstance(rel, collections.abc.Mapping):
                continue
            linkage = rel.get("data")
            if linkage is None:
                continue

            if isinstance(linkage, (list, tuple)):
                linked = []
                for ref in linkage:
                    child = (
                        lookup.get(_resource_key(ref))
                        if isinstance(ref, collections.abc.Mapping)
                        else None
                    )
                    if child is None:
                        logger.debug("dropping unresolved reference %r in %r", ref, name)
                        continue
                    linked.append(child)
                bag[name] = linked
            else:
                child = (
                    lookup.get(_resource_key(linkage))
                    if isinstance(linkage, collections.abc.Mapping)
                    else None
                )
                if child is None:
                    logger.debug("unresolved reference %r in %r", linkage, name)
                bag[name] = child

    def deserialize(self, document: typing.Any) -> typing.Any:
        """
        Flattens a wire document into plain dicts with relationships inlined.

        Error documents are normalized into ``{"error": ...}`` (or
        ``{"errors": [...]}`` when every error is a validation failure) and
        returned rather than raised.  Documents without ``data`` are returned
        unchanged.

        :param Any document: the parsed response body.
        :return: ``{"data": ..., **other_top_level_members}``, the normalized
            error document, or the input itself.
        """
        if not isinstance(document, collections.abc.Mapping):
            return document

        normalized = self._normalize_errors(document)
        if normalized is not None:
            return normalized

        data = document.get("data")
        if data is None:
            return document

        is_collection = isinstance(data, (list, tuple))
        primary = list(data) if is_collection else [data]
        records = primary + list(document.get("included") or ())

        bags = [self._flatten(record) for record in records]
        lookup = {_resource_key(record): bag for record, bag in zip(records, bags)}

        for record, bag in zip(records, bags):
            self._link(record, bag, lookup)

        rest = {k: v for k, v in document.items() if k not in ("data", "included")}
        if is_collection:
            primary_keys = {_resource_key(record) for record in primary}
            return {
                "data": [
                    bag
                    for record, bag in zip(records, bags)
                    if _resource_key(record) in primary_keys
                ],
                **rest,
            }
        return {"data": lookup.get(_resource_key(data)), **rest}

    def __init__(self, schema: typing.Any = None, *, type_key: str = "_type"):
        self._schema = parse_schema(schema)
        self._type_key = type_key
