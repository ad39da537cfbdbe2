import abc
import typing
from collections import OrderedDict

from .types import MutableJSONObject


class WireBuilder(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def __call__(self) -> typing.Any:
        ...  # pragma: nocover


class ResourceRefBuilder(WireBuilder):
    type: typing.Optional[str] = None
    id: typing.Optional[str] = None

    def __call__(self) -> MutableJSONObject:
        return {"type": self.type, "id": self.id}

    def __init__(self, type: typing.Optional[str] = None, id: typing.Optional[str] = None):
        self.type = type
        self.id = id


class RelationshipBuilder(WireBuilder, metaclass=abc.ABCMeta):
    def __call__(self) -> MutableJSONObject:
        raise NotImplementedError()


class ToOneRelBuilder(RelationshipBuilder):
    data: typing.Optional[ResourceRefBuilder]

    def set(self, ref: typing.Optional[ResourceRefBuilder]) -> None:
        self.data = ref

    def __call__(self) -> MutableJSONObject:
        return {"data": self.data() if self.data is not None else None}

    def __init__(self):
        self.data = None


class ToManyRelBuilder(RelationshipBuilder):
    data: typing.List[typing.Optional[ResourceRefBuilder]]

    def append(self, ref: typing.Optional[ResourceRefBuilder]) -> None:
        self.data.append(ref)

    def __call__(self) -> MutableJSONObject:
        return {"data": [b() if b is not None else None for b in self.data]}

    def __init__(self):
        self.data = []


class ResourceBuilder(WireBuilder):
    """
    Accumulates the members of a wire resource.  ``attributes`` and
    ``relationships`` are only emitted when something was added to them,
    unless ``always_emit_attributes`` is set.
    """

    type: typing.Optional[str] = None
    id: typing.Optional[str] = None
    attributes: "OrderedDict[str, typing.Any]"
    relationships: "OrderedDict[str, RelationshipBuilder]"
    always_emit_attributes: bool = False

    def set_id(self, id: str):
        self.id = id

    def set_attributes(self, attributes: typing.Mapping[str, typing.Any]):
        self.attributes = OrderedDict(attributes)

    def to_one_relationship(self, name: str) -> ToOneRelBuilder:
        self.relationships[name] = rel = ToOneRelBuilder()
        return rel

    def to_many_relationship(self, name: str) -> ToManyRelBuilder:
        self.relationships[name] = rel = ToManyRelBuilder()
        return rel

    def ref(self) -> ResourceRefBuilder:
        return ResourceRefBuilder(type=self.type, id=self.id)

    def __call__(self) -> MutableJSONObject:
        retval: MutableJSONObject = {"type": self.type}
        if self.id is not None:
            retval["id"] = self.id
        if self.attributes or self.always_emit_attributes:
            retval["attributes"] = dict(self.attributes)
        if self.relationships:
            retval["relationships"] = {k: v() for k, v in self.relationships.items()}
        return retval

    def __init__(self, type: typing.Optional[str] = None):
        self.type = type
        self.id = None
        self.attributes = OrderedDict()
        self.relationships = OrderedDict()
