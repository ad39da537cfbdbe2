"""
:py:mod:`jsonapi_graph.renderer` turns documents produced by
:py:meth:`Serializer.serialize` into structures :py:func:`json.dumps` accepts.

Attribute values may be arbitrary Python objects (dates coming back from a
``date`` field, decimals, ...); the renderer converts them the way the wire
format expects.

Synopsis
--------

.. code-block:: python

   import datetime

   from jsonapi_graph import DocumentRenderer, Serializer

   renderer = DocumentRenderer()
   body = renderer.dumps(
       Serializer().serialize(
           "todos",
           {"due": datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc)},
       )
   )
   # '{"data": {"type": "todos", "attributes": {"due": "2020-01-01T00:00:00+00:00"}}}'

"""

import base64
import collections.abc
import datetime
import decimal
import json
import typing

from .types import JSONValue
from .utils import english_enumerate


class TZLocalizer(typing.Protocol):
    def localize(self, dt: datetime.datetime) -> datetime.datetime:
        ...  # pragma: nocover


class RendererContext:
    parent: typing.Optional["RendererContext"]
    path: typing.Tuple[str, ...]

    @property
    def pointer(self) -> str:
        return "/" + "/".join(self.path)

    def __truediv__(self, component: typing.Union[str, int]) -> "RendererContext":
        return RendererContext(parent=self, path=self.path + (str(component),))

    def __init__(
        self,
        parent: typing.Optional["RendererContext"] = None,
        path: typing.Tuple[str, ...] = (),
    ):
        self.parent = parent
        self.path = path


class DocumentRenderer:
    _render_decimal_as_str: bool = True
    _assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None

    def _render_datetime(self, ctx: RendererContext, value: typing.Any) -> JSONValue:
        _value = typing.cast(datetime.datetime, value)
        if _value.tzinfo is None:
            if self._assume_naive_timezone_as is None:
                raise ValueError(f"{ctx.pointer}: naive datetime {_value}")
            if hasattr(self._assume_naive_timezone_as, "localize"):
                _value = typing.cast(TZLocalizer, self._assume_naive_timezone_as).localize(_value)
            else:
                _value = _value.replace(tzinfo=self._assume_naive_timezone_as)
        return _value.astimezone(datetime.timezone.utc).isoformat()

    def _render_date(self, ctx: RendererContext, value: typing.Any) -> JSONValue:
        return typing.cast(datetime.date, value).isoformat()

    def _render_decimal(self, ctx: RendererContext, value: typing.Any) -> JSONValue:
        _value = typing.cast(decimal.Decimal, value)
        return str(_value) if self._render_decimal_as_str else float(_value)

    def _render_bytes(self, ctx: RendererContext, value: typing.Any) -> JSONValue:
        return base64.b64encode(typing.cast(bytes, value)).decode("ascii")

    def _render_passthrough(self, ctx: RendererContext, value: typing.Any) -> JSONValue:
        return typing.cast(JSONValue, value)

    _supported_types: typing.ClassVar[typing.Dict[type, typing.Callable]] = {
        datetime.datetime: _render_datetime,
        datetime.date: _render_date,
        decimal.Decimal: _render_decimal,
        bytes: _render_bytes,
        str: _render_passthrough,
        int: _render_passthrough,
        float: _render_passthrough,
        bool: _render_passthrough,
        None.__class__: _render_passthrough,
    }

    def _render_scalar(self, ctx: RendererContext, value: typing.Any) -> JSONValue:
        # fast pass
        r = self._supported_types.get(type(value))
        if r is not None:
            return r(self, ctx, value)

        for type_, r in self._supported_types.items():
            if isinstance(value, type_):
                return r(self, ctx, value)

        expected = english_enumerate(
            [t.__name__ for t in self._supported_types] + ["a mapping", "a sequence"],
            ", or ",
        )
        raise TypeError(f"{ctx.pointer}: unsupported value {value!r}; expected {expected}")

    def _render(self, ctx: RendererContext, value: typing.Any) -> JSONValue:
        if isinstance(value, collections.abc.Mapping):
            return {str(k): self._render(ctx / k, v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._render(ctx / i, v) for i, v in enumerate(value)]
        return self._render_scalar(ctx, value)

    def dumps(self, document: typing.Any, **kwargs: typing.Any) -> str:
        return json.dumps(self(document), **kwargs)

    def __call__(self, document: typing.Any) -> JSONValue:
        return self._render(RendererContext(), document)

    def __init__(
        self,
        render_decimal_as_str: bool = True,
        assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None,
    ):
        self._render_decimal_as_str = render_decimal_as_str
        self._assume_naive_timezone_as = assume_naive_timezone_as
