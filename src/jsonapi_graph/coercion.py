import datetime
import math
import re
import typing

from .models import FieldSpec

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(
    r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)

_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


class CoercionContext(typing.TypedDict, total=False):
    parent_type: typing.Optional[str]
    field: typing.Optional[FieldSpec]


def _text(value: typing.Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError:
            # beyond the int to str digit limit; no double holds it either
            return "-Infinity" if value < 0 else "Infinity"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "-Infinity" if value < 0 else "Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
    return str(value)


def _parse_int(value: typing.Any) -> typing.Union[int, float]:
    m = _INT_PREFIX.match(_text(value))
    if m is None:
        return math.nan
    literal = m.group(1)
    try:
        return int(literal)
    except ValueError:
        return float(literal)


def _parse_float(value: typing.Any) -> float:
    m = _FLOAT_PREFIX.match(_text(value))
    if m is None:
        return math.nan
    literal = m.group(1)
    if literal.endswith("Infinity"):
        return -math.inf if literal.startswith("-") else math.inf
    return float(literal)


def _parse_date(value: typing.Any) -> typing.Optional[datetime.datetime]:
    if isinstance(value, datetime.datetime):
        result = value
    elif isinstance(value, datetime.date):
        result = datetime.datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        try:
            return _EPOCH + datetime.timedelta(milliseconds=value)
        except (OverflowError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            result = datetime.datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if result.tzinfo is None:
        result = result.replace(tzinfo=datetime.timezone.utc)
    return result


def coerce_value(
    value: typing.Any,
    type_: typing.Optional[str],
    context: typing.Optional[CoercionContext] = None,
) -> typing.Any:
    """
    Coerces a raw attribute value according to a kind tag.  It never raises:
    values that cannot be converted end up as ``None`` or ``nan``.

    :param Any value: the raw value.
    :param Optional[str] type_: the kind tag used when the context has no field declaration.
    :param Optional[CoercionContext] context: ``parent_type`` is the wire type of the owning
        resource, ``field`` the :py:class:`FieldSpec` whose kind takes precedence.
    :return: the coerced value.
    """
    context = context or {}
    field = context.get("field")
    kind = (field.kind if field is not None else None) or type_

    if kind == "string":
        if value is None:
            return ""
        return _text(value)
    elif kind == "number":
        return _parse_int(value) if value else value
    elif kind == "float":
        return _parse_float(value) if value else value
    elif kind == "date":
        if value is None or isinstance(value, bool):
            return None
        return _parse_date(value)
    elif kind == "boolean":
        if value == "false":
            return False
        return bool(value)
    elif kind == "type":
        return context.get("parent_type") or value or None
    else:
        return value
