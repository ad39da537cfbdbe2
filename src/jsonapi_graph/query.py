"""
:py:mod:`jsonapi_graph.query` builds request URLs from path descriptors.

A descriptor is either a slash-delimited string or a list of segments whose
last element may be a mapping of query parameters:

.. code-block:: python

   parse_query_arg("todos/1/relationships/user")
   # ParsedQuery(url='/todos/1/relationships/user', id='1', params={},
   #             keys=['todos', 'relationships', 'user'])

   parse_query_arg(["todos", {"page": {"size": 20}}]).url
   # '/todos?page[size]=20'

"""

import collections.abc
import re
import typing

from .interfaces import QueryStringifier
from .models import ParsedQuery
from .utils import querystring

QueryArg = typing.Union[str, int, typing.Sequence[typing.Any]]
StringifyOption = typing.Union[None, typing.Mapping[str, typing.Any], QueryStringifier]

_ID_PATTERN = re.compile(r"[0-9]")
_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[089ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def is_id(value: typing.Any) -> bool:
    if not value:
        return False
    return _ID_PATTERN.match(str(value)) is not None


def is_uuid(value: typing.Any) -> bool:
    return isinstance(value, str) and _UUID_PATTERN.fullmatch(value) is not None


def _is_id_segment(value: typing.Any) -> bool:
    return is_id(value) or is_uuid(value)


def _flatten(arg: QueryArg) -> typing.List[typing.Any]:
    segments: typing.List[typing.Any] = []
    for item in arg if isinstance(arg, (list, tuple)) else [arg]:
        # nested sequences are spliced in one level deep
        if isinstance(item, (list, tuple)):
            segments.extend(item)
        else:
            segments.append(item)

    tokens: typing.List[typing.Any] = []
    for segment in segments:
        if isinstance(segment, str):
            tokens.extend(t for t in segment.split("/") if t)
        elif segment is not None:
            tokens.append(segment)
    return tokens


def _encode_params(params: typing.Mapping[str, typing.Any], stringify: StringifyOption) -> str:
    if stringify is None:
        return querystring.stringify(params)
    if isinstance(stringify, collections.abc.Mapping):
        return querystring.stringify(params, **stringify)
    return stringify(params, querystring.stringify)


def parse_query_arg(
    arg: typing.Optional[QueryArg], stringify: StringifyOption = None
) -> ParsedQuery:
    """
    Splits a path descriptor into a URL, a resource id, query parameters and
    the remaining path keys.

    The first segment that looks like a numeric id or a UUID becomes ``id``.
    When that segment terminates the path it is the resource being addressed;
    otherwise it is still reported as ``id`` and the path continues, as in
    ``todos/1/relationships/user``.  Either way it never appears in ``keys``.

    :param arg: a string, or a sequence of strings, numbers and an optional trailing mapping.
    :param stringify: ``None`` for the default encoder, a mapping of options for it, or a
        callable receiving the parameters and the default encoder.
    :return: a :py:class:`ParsedQuery`.
    """
    if not arg:
        return ParsedQuery(url="/")

    tokens = _flatten(arg)

    params: typing.Dict[str, typing.Any] = {}
    if tokens and isinstance(tokens[-1], collections.abc.Mapping):
        params = dict(tokens.pop())

    path = [str(t) for t in tokens]
    url = "/" + "/".join(path)
    if params:
        encoded = _encode_params(params, stringify)
        if encoded:
            url += "?" + encoded

    id_ = next((str(t) for t in tokens if _is_id_segment(t)), None)
    keys = [p for p, t in zip(path, tokens) if not _is_id_segment(t)]

    return ParsedQuery(url=url, id=id_, params=params, keys=keys)

