"""
Deterministic query-string encoding of nested parameters.

Logically equal parameter sets always yield byte-identical strings, so an
encoded URL can serve as a cache key:

.. code-block:: python

   stringify({"page": {"size": 20}, "include": ["user", "comments"]})
   # 'include=user,comments&page[size]=20'

"""

import collections.abc
import typing
import urllib.parse

ARRAY_FORMATS = ("comma", "brackets", "indices", "repeat")


def _scalar(value: typing.Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class _Encoder:
    sort: bool
    array_format: str
    encode_values_only: bool

    def _quote(self, text: str) -> str:
        return urllib.parse.quote(text, safe="")

    def _key(self, key: str) -> str:
        return key if self.encode_values_only else self._quote(key)

    def _sorted_items(self, params: typing.Mapping[str, typing.Any]):
        items = [(str(k), v) for k, v in params.items()]
        if self.sort:
            items.sort(key=lambda item: item[0])
        return items

    def _encode(
        self, prefix: str, value: typing.Any, out: typing.List[str]
    ) -> None:
        if isinstance(value, collections.abc.Mapping):
            for k, v in self._sorted_items(value):
                self._encode(f"{prefix}[{k}]", v, out)
        elif isinstance(value, (list, tuple)):
            if not value:
                return
            if self.array_format == "comma":
                out.append(
                    f"{self._key(prefix)}=" + ",".join(self._quote(_scalar(v)) for v in value)
                )
            else:
                for i, v in enumerate(value):
                    if self.array_format == "brackets":
                        self._encode(f"{prefix}[]", v, out)
                    elif self.array_format == "indices":
                        self._encode(f"{prefix}[{i}]", v, out)
                    else:
                        self._encode(prefix, v, out)
        else:
            out.append(f"{self._key(prefix)}={self._quote(_scalar(value))}")

    def __call__(self, params: typing.Mapping[str, typing.Any]) -> str:
        out: typing.List[str] = []
        for k, v in self._sorted_items(params):
            self._encode(k, v, out)
        return "&".join(out)

    def __init__(self, sort: bool, array_format: str, encode_values_only: bool):
        if array_format not in ARRAY_FORMATS:
            raise ValueError(f"unsupported array format {array_format!r}")
        self.sort = sort
        self.array_format = array_format
        self.encode_values_only = encode_values_only


def stringify(
    params: typing.Mapping[str, typing.Any],
    *,
    sort: bool = True,
    array_format: str = "comma",
    encode_values_only: bool = True,
) -> str:
    """
    Encodes nested parameters as a query string without the leading ``?``.

    :param Mapping[str, Any] params: the parameters.
    :param bool sort: order keys lexicographically at every nesting level.
    :param str array_format: one of ``comma``, ``brackets``, ``indices`` or ``repeat``.
    :param bool encode_values_only: leave keys (and their brackets) unencoded.
    :return: the encoded string.
    """
    return _Encoder(sort, array_format, encode_values_only)(params)
