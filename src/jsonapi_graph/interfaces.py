"""
Callable shapes that a schema declaration may plug into the serializer and the
query parser.

"""
import typing

from .types import JSONObject, MutableJSONObject


class FieldSerializer(typing.Protocol):
    """
    Converts an attribute value right before it is written to a wire resource.
    The second argument is the attribute set of the resource as it was before
    read-only fields were stripped.
    """

    def __call__(self, value: typing.Any, attrs: JSONObject) -> typing.Any:
        ...  # pragma: nocover


class FieldResolver(typing.Protocol):
    """
    Computes the final value of an attribute while a wire resource is being
    flattened.  It receives the coerced value, the flattened attribute bag and
    the raw wire resource.
    """

    def __call__(
        self, value: typing.Any, bag: MutableJSONObject, record: JSONObject
    ) -> typing.Any:
        ...  # pragma: nocover


class TargetTypeResolver(typing.Protocol):
    """
    Returns the resource type a relationship points at, given the remaining
    attributes of the owning object.
    """

    def __call__(self, attrs: JSONObject) -> typing.Optional[str]:
        ...  # pragma: nocover


class QueryStringifier(typing.Protocol):
    """
    Renders query parameters.  The default encoder is passed as the second
    argument so that an implementation can delegate to it.
    """

    def __call__(
        self,
        params: JSONObject,
        default: typing.Callable[..., str],
    ) -> str:
        ...  # pragma: nocover
