from .coercion import coerce_value  # noqa
from .exceptions import InvalidStructureError, JSONAPIGraphException  # noqa
from .models import FieldSpec, ParsedQuery, RelationshipSpec, TypeConfig, TypeMap  # noqa
from .query import is_id, is_uuid, parse_query_arg  # noqa
from .renderer import DocumentRenderer  # noqa
from .resolver import merge_payload_types, resolve_query_type_map, resolve_type_chain  # noqa
from .schema import Schema, parse_schema  # noqa
from .serializer import Serializer  # noqa
