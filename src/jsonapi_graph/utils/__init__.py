from .formatting import english_enumerate  # noqa
from .querystring import stringify  # noqa
