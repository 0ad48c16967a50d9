import re
from typing import Tuple

from . import const as c
from .config import FilterType, RoutingFormat
from .exceptions import ValidationError
from .utils import underscore

ENTITY_NAME_PATTERN = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_]\w*$")


def validate_entity_name(entity: str) -> str:
    """Check the entity uses the ``module.path:ClassName`` notation."""
    if not entity or not ENTITY_NAME_PATTERN.match(entity):
        raise ValidationError(
            f'The entity name isn\'t valid ("{entity}" given, expecting '
            "something like blog.models:Post)"
        )
    return entity


def parse_shortcut_notation(entity: str) -> Tuple[str, str]:
    """Split ``blog.models:Post`` into ``("blog.models", "Post")``."""
    entity = entity.replace("/", ".")
    if ":" not in entity:
        raise ValidationError(
            f'The entity name must contain a ":" ("{entity}" given, '
            "expecting something like blog.models:Post)"
        )
    module, _, name = entity.partition(":")
    return module, name


def validate_format(fmt) -> RoutingFormat:
    if isinstance(fmt, RoutingFormat):
        return fmt
    if not fmt:
        raise ValidationError("Please enter a configuration format.")

    value = str(fmt).strip().lower()
    value = c.FORMAT_ALIASES.get(value, value)
    try:
        return RoutingFormat(value)
    except ValueError:
        raise ValidationError(f'Format "{fmt}" is not supported.') from None


def validate_filter_type(filter_type) -> FilterType:
    if isinstance(filter_type, FilterType):
        return filter_type

    value = str(filter_type or "").strip().lower()
    try:
        return FilterType(value)
    except ValueError:
        allowed = ", ".join(member.value for member in FilterType)
        raise ValidationError(
            f'Filter type "{filter_type}" is not supported. Use one of: {allowed}.'
        ) from None


def get_route_prefix(prefix: str, entity: str) -> str:
    """
    Route prefix from the option, or the underscored entity name.

    A leading slash is dropped: "/post" and "post" mount at the same place.
    """
    prefix = prefix or underscore(entity.replace("\\", "_").replace("/", "_"))
    if prefix and prefix[0] == "/":
        prefix = prefix[1:]
    return prefix


def get_route_name_prefix(prefix: str) -> str:
    # Flask refuses dots in blueprint and endpoint names
    return prefix.replace("/", "_").replace(".", "_")
