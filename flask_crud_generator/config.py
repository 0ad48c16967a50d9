"""
Generation options

Every option the ``crud`` command understands is gathered in
:class:`CrudGenerationConfig`, which is handed to each generator.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from . import const as c
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


class FilterType(Enum):
    """How the generated list page filters its rows."""
    FORM = c.FILTER_TYPE_FORM
    INPUT = c.FILTER_TYPE_INPUT
    NONE = c.FILTER_TYPE_NONE


class RoutingFormat(Enum):
    """Where the generated routes are declared."""
    DECORATOR = c.FORMAT_DECORATOR
    YML = c.FORMAT_YML
    XML = c.FORMAT_XML
    PY = c.FORMAT_PY

    @property
    def extension(self) -> str:
        return self.value


@dataclass
class CrudGenerationConfig:
    """Configuration for CRUD generation."""
    entity: str
    route_prefix: str = ""
    template: str = c.DEFAULT_TEMPLATE
    format: RoutingFormat = RoutingFormat.DECORATOR
    overwrite: bool = False
    bundle_views: bool = False
    without_write: bool = False
    without_show: bool = False
    without_bulk: bool = False
    filter_type: FilterType = FilterType.FORM
    output_dir: Union[str, Path] = field(default=".")

    def __post_init__(self):
        if isinstance(self.format, str):
            from .validators import validate_format
            self.format = validate_format(self.format)
        if isinstance(self.filter_type, str):
            from .validators import validate_filter_type
            self.filter_type = validate_filter_type(self.filter_type)
        self.output_dir = Path(self.output_dir)

    @property
    def with_write(self) -> bool:
        return not self.without_write

    @property
    def with_bulk(self) -> bool:
        """Bulk actions only make sense next to the write actions."""
        return self.with_write and not self.without_bulk

    @property
    def with_show(self) -> bool:
        return not self.without_show

    @property
    def actions(self) -> List[str]:
        actions = list(c.ALL_ACTIONS if self.with_write else c.READ_ACTIONS)
        if self.without_show:
            actions.remove("show")
        return actions

    @property
    def route_name_prefix(self) -> str:
        from .validators import get_route_name_prefix
        return get_route_name_prefix(self.route_prefix)

    def summary(self) -> Dict[str, Any]:
        """Values shown to the user before generation."""
        return {
            "entity": self.entity,
            "format": self.format.value,
            "template": self.template,
            "route_prefix": "/" + self.route_prefix,
            "write actions": "yes" if self.with_write else "no",
            "show action": "yes" if self.with_show else "no",
            "bulk actions": "yes" if self.with_bulk else "no",
            "filter type": self.filter_type.value,
        }


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read option defaults from a YAML or JSON file.

    Keys may use dashes or underscores ("route-prefix" or "route_prefix").

    Raises:
        ValidationError: If the file isn't a mapping
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"Configuration file {path} must contain a mapping")

    logger.info(f"Loaded {len(data)} option defaults from {path}")
    return {str(key).replace("-", "_"): value for key, value in data.items()}
