"""
Routing file updates

The application keeps a YAML routing file that imports route resources
under a prefix::

    blog_post:
        resource: blog/config/routing/post.yml
        prefix: /post

:class:`RoutingManipulator` appends such entries.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import RoutingError

logger = logging.getLogger(__name__)


class RoutingManipulator:
    """Adds resource imports to a YAML routing file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise RoutingError(f"Could not parse {self.path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise RoutingError(f"{self.path} does not contain a routing mapping")
        return data

    def has_resource(self, resource: str) -> bool:
        for entry in self._load().values():
            if isinstance(entry, dict) and entry.get("resource") == resource:
                return True
        return False

    def add_resource(
        self, name: str, resource: str, prefix: str, resource_type: Optional[str] = None
    ) -> bool:
        """
        Import ``resource`` under ``prefix``.

        Raises:
            RoutingError: If the name or the resource is already imported,
                or the file can't be written
        """
        routes = self._load()
        if name in routes:
            raise RoutingError(f'Routing entry "{name}" already exists in {self.path}.')
        if self.has_resource(resource):
            raise RoutingError(f'Resource "{resource}" is already imported in {self.path}.')

        entry = {"resource": resource}
        if resource_type:
            entry["type"] = resource_type
        entry["prefix"] = prefix
        routes[name] = entry

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                yaml.safe_dump(routes, default_flow_style=False, sort_keys=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise RoutingError(f"Could not write {self.path}: {e}") from e

        logger.info(f"Imported {resource} as {name} in {self.path}")
        return True
