"""
Shared naming for the generated files.

Each generator works from the same :class:`EntityPaths` and template context
so the controller, form, filter and views agree on module and route names.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from .. import const as c
from ..config import CrudGenerationConfig, FilterType, RoutingFormat
from ..metadata import EntityMetadata
from ..utils import bundle_path, dotted


@dataclass
class EntityPaths:
    """Relative paths and module names of everything generated for an entity."""
    metadata: EntityMetadata
    config: CrudGenerationConfig

    @property
    def bundle_dir(self) -> Path:
        return bundle_path(Path("."), self.metadata.bundle)

    @property
    def controller_dir(self) -> Path:
        return self.bundle_dir / "controllers"

    @property
    def controller_file(self) -> Path:
        return self.controller_dir / f"{self.metadata.snake_name}_controller.py"

    @property
    def controller_module(self) -> str:
        return dotted(self.metadata.bundle, "controllers", f"{self.metadata.snake_name}_controller")

    @property
    def form_dir(self) -> Path:
        return self.bundle_dir / "forms"

    @property
    def form_file(self) -> Path:
        return self.form_dir / f"{self.metadata.snake_name}_form.py"

    @property
    def form_module(self) -> str:
        return dotted(self.metadata.bundle, "forms", f"{self.metadata.snake_name}_form")

    @property
    def filter_dir(self) -> Path:
        return self.bundle_dir / "filters"

    @property
    def filter_file(self) -> Path:
        return self.filter_dir / f"{self.metadata.snake_name}_filter.py"

    @property
    def filter_module(self) -> str:
        return dotted(self.metadata.bundle, "filters", f"{self.metadata.snake_name}_filter")

    @property
    def views_root(self) -> Path:
        base = self.bundle_dir if self.config.bundle_views else Path(".")
        return base / "templates"

    @property
    def views_dir(self) -> Path:
        return self.views_root / self.metadata.snake_name

    @property
    def route_config_file(self) -> Path:
        return (
            self.bundle_dir / "config" / "routing"
            / f"{self.metadata.snake_name}.{self.config.format.extension}"
        )

    @property
    def test_dir(self) -> Path:
        return self.bundle_dir / "tests" / "controllers"

    @property
    def test_file(self) -> Path:
        return self.test_dir / f"test_{self.metadata.snake_name}_controller.py"

    @property
    def blueprint_name(self) -> str:
        return self.config.route_name_prefix or self.metadata.snake_name


def build_routes(paths: EntityPaths) -> List[Dict[str, Any]]:
    """Routes of the generated controller, relative to the route prefix."""
    config = paths.config
    id_part = f"<{paths.metadata.url_converter}:id>"
    rules = {
        "index": ("/", ["GET"]),
        "show": (f"/{id_part}", ["GET"]),
        "new": ("/new", ["GET", "POST"]),
        "edit": (f"/{id_part}/edit", ["GET", "POST"]),
        "delete": (f"/{id_part}/delete", ["POST"]),
        "bulk_action": ("/bulk-action", ["POST"]),
    }

    actions = list(config.actions)
    if config.with_bulk:
        actions.append("bulk_action")

    name_prefix = config.route_name_prefix or paths.metadata.snake_name
    routes = []
    for action in actions:
        rule, methods = rules[action]
        routes.append({
            "action": action,
            "name": f"{name_prefix}_{action}",
            "rule": rule,
            "methods": methods,
            "endpoint": f"{paths.controller_module}:{action}",
        })
    return routes


def build_context(paths: EntityPaths) -> Dict[str, Any]:
    """Variables available to every skeleton template."""
    metadata = paths.metadata
    config = paths.config
    return {
        "entity": metadata.name,
        "entity_module": metadata.module,
        "bundle": metadata.bundle,
        "snake": metadata.snake_name,
        "singular": metadata.singular,
        "plural": metadata.plural,
        "identifier": metadata.identifier,
        "url_converter": metadata.url_converter,
        "fields": metadata.fields,
        "form_fields": metadata.form_fields,
        "filter_fields": metadata.filter_fields,
        "list_fields": metadata.filter_fields,
        "search_fields": metadata.search_fields,
        "actions": config.actions,
        "routes": build_routes(paths),
        "route_prefix": config.route_prefix,
        "route_name_prefix": config.route_name_prefix,
        "blueprint": paths.blueprint_name,
        "format": config.format.value,
        "use_decorators": config.format is RoutingFormat.DECORATOR,
        "filter_type": config.filter_type.value,
        "filter_form": config.filter_type is FilterType.FORM,
        "filter_input": config.filter_type is FilterType.INPUT,
        "with_search": config.filter_type is FilterType.INPUT and bool(metadata.search_fields),
        "with_write": config.with_write,
        "with_show": config.with_show,
        "with_bulk": config.with_bulk,
        "base_template": config.template,
        "template_dir": metadata.snake_name,
        "controller_module": paths.controller_module,
        "controllers_package": dotted(metadata.bundle, "controllers"),
        "form_module": paths.form_module,
        "form_class": f"{metadata.name}Form",
        "filter_module": paths.filter_module,
        "filter_class": f"{metadata.name}Filter",
        "per_page": c.DEFAULT_PER_PAGE,
    }
