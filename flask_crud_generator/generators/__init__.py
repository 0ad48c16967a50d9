"""
CRUD code generators

    CrudGenerator    - controller, views, route configuration, test stub
    FormGenerator    - Flask-WTF form for the write actions
    FilterGenerator  - filter form for the list page

Each generator receives a SkeletonRenderer and a CrudGenerationConfig and
writes its files inside one GenerationTransaction.
"""

from .context import EntityPaths, build_context, build_routes
from .crud_generator import CrudGenerator
from .filter_generator import FilterGenerator
from .form_generator import FormGenerator

__all__ = [
    "CrudGenerator",
    "EntityPaths",
    "FilterGenerator",
    "FormGenerator",
    "build_context",
    "build_routes",
]
