"""
Entity metadata

Reads the mapping of a SQLAlchemy entity class and reduces it to what the
generators need: the identifier, the scalar fields with their form and
filter hints, and the relationships.
"""

import importlib
import keyword
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import inflect
from sqlalchemy import inspect, types
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import MANYTOONE

from . import const as c
from .exceptions import EntityNotFoundError, UnsupportedEntityError
from .humanize import humanize_uc
from .utils import bundle_of, underscore

logger = logging.getLogger(__name__)
p = inflect.engine()

# most specific first, Enum and Text are Strings too
FIELD_KINDS = [
    (types.Boolean, "boolean", "BooleanField"),
    (types.Enum, "text", "SelectField"),
    (types.Text, "text", "TextAreaField"),
    (types.String, "text", "StringField"),
    (types.Integer, "number", "IntegerField"),
    (types.Float, "number", "FloatField"),
    (types.Numeric, "number", "DecimalField"),
    (types.DateTime, "datetime", "DateTimeField"),
    (types.Date, "date", "DateField"),
    (types.Time, "time", "TimeField"),
]


@dataclass
class FieldInfo:
    """A mapped scalar column."""
    name: str
    kind: str
    nullable: bool = True
    length: Optional[int] = None
    primary_key: bool = False
    form_field: str = "StringField"
    choices: List[str] = field(default_factory=list)

    @property
    def filterable(self) -> bool:
        return self.kind != "other"

    @property
    def searchable(self) -> bool:
        return self.kind == "text" and not self.choices


@dataclass
class RelationInfo:
    name: str
    target: str
    uselist: bool
    # local foreign key columns, many-to-one only
    local_columns: List[str] = field(default_factory=list)


@dataclass
class EntityMetadata:
    """Everything the generators know about an entity."""
    name: str
    module: str
    identifier: str
    identifier_kind: str
    fields: List[FieldInfo] = field(default_factory=list)
    relations: List[RelationInfo] = field(default_factory=list)

    @property
    def bundle(self) -> str:
        return bundle_of(self.module)

    @property
    def snake_name(self) -> str:
        return underscore(self.name)

    @property
    def singular(self) -> str:
        return variable_name(p.singular_noun(self.snake_name) or self.snake_name)

    @property
    def plural(self) -> str:
        plural = variable_name(p.plural(self.singular))
        if plural == self.singular:
            return f"{self.singular}_list"
        return plural

    @property
    def form_fields(self) -> List[FieldInfo]:
        return [f for f in self.fields if not f.primary_key]

    @property
    def filter_fields(self) -> List[FieldInfo]:
        return [f for f in self.fields if f.filterable]

    @property
    def search_fields(self) -> List[FieldInfo]:
        return [f for f in self.fields if f.searchable]

    @property
    def url_converter(self) -> str:
        return "int" if self.identifier_kind == "number" else "string"

    def label_for(self, field: FieldInfo) -> str:
        """Form label of ``field``, named after its relation for foreign keys."""
        for relation in self.relations:
            if field.name in relation.local_columns:
                return humanize_uc(relation.name)
        return humanize_uc(field.name)


def variable_name(name: str) -> str:
    """Suffix ``name`` with ``_item`` when generated code can't use it as is."""
    if keyword.iskeyword(name) or name in c.RESERVED_NAMES:
        return f"{name}_item"
    return name


def classify_type(sql_type) -> tuple:
    """Return ``(kind, form field class)`` for a SQLAlchemy column type."""
    for type_class, kind, form_field in FIELD_KINDS:
        if isinstance(sql_type, type_class):
            return kind, form_field
    return "other", "StringField"


def load_entity(module_name: str, class_name: str):
    """Import ``module_name`` and return its mapped class ``class_name``."""
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        logger.debug(f"Could not import {module_name}: {e}")
        raise EntityNotFoundError(
            c.LOGMSG_ERR_ENTITY_NOT_FOUND.format(class_name, module_name)
        ) from e

    entity = getattr(module, class_name, None)
    if entity is None:
        raise EntityNotFoundError(
            c.LOGMSG_ERR_ENTITY_NOT_FOUND.format(class_name, module_name)
        )
    return entity


def get_entity_metadata(entity_class, module_name: Optional[str] = None) -> EntityMetadata:
    """
    Build :class:`EntityMetadata` from a mapped class.

    Raises:
        EntityNotFoundError: If the class isn't mapped by SQLAlchemy
        UnsupportedEntityError: If the entity hasn't exactly one primary key
    """
    module_name = module_name or entity_class.__module__
    try:
        mapper = inspect(entity_class)
    except NoInspectionAvailable as e:
        raise EntityNotFoundError(
            f'"{entity_class.__name__}" in "{module_name}" is not a mapped entity.'
        ) from e

    primary_keys = list(mapper.primary_key)
    if len(primary_keys) != 1:
        raise UnsupportedEntityError(
            c.LOGMSG_ERR_IDENTIFIER.format(entity_class.__name__, len(primary_keys))
        )

    pk_column = primary_keys[0]
    fields = []
    identifier = None
    for attr in mapper.column_attrs:
        column = attr.columns[0]
        kind, form_field = classify_type(column.type)
        info = FieldInfo(
            name=attr.key,
            kind=kind,
            nullable=bool(column.nullable),
            length=getattr(column.type, "length", None),
            primary_key=column is pk_column,
            form_field=form_field,
            choices=list(getattr(column.type, "enums", None) or []),
        )
        if info.primary_key:
            identifier = info
        fields.append(info)

    if identifier is None:
        raise UnsupportedEntityError(
            c.LOGMSG_ERR_IDENTIFIER.format(entity_class.__name__, 0)
        )

    relations = [
        RelationInfo(
            name=rel.key,
            target=rel.mapper.class_.__name__,
            uselist=bool(rel.uselist),
            local_columns=[
                mapper.get_property_by_column(column).key
                for column in rel.local_columns
            ] if rel.direction is MANYTOONE else [],
        )
        for rel in mapper.relationships
    ]

    metadata = EntityMetadata(
        name=entity_class.__name__,
        module=module_name,
        identifier=identifier.name,
        identifier_kind=identifier.kind,
        fields=fields,
        relations=relations,
    )
    logger.info(
        f"Read {len(fields)} fields and {len(relations)} relations of {metadata.name}"
    )
    return metadata


def read_entity(module_name: str, class_name: str) -> EntityMetadata:
    return get_entity_metadata(load_entity(module_name, class_name), module_name)
