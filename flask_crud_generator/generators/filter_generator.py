import logging
from typing import Any, Dict, List

from ..config import CrudGenerationConfig
from ..exceptions import GeneratedFileExistsError
from ..file_operations import GenerationTransaction
from ..humanize import humanize_uc
from ..metadata import EntityMetadata
from ..templating import SkeletonRenderer
from .context import EntityPaths, build_context

logger = logging.getLogger(__name__)

# filter field class and how the submitted value narrows the query
FILTER_FIELDS = {
    "text": ("StringField", "contains"),
    "number": (None, "equals"),
    "boolean": ("SelectField", "boolean"),
    "date": ("DateField", "equals"),
    "datetime": ("DateField", "same_day"),
    "time": ("TimeField", "equals"),
}


def filter_field_specs(metadata: EntityMetadata) -> List[Dict[str, Any]]:
    specs = []
    for field in metadata.filter_fields:
        field_class, lookup = FILTER_FIELDS[field.kind]
        choices = []
        if field.choices:
            field_class, lookup = "SelectField", "equals"
            choices = [("", "Any")] + [(value, humanize_uc(value)) for value in field.choices]
        elif field.kind == "boolean":
            choices = [("", "Any"), ("1", "Yes"), ("0", "No")]
        specs.append({
            "name": field.name,
            "field_class": field_class or field.form_field,
            "label": metadata.label_for(field),
            "lookup": lookup,
            "choices": choices,
        })
    return specs


class FilterGenerator:
    """
    Generates the filter form shown above the list page, together with the
    function that narrows the list query from the submitted values.
    """

    def __init__(self, renderer: SkeletonRenderer, config: CrudGenerationConfig):
        self.renderer = renderer
        self.config = config

    def generate(self, metadata: EntityMetadata) -> str:
        paths = EntityPaths(metadata, self.config)
        specs = filter_field_specs(metadata)
        context = build_context(paths)
        context.update(
            filter_specs=specs,
            field_classes=sorted({spec["field_class"] for spec in specs}),
            lookups={spec["lookup"] for spec in specs},
        )

        with GenerationTransaction(self.config.output_dir, "Filter generation") as transaction:
            if not self.config.overwrite and transaction.exists(paths.filter_file):
                raise GeneratedFileExistsError(
                    f"Unable to generate the {context['filter_class']} filter class as it "
                    f"already exists under the {paths.filter_file} file",
                    path=paths.filter_file,
                )
            transaction.ensure_package(paths.filter_dir)
            transaction.add_file(
                paths.filter_file, self.renderer.render("filter/filter.py.j2", context)
            )

        logger.info(f"Generated filter {paths.filter_module}")
        return str(paths.filter_file)
