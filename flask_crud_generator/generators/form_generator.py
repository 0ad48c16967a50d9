import logging
from typing import Any, Dict, List

from ..config import CrudGenerationConfig
from ..exceptions import GeneratedFileExistsError
from ..file_operations import GenerationTransaction
from ..humanize import humanize_uc
from ..metadata import EntityMetadata, FieldInfo
from ..templating import SkeletonRenderer
from .context import EntityPaths, build_context

logger = logging.getLogger(__name__)


def field_validators(field: FieldInfo) -> List[str]:
    """WTForms validator expressions for a form field."""
    validators = []
    # an unchecked checkbox submits nothing, so booleans are never required
    if field.nullable or field.kind == "boolean":
        validators.append("Optional()")
    else:
        validators.append("InputRequired()")
    if field.kind == "text" and field.length and not field.choices:
        validators.append(f"Length(max={field.length})")
    return validators


def form_field_specs(metadata: EntityMetadata) -> List[Dict[str, Any]]:
    specs = []
    for field in metadata.form_fields:
        specs.append({
            "name": field.name,
            "field_class": field.form_field,
            "label": metadata.label_for(field),
            "validators": field_validators(field),
            "choices": [(value, humanize_uc(value)) for value in field.choices],
        })
    return specs


class FormGenerator:
    """Generates the Flask-WTF form used by the new and edit actions."""

    def __init__(self, renderer: SkeletonRenderer, config: CrudGenerationConfig):
        self.renderer = renderer
        self.config = config

    def generate(self, metadata: EntityMetadata) -> str:
        paths = EntityPaths(metadata, self.config)
        specs = form_field_specs(metadata)
        context = build_context(paths)
        context.update(
            form_specs=specs,
            field_classes=sorted({spec["field_class"] for spec in specs}),
            validator_classes=sorted({
                validator.partition("(")[0]
                for spec in specs
                for validator in spec["validators"]
            }),
        )

        with GenerationTransaction(self.config.output_dir, "Form generation") as transaction:
            if not self.config.overwrite and transaction.exists(paths.form_file):
                raise GeneratedFileExistsError(
                    f"Unable to generate the {context['form_class']} form class as it "
                    f"already exists under the {paths.form_file} file",
                    path=paths.form_file,
                )
            transaction.ensure_package(paths.form_dir)
            transaction.add_file(paths.form_file, self.renderer.render("form/form.py.j2", context))

        logger.info(f"Generated form {paths.form_module}")
        return str(paths.form_file)
