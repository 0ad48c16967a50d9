import json
import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from . import const as c
from .humanize import register_filters

logger = logging.getLogger(__name__)

SKELETON_DIR = Path(__file__).resolve().parent / "skeleton"
VIEW_SUFFIX = ".html.j2"


def python_string(value) -> str:
    """``value`` as a double quoted Python string literal."""
    return json.dumps(str(value), ensure_ascii=False)


def get_skeleton_dirs(
    root: Union[str, Path], bundle_dir: Optional[Union[str, Path]] = None
) -> List[Path]:
    """
    Skeleton search path, highest priority first.

    Templates placed in ``<bundle>/resources/skeleton`` or
    ``<root>/resources/skeleton`` replace the packaged ones of the same name.
    """
    dirs = []
    for base in (bundle_dir, root):
        if base is None:
            continue
        candidate = Path(base) / c.SKELETON_OVERRIDE_DIR
        if candidate.is_dir() and candidate not in dirs:
            dirs.append(candidate)
    dirs.append(SKELETON_DIR)
    return dirs


class SkeletonRenderer:
    """
    Renders generated files from the skeleton templates.

    View skeletons (``*.html.j2``) produce Jinja2 templates themselves, so
    they are rendered with ``[[ ]]``, ``[% %]`` and ``[# #]`` delimiters and
    the generated ``{{ }}`` markup passes through untouched.
    """

    def __init__(self, skeleton_dirs: Optional[Sequence[Union[str, Path]]] = None):
        self.skeleton_dirs = [Path(d) for d in (skeleton_dirs or [SKELETON_DIR])]
        loader = FileSystemLoader([str(d) for d in self.skeleton_dirs])
        options = dict(
            loader=loader,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.env = register_filters(Environment(**options))
        self.env.filters["pystr"] = python_string
        self.view_env = register_filters(Environment(
            block_start_string="[%",
            block_end_string="%]",
            variable_start_string="[[",
            variable_end_string="]]",
            comment_start_string="[#",
            comment_end_string="#]",
            **options,
        ))
        logger.debug(f"Skeleton directories: {self.skeleton_dirs}")

    def _environment(self, template: str) -> Environment:
        return self.view_env if template.endswith(VIEW_SUFFIX) else self.env

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        return self._environment(template).get_template(template).render(**context)
