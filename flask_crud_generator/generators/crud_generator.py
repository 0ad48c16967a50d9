import logging
from typing import List

from ..config import CrudGenerationConfig, RoutingFormat
from ..exceptions import GeneratedFileExistsError
from ..file_operations import GenerationTransaction
from ..metadata import EntityMetadata
from ..templating import SkeletonRenderer
from .context import EntityPaths, build_context

logger = logging.getLogger(__name__)

VIEW_TEMPLATES = {
    "index": "crud/views/index.html.j2",
    "show": "crud/views/show.html.j2",
    "new": "crud/views/new.html.j2",
    "edit": "crud/views/edit.html.j2",
}


class CrudGenerator:
    """
    Generates the controller, views, route configuration and a functional
    test stub for an entity.
    """

    def __init__(self, renderer: SkeletonRenderer, config: CrudGenerationConfig):
        self.renderer = renderer
        self.config = config

    def generate(self, metadata: EntityMetadata) -> List[str]:
        """
        Write the CRUD files for ``metadata``.

        Returns:
            Paths of the written files

        Raises:
            GeneratedFileExistsError: If the controller exists and overwrite
                is off
        """
        paths = EntityPaths(metadata, self.config)
        context = build_context(paths)

        with GenerationTransaction(self.config.output_dir, "CRUD generation") as transaction:
            if not self.config.overwrite and transaction.exists(paths.controller_file):
                raise GeneratedFileExistsError(
                    "Unable to generate the controller as it already exists.",
                    path=paths.controller_file,
                )
            transaction.ensure_package(paths.controller_dir)
            transaction.add_file(
                paths.controller_file,
                self.renderer.render("crud/controller.py.j2", context),
            )

            for action in self.config.actions:
                if action in VIEW_TEMPLATES:
                    transaction.add_file(
                        paths.views_dir / f"{action}.html",
                        self.renderer.render(VIEW_TEMPLATES[action], context),
                    )

            if self.config.format is not RoutingFormat.DECORATOR:
                transaction.add_file(
                    paths.route_config_file,
                    self.renderer.render(
                        f"crud/config/routing.{self.config.format.extension}.j2", context
                    ),
                )

            if self.config.overwrite or not transaction.exists(paths.test_file):
                transaction.add_file(
                    paths.test_file,
                    self.renderer.render("crud/tests/test_controller.py.j2", context),
                )
            else:
                logger.info(f"Keeping existing test {paths.test_file}")

        written = [str(path) for path in transaction.get_written_files()]
        logger.info(f"Generated {len(written)} CRUD files for {metadata.name}")
        return written
