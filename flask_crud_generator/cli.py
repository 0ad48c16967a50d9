"""
CLI Commands for the Flask CRUD generator

Commands:
    crud-generator crud blog.models:Post --route-prefix=post_admin
    flask crud-generator crud --entity=blog.models:Post

The default command generates the list, show, new, edit and delete actions.
Use --without-write to only generate the list and show actions.

Every generated file is based on a skeleton template. The packaged ones can be
overridden by placing templates of the same name in one of the following
locations, by order of priority:

    <bundle>/resources/skeleton/
    <output dir>/resources/skeleton/
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List

import click

from . import const as c
from .config import CrudGenerationConfig, FilterType, RoutingFormat, load_config_file
from .exceptions import (
    CrudGeneratorException,
    EntityNotFoundError,
    RoutingError,
    UnsupportedEntityError,
    ValidationError,
)
from .generators import CrudGenerator, EntityPaths, FilterGenerator, FormGenerator
from .metadata import EntityMetadata, read_entity
from .routing import RoutingManipulator
from .templating import SkeletonRenderer, get_skeleton_dirs
from .utils import bundle_path, dotted
from .validators import (
    get_route_prefix,
    parse_shortcut_notation,
    validate_entity_name,
    validate_filter_type,
    validate_format,
)

logger = logging.getLogger(__name__)


def echo_header(title):
    """
    Print a formatted header with title and underline.

    Args:
        title: Title text to display
    """
    click.echo()
    click.echo(click.style(title, fg="green"))
    click.echo(click.style("-" * len(title), fg="green"))
    click.echo()


def _ok():
    return click.style("OK", fg="green")


def _as_usage_error(func, value):
    try:
        return func(value)
    except ValidationError as e:
        raise click.BadParameter(str(e))


def validate_entity_option(ctx, param, value):
    if not value:
        return value
    return _as_usage_error(validate_entity_name, value)


def validate_format_option(ctx, param, value):
    return _as_usage_error(validate_format, value)


def validate_filter_type_option(ctx, param, value):
    return _as_usage_error(validate_filter_type, value)


def load_metadata(entity: str) -> EntityMetadata:
    """
    Read the entity mapping, turning lookup failures into CLI errors.
    """
    module, name = parse_shortcut_notation(entity)
    try:
        return read_entity(module, name)
    except (EntityNotFoundError, UnsupportedEntityError) as e:
        raise click.ClickException(str(e))


def interact(options: Dict[str, Any]) -> Dict[str, Any]:
    """
    Ask for every option, using the command line values as defaults.
    """
    echo_header("Welcome to the Flask CRUD generator")
    click.echo("This command helps you generate CRUD controllers and templates.")
    click.echo()
    click.echo("First, give the name of the existing entity for which you want to generate a CRUD")
    click.echo(f"(use the shortcut notation like {click.style('blog.models:Post', fg='yellow')})")
    click.echo()

    options["entity"] = click.prompt(
        "The Entity shortcut name",
        default=options["entity"] or None,
        value_proc=lambda value: _as_usage_error(validate_entity_name, value),
    )
    metadata = load_metadata(options["entity"])

    click.echo()
    click.echo("By default, the generator creates all actions: list and show, new, update, and delete.")
    click.echo('You can also ask it to generate only "list and show" actions:')
    click.echo()
    options["without_write"] = not click.confirm(
        'Do you want to generate the "write" actions', default=not options["without_write"]
    )

    click.echo()
    click.echo("By default, the generator creates a filter form.")
    click.echo()
    options["filter_type"] = click.prompt(
        "Filter type (form, input, none)",
        default=options["filter_type"].value,
        value_proc=lambda value: _as_usage_error(validate_filter_type, value),
    )

    if not options["without_write"]:
        click.echo()
        click.echo("By default, the generator creates bulk actions.")
        click.echo()
        options["without_bulk"] = not click.confirm(
            "Do you want to generate bulk actions", default=not options["without_bulk"]
        )

    click.echo()
    click.echo(f"By default, the created views extend {c.DEFAULT_TEMPLATE}.")
    click.echo("You can also set the template the views extend, for example base.html.")
    click.echo()
    options["template"] = click.prompt("Base template for the views", default=options["template"])

    click.echo()
    click.echo("Determine the format to use for the generated CRUD.")
    click.echo()
    options["fmt"] = click.prompt(
        "Configuration format (decorator, yml, xml, or py)",
        default=options["fmt"].value,
        value_proc=lambda value: _as_usage_error(validate_format, value),
    )

    click.echo()
    click.echo('Determine the routes prefix (all the routes will be "mounted" under this')
    click.echo("prefix: /prefix/, /prefix/new, ...).")
    click.echo()
    prefix = get_route_prefix(options["route_prefix"], metadata.name)
    options["route_prefix"] = click.prompt("Routes prefix", default="/" + prefix)

    config = build_config(options)
    echo_header("Summary before generation")
    click.echo(f"You are going to generate a CRUD controller for {click.style(options['entity'], fg='green')}")
    for key, value in config.summary().items():
        click.echo(f"  {key}: {click.style(str(value), fg='green')}")
    click.echo()
    return options


def build_config(options: Dict[str, Any]) -> CrudGenerationConfig:
    entity = validate_entity_name(options["entity"])
    _, name = parse_shortcut_notation(entity)
    return CrudGenerationConfig(
        entity=entity,
        route_prefix=get_route_prefix(options["route_prefix"], name),
        template=options["template"],
        format=validate_format(options["fmt"]),
        overwrite=options["overwrite"],
        bundle_views=options["bundle_views"],
        without_write=options["without_write"],
        without_show=options["without_show"],
        without_bulk=options["without_bulk"],
        filter_type=validate_filter_type(options["filter_type"]),
        output_dir=options["output_dir"],
    )


def update_routing(
    config: CrudGenerationConfig, metadata: EntityMetadata, auto: bool = True
) -> List[str]:
    """
    Import the generated routes in the routing file.

    Returns:
        Manual instructions when the file could not be updated, else []
    """
    paths = EntityPaths(metadata, config)
    name = dotted(metadata.bundle, metadata.snake_name).replace(".", "_")
    prefix = "/" + config.route_prefix

    if config.format is RoutingFormat.DECORATOR:
        routing_file = config.output_dir / c.ROUTING_FILE
        resource = f"{paths.controller_module}:bp"
        resource_type = "blueprint"
    else:
        routing_file = bundle_path(config.output_dir, metadata.bundle) / c.ROUTING_FILE
        resource = paths.route_config_file.as_posix()
        resource_type = None

    try:
        if not auto:
            raise RoutingError("Automatic update declined")
        RoutingManipulator(routing_file).add_resource(name, resource, prefix, resource_type)
    except RoutingError as e:
        logger.info(f"Routing not updated: {e}")
        lines = [
            "- Import the routing resource in the routing file",
            f"  ({routing_file}).",
            "",
            f"    {click.style(name + ':', fg='yellow')}",
            f'        resource: "{resource}"',
        ]
        if resource_type:
            lines.append(f"        type:     {resource_type}")
        lines.extend([f"        prefix:   {prefix}", ""])
        return lines
    return []


def write_generator_summary(errors: List[str]):
    if not errors:
        echo_header("Everything is OK! Now get to work :)")
        return

    click.echo()
    click.echo(click.style(
        "The command was not able to configure everything automatically.", fg="red"
    ))
    click.echo(click.style("You'll need to make the following changes manually.", fg="red"))
    click.echo()
    for line in errors:
        click.echo(line)


def generate(config: CrudGenerationConfig, interactive: bool) -> List[str]:
    """Run the generators for ``config``; returns the manual steps left."""
    echo_header("CRUD generation")

    metadata = load_metadata(config.entity)
    renderer = SkeletonRenderer(
        get_skeleton_dirs(config.output_dir, bundle_path(config.output_dir, metadata.bundle))
    )

    CrudGenerator(renderer, config).generate(metadata)
    click.echo(f"Generating the CRUD code: {_ok()}")

    if config.with_write:
        FormGenerator(renderer, config).generate(metadata)
        click.echo(f"Generating the Form code: {_ok()}")

    if config.filter_type is FilterType.FORM:
        FilterGenerator(renderer, config).generate(metadata)
        click.echo(f"Generating the Filter code: {_ok()}")
    elif config.filter_type is FilterType.INPUT:
        logger.info("Search input is part of the controller, no filter class needed")
    elif config.filter_type is FilterType.NONE:
        logger.info("No filtering requested")

    auto = True
    if interactive and config.format is not RoutingFormat.DECORATOR:
        auto = click.confirm("Confirm automatic update of the Routing", default=True)
    click.echo("Updating the routing: ", nl=False)
    errors = update_routing(config, metadata, auto)
    click.echo(click.style("FAILED", fg="red") if errors else _ok())
    return errors


@click.group()
@click.option(
    "--config", "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file (YAML or JSON) with option defaults",
)
@click.pass_context
def cli(ctx, config_file):
    """Flask CRUD generator commands."""
    if config_file:
        try:
            defaults = load_config_file(config_file)
        except (ValidationError, ValueError) as e:
            raise click.BadParameter(str(e), param_hint="--config")
        if "format" in defaults:
            defaults["fmt"] = defaults.pop("format")
        ctx.default_map = {"crud": defaults}


@cli.command("crud")
@click.argument("entity_argument", metavar="[ENTITY]", required=False, callback=validate_entity_option)
@click.option(
    "--entity",
    callback=validate_entity_option,
    help="The entity class name to initialize (shortcut notation, e.g. blog.models:Post)",
)
@click.option("--route-prefix", "-r", default="", help="The route prefix")
@click.option(
    "--template", "-t",
    default=c.DEFAULT_TEMPLATE,
    show_default=True,
    help="The base template which will be extended by the templates",
)
@click.option(
    "--format", "-f", "fmt",
    default=c.DEFAULT_FORMAT,
    show_default=True,
    callback=validate_format_option,
    help="The format used for the route configuration (decorator, yml, xml or py)",
)
@click.option(
    "--overwrite", "-o",
    is_flag=True,
    help="Overwrite any existing controller, form or filter class",
)
@click.option(
    "--bundle-views", "-b",
    is_flag=True,
    help="Store the views in the entity package instead of the application templates",
)
@click.option("--without-write", is_flag=True, help="Do not generate the new, edit, bulk and delete actions")
@click.option("--without-show", is_flag=True, help="Do not generate the show action")
@click.option("--without-bulk", is_flag=True, help="Do not generate bulk actions")
@click.option(
    "--filter-type",
    default=c.DEFAULT_FILTER_TYPE,
    show_default=True,
    callback=validate_filter_type_option,
    help="What type of filtering to use: form filter, multi search input or none",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    help="Application root the files are generated in (defaults to --app-dir)",
)
@click.option(
    "--app-dir",
    default=".",
    show_default=True,
    type=click.Path(exists=True, file_okay=False),
    help="Directory added to the import path to load the entity module",
)
@click.option("--no-interaction", "-n", is_flag=True, help="Do not ask any interactive question")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
def crud(
    entity_argument, entity, route_prefix, template, fmt, overwrite, bundle_views,
    without_write, without_show, without_bulk, filter_type, output_dir, app_dir,
    no_interaction, verbose,
):
    """Generate a CRUD based on a SQLAlchemy entity."""
    if verbose:
        logging.basicConfig(level=logging.INFO)

    app_dir = os.path.abspath(app_dir)
    if app_dir not in sys.path:
        sys.path.insert(0, app_dir)

    options = {
        "entity": entity_argument or entity,
        "route_prefix": route_prefix,
        "template": template,
        "fmt": fmt,
        "overwrite": overwrite,
        "bundle_views": bundle_views,
        "without_write": without_write,
        "without_show": without_show,
        "without_bulk": without_bulk,
        "filter_type": filter_type,
        "output_dir": Path(output_dir or app_dir),
    }
    interactive = not no_interaction

    if interactive:
        options = interact(options)
        if not click.confirm("Do you confirm generation", default=True):
            click.echo(click.style("Command aborted", fg="red"), err=True)
            sys.exit(1)
    elif not options["entity"]:
        raise click.UsageError("The entity is required, pass it as ENTITY or --entity.")

    try:
        config = build_config(options)
    except ValidationError as e:
        raise click.UsageError(str(e))

    try:
        errors = generate(config, interactive)
    except CrudGeneratorException as e:
        click.echo(click.style(f"Error generating the CRUD: {e}", fg="red"), err=True)
        sys.exit(1)

    write_generator_summary(errors)


if __name__ == "__main__":
    cli()
