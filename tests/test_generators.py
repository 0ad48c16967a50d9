"""
Tests for the CRUD, form and filter generators.

The generated Python modules are compiled and the generated views parsed, so
a skeleton producing broken code fails here.
"""

import ast
import os
import shutil
import tempfile
import unittest
import xml.etree.ElementTree as ET

import yaml
from jinja2 import Environment

from flask_crud_generator.config import CrudGenerationConfig
from flask_crud_generator.exceptions import GeneratedFileExistsError
from flask_crud_generator.generators import (
    CrudGenerator,
    EntityPaths,
    FilterGenerator,
    FormGenerator,
    build_context,
    build_routes,
)
from flask_crud_generator.generators.filter_generator import filter_field_specs
from flask_crud_generator.generators.form_generator import field_validators
from flask_crud_generator.metadata import read_entity
from flask_crud_generator.templating import SkeletonRenderer, get_skeleton_dirs


def field_choices(source, name):
    """The literal ``choices`` passed to the generated field ``name``."""
    for node in ast.walk(ast.parse(source)):
        if (
            isinstance(node, ast.Assign)
            and isinstance(node.targets[0], ast.Name)
            and node.targets[0].id == name
        ):
            for keyword in node.value.keywords:
                if keyword.arg == "choices":
                    return ast.literal_eval(keyword.value)
    return None


QUOTED_MOODS = [
    ("it's fine", "It's fine"),
    ('say "hi"', 'Say "hi"'),
    ("back\\slash", "Back\\slash"),
]


class GeneratorTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.addCleanup(lambda: shutil.rmtree(self.temp_dir, ignore_errors=True))

    def config(self, entity="blog.models:Post", route_prefix="post", **options):
        return CrudGenerationConfig(
            entity=entity, route_prefix=route_prefix, output_dir=self.temp_dir, **options
        )

    def renderer(self, bundle_dir=None):
        return SkeletonRenderer(get_skeleton_dirs(self.temp_dir, bundle_dir))

    def generate(self, generator_class, module="blog.models", name="Post", **options):
        config = self.config(entity=f"{module}:{name}", **options)
        metadata = read_entity(module, name)
        return generator_class(self.renderer(), config).generate(metadata)

    def path(self, *parts):
        return os.path.join(self.temp_dir, *parts)

    def read(self, *parts):
        with open(self.path(*parts)) as f:
            return f.read()

    def assertCompiles(self, *parts):
        source = self.read(*parts)
        compile(source, self.path(*parts), "exec")
        return source

    def assertTemplate(self, *parts):
        source = self.read(*parts)
        Environment().parse(source)
        self.assertNotIn("[[", source)
        self.assertNotIn("[%", source)
        return source


class TestCrudGenerator(GeneratorTestCase):
    def test_default_files(self):
        written = self.generate(CrudGenerator)

        for parts in [
            ("blog", "controllers", "__init__.py"),
            ("blog", "controllers", "post_controller.py"),
            ("templates", "post", "index.html"),
            ("templates", "post", "show.html"),
            ("templates", "post", "new.html"),
            ("templates", "post", "edit.html"),
            ("blog", "tests", "controllers", "test_post_controller.py"),
        ]:
            self.assertTrue(os.path.isfile(self.path(*parts)), parts)
        self.assertFalse(os.path.exists(self.path("blog", "config")))
        self.assertEqual(len(written), 7)

    def test_controller(self):
        self.generate(CrudGenerator)
        source = self.assertCompiles("blog", "controllers", "post_controller.py")

        self.assertIn(
            "from flask import Blueprint, abort, current_app, flash, redirect, "
            "render_template, request, url_for\n",
            source,
        )
        self.assertIn("from blog.models import Post\n", source)
        self.assertIn("from blog.filters.post_filter import PostFilter, apply_filters\n", source)
        self.assertIn("from blog.forms.post_form import PostForm\n", source)
        self.assertIn('bp = Blueprint("post", __name__)', source)
        self.assertIn('@bp.route("/", methods=["GET"])', source)
        self.assertIn('@bp.route("/<int:id>", methods=["GET"])', source)
        self.assertIn('@bp.route("/<int:id>/edit", methods=["GET", "POST"])', source)
        self.assertIn('@bp.route("/<int:id>/delete", methods=["POST"])', source)
        self.assertIn('@bp.route("/bulk-action", methods=["POST"])', source)
        self.assertIn('ids = request.form.getlist("ids", type=int)', source)
        self.assertIn("posts=pagination.items,", source)
        self.assertIn('"title",', source)

    def test_dotted_route_prefix(self):
        self.generate(CrudGenerator, route_prefix="api/v1.0/post")
        source = self.assertCompiles("blog", "controllers", "post_controller.py")
        self.assertIn('bp = Blueprint("api_v1_0_post", __name__)', source)

    def test_views(self):
        self.generate(CrudGenerator)

        index = self.assertTemplate("templates", "post", "index.html")
        self.assertTrue(index.startswith('{% extends "crud_generator/base.html" %}'))
        self.assertIn("{% for post in posts %}", index)
        self.assertIn("{{ column|humanize_uc }}", index)
        self.assertIn("{{ bulk_form.csrf_token }}", index)
        self.assertIn("{% for field in filter_form %}", index)
        self.assertIn("{{ columns|length + 2 }}", index)
        self.assertIn("No posts found.", index)
        self.assertIn("url_for('.new')", index)

        show = self.assertTemplate("templates", "post", "show.html")
        self.assertIn("url_for('.delete', id=post.id)", show)
        self.assertIn("{{ delete_form.csrf_token }}", show)

        self.assertIn("{{ form.csrf_token }}", self.assertTemplate("templates", "post", "new.html"))
        self.assertIn("url_for('.edit', id=post.id)", self.assertTemplate("templates", "post", "edit.html"))

    def test_custom_base_template(self):
        self.generate(CrudGenerator, template="admin/layout.html")
        index = self.read("templates", "post", "index.html")
        self.assertTrue(index.startswith('{% extends "admin/layout.html" %}'))

    def test_without_write(self):
        self.generate(CrudGenerator, without_write=True)

        source = self.assertCompiles("blog", "controllers", "post_controller.py")
        self.assertIn("from flask import Blueprint, abort, current_app, render_template, request\n", source)
        self.assertNotIn("FlaskForm", source)
        self.assertNotIn("def new(", source)
        self.assertNotIn("def bulk_action(", source)
        self.assertFalse(os.path.exists(self.path("templates", "post", "new.html")))
        self.assertFalse(os.path.exists(self.path("templates", "post", "edit.html")))

        index = self.assertTemplate("templates", "post", "index.html")
        self.assertNotIn("bulk_form", index)
        self.assertNotIn("url_for('.edit'", index)
        self.assertIn("{{ columns|length + 1 }}", index)

        test_source = self.assertCompiles("blog", "tests", "controllers", "test_post_controller.py")
        self.assertIn("def test_show_missing_post(client):", test_source)
        self.assertNotIn("def test_new_form", test_source)

    def test_without_show(self):
        self.generate(CrudGenerator, without_show=True)

        source = self.assertCompiles("blog", "controllers", "post_controller.py")
        self.assertNotIn("def show(", source)
        self.assertIn('return redirect(url_for(".edit", id=post.id))', source)
        self.assertFalse(os.path.exists(self.path("templates", "post", "show.html")))
        self.assertNotIn("url_for('.show'", self.assertTemplate("templates", "post", "index.html"))

    def test_without_bulk(self):
        self.generate(CrudGenerator, without_bulk=True)
        source = self.assertCompiles("blog", "controllers", "post_controller.py")
        self.assertNotIn("def bulk_action(", source)
        self.assertNotIn("bulk_form", self.read("templates", "post", "index.html"))

    def test_search_input(self):
        self.generate(CrudGenerator, filter_type="input")

        source = self.assertCompiles("blog", "controllers", "post_controller.py")
        self.assertIn("from sqlalchemy import or_, select\n", source)
        self.assertIn("Post.title.ilike(pattern),", source)
        self.assertIn("Post.body.ilike(pattern),", source)
        self.assertNotIn("apply_filters", source)

        index = self.assertTemplate("templates", "post", "index.html")
        self.assertIn('placeholder="Search title, body"', index)

    def test_no_filter(self):
        self.generate(CrudGenerator, filter_type="none")

        source = self.assertCompiles("blog", "controllers", "post_controller.py")
        self.assertNotIn("apply_filters", source)
        self.assertNotIn("search", source)
        index = self.assertTemplate("templates", "post", "index.html")
        self.assertNotIn("filter_form", index)
        self.assertNotIn('name="search"', index)

    def test_yml_routes(self):
        self.generate(CrudGenerator, format="yml")

        source = self.assertCompiles("blog", "controllers", "post_controller.py")
        self.assertNotIn("@bp.route", source)

        routes = yaml.safe_load(self.read("blog", "config", "routing", "post.yml"))
        self.assertEqual(
            list(routes),
            ["post_index", "post_show", "post_new", "post_edit", "post_delete", "post_bulk_action"],
        )
        self.assertEqual(
            routes["post_edit"],
            {
                "path": "/<int:id>/edit",
                "endpoint": "blog.controllers.post_controller:edit",
                "methods": ["GET", "POST"],
            },
        )

    def test_xml_routes(self):
        self.generate(CrudGenerator, format="xml", route_prefix="admin/post")

        root = ET.parse(self.path("blog", "config", "routing", "post.xml")).getroot()
        self.assertEqual(root.get("blueprint"), "blog.controllers.post_controller:bp")
        routes = {route.get("id"): route for route in root}
        self.assertEqual(len(routes), 6)
        self.assertEqual(routes["admin_post_show"].get("path"), "/<int:id>")
        self.assertEqual(routes["admin_post_new"].get("methods"), "GET|POST")

    def test_py_routes(self):
        self.generate(CrudGenerator, format="py", without_write=True)

        source = self.assertCompiles("blog", "config", "routing", "post.py")
        self.assertIn("from blog.controllers import post_controller\n", source)
        self.assertIn('("/<int:id>", "show", post_controller.show, ["GET"]),', source)
        self.assertNotIn('"new"', source)

    def test_bundle_views(self):
        self.generate(CrudGenerator, bundle_views=True)
        self.assertTrue(os.path.isfile(self.path("blog", "templates", "post", "index.html")))
        self.assertFalse(os.path.exists(self.path("templates")))

    def test_existing_controller(self):
        self.generate(CrudGenerator)
        with self.assertRaises(GeneratedFileExistsError) as ctx:
            self.generate(CrudGenerator)
        self.assertEqual(str(ctx.exception), "Unable to generate the controller as it already exists.")

        self.generate(CrudGenerator, overwrite=True, without_write=True)
        self.assertNotIn("def new(", self.read("blog", "controllers", "post_controller.py"))

    def test_existing_test_is_kept(self):
        self.generate(CrudGenerator)
        test_file = self.path("blog", "tests", "controllers", "test_post_controller.py")
        with open(test_file, "w") as f:
            f.write("# customised\n")
        os.remove(self.path("blog", "controllers", "post_controller.py"))

        self.generate(CrudGenerator)
        self.assertEqual(self.read("blog", "tests", "controllers", "test_post_controller.py"), "# customised\n")

    def test_string_identifier(self):
        self.generate(CrudGenerator, name="Category", route_prefix="category")
        source = self.assertCompiles("blog", "controllers", "category_controller.py")
        self.assertIn('@bp.route("/<string:id>", methods=["GET"])', source)
        self.assertIn('ids = request.form.getlist("ids")', source)
        self.assertIn('sort = request.args.get("sort", "slug")', source)

    def test_reserved_entity_name(self):
        self.generate(CrudGenerator, name="Query", route_prefix="query")
        source = self.assertCompiles("blog", "controllers", "query_controller.py")
        self.assertIn("query_item = _get_or_404(id)", source)
        self.assertIn("query_items=pagination.items,", source)
        self.assertIn("{% for query_item in query_items %}", self.assertTemplate("templates", "query", "index.html"))

    def test_top_level_module(self):
        self.generate(CrudGenerator, module="catalog", name="Product", route_prefix="product", format="yml")

        source = self.assertCompiles("controllers", "product_controller.py")
        self.assertIn("from catalog import Product\n", source)
        self.assertIn("from filters.product_filter import ProductFilter, apply_filters\n", source)
        routes = yaml.safe_load(self.read("config", "routing", "product.yml"))
        self.assertEqual(routes["product_index"]["endpoint"], "controllers.product_controller:index")


class TestSkeletonOverrides(GeneratorTestCase):
    def write_skeleton(self, base, content):
        directory = os.path.join(base, "resources", "skeleton", "crud", "views")
        os.makedirs(directory)
        with open(os.path.join(directory, "index.html.j2"), "w") as f:
            f.write(content)

    def test_root_override(self):
        self.write_skeleton(self.temp_dir, "custom [[ entity ]] {{ keep }}\n")
        self.generate(CrudGenerator)
        self.assertEqual(self.read("templates", "post", "index.html"), "custom Post {{ keep }}\n")
        self.assertIn("{% for field in form", self.read("templates", "post", "new.html"))

    def test_bundle_override_wins(self):
        self.write_skeleton(self.temp_dir, "root\n")
        self.write_skeleton(self.path("blog"), "bundle\n")

        dirs = get_skeleton_dirs(self.temp_dir, self.path("blog"))
        self.assertEqual(len(dirs), 3)
        config = self.config()
        CrudGenerator(SkeletonRenderer(dirs), config).generate(read_entity("blog.models", "Post"))
        self.assertEqual(self.read("templates", "post", "index.html"), "bundle\n")

    def test_packaged_skeletons_only(self):
        self.assertEqual(len(get_skeleton_dirs(self.temp_dir, self.path("blog"))), 1)


class TestFormGenerator(GeneratorTestCase):
    def test_form(self):
        self.generate(FormGenerator)

        self.assertEqual(self.read("blog", "forms", "__init__.py"), "")
        source = self.assertCompiles("blog", "forms", "post_form.py")
        self.assertIn(
            "from wtforms import BooleanField, DateTimeField, DecimalField, IntegerField, "
            "SelectField, StringField, TextAreaField\n",
            source,
        )
        self.assertIn("from wtforms.validators import InputRequired, Length, Optional\n", source)
        self.assertIn("class PostForm(FlaskForm):", source)
        self.assertIn(
            '    title = StringField(\n'
            '        "Title",\n'
            '        validators=[InputRequired(), Length(max=255)],\n'
            '    )\n',
            source,
        )
        self.assertIn('("draft", "Draft"),', source)
        self.assertIn('created_at = DateTimeField(\n        "Created at",', source)
        self.assertNotIn("    id = ", source)
        self.assertIn('author_id = IntegerField(\n        "Author",', source)

    def test_quoted_enum_choices(self):
        self.generate(FormGenerator, name="Note")
        source = self.assertCompiles("blog", "forms", "note_form.py")
        self.assertIn('("say \\"hi\\"", "Say \\"hi\\""),', source)
        self.assertEqual(field_choices(source, "mood"), QUOTED_MOODS)

    def test_existing_form(self):
        self.generate(FormGenerator)
        with self.assertRaises(GeneratedFileExistsError) as ctx:
            self.generate(FormGenerator)
        self.assertIn("PostForm", str(ctx.exception))
        self.generate(FormGenerator, overwrite=True)

    def test_field_validators(self):
        fields = {f.name: f for f in read_entity("blog.models", "Post").fields}
        self.assertEqual(field_validators(fields["title"]), ["InputRequired()", "Length(max=255)"])
        self.assertEqual(field_validators(fields["body"]), ["Optional()"])
        self.assertEqual(field_validators(fields["published"]), ["Optional()"])
        self.assertEqual(field_validators(fields["status"]), ["InputRequired()"])


class TestFilterGenerator(GeneratorTestCase):
    def test_filter(self):
        self.generate(FilterGenerator)

        source = self.assertCompiles("blog", "filters", "post_filter.py")
        self.assertIn("from sqlalchemy import func\n", source)
        self.assertIn("class PostFilter(FlaskForm):", source)
        self.assertIn("def apply_filters(query, form):", source)
        self.assertIn('query = query.where(Post.title.ilike(f"%{value}%"))', source)
        self.assertIn('query = query.where(Post.published.is_(value == "1"))', source)
        self.assertIn("query = query.where(func.date(Post.created_at) == value)", source)
        self.assertIn("query = query.where(Post.views == value)", source)
        self.assertEqual(
            field_choices(source, "status"),
            [("", "Any"), ("draft", "Draft"), ("published", "Published")],
        )
        self.assertIn('        default="",\n', source)
        self.assertIn('author_id = IntegerField(\n        "Author",', source)

    def test_quoted_enum_choices(self):
        self.generate(FilterGenerator, name="Note")
        source = self.assertCompiles("blog", "filters", "note_filter.py")
        self.assertEqual(field_choices(source, "mood"), [("", "Any")] + QUOTED_MOODS)

    def test_filter_specs(self):
        specs = {spec["name"]: spec for spec in filter_field_specs(read_entity("blog.models", "Post"))}
        self.assertEqual(specs["title"]["lookup"], "contains")
        self.assertEqual(specs["views"]["field_class"], "IntegerField")
        self.assertEqual(specs["rating"]["field_class"], "DecimalField")
        self.assertEqual(specs["created_at"]["field_class"], "DateField")
        self.assertEqual(specs["status"]["field_class"], "SelectField")
        self.assertEqual(specs["status"]["choices"][0], ("", "Any"))
        self.assertEqual(specs["published"]["choices"], [("", "Any"), ("1", "Yes"), ("0", "No")])

    def test_without_datetime_fields(self):
        self.generate(FilterGenerator, module="catalog", name="Product")
        source = self.assertCompiles("filters", "product_filter.py")
        self.assertNotIn("sqlalchemy", source)
        self.assertIn("query = query.where(Product.price == value)", source)

    def test_existing_filter(self):
        self.generate(FilterGenerator)
        with self.assertRaises(GeneratedFileExistsError):
            self.generate(FilterGenerator)


class TestContext(GeneratorTestCase):
    def test_routes(self):
        paths = EntityPaths(read_entity("blog.models", "Post"), self.config(route_prefix="admin/post"))
        routes = build_routes(paths)
        self.assertEqual(
            [route["name"] for route in routes],
            ["admin_post_index", "admin_post_show", "admin_post_new", "admin_post_edit",
             "admin_post_delete", "admin_post_bulk_action"],
        )
        self.assertEqual(routes[1]["rule"], "/<int:id>")
        self.assertEqual(routes[4]["methods"], ["POST"])

    def test_routes_without_write(self):
        paths = EntityPaths(read_entity("blog.models", "Post"), self.config(without_write=True))
        self.assertEqual([route["action"] for route in build_routes(paths)], ["index", "show"])

    def test_context(self):
        paths = EntityPaths(read_entity("blog.models", "Post"), self.config(filter_type="input"))
        context = build_context(paths)
        self.assertEqual(context["controller_module"], "blog.controllers.post_controller")
        self.assertEqual(context["form_class"], "PostForm")
        self.assertEqual(context["filter_class"], "PostFilter")
        self.assertTrue(context["use_decorators"])
        self.assertTrue(context["with_search"])
        self.assertFalse(context["filter_form"])
        self.assertEqual(paths.test_file.as_posix(), "blog/tests/controllers/test_post_controller.py")
