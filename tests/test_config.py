import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from flask_crud_generator.config import (
    CrudGenerationConfig,
    FilterType,
    RoutingFormat,
    load_config_file,
)
from flask_crud_generator.exceptions import ValidationError


class TestCrudGenerationConfig(unittest.TestCase):
    def test_defaults(self):
        config = CrudGenerationConfig(entity="blog.models:Post")
        self.assertIs(config.format, RoutingFormat.DECORATOR)
        self.assertIs(config.filter_type, FilterType.FORM)
        self.assertEqual(config.template, "crud_generator/base.html")
        self.assertEqual(config.output_dir, Path("."))
        self.assertEqual(config.actions, ["index", "show", "new", "edit", "delete"])
        self.assertTrue(config.with_write)
        self.assertTrue(config.with_show)
        self.assertTrue(config.with_bulk)

    def test_without_write(self):
        config = CrudGenerationConfig(entity="blog.models:Post", without_write=True)
        self.assertEqual(config.actions, ["index", "show"])
        self.assertFalse(config.with_bulk)

    def test_without_show(self):
        config = CrudGenerationConfig(entity="blog.models:Post", without_show=True)
        self.assertEqual(config.actions, ["index", "new", "edit", "delete"])

        config = CrudGenerationConfig(
            entity="blog.models:Post", without_show=True, without_write=True
        )
        self.assertEqual(config.actions, ["index"])

    def test_without_bulk(self):
        config = CrudGenerationConfig(entity="blog.models:Post", without_bulk=True)
        self.assertTrue(config.with_write)
        self.assertFalse(config.with_bulk)

    def test_string_options_are_converted(self):
        config = CrudGenerationConfig(
            entity="blog.models:Post", format="annotation", filter_type="input", output_dir="out"
        )
        self.assertIs(config.format, RoutingFormat.DECORATOR)
        self.assertIs(config.filter_type, FilterType.INPUT)
        self.assertEqual(config.output_dir, Path("out"))

    def test_invalid_string_option(self):
        with self.assertRaises(ValidationError):
            CrudGenerationConfig(entity="blog.models:Post", format="json")

    def test_route_name_prefix(self):
        config = CrudGenerationConfig(entity="blog.models:Post", route_prefix="admin/post")
        self.assertEqual(config.route_name_prefix, "admin_post")

    def test_extension(self):
        self.assertEqual(RoutingFormat.YML.extension, "yml")
        self.assertEqual(RoutingFormat.PY.extension, "py")

    def test_summary(self):
        config = CrudGenerationConfig(
            entity="blog.models:Post", route_prefix="post", without_write=True, format="xml"
        )
        summary = config.summary()
        self.assertEqual(summary["route_prefix"], "/post")
        self.assertEqual(summary["format"], "xml")
        self.assertEqual(summary["write actions"], "no")
        self.assertEqual(summary["bulk actions"], "no")


class TestLoadConfigFile(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.addCleanup(lambda: shutil.rmtree(self.temp_dir, ignore_errors=True))

    def write(self, name, content):
        path = os.path.join(self.temp_dir, name)
        with open(path, "w") as f:
            f.write(content)
        return path

    def test_yaml(self):
        path = self.write("crud.yml", "route-prefix: admin\nformat: yml\nwithout_bulk: true\n")
        self.assertEqual(
            load_config_file(path),
            {"route_prefix": "admin", "format": "yml", "without_bulk": True},
        )

    def test_json(self):
        path = self.write("crud.json", json.dumps({"filter-type": "none", "overwrite": True}))
        self.assertEqual(load_config_file(path), {"filter_type": "none", "overwrite": True})

    def test_empty_file(self):
        path = self.write("crud.yml", "")
        self.assertEqual(load_config_file(path), {})

    def test_not_a_mapping(self):
        path = self.write("crud.yml", "- format\n- yml\n")
        with self.assertRaises(ValidationError):
            load_config_file(path)
