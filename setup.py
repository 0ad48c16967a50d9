import io
import os
import re

from setuptools import find_packages, setup


with io.open("flask_crud_generator/__init__.py", "rt", encoding="utf8") as f:
    version = re.search(r"__version__ = \"(.*?)\"", f.read()).group(1)


def fpath(name):
    return os.path.join(os.path.dirname(__file__), name)


def read(fname):
    return open(fpath(fname)).read()


def desc():
    return read("README.rst")


setup(
    name="Flask-CrudGenerator",
    version=version,
    license="BSD",
    author="Flask-CrudGenerator Team",
    description=(
        "CRUD scaffolding for Flask: generates controllers, forms, filters, views"
        " and routing entries from SQLAlchemy entities, with pagination, filters"
        " and bulk actions."
    ),
    long_description=desc(),
    long_description_content_type="text/x-rst",
    packages=find_packages(exclude=["tests*"]),
    package_data={
        "flask_crud_generator": ["skeleton/*/*.j2", "skeleton/*/*/*.j2"],
    },
    entry_points={
        "flask.commands": ["crud-generator=flask_crud_generator.cli:cli"],
        "console_scripts": ["crud-generator = flask_crud_generator.cli:cli"],
    },
    include_package_data=True,
    zip_safe=False,
    platforms="any",
    install_requires=[
        "click>=8, <9",
        "inflect>=5, <8",
        "Jinja2>=3, <4",
        "PyYAML>=5.4, <7",
        "SQLAlchemy>=1.4, <3",
    ],
    extras_require={
        "testing": [
            "pytest>=7",
            "Flask>=2, <4",
            "Flask-SQLAlchemy>=3, <4",
            "Flask-WTF>=1, <2",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Web Environment",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
    ],
    python_requires=">=3.8",
)
