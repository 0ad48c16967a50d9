import re
from pathlib import Path
from typing import Union

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")


def underscore(name: str) -> str:
    """
    Snake case for file and route names: ``BlogPost`` -> ``blog_post``.

    Unlike the humanize filters, acronyms stay together
    (``HTTPLog`` -> ``http_log``).
    """
    name = _FIRST_CAP.sub(r"\1_\2", name)
    return _ALL_CAP.sub(r"\1_\2", name).lower()


def bundle_of(module: str) -> str:
    """Package holding ``module``; ``""`` for a top-level module."""
    return module.rpartition(".")[0]


def bundle_path(root: Union[str, Path], bundle: str) -> Path:
    root = Path(root)
    if not bundle:
        return root
    return root.joinpath(*bundle.split("."))


def dotted(*parts: str) -> str:
    """Join module path parts, skipping empty ones."""
    return ".".join(part for part in parts if part)
