__author__ = "Flask-CrudGenerator Team"
__version__ = "1.0.0"

from .config import CrudGenerationConfig, FilterType, RoutingFormat  # noqa: F401
from .humanize import humanize_lc, humanize_uc, init_app  # noqa: F401
