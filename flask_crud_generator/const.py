FILTER_TYPE_FORM = "form"
FILTER_TYPE_INPUT = "input"
FILTER_TYPE_NONE = "none"

FORMAT_DECORATOR = "decorator"
FORMAT_YML = "yml"
FORMAT_XML = "xml"
FORMAT_PY = "py"

# "annotation" is what the format is called in generators for other frameworks
FORMAT_ALIASES = {"annotation": FORMAT_DECORATOR, "yaml": FORMAT_YML}

DEFAULT_TEMPLATE = "crud_generator/base.html"
DEFAULT_FORMAT = FORMAT_DECORATOR
DEFAULT_FILTER_TYPE = FILTER_TYPE_FORM
DEFAULT_PER_PAGE = 20

ALL_ACTIONS = ["index", "show", "new", "edit", "delete"]
READ_ACTIONS = ["index", "show"]

SKELETON_OVERRIDE_DIR = "resources/skeleton"
ROUTING_FILE = "config/routing.yml"

LOGMSG_ERR_ENTITY_NOT_FOUND = (
    'Entity "{0}" does not exist in the "{1}" module. You may have mistyped the '
    "module name or maybe the entity doesn't exist yet."
)
LOGMSG_ERR_IDENTIFIER = (
    "The CRUD generator does not support entity classes with multiple or no "
    'primary keys ("{0}" has {1}).'
)

# names taken inside generated controllers and views
RESERVED_NAMES = frozenset([
    "abort", "action", "bp", "bulk_form", "column", "columns", "current_app",
    "delete_form", "direction", "filter_form", "flash", "form", "id", "ids",
    "loop", "page", "pagination", "pattern", "query", "redirect", "request",
    "search", "select", "session", "sort", "url_for",
])
