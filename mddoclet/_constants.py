"""Common literal values used across mddoclet.

These constants keep extension names, CSS hooks, and file naming patterns
centralized so the converter, the pipeline, and the tests share the same
values. Intended for internal use within the mddoclet package.

Examples
--------
>>> from mddoclet import _constants
>>> _constants.DIAGRAM_FILE_TEMPLATE.format(unit="com-example-foo", ordinal=1, ext="png")
'com-example-foo-uml-1.png'
>>> "tables" in _constants.DEFAULT_EXTENSIONS
True
"""

EXTENSION_NAMES = (
    "autolinks",
    "definition-lists",
    "smartypants",
    "tables",
    "wiki-links",
    "fenced-code-blocks",
)
DEFAULT_EXTENSIONS = frozenset(EXTENSION_NAMES)
EXTENSION_ALIASES = {
    "definitions": "definition-lists",
    "deflists": "definition-lists",
    "wikilinks": "wiki-links",
    "fenced-code": "fenced-code-blocks",
    "fenced-codes": "fenced-code-blocks",
    "smarty": "smartypants",
}

DEFAULT_PARSE_TIMEOUT = 2.0
DEFAULT_DIAGRAM_TIMEOUT = 30.0
DEFAULT_HIGHLIGHT_STYLE = "default"
DEFAULT_IMAGE_DIR = "doc-files"
DEFAULT_TODO_TITLE = "To Do"

DIAGRAM_FILE_TEMPLATE = "{unit}-uml-{ordinal}.{ext}"
DIAGRAM_CSS_CLASS = "uml-diagram"
DIAGRAM_ERROR_CSS_CLASS = "uml-error"
CODEHILITE_CSS_CLASS = "codehilite"
TODO_CSS_CLASS = "todo"
