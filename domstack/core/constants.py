"""Centralised names and defaults.

Everything the evaluator, tree builder and runner match against by
literal string is collected here.
"""

# ---------------------------------------------------------------------------
# Node tree  (domstack/core/tree_nodes.py, tree_builder.py)
# ---------------------------------------------------------------------------
TEXT_TAG     = "#text"       # tag carried by pure-text nodes (DOM nodeName)
DOCUMENT_TAG = "#document"   # synthetic root returned by build_tree()

# Elements that never have children or an end tag in HTML.
VOID_ELEMENTS: frozenset[str] = frozenset({
    "AREA", "BASE", "BR", "COL", "EMBED", "HR", "IMG", "INPUT",
    "LINK", "META", "PARAM", "SOURCE", "TRACK", "WBR",
})

# ---------------------------------------------------------------------------
# Evaluator  (domstack/core/evaluator.py)
# ---------------------------------------------------------------------------
NAME_ATTRIBUTES: tuple[str, ...] = ("data-name", "name")   # checked in order
ABSENT_REPR   = "<absent>"    # bound, but no value
UNBOUND_REPR  = "<unbound>"   # not in the store at all

# ---------------------------------------------------------------------------
# Runner / CLI
# ---------------------------------------------------------------------------
DEFAULT_ROOT_ID = "code"
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")

EXIT_OK           = 0
EXIT_ABORTED      = 1
EXIT_SOURCE_ERROR = 2
