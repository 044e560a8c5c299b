"""Tree builder — turns a program document into a node tree.

Entry points
------------
    from domstack.core.tree_builder import load_program_file, ProgramSourceError
    root = load_program_file(Path("hello.html"), root_id="code")

HTML
    The document is parsed with the standard library's ``html.parser``.
    Element names are upper-cased (as DOM ``nodeName`` reports them for
    HTML), comments and doctypes are dropped, void elements never get
    children, stray end tags are ignored and anything still open at the
    end of input is closed.  The program root is the element whose ``id``
    matches ``root_id``.

JSON
    A node is ``{"tag": "LET", "attributes": {...}, "children": [...]}``;
    an element with no children may give ``"text"`` instead, and a bare
    string is a text node.  A top-level list is wrapped in a synthetic
    root so its items run as the program.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from html.parser import HTMLParser
from pathlib import Path
from typing import Any

from domstack.core.constants import DOCUMENT_TAG, TEXT_TAG, VOID_ELEMENTS
from domstack.core.tree_nodes import ElementNode, TextNode, TreeNode


class ProgramSourceError(ValueError):
    """Raised when a program document cannot be turned into a node tree."""


# ---------------------------------------------------------------------------
# HTML front end
# ---------------------------------------------------------------------------

@dataclass
class _OpenElement:
    tag:        str
    attributes: dict[str, str]
    children:   list[TreeNode] = field(default_factory=list)

    def freeze(self) -> ElementNode:
        return ElementNode(self.tag, self.attributes, tuple(self.children))


class _HTMLTreeBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._stack: list[_OpenElement] = [_OpenElement(DOCUMENT_TAG, {})]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def _top(self) -> _OpenElement:
        return self._stack[-1]

    def _append(self, node: TreeNode) -> None:
        self._top.children.append(node)

    def _close_top(self) -> None:
        element = self._stack.pop()
        self._append(element.freeze())

    @staticmethod
    def _attrs(attrs: list[tuple[str, str | None]]) -> dict[str, str]:
        # later duplicates lose, as in the DOM
        result: dict[str, str] = {}
        for name, value in attrs:
            result.setdefault(name.lower(), value if value is not None else "")
        return result

    # ------------------------------------------------------------------
    # HTMLParser callbacks
    # ------------------------------------------------------------------

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        tag = tag.upper()
        if tag in VOID_ELEMENTS:
            self._append(ElementNode(tag, self._attrs(attrs)))
            return
        self._stack.append(_OpenElement(tag, self._attrs(attrs)))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._append(ElementNode(tag.upper(), self._attrs(attrs)))

    def handle_endtag(self, tag: str) -> None:
        tag = tag.upper()
        for depth in range(len(self._stack) - 1, 0, -1):
            if self._stack[depth].tag == tag:
                while len(self._stack) > depth:
                    self._close_top()
                return
        # no matching open element → ignored

    def handle_data(self, data: str) -> None:
        children = self._top.children
        if children and isinstance(children[-1], TextNode):
            children[-1] = TextNode(children[-1].data + data)
        else:
            children.append(TextNode(data))

    # ------------------------------------------------------------------

    def build(self, html: str) -> ElementNode:
        self.feed(html)
        self.close()
        while len(self._stack) > 1:
            self._close_top()
        return self._stack[0].freeze()


def build_tree(html: str) -> ElementNode:
    """Parse an HTML document into a ``#document`` ElementNode."""
    return _HTMLTreeBuilder().build(html)


def find_by_id(root: ElementNode, element_id: str) -> ElementNode | None:
    """Depth-first search for the element whose ``id`` is ``element_id``."""
    pending: list[TreeNode] = [root]
    while pending:
        node = pending.pop()
        if not isinstance(node, ElementNode):
            continue
        if node.attributes.get("id") == element_id:
            return node
        pending.extend(reversed(node.children))
    return None


def load_program(html: str, root_id: str) -> ElementNode:
    """Parse ``html`` and return the program root element.

    Raises ProgramSourceError when no element carries ``id=root_id``.
    """
    root = find_by_id(build_tree(html), root_id)
    if root is None:
        raise ProgramSourceError(f"no element with id {root_id!r} to run")
    return root


# ---------------------------------------------------------------------------
# JSON front end
# ---------------------------------------------------------------------------

def node_from_dict(data: Any) -> TreeNode:
    """Build a node from its JSON representation."""
    if isinstance(data, str):
        return TextNode(data)
    if not isinstance(data, dict):
        raise ProgramSourceError(f"expected an object or string, got {type(data).__name__}")

    tag = data.get("tag")
    if not isinstance(tag, str) or not tag:
        raise ProgramSourceError(f"node without a tag: {data!r}")
    if tag == TEXT_TAG:
        return TextNode(str(data.get("text", "")))

    attributes = data.get("attributes", {})
    if not isinstance(attributes, dict):
        raise ProgramSourceError(f"{tag}: attributes must be an object")

    children = data.get("children")
    text = data.get("text")
    if children is not None and text is not None:
        raise ProgramSourceError(f"{tag}: give either children or text, not both")
    if children is None:
        children = [] if text is None else [str(text)]
    if not isinstance(children, list):
        raise ProgramSourceError(f"{tag}: children must be a list")

    return ElementNode(
        tag.upper(),
        {str(k).lower(): str(v) for k, v in attributes.items()},
        tuple(node_from_dict(child) for child in children),
    )


def load_json_program(text: str) -> TreeNode:
    """Parse a JSON program; a top-level list becomes the root's children."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProgramSourceError(f"malformed JSON program: {exc}") from exc
    if isinstance(data, list):
        return ElementNode(DOCUMENT_TAG, {}, tuple(node_from_dict(item) for item in data))
    return node_from_dict(data)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_program_file(path: Path, root_id: str) -> TreeNode:
    """Read ``path`` and return its program root (JSON for ``.json`` files)."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProgramSourceError(f"cannot read {str(path)!r}: {exc}") from exc

    if path.suffix.lower() == ".json":
        return load_json_program(text)
    return load_program(text, root_id)
