"""Program tree node types.

A program is not text but a tree of nodes, the way a browser exposes a
markup document.  The evaluator only ever reads four things from a node,
captured by the ``Node`` protocol:

tag        — upper-case element name, or ``#text`` for a text node
attributes — attribute name → string value
children   — ordered child nodes
text       — the node's text content (descendant text for elements)

Concrete nodes
--------------
ElementNode — an element with attributes and children
TextNode    — a run of character data

Any other tree (an lxml element wrapper, a parse tree from another front
end) can be evaluated as long as it provides the same four attributes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol, Sequence, Union

from domstack.core.constants import TEXT_TAG


class Node(Protocol):
    """Read-only capability set the evaluator depends on."""

    @property
    def tag(self) -> str: ...

    @property
    def attributes(self) -> Mapping[str, str]: ...

    @property
    def children(self) -> Sequence["Node"]: ...

    @property
    def text(self) -> str: ...


@dataclass(frozen=True)
class TextNode:
    """Character data between elements."""
    data: str

    @property
    def tag(self) -> str:
        return TEXT_TAG

    @property
    def attributes(self) -> Mapping[str, str]:
        return {}

    @property
    def children(self) -> Sequence["TreeNode"]:
        return ()

    @property
    def text(self) -> str:
        return self.data


@dataclass(frozen=True)
class ElementNode:
    """An element; ``tag`` is stored upper-case like DOM ``nodeName``."""
    tag:        str
    attributes: Mapping[str, str]      = field(default_factory=dict)
    children:   tuple["TreeNode", ...] = ()

    @property
    def text(self) -> str:
        return "".join(child.text for child in self.children)


TreeNode = Union[ElementNode, TextNode]


def is_text_node(node: Node) -> bool:
    return node.tag == TEXT_TAG


def get_attribute(node: Node, names: Sequence[str]) -> str | None:
    """Return the first attribute in ``names`` that ``node`` carries."""
    for name in names:
        value = node.attributes.get(name)
        if value is not None:
            return value
    return None
