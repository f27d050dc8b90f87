"""Typed query helpers over tree-sitter syntax nodes.

Extractors never index into ``Node.children`` by position. Children are looked
up by field role or by node kind, and absence is explicit: ``child`` returns
None, ``require_child`` raises ``ExtractionError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from symbols.models import UNSPECIFIED

if TYPE_CHECKING:
    from pathlib import Path

    from tree_sitter import Node

_TRIVIA = frozenset({"comment"})


class ExtractionError(Exception):
    """Raised when a syntax tree does not have the shape an extractor expects."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        node_type: str | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.node_type = node_type
        self.line = line

    @classmethod
    def at(cls, node: Node, message: str) -> ExtractionError:
        return cls(message, node_type=node.type, line=node.start_point[0] + 1)

    def with_path(self, path: Path) -> ExtractionError:
        return ExtractionError(
            self.message, path=path, node_type=self.node_type, line=self.line
        )

    def location(self) -> str:
        where = str(self.path) if self.path is not None else "<source>"
        if self.line is None:
            return where
        return f"{where}:{self.line}"

    def __str__(self) -> str:
        return f"{self.location()}: {self.message}"


def text(node: Node) -> str:
    """Return the raw source text of a node."""
    if node.text is None:
        raise ExtractionError.at(node, f"{node.type} node has no source text")
    try:
        return node.text.decode("utf8")
    except UnicodeDecodeError as exc:
        msg = f"{node.type} node text is not valid UTF-8"
        raise ExtractionError.at(node, msg) from exc


def child(node: Node, role: str) -> Node | None:
    """Return the child playing ``role`` (a grammar field name), if any."""
    return node.child_by_field_name(role)


def require_child(node: Node, role: str) -> Node:
    """Return the child playing ``role`` or fail the extraction."""
    found = node.child_by_field_name(role)
    if found is None:
        raise ExtractionError.at(node, f"{node.type} node is missing its '{role}'")
    return found


def children_of_type(node: Node, *kinds: str) -> list[Node]:
    return [c for c in node.children if c.type in kinds]


def first_child_of_type(node: Node, *kinds: str) -> Node | None:
    for c in node.children:
        if c.type in kinds:
            return c
    return None


def has_token(node: Node, token: str) -> bool:
    """True when ``node`` has a direct child of kind ``token`` (named or not)."""
    return any(c.type == token for c in node.children)


def significant_children(node: Node) -> list[Node]:
    """Named children other than comments."""
    return [c for c in node.named_children if c.type not in _TRIVIA]


def descendants_of_type(node: Node, *kinds: str) -> list[Node]:
    """Return all descendants of the given kinds in document order."""
    found: list[Node] = []
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        if current.type in kinds:
            found.append(current)
        stack.extend(reversed(current.children))
    return found


def parent_type(node: Node) -> str | None:
    parent = node.parent
    return parent.type if parent is not None else None


def grandparent_type(node: Node) -> str | None:
    parent = node.parent
    if parent is None or parent.parent is None:
        return None
    return parent.parent.type


def annotation_text(annotation: Node | None) -> str:
    """Return the type expression inside an annotation node.

    A missing annotation is not an error: it yields ``UNSPECIFIED``.
    """
    if annotation is None:
        return UNSPECIFIED
    inner = significant_children(annotation)
    if len(inner) == 1:
        return text(inner[0])
    # Predicate and assertion annotations keep their full text after the colon.
    raw = text(annotation).strip()
    return raw[1:].strip() if raw.startswith(":") else raw


def first_error_line(node: Node) -> int | None:
    """Line number of the first syntax error below ``node``, if any."""
    if not node.has_error:
        return None
    for found in descendants_of_type(node, "ERROR"):
        return found.start_point[0] + 1
    return node.start_point[0] + 1


__all__ = [
    "ExtractionError",
    "annotation_text",
    "child",
    "children_of_type",
    "descendants_of_type",
    "first_child_of_type",
    "first_error_line",
    "grandparent_type",
    "has_token",
    "parent_type",
    "require_child",
    "significant_children",
    "text",
]
