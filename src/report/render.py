"""Human- and machine-readable rendering of diff reports."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
from rich.console import Console
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Iterator

    from report.models import DiffKind, DiffNode

# Glyph and rich style per node kind; outlines are unstyled.
_VISUALS: dict[DiffKind, tuple[str, str | None]] = {
    "outline": ("•", None),
    "added": ("+", "bright_green"),
    "removed": ("-", "bright_red"),
    "changed": ("~", "bright_yellow"),
}


def iter_lines(node: DiffNode, indent_level: int = 0) -> Iterator[tuple[int, DiffNode]]:
    """Yield ``(depth, node)`` pairs in print order (pre-order)."""
    yield indent_level, node
    for child in node.children or ():
        yield from iter_lines(child, indent_level + 1)


def format_line(node: DiffNode, indent_level: int) -> str:
    glyph, _ = _VISUALS[node.kind]
    return f"{'  ' * indent_level}{glyph} {node.label}"


def render_text(node: DiffNode) -> Text:
    """Render a report tree as styled text, two spaces of indent per level."""
    text = Text()
    for indent_level, current in iter_lines(node):
        _, style = _VISUALS[current.kind]
        text.append(format_line(current, indent_level), style=style or "")
        text.append("\n")
    return text


def print_diff(node: DiffNode, console: Console | None = None) -> None:
    (console or Console()).print(render_text(node), end="", soft_wrap=True)


def render_json(node: DiffNode | None) -> bytes:
    """Serialize a report tree (or the absence of one) as indented JSON."""
    payload = node.to_dict() if node is not None else None
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_APPEND_NEWLINE)


__all__ = ["format_line", "iter_lines", "print_diff", "render_json", "render_text"]
