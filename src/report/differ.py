"""Name-keyed reconciliation of symbol collections.

``compare_items`` matches two sequences of named items by name, not by
position or content, so a renamed item shows up as one removal plus one
addition. Results are assembled into ``DiffNode`` trees bottom-up.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from report.models import DiffNode, added, removed

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from report.models import DiffKind

logger = logging.getLogger(__name__)

ORDER_CHANGED = "Order Changed"


class NamedItem(Protocol):
    @property
    def name(self) -> str: ...


TItem = TypeVar("TItem", bound=NamedItem)

_ItemKey = tuple[str, int]


def format_value(value: Any) -> str:
    """Render a scalar the same way regardless of the source language."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "none"
    return str(value)


def prepare_result(
    label: str, kind: DiffKind, results: Iterable[DiffNode | None]
) -> DiffNode | None:
    """Wrap the present results in a node, or return None when there are none."""
    children = tuple(result for result in results if result is not None)
    if not children:
        return None
    return DiffNode(label=label, kind=kind, children=children)


def compare_value(label: str, old_value: Any, new_value: Any) -> DiffNode | None:
    """Compare two scalars with strict, type-sensitive equality."""
    if type(old_value) is type(new_value) and old_value == new_value:
        return None
    return DiffNode(
        label=label,
        kind="changed",
        children=(
            removed(format_value(old_value)),
            added(format_value(new_value)),
        ),
    )


def _key_items(items: Sequence[TItem]) -> list[tuple[_ItemKey, TItem]]:
    # Repeated names (e.g. overloads) are told apart by occurrence number.
    occurrences: dict[str, int] = {}
    keyed: list[tuple[_ItemKey, TItem]] = []
    for item in items:
        occurrence = occurrences.get(item.name, 0) + 1
        occurrences[item.name] = occurrence
        keyed.append(((item.name, occurrence), item))

    duplicates = sorted(name for name, count in occurrences.items() if count > 1)
    if duplicates:
        logger.debug("Pairing repeated names by occurrence: %s", ", ".join(duplicates))
    return keyed


def _key_label(key: _ItemKey) -> str:
    name, occurrence = key
    return name if occurrence == 1 else f"{name} ({occurrence})"


def _order_changed(old_items: Sequence[TItem], new_items: Sequence[TItem]) -> DiffNode:
    return DiffNode(
        label=ORDER_CHANGED,
        kind="changed",
        children=(
            removed(", ".join(item.name for item in old_items)),
            added(", ".join(item.name for item in new_items)),
        ),
    )


def compare_items(
    label: str,
    old_items: Sequence[TItem],
    new_items: Sequence[TItem],
    compare_func: Callable[[TItem, TItem], DiffNode | None],
    *,
    order_sensitive: bool = False,
) -> DiffNode | None:
    """Reconcile two named collections into one outline node.

    Args:
        label: Label of the resulting outline node.
        old_items: Items from the old run, in declaration order.
        new_items: Items from the new run, in declaration order.
        compare_func: Compares a matched pair; returns None when equal.
        order_sensitive: Report a single "Order Changed" entry when a matched
            item sits at a different position in the two sequences.

    Returns:
        An outline node whose children list removals first, then additions
        and changes in new-sequence order; None when nothing differs.
    """
    unmatched: dict[_ItemKey, tuple[int, TItem]] = {
        key: (position, item)
        for position, (key, item) in enumerate(_key_items(old_items))
    }

    results: list[DiffNode | None] = []
    order_reported = False
    for position, (key, new_item) in enumerate(_key_items(new_items)):
        match = unmatched.pop(key, None)
        if match is None:
            results.append(added(_key_label(key)))
            continue

        old_position, old_item = match
        if order_sensitive and not order_reported and old_position != position:
            order_reported = True
            results.append(_order_changed(old_items, new_items))

        results.append(compare_func(old_item, new_item))

    removals = [removed(_key_label(key)) for key in unmatched]
    return prepare_result(label, "outline", [*removals, *results])


__all__ = [
    "ORDER_CHANGED",
    "NamedItem",
    "compare_items",
    "compare_value",
    "format_value",
    "prepare_result",
]
