"""Diff report model, generic differ and renderers."""

from report.differ import compare_items, compare_value, prepare_result
from report.models import DiffKind, DiffNode, added, removed

__all__ = [
    "DiffKind",
    "DiffNode",
    "added",
    "compare_items",
    "compare_value",
    "prepare_result",
    "removed",
]
