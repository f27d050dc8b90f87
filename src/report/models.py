"""Diff report models.

A comparison produces a tree of ``DiffNode`` values. Leaves are additions or
removals; inner nodes either outline a section (``outline``) or describe a
changed symbol or value (``changed``). Empty sections never exist: a
comparison that finds nothing returns ``None`` instead of an empty node.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

DiffKind = Literal["outline", "added", "removed", "changed"]

LEAF_KINDS: frozenset[DiffKind] = frozenset({"added", "removed"})


class DiffNode(BaseModel):
    """A single entry in a diff report tree."""

    model_config = ConfigDict(frozen=True)

    label: str
    kind: DiffKind
    children: tuple[DiffNode, ...] | None = Field(
        default=None, description="Nested differences (never empty)"
    )

    @model_validator(mode="after")
    def _check_shape(self) -> DiffNode:
        if self.kind in LEAF_KINDS:
            if self.children is not None:
                msg = f"{self.kind} node '{self.label}' cannot have children"
                raise ValueError(msg)
        elif not self.children:
            msg = f"{self.kind} node '{self.label}' requires at least one child"
            raise ValueError(msg)
        return self

    def count(self, kind: DiffKind) -> int:
        """Count nodes of ``kind`` in this subtree, including this node."""
        own = 1 if self.kind == kind else 0
        return own + sum(child.count(kind) for child in self.children or ())

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"label": self.label, "kind": self.kind}
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def added(label: str) -> DiffNode:
    return DiffNode(label=label, kind="added")


def removed(label: str) -> DiffNode:
    return DiffNode(label=label, kind="removed")


DiffNode.model_rebuild()

__all__ = ["DiffKind", "DiffNode", "LEAF_KINDS", "added", "removed"]
