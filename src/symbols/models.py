"""Symbol models for generated source files.

A ``SourceDetails`` value is the canonical, language-independent view of one
source file: its classes, interfaces, type aliases and module-scope
variables. Both extractors produce these records and the comparators only
ever look at them.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Type expression used when the source carries no annotation.
UNSPECIFIED = "unspecified"

Visibility = Literal["public", "private", "protected"]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class ParameterRecord(_Record):
    """A parameter in a method signature."""

    name: str
    type: str = UNSPECIFIED
    ordinal: int = Field(ge=0, description="Zero-based declared position")
    is_optional: bool = False


class MethodRecord(_Record):
    """A method of a class or interface."""

    name: str
    return_type: str = UNSPECIFIED
    parameters: tuple[ParameterRecord, ...] = ()


class FieldRecord(_Record):
    """A field (property) of a class or interface."""

    name: str
    type: str = UNSPECIFIED
    value: str | None = Field(default=None, description="Initializer source text")
    visibility: Visibility = "public"
    is_read_only: bool = False


class ClassRecord(_Record):
    """A class declaration."""

    name: str
    is_exported: bool = False
    methods: tuple[MethodRecord, ...] = ()
    fields: tuple[FieldRecord, ...] = ()
    base_class: str | None = None
    interfaces: tuple[str, ...] | None = None


class InterfaceRecord(_Record):
    """An interface (or protocol) declaration."""

    name: str
    is_exported: bool = False
    methods: tuple[MethodRecord, ...] = ()
    fields: tuple[FieldRecord, ...] = ()
    extends: tuple[str, ...] | None = None


class TypeAliasRecord(_Record):
    """A named type alias and the raw text of its definition."""

    name: str
    is_exported: bool = False
    type: str


class VariableRecord(_Record):
    """A module-scope variable binding."""

    name: str
    is_exported: bool = False
    type: str = UNSPECIFIED
    value: str | None = None


class SourceDetails(_Record):
    """All symbols extracted from one source file, in declaration order."""

    classes: tuple[ClassRecord, ...] = ()
    interfaces: tuple[InterfaceRecord, ...] = ()
    types: tuple[TypeAliasRecord, ...] = ()
    variables: tuple[VariableRecord, ...] = ()


__all__ = [
    "UNSPECIFIED",
    "ClassRecord",
    "FieldRecord",
    "InterfaceRecord",
    "MethodRecord",
    "ParameterRecord",
    "SourceDetails",
    "TypeAliasRecord",
    "VariableRecord",
    "Visibility",
]
