"""Canonical symbol records shared by all source languages."""

from symbols.models import (
    UNSPECIFIED,
    ClassRecord,
    FieldRecord,
    InterfaceRecord,
    MethodRecord,
    ParameterRecord,
    SourceDetails,
    TypeAliasRecord,
    VariableRecord,
)

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
]
