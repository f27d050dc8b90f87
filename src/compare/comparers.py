"""Field-by-field comparison of symbol records.

Each comparator takes an old and a new record with the same name and returns
a ``changed`` node describing their differences, or None when they match.
Parameter lists are order sensitive because position affects call
compatibility; member and declaration lists are not.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from report.differ import compare_items, compare_value, prepare_result

if TYPE_CHECKING:
    from collections.abc import Iterable

    from report.models import DiffNode
    from symbols.models import (
        ClassRecord,
        FieldRecord,
        InterfaceRecord,
        MethodRecord,
        ParameterRecord,
        SourceDetails,
        TypeAliasRecord,
        VariableRecord,
    )


def _joined(names: Iterable[str] | None) -> str | None:
    if names is None:
        return None
    return ", ".join(sorted(names))


def compare_parameter(old: ParameterRecord, new: ParameterRecord) -> DiffNode | None:
    return prepare_result(
        old.name,
        "changed",
        [
            compare_value("Type", old.type, new.type),
            compare_value("Optional", old.is_optional, new.is_optional),
        ],
    )


def compare_method(old: MethodRecord, new: MethodRecord) -> DiffNode | None:
    return prepare_result(
        old.name,
        "changed",
        [
            compare_items(
                "Parameters",
                old.parameters,
                new.parameters,
                compare_parameter,
                order_sensitive=True,
            ),
            compare_value("Return Type", old.return_type, new.return_type),
        ],
    )


def compare_field(old: FieldRecord, new: FieldRecord) -> DiffNode | None:
    return prepare_result(
        old.name,
        "changed",
        [
            compare_value("Type", old.type, new.type),
            compare_value("Value", old.value, new.value),
            compare_value("Visibility", old.visibility, new.visibility),
            compare_value("Read Only", old.is_read_only, new.is_read_only),
        ],
    )


def compare_class(old: ClassRecord, new: ClassRecord) -> DiffNode | None:
    return prepare_result(
        old.name,
        "changed",
        [
            compare_items("Methods", old.methods, new.methods, compare_method),
            compare_items("Fields", old.fields, new.fields, compare_field),
            compare_value("Base Class", old.base_class, new.base_class),
            compare_value(
                "Interfaces", _joined(old.interfaces), _joined(new.interfaces)
            ),
            compare_value("Exported", old.is_exported, new.is_exported),
        ],
    )


def compare_interface(old: InterfaceRecord, new: InterfaceRecord) -> DiffNode | None:
    return prepare_result(
        old.name,
        "changed",
        [
            compare_items("Methods", old.methods, new.methods, compare_method),
            compare_items("Fields", old.fields, new.fields, compare_field),
            compare_value("Extends", _joined(old.extends), _joined(new.extends)),
            compare_value("Exported", old.is_exported, new.is_exported),
        ],
    )


def compare_type_alias(old: TypeAliasRecord, new: TypeAliasRecord) -> DiffNode | None:
    return prepare_result(
        old.name,
        "changed",
        [
            compare_value("Type", old.type, new.type),
            compare_value("Exported", old.is_exported, new.is_exported),
        ],
    )


def compare_variable(old: VariableRecord, new: VariableRecord) -> DiffNode | None:
    return prepare_result(
        old.name,
        "changed",
        [
            compare_value("Type", old.type, new.type),
            compare_value("Value", old.value, new.value),
            compare_value("Exported", old.is_exported, new.is_exported),
        ],
    )


def compare_source_details(
    label: str, old: SourceDetails, new: SourceDetails
) -> DiffNode | None:
    """Compare everything extracted from one file; ``label`` names the file."""
    return prepare_result(
        label,
        "changed",
        [
            compare_items("Classes", old.classes, new.classes, compare_class),
            compare_items(
                "Interfaces", old.interfaces, new.interfaces, compare_interface
            ),
            compare_items("Type Aliases", old.types, new.types, compare_type_alias),
            compare_items("Variables", old.variables, new.variables, compare_variable),
        ],
    )


__all__ = [
    "compare_class",
    "compare_field",
    "compare_interface",
    "compare_method",
    "compare_parameter",
    "compare_source_details",
    "compare_type_alias",
    "compare_variable",
]
