"""Tree-sitter based symbol extraction for Python files.

Python has no export statement, so a module-level name is treated as exported
unless it starts with an underscore. Classes that derive from ``Protocol`` are
reported as interfaces.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tree_sitter import Language
from tree_sitter_python import language as get_python_language

from extract.base import SourceExtractor
from extract.query import (
    ExtractionError,
    annotation_text,
    child,
    descendants_of_type,
    first_child_of_type,
    grandparent_type,
    parent_type,
    require_child,
    significant_children,
    text,
)
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

if TYPE_CHECKING:
    from tree_sitter import Node

    from symbols.models import Visibility

ROOT = "module"

PROTOCOL_BASES = frozenset({"Protocol", "typing.Protocol", "typing_extensions.Protocol"})
TYPE_ALIAS_ANNOTATIONS = frozenset({"TypeAlias", "typing.TypeAlias"})

# Parameter kinds that carry a name; bare ``*`` and ``/`` separators do not.
_PARAMETER_KINDS = frozenset(
    {
        "identifier",
        "typed_parameter",
        "default_parameter",
        "typed_default_parameter",
        "list_splat_pattern",
        "dictionary_splat_pattern",
        "tuple_pattern",
    }
)
_SPLAT_NAME_KINDS = ("identifier", "list_splat_pattern", "dictionary_splat_pattern")
_BARE_PARAMETER_KINDS = frozenset({*_SPLAT_NAME_KINDS, "tuple_pattern"})


def _is_exported(name: str) -> bool:
    return not name.startswith("_")


def _visibility(name: str) -> Visibility:
    if name.startswith("__") and not name.endswith("__"):
        return "private"
    if name.startswith("_") and not name.startswith("__"):
        return "protected"
    return "public"


def _unwrap_definition(node: Node) -> Node:
    """Return the class/function inside a ``decorated_definition``."""
    if node.type == "decorated_definition":
        return require_child(node, "definition")
    return node


def _extract_parameter(node: Node, ordinal: int) -> ParameterRecord:
    if node.type in _BARE_PARAMETER_KINDS:
        return ParameterRecord(name=text(node), ordinal=ordinal)

    if node.type == "typed_parameter":
        name_node = first_child_of_type(node, *_SPLAT_NAME_KINDS)
        if name_node is None:
            raise ExtractionError.at(node, "typed_parameter node has no name")
        return ParameterRecord(
            name=text(name_node),
            type=annotation_text(child(node, "type")),
            ordinal=ordinal,
        )

    # default_parameter / typed_default_parameter
    return ParameterRecord(
        name=text(require_child(node, "name")),
        type=annotation_text(child(node, "type")),
        ordinal=ordinal,
        is_optional=True,
    )


def _extract_method(node: Node) -> MethodRecord:
    parameters_node = require_child(node, "parameters")
    parameter_nodes = [
        p for p in parameters_node.named_children if p.type in _PARAMETER_KINDS
    ]
    return MethodRecord(
        name=text(require_child(node, "name")),
        return_type=annotation_text(child(node, "return_type")),
        parameters=tuple(
            _extract_parameter(p, ordinal) for ordinal, p in enumerate(parameter_nodes)
        ),
    )


def _statement_assignment(statement: Node) -> Node | None:
    """Return the assignment held by an ``expression_statement``, if any."""
    if statement.type != "expression_statement":
        return None
    return first_child_of_type(statement, "assignment")


def _assignment_links(assignment: Node) -> tuple[list[tuple[str, Node]], Node | None]:
    """Split ``a = b = value`` into its named links and the value they share.

    Each link pairs a plain-name target with the assignment node that binds
    it (annotations live on that node). Attribute and unpacking targets are
    skipped.
    """
    links: list[tuple[str, Node]] = []
    current = assignment
    while True:
        left = require_child(current, "left")
        if left.type == "identifier":
            links.append((text(left), current))
        value = child(current, "right")
        if value is None or value.type != "assignment":
            return links, value
        current = value


def _is_read_only(type_text: str) -> bool:
    return type_text in ("Final", "typing.Final") or type_text.startswith(
        ("Final[", "typing.Final[")
    )


def _extract_fields(body: Node) -> tuple[FieldRecord, ...]:
    fields: list[FieldRecord] = []
    for statement in body.named_children:
        assignment = _statement_assignment(statement)
        if assignment is None:
            continue
        links, value_node = _assignment_links(assignment)
        value = text(value_node) if value_node is not None else None
        for name, link in links:
            type_text = annotation_text(child(link, "type"))
            fields.append(
                FieldRecord(
                    name=name,
                    type=type_text,
                    value=value,
                    visibility=_visibility(name),
                    is_read_only=_is_read_only(type_text),
                )
            )
    return tuple(fields)


def _extract_methods(body: Node) -> tuple[MethodRecord, ...]:
    return tuple(
        _extract_method(definition)
        for definition in (
            _unwrap_definition(n)
            for n in body.named_children
            if n.type in ("function_definition", "decorated_definition")
        )
        if definition.type == "function_definition"
    )


def _extract_bases(node: Node) -> list[str]:
    """Positional base classes as written; keyword arguments are skipped."""
    superclasses = child(node, "superclasses")
    if superclasses is None:
        return []

    bases: list[str] = []
    for base in significant_children(superclasses):
        if base.type in ("keyword_argument", "list_splat", "dictionary_splat"):
            continue
        if base.type == "subscript":
            # Protocol[T] / Generic[T]: keep the subscripted name
            bases.append(text(require_child(base, "value")))
        else:
            bases.append(text(base))
    return bases


def _extract_class(node: Node) -> ClassRecord | InterfaceRecord:
    name = text(require_child(node, "name"))
    body = require_child(node, "body")
    bases = _extract_bases(node)

    if PROTOCOL_BASES.intersection(bases):
        extends = tuple(b for b in bases if b not in PROTOCOL_BASES)
        return InterfaceRecord(
            name=name,
            is_exported=_is_exported(name),
            methods=_extract_methods(body),
            fields=_extract_fields(body),
            extends=extends or None,
        )

    return ClassRecord(
        name=name,
        is_exported=_is_exported(name),
        methods=_extract_methods(body),
        fields=_extract_fields(body),
        base_class=bases[0] if bases else None,
        interfaces=tuple(bases[1:]) or None,
    )


def is_module_scope_assignment(assignment: Node) -> bool:
    """An assignment is module scope when its statement sits in the module."""
    return grandparent_type(assignment) == ROOT


def _is_type_alias_assignment(assignment: Node) -> bool:
    type_node = child(assignment, "type")
    return (
        type_node is not None
        and child(assignment, "right") is not None
        and annotation_text(type_node) in TYPE_ALIAS_ANNOTATIONS
    )


def _alias_name(left: Node) -> str:
    """Name of a ``type`` statement target; type parameters are not part of it."""
    if left.type == "identifier":
        return text(left)
    names = descendants_of_type(left, "identifier")
    if not names:
        raise ExtractionError.at(left, "type alias target has no name")
    return text(names[0])


def _extract_type_alias_statement(node: Node) -> TypeAliasRecord:
    name = _alias_name(require_child(node, "left"))
    return TypeAliasRecord(
        name=name,
        is_exported=_is_exported(name),
        type=text(require_child(node, "right")),
    )


def _extract_type_alias_assignment(assignment: Node) -> TypeAliasRecord:
    name = text(require_child(assignment, "left"))
    return TypeAliasRecord(
        name=name,
        is_exported=_is_exported(name),
        type=text(require_child(assignment, "right")),
    )


def _extract_variable(
    link: Node, name: str, value_node: Node | None
) -> VariableRecord:
    return VariableRecord(
        name=name,
        is_exported=_is_exported(name),
        type=annotation_text(child(link, "type")),
        value=text(value_node) if value_node is not None else None,
    )


class PythonExtractor(SourceExtractor):
    """Extracts classes, protocols, type aliases and variables from Python."""

    language_name = "python"

    def __init__(self) -> None:
        super().__init__(Language(get_python_language()))

    def extract_root(self, root: Node) -> SourceDetails:
        classes: list[ClassRecord] = []
        interfaces: list[InterfaceRecord] = []
        for node in descendants_of_type(root, "class_definition"):
            record = _extract_class(node)
            if isinstance(record, InterfaceRecord):
                interfaces.append(record)
            else:
                classes.append(record)

        types: list[TypeAliasRecord] = []
        variables: list[VariableRecord] = []
        for node in descendants_of_type(root, "assignment", "type_alias_statement"):
            if node.type == "type_alias_statement":
                if parent_type(node) == ROOT:
                    types.append(_extract_type_alias_statement(node))
                continue
            if not is_module_scope_assignment(node):
                continue
            links, value_node = _assignment_links(node)
            if not links:
                continue
            if _is_type_alias_assignment(node):
                types.append(_extract_type_alias_assignment(node))
            else:
                variables.extend(
                    _extract_variable(link, name, value_node) for name, link in links
                )

        return SourceDetails(
            classes=tuple(classes),
            interfaces=tuple(interfaces),
            types=tuple(types),
            variables=tuple(variables),
        )


__all__ = ["PythonExtractor", "is_module_scope_assignment"]
