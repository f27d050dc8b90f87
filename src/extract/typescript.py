"""Tree-sitter based symbol extraction for TypeScript files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tree_sitter import Language
from tree_sitter_typescript import language_tsx, language_typescript

from extract.base import SourceExtractor
from extract.query import (
    annotation_text,
    child,
    children_of_type,
    descendants_of_type,
    first_child_of_type,
    has_token,
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

EXPORT_WRAPPER = "export_statement"
AMBIENT_WRAPPER = "ambient_declaration"
ROOT = "program"

CLASS_KINDS = ("class_declaration", "abstract_class_declaration")
METHOD_KINDS = ("method_definition", "method_signature", "abstract_method_signature")
PARAMETER_KINDS = ("required_parameter", "optional_parameter")


def _enclosing_type(declaration: Node) -> str | None:
    """Type of the node holding a declaration, looking through ``declare``."""
    parent = declaration.parent
    if parent is not None and parent.type == AMBIENT_WRAPPER:
        parent = parent.parent
    return parent.type if parent is not None else None


def _is_exported(node: Node) -> bool:
    return _enclosing_type(node) == EXPORT_WRAPPER


def is_module_scope_variable(declarator: Node) -> bool:
    """A declarator is module scope when its declaration sits at the top level.

    ``variable_declarator`` is wrapped in a ``lexical_declaration`` (or
    ``variable_declaration``), so the deciding node is the grandparent, or
    the node above an ``ambient_declaration`` for ``declare const``.
    """
    declaration = declarator.parent
    if declaration is None:
        return False
    return _enclosing_type(declaration) in (EXPORT_WRAPPER, ROOT)


def _extract_parameter(node: Node, ordinal: int) -> ParameterRecord:
    return ParameterRecord(
        name=text(require_child(node, "pattern")),
        type=annotation_text(child(node, "type")),
        ordinal=ordinal,
        is_optional=node.type == "optional_parameter" or child(node, "value") is not None,
    )


def _extract_method(node: Node) -> MethodRecord:
    parameters_node = require_child(node, "parameters")
    parameter_nodes = children_of_type(parameters_node, *PARAMETER_KINDS)
    return MethodRecord(
        name=text(require_child(node, "name")),
        return_type=annotation_text(child(node, "return_type")),
        parameters=tuple(
            _extract_parameter(p, ordinal) for ordinal, p in enumerate(parameter_nodes)
        ),
    )


def _field_visibility(node: Node, name_node: Node) -> Visibility:
    if name_node.type == "private_property_identifier":
        return "private"
    modifier = first_child_of_type(node, "accessibility_modifier")
    if modifier is None:
        return "public"
    modifier_text = text(modifier)
    if modifier_text == "private":
        return "private"
    if modifier_text == "protected":
        return "protected"
    return "public"


def _extract_field(node: Node) -> FieldRecord:
    name_node = require_child(node, "name")
    value_node = child(node, "value")
    return FieldRecord(
        name=text(name_node),
        type=annotation_text(child(node, "type")),
        value=text(value_node) if value_node is not None else None,
        visibility=_field_visibility(node, name_node),
        is_read_only=has_token(node, "readonly"),
    )


def _is_parameter_property(parameter: Node) -> bool:
    return (
        first_child_of_type(parameter, "accessibility_modifier") is not None
        or has_token(parameter, "readonly")
    )


def _extract_parameter_properties(body: Node) -> list[FieldRecord]:
    """Fields declared by ``constructor(private readonly name: T)`` parameters."""
    fields: list[FieldRecord] = []
    for method in children_of_type(body, "method_definition"):
        if text(require_child(method, "name")) != "constructor":
            continue
        parameters_node = require_child(method, "parameters")
        for parameter in children_of_type(parameters_node, *PARAMETER_KINDS):
            if not _is_parameter_property(parameter):
                continue
            name_node = require_child(parameter, "pattern")
            value_node = child(parameter, "value")
            fields.append(
                FieldRecord(
                    name=text(name_node),
                    type=annotation_text(child(parameter, "type")),
                    value=text(value_node) if value_node is not None else None,
                    visibility=_field_visibility(parameter, name_node),
                    is_read_only=has_token(parameter, "readonly"),
                )
            )
    return fields


def _extract_heritage(node: Node) -> tuple[str | None, tuple[str, ...] | None]:
    """Return the base class and implemented interfaces of a class."""
    heritage = first_child_of_type(node, "class_heritage")
    if heritage is None:
        return None, None

    base_class: str | None = None
    extends = first_child_of_type(heritage, "extends_clause")
    if extends is not None:
        base_class = text(require_child(extends, "value"))

    interfaces: tuple[str, ...] | None = None
    implements = first_child_of_type(heritage, "implements_clause")
    if implements is not None:
        interfaces = tuple(text(n) for n in significant_children(implements))

    return base_class, interfaces


def _extract_class(node: Node) -> ClassRecord:
    body = require_child(node, "body")
    base_class, interfaces = _extract_heritage(node)
    return ClassRecord(
        name=text(require_child(node, "name")),
        is_exported=_is_exported(node),
        methods=tuple(_extract_method(m) for m in children_of_type(body, *METHOD_KINDS)),
        fields=(
            *(_extract_field(f) for f in children_of_type(body, "public_field_definition")),
            *_extract_parameter_properties(body),
        ),
        base_class=base_class,
        interfaces=interfaces,
    )


def _extract_property_signature(node: Node) -> FieldRecord:
    return FieldRecord(
        name=text(require_child(node, "name")),
        type=annotation_text(child(node, "type")),
        is_read_only=has_token(node, "readonly"),
    )


def _extract_interface(node: Node) -> InterfaceRecord:
    body = require_child(node, "body")
    extends: tuple[str, ...] | None = None
    extends_clause = first_child_of_type(node, "extends_type_clause")
    if extends_clause is not None:
        extends = tuple(text(n) for n in significant_children(extends_clause))

    return InterfaceRecord(
        name=text(require_child(node, "name")),
        is_exported=_is_exported(node),
        methods=tuple(
            _extract_method(m) for m in children_of_type(body, "method_signature")
        ),
        fields=tuple(
            _extract_property_signature(p)
            for p in children_of_type(body, "property_signature")
        ),
        extends=extends,
    )


def _extract_type_alias(node: Node) -> TypeAliasRecord:
    return TypeAliasRecord(
        name=text(require_child(node, "name")),
        is_exported=_is_exported(node),
        type=text(require_child(node, "value")),
    )


def _extract_variable(node: Node) -> VariableRecord:
    value_node = child(node, "value")
    declaration = node.parent
    return VariableRecord(
        name=text(require_child(node, "name")),
        # The export wrapper encloses the declaration, not the declarator.
        is_exported=declaration is not None and _is_exported(declaration),
        type=annotation_text(child(node, "type")),
        value=text(value_node) if value_node is not None else None,
    )


class TypeScriptExtractor(SourceExtractor):
    """Extracts classes, interfaces, type aliases and variables from TypeScript."""

    language_name = "typescript"

    def __init__(self, *, tsx: bool = False) -> None:
        grammar = language_tsx() if tsx else language_typescript()
        super().__init__(Language(grammar))
        if tsx:
            self.language_name = "tsx"

    def extract_root(self, root: Node) -> SourceDetails:
        return SourceDetails(
            classes=tuple(
                _extract_class(n) for n in descendants_of_type(root, *CLASS_KINDS)
            ),
            interfaces=tuple(
                _extract_interface(n)
                for n in descendants_of_type(root, "interface_declaration")
            ),
            types=tuple(
                _extract_type_alias(n)
                for n in descendants_of_type(root, "type_alias_declaration")
            ),
            variables=tuple(
                _extract_variable(n)
                for n in descendants_of_type(root, "variable_declarator")
                if is_module_scope_variable(n)
            ),
        )


__all__ = ["TypeScriptExtractor", "is_module_scope_variable"]
