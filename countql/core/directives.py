from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable, Optional

from graphql import (
    DirectiveNode,
    FieldDefinitionNode,
    ListTypeNode,
    NonNullTypeNode,
    TypeNode,
    value_from_ast_untyped,
)

__all__ = [
    'CountType',
    'COUNT_DIRECTIVE',
    'MODEL_DIRECTIVE',
    'RELATIONSHIP_DIRECTIVES',
    'INDEX_DIRECTIVE',
    'TRANSFORMER_DIRECTIVES',
    'find_directive',
    'has_directive',
    'directive_arguments',
    'unwrap_type',
    'unwrap_non_null',
    'is_list_type',
    'field_names',
]

COUNT_DIRECTIVE = 'count'
MODEL_DIRECTIVE = 'model'
# Legacy schemas declare to-many relationships with @connection.
RELATIONSHIP_DIRECTIVES = ('hasMany', 'connection')
INDEX_DIRECTIVE = 'index'

# Directives consumed at schema-build time; none of them reach the deployed schema.
TRANSFORMER_DIRECTIVES = frozenset({
    COUNT_DIRECTIVE,
    MODEL_DIRECTIVE,
    INDEX_DIRECTIVE,
    'hasMany',
    'hasOne',
    'belongsTo',
    'manyToMany',
    'connection',
    'key',
    'primaryKey',
    'auth',
})


class CountType(Enum):
    scan = 'scan'
    distinct = 'distinct'


def find_directive(node: Any, name: str) -> Optional[DirectiveNode]:
    for directive in getattr(node, 'directives', None) or ():
        if directive.name.value == name:
            return directive
    return None


def has_directive(node: Any, *names: str) -> bool:
    return any(find_directive(node, n) is not None for n in names)


def directive_arguments(directive: DirectiveNode) -> Dict[str, Any]:
    """Read directive arguments into plain Python values keyed by argument name."""
    return {
        arg.name.value: value_from_ast_untyped(arg.value)
        for arg in directive.arguments or ()
    }


def unwrap_non_null(type_node: TypeNode) -> TypeNode:
    while isinstance(type_node, NonNullTypeNode):
        type_node = type_node.type
    return type_node


def unwrap_type(type_node: TypeNode) -> str:
    """Strip list and non-null wrappers and return the base type name."""
    while isinstance(type_node, (NonNullTypeNode, ListTypeNode)):
        type_node = type_node.type
    return type_node.name.value


def is_list_type(field: FieldDefinitionNode) -> bool:
    return isinstance(unwrap_non_null(field.type), ListTypeNode)


def field_names(fields: Iterable[FieldDefinitionNode]) -> Dict[str, FieldDefinitionNode]:
    return {f.name.value: f for f in fields or ()}
