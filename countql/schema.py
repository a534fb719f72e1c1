"""Output schema wrapper over a graphql-core document.

The transform never mutates nodes in place: every change replaces the affected
definition with a copy, keeping the input document untouched.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from graphql import (
    DefinitionNode,
    DirectiveNode,
    DocumentNode,
    FieldDefinitionNode,
    GraphQLSchema,
    NameNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    OperationType,
    SchemaDefinitionNode,
    TypeDefinitionNode,
    build_ast_schema,
    parse,
    print_ast,
)

from .core.directives import TRANSFORMER_DIRECTIVES

__all__ = [
    'AWS_SCALARS',
    'OutputSchema',
    'build_output_schema',
    'merge_extensions',
    'parse_fields',
    'replace_node',
]

AWS_SCALARS = (
    'AWSDate',
    'AWSTime',
    'AWSDateTime',
    'AWSTimestamp',
    'AWSEmail',
    'AWSJSON',
    'AWSURL',
    'AWSPhone',
    'AWSIPAddress',
)


def replace_node(node: Any, **changes: Any) -> Any:
    """Copy a graphql-core node with some attributes replaced."""
    values = {key: getattr(node, key, None) for key in node.keys}
    values.update(changes)
    return node.__class__(**values)


def parse_fields(sdl_fields: str) -> tuple:
    """Parse field definitions written as SDL into ``FieldDefinitionNode`` s."""
    doc = parse(f"type _ {{\n{sdl_fields}\n}}", no_location=True)
    return tuple(doc.definitions[0].fields)


def merge_extensions(definitions: Iterable[DefinitionNode]) -> Dict[str, ObjectTypeDefinitionNode]:
    """Object type definitions by name, with their ``extend type`` fields and directives folded in.

    Extensions of types the document does not define are left out.
    """
    definitions = list(definitions)
    merged: Dict[str, ObjectTypeDefinitionNode] = {
        d.name.value: d for d in definitions if isinstance(d, ObjectTypeDefinitionNode)
    }
    for d in definitions:
        base = merged.get(d.name.value) if isinstance(d, ObjectTypeExtensionNode) else None
        if base is None:
            continue
        merged[d.name.value] = replace_node(
            base,
            fields=tuple(base.fields or ()) + tuple(d.fields or ()),
            directives=tuple(base.directives or ()) + tuple(d.directives or ()),
        )
    return merged


def _strip_directives(directives: Optional[Sequence[DirectiveNode]]) -> tuple:
    return tuple(d for d in directives or () if d.name.value not in TRANSFORMER_DIRECTIVES)


class OutputSchema:
    """Mutable view of the schema being produced by a transform run."""

    def __init__(self, document: DocumentNode):
        self._definitions: List[DefinitionNode] = list(document.definitions)

    @classmethod
    def from_sdl(cls, sdl: str) -> 'OutputSchema':
        return cls(parse(sdl, no_location=True))

    @property
    def definitions(self) -> List[DefinitionNode]:
        return list(self._definitions)

    def _index_of(self, name: str) -> int:
        for i, definition in enumerate(self._definitions):
            if isinstance(definition, TypeDefinitionNode) and definition.name.value == name:
                return i
        return -1

    def get_type(self, name: str) -> Optional[TypeDefinitionNode]:
        i = self._index_of(name)
        return self._definitions[i] if i >= 0 else None  # type: ignore[return-value]

    def has_type(self, name: str) -> bool:
        return self._index_of(name) >= 0

    def add_type(self, definition: TypeDefinitionNode) -> bool:
        """Add a type definition unless one with the same name exists.

        Returns:
            True when the definition was added.
        """
        if self.has_type(definition.name.value):
            return False
        self._definitions.append(definition)
        return True

    def add_fields(self, type_name: str, fields: Iterable[FieldDefinitionNode]) -> List[str]:
        """Append fields to an object type, skipping names already present.

        Returns:
            Names of the fields actually added.
        """
        i = self._index_of(type_name)
        if i < 0:
            raise KeyError(f"Type '{type_name}' is not defined in the output schema")
        current = self._definitions[i]
        existing = {f.name.value for f in current.fields or ()}
        added = [f for f in fields if f.name.value not in existing]
        if added:
            self._definitions[i] = replace_node(current, fields=tuple(current.fields or ()) + tuple(added))
        return [f.name.value for f in added]

    def query_type_name(self) -> str:
        for definition in self._definitions:
            if isinstance(definition, SchemaDefinitionNode):
                for op in definition.operation_types or ():
                    if op.operation == OperationType.QUERY:
                        return op.type.name.value
        return 'Query'

    def add_query_fields(self, fields: Iterable[FieldDefinitionNode]) -> List[str]:
        name = self.query_type_name()
        if not self.has_type(name):
            self._definitions.append(
                ObjectTypeDefinitionNode(
                    name=NameNode(value=name),
                    description=None,
                    interfaces=(),
                    directives=(),
                    fields=(),
                )
            )
        return self.add_fields(name, fields)

    def document(self, strip_transformer_directives: bool = True) -> DocumentNode:
        definitions: List[DefinitionNode] = []
        for definition in self._definitions:
            if strip_transformer_directives and isinstance(
                definition, (ObjectTypeDefinitionNode, ObjectTypeExtensionNode)
            ):
                fields = tuple(
                    replace_node(f, directives=_strip_directives(f.directives))
                    for f in definition.fields or ()
                )
                definition = replace_node(
                    definition, directives=_strip_directives(definition.directives), fields=fields
                )
                if isinstance(definition, ObjectTypeExtensionNode) and not (
                    definition.directives or definition.fields or definition.interfaces
                ):
                    # `extend type Foo` with nothing left is not valid SDL
                    continue
            definitions.append(definition)
        return DocumentNode(definitions=tuple(definitions))

    def print(self) -> str:
        return print_ast(self.document())


def build_output_schema(sdl: str) -> GraphQLSchema:
    """Build (and thereby validate) a printed output schema.

    AWS scalars are declared for the build unless the schema declares them.
    """
    doc = parse(sdl)
    declared = {
        d.name.value for d in doc.definitions if isinstance(d, TypeDefinitionNode)
    }
    missing = '\n'.join(f"scalar {n}" for n in AWS_SCALARS if n not in declared)
    if missing:
        doc = parse(missing + '\n' + sdl)
    return build_ast_schema(doc)
