"""Directive Processor: collect and validate ``@count`` occurrences.

This phase only reads the input document. It records one annotation per
``@count`` occurrence and validates field-level occurrences eagerly, so that
visiting order across types is irrelevant and the phase can be re-run after
:meth:`DirectiveProcessor.reset`.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from graphql import (
    DocumentNode,
    EnumTypeDefinitionNode,
    FieldDefinitionNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    ScalarTypeDefinitionNode,
)

from .core.annotations import Annotation, FieldAnnotation, ObjectAnnotation
from .core.directives import (
    COUNT_DIRECTIVE,
    INDEX_DIRECTIVE,
    MODEL_DIRECTIVE,
    RELATIONSHIP_DIRECTIVES,
    CountType,
    directive_arguments,
    field_names,
    find_directive,
    has_directive,
    is_list_type,
    unwrap_type,
)
from .errors import (
    MissingModelAnnotation,
    MissingRelationshipAnnotation,
    NotAListType,
    UnknownField,
    UnsupportedCountType,
)
from .filter_inputs import SCALAR_FILTER_INPUTS
from .schema import merge_extensions

__all__ = [
    'DirectiveProcessor',
    'validate_model_presence',
    'validate_relationship_or_index',
    'validate_list_type',
    'validate_explicit_fields',
]

logger = logging.getLogger(__name__)


def validate_model_presence(definition: ObjectTypeDefinitionNode) -> None:
    if not has_directive(definition, MODEL_DIRECTIVE):
        raise MissingModelAnnotation(definition.name.value)


def validate_relationship_or_index(owner: ObjectTypeDefinitionNode, field: FieldDefinitionNode) -> None:
    if not has_directive(field, *RELATIONSHIP_DIRECTIVES, INDEX_DIRECTIVE):
        raise MissingRelationshipAnnotation(owner.name.value, field.name.value)


def validate_list_type(owner: ObjectTypeDefinitionNode, field: FieldDefinitionNode) -> None:
    if not is_list_type(field):
        raise NotAListType(owner.name.value, field.name.value)


def validate_explicit_fields(
    owner: ObjectTypeDefinitionNode,
    field: FieldDefinitionNode,
    names: Sequence[str],
    document: Optional[DocumentNode] = None,
) -> Tuple[str, ...]:
    """Check that every explicit key field exists on ``owner`` as a scalar or enum field.

    When ``document`` is omitted only existence is checked.
    """
    type_name, field_name = owner.name.value, field.name.value
    if not names:
        raise UnknownField(type_name, field_name, None)
    available = field_names(owner.fields)
    leaf_types = set(SCALAR_FILTER_INPUTS)
    if document is not None:
        leaf_types.update(
            d.name.value for d in document.definitions
            if isinstance(d, (EnumTypeDefinitionNode, ScalarTypeDefinitionNode))
        )
    for name in names:
        target = available.get(name)
        if target is None:
            raise UnknownField(type_name, field_name, name)
        if document is not None and (is_list_type(target) or unwrap_type(target.type) not in leaf_types):
            raise UnknownField(type_name, field_name, name, reason="Explicit fields must be scalar or enum fields.")
    return tuple(names)


class DirectiveProcessor:
    """Visit a document and collect ``@count`` annotations.

    Object-level occurrences are recorded as-is; their ``@model`` companion is
    checked by the synthesizer before anything is emitted. Field-level
    occurrences are validated here.
    """

    def __init__(self):
        self.models: List[ObjectAnnotation] = []
        self.fields: List[FieldAnnotation] = []

    def reset(self) -> None:
        self.models = []
        self.fields = []

    @property
    def annotations(self) -> List[Annotation]:
        return [*self.models, *self.fields]

    def visit(self, document: DocumentNode) -> List[Annotation]:
        merged = merge_extensions(document.definitions)
        for definition in document.definitions:
            if isinstance(definition, (ObjectTypeDefinitionNode, ObjectTypeExtensionNode)):
                self.visit_object(definition, document, merged.get(definition.name.value))
        logger.info(
            "Collected %d @count model(s) and %d @count field(s)", len(self.models), len(self.fields)
        )
        return self.annotations

    def visit_object(
        self,
        definition: ObjectTypeDefinitionNode,
        document: Optional[DocumentNode] = None,
        owner: Optional[ObjectTypeDefinitionNode] = None,
    ) -> None:
        """Collect the occurrences declared in ``definition``.

        ``owner`` is the complete type the occurrences belong to; for an
        ``extend type`` block it is the base definition with all extensions merged.
        """
        owner = owner or definition
        if find_directive(definition, COUNT_DIRECTIVE) is not None:
            self.object(owner)
        for field in definition.fields or ():
            directive = find_directive(field, COUNT_DIRECTIVE)
            if directive is not None:
                self.field(owner, field, document)

    def object(self, definition: ObjectTypeDefinitionNode) -> ObjectAnnotation:
        annotation = ObjectAnnotation(definition=definition)
        self.models.append(annotation)
        return annotation

    def field(
        self,
        owner: ObjectTypeDefinitionNode,
        field: FieldDefinitionNode,
        document: Optional[DocumentNode] = None,
    ) -> FieldAnnotation:
        directive = find_directive(field, COUNT_DIRECTIVE)
        args = directive_arguments(directive) if directive is not None else {}
        type_name, field_name = owner.name.value, field.name.value

        raw_type = args.get('type') or CountType.scan.value
        try:
            count_type = CountType(raw_type)
        except ValueError:
            raise UnsupportedCountType(type_name, field_name, str(raw_type)) from None
        if count_type is not CountType.scan:
            raise UnsupportedCountType(type_name, field_name, count_type.value)

        validate_model_presence(owner)
        validate_relationship_or_index(owner, field)
        validate_list_type(owner, field)
        explicit: Optional[Tuple[str, ...]] = None
        if 'fields' in args and args['fields'] is not None:
            raw = args['fields']
            names = [raw] if isinstance(raw, str) else list(raw)
            explicit = validate_explicit_fields(owner, field, names, document)

        annotation = FieldAnnotation(owner=owner, field=field, count_type=count_type, explicit_fields=explicit)
        self.fields.append(annotation)
        logger.debug("Validated @count on %s.%s", type_name, field_name)
        return annotation
