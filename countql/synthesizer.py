"""Schema & Binding Synthesizer.

Consumes the annotations collected by :class:`~countql.processor.DirectiveProcessor`
and, once visiting is complete:

- adds ``count<Type>`` query fields and shadow counter fields to the output schema,
- creates the filter-input types they accept,
- registers one resolver binding per generated field.

Everything here is keyed by name, so running it twice over the same schema
yields the same fields and bindings.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from graphql import ObjectTypeDefinitionNode

from .config import TransformConfig
from .core.annotations import Annotation, CountFieldConfig, FieldAnnotation, ObjectAnnotation, TableReference
from .core.directives import MODEL_DIRECTIVE, has_directive, unwrap_type
from .core.naming import count_query_name, filter_input_name, shadow_field_name
from .errors import MissingModelAnnotation, MissingRelationshipAnnotation, UnresolvableRelatedType
from .filter_inputs import FilterInputBuilder
from .processor import validate_model_presence
from .registry import BindingRegistry, ResolverBinding
from .schema import OutputSchema, parse_fields
from .strategies import BaseStrategy, get_strategy
from .templates import RequestTransform, ResponseTransform

__all__ = ['SchemaSynthesizer']

logger = logging.getLogger(__name__)


class SchemaSynthesizer:
    def __init__(
        self,
        output: OutputSchema,
        config: Optional[TransformConfig] = None,
        registry: Optional[BindingRegistry] = None,
        strategy: Optional[BaseStrategy] = None,
    ):
        self.output = output
        self.config = config or TransformConfig()
        self.registry = registry if registry is not None else BindingRegistry()
        self.strategy = strategy or get_strategy(self.config.binding_strategy.value)
        self.filters = FilterInputBuilder(output)

    # --- validation --------------------------------------------------------

    def validate(self, annotations: Sequence[Annotation]) -> List[CountFieldConfig]:
        """Validate every annotation and resolve field configs without touching the schema.

        Raises:
            CountTransformError: on the first invalid annotation.
        """
        configs: List[CountFieldConfig] = []
        for annotation in annotations:
            if isinstance(annotation, ObjectAnnotation):
                validate_model_presence(annotation.definition)
            elif isinstance(annotation, FieldAnnotation):
                configs.append(self.resolve_field_config(annotation))
            else:
                raise TypeError(f"Unsupported annotation: {annotation!r}")
        return configs

    def _model_type(self, owner: str, field: str, name: str) -> ObjectTypeDefinitionNode:
        definition = self.output.get_type(name)
        if not isinstance(definition, ObjectTypeDefinitionNode):
            raise UnresolvableRelatedType(owner, field, name)
        if not has_directive(definition, MODEL_DIRECTIVE):
            raise MissingModelAnnotation(name, referenced_by=f"{owner}.{field}")
        return definition

    def resolve_field_config(self, annotation: FieldAnnotation) -> CountFieldConfig:
        owner, field_name = annotation.type_name, annotation.field_name
        if not self.strategy.supports(annotation.field):
            raise MissingRelationshipAnnotation(owner, field_name, self.strategy.describe())
        related = unwrap_type(annotation.field.type)
        self._model_type(owner, field_name, related)
        if annotation.explicit_fields:
            counter_fields = tuple(annotation.explicit_fields)
            synthesized = False
            filter_input = None
        else:
            shadow = shadow_field_name(owner, field_name)
            counter_fields = (shadow,)
            synthesized = True
            filter_input = filter_input_name(shadow)
        return CountFieldConfig(
            owner_type=owner,
            field_name=field_name,
            related_type=related,
            table=TableReference(related),
            counter_fields=counter_fields,
            synthesized=synthesized,
            filter_input_name=filter_input,
            index_name=self.strategy.index_name(annotation.field),
            count_type=annotation.count_type,
        )

    # --- synthesis ---------------------------------------------------------

    def synthesize(self, annotations: Sequence[Annotation]) -> BindingRegistry:
        """Validate everything first, then mutate the schema and register bindings."""
        configs = iter(self.validate(annotations))
        for annotation in annotations:
            if isinstance(annotation, ObjectAnnotation):
                self.synthesize_model(annotation)
            elif isinstance(annotation, FieldAnnotation):
                self.synthesize_field(next(configs))
        logger.info("Registered %d count resolver binding(s)", len(self.registry))
        return self.registry

    def synthesize_model(self, annotation: ObjectAnnotation) -> ResolverBinding:
        type_name = annotation.type_name
        query_name = count_query_name(type_name)
        input_name = self.filters.ensure_filter_input(filter_input_name(type_name), annotation.definition)
        self.output.add_query_fields(parse_fields(f"{query_name}(filter: {input_name}): Int"))
        return self.bind(self.output.query_type_name(), query_name, TableReference(type_name))

    def synthesize_field(self, cfg: CountFieldConfig) -> List[ResolverBinding]:
        if cfg.synthesized:
            shadow = cfg.counter_fields[0]
            related = self.output.get_type(cfg.related_type)
            existing = {f.name.value for f in related.fields or ()}
            if shadow in existing:
                logger.debug("Keeping existing field %s.%s", cfg.related_type, shadow)
            else:
                input_name = self.filters.ensure_filter_input(cfg.filter_input_name, related)
                self.output.add_fields(cfg.related_type, parse_fields(f"{shadow}(filter: {input_name}): Int!"))
        return [
            self.bind(cfg.binding_type, name, cfg.table, cfg.index_name)
            for name in cfg.counter_fields
        ]

    def bind(
        self,
        type_name: str,
        field_name: str,
        table: TableReference,
        index_name: Optional[str] = None,
    ) -> ResolverBinding:
        data_source = self.config.data_source_name
        return self.registry.register(ResolverBinding(
            type_name=type_name,
            field_name=field_name,
            table=table,
            executor=data_source,
            index_name=index_name,
            request=RequestTransform(data_source=data_source, index_name=index_name),
            response=ResponseTransform(),
        ))
