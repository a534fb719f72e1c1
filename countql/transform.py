from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from graphql import DocumentNode, GraphQLSchema, parse

from .config import TransformConfig
from .processor import DirectiveProcessor
from .registry import BindingRegistry
from .schema import OutputSchema, build_output_schema
from .stack import CountResolverStack
from .synthesizer import SchemaSynthesizer

__all__ = ['CountTransformer', 'TransformResult']

logger = logging.getLogger(__name__)


@dataclass
class TransformResult:
    """Augmented schema plus the infrastructure needed to serve it.

    Attributes:
        schema: Printed output SDL, transformer directives removed.
        stacks: Stack name -> CloudFormation template. Empty when nothing is annotated.
        bindings: Registered resolver bindings.
    """

    schema: str
    stacks: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    bindings: BindingRegistry = field(default_factory=BindingRegistry)
    stack: Optional[CountResolverStack] = None

    def build_schema(self) -> GraphQLSchema:
        return build_output_schema(self.schema)


class CountTransformer:
    """Turn a ``@count``-annotated schema into an augmented schema and resolver stack.

    Example:
        result = CountTransformer().transform('''
            type Foo @model @count { id: ID! name: String }
        ''')
        result.schema         # contains countFoo(filter: ModelFooFilterInput): Int
        result.stacks['countResolverStack']

    Validation runs to completion before the schema or stack is touched, so a
    failing run produces no partial output.
    """

    def __init__(self, config: Optional[TransformConfig] = None):
        self.config = config or TransformConfig()
        self.processor = DirectiveProcessor()

    def transform(self, schema: Union[str, DocumentNode]) -> TransformResult:
        document = parse(schema, no_location=True) if isinstance(schema, str) else schema
        self.processor.reset()
        annotations = self.processor.visit(document)

        output = OutputSchema(document)
        registry = BindingRegistry()
        synthesizer = SchemaSynthesizer(output, self.config, registry)
        synthesizer.synthesize(annotations)

        result = TransformResult(schema=output.print(), bindings=registry)
        if len(registry):
            stack = CountResolverStack(self.config).build(registry)
            result.stack = stack
            result.stacks[stack.name] = stack.to_template()
        else:
            logger.info("No @count annotations found; no resolver stack generated")
        return result
