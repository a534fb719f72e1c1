from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from graphql import FieldDefinitionNode, ObjectTypeDefinitionNode

from .directives import CountType

__all__ = [
    'API_ID_PARAMETER',
    'ENV_PARAMETER',
    'TableReference',
    'ObjectAnnotation',
    'FieldAnnotation',
    'Annotation',
    'CountFieldConfig',
]

API_ID_PARAMETER = 'GraphQLAPIIdOutput'
ENV_PARAMETER = 'env'


@dataclass(frozen=True)
class TableReference:
    """Backing table of a ``@model`` type.

    The deployed table name is only known at deploy time
    (``<Type>-<apiId>-<env>``), so names and ARNs render as ``Fn::Sub``
    intrinsics over the stack parameters.
    """

    type_name: str

    @property
    def name_template(self) -> str:
        return f"{self.type_name}-${{{API_ID_PARAMETER}}}-${{{ENV_PARAMETER}}}"

    def name(self) -> Dict[str, Any]:
        return {'Fn::Sub': self.name_template}

    def arn(self, index_name: Optional[str] = None) -> Dict[str, Any]:
        arn = (
            "arn:${AWS::Partition}:dynamodb:${AWS::Region}:${AWS::AccountId}:table/"
            + self.name_template
        )
        if index_name:
            arn += f"/index/{index_name}"
        return {'Fn::Sub': arn}

    def resolve(self, api_id: str, env: str) -> str:
        """Concrete table name for a known deployment (local runs, tests)."""
        return f"{self.type_name}-{api_id}-{env}"


@dataclass(frozen=True)
class ObjectAnnotation:
    """``@count`` on an object type: adds ``count<Type>`` to the query root."""

    definition: ObjectTypeDefinitionNode
    kind: str = 'object'

    @property
    def type_name(self) -> str:
        return self.definition.name.value


@dataclass(frozen=True)
class FieldAnnotation:
    """``@count`` on a list-valued field of a model type."""

    owner: ObjectTypeDefinitionNode
    field: FieldDefinitionNode
    count_type: CountType = CountType.scan
    explicit_fields: Optional[Tuple[str, ...]] = None
    kind: str = 'field'

    @property
    def type_name(self) -> str:
        return self.owner.name.value

    @property
    def field_name(self) -> str:
        return self.field.name.value


Annotation = Union[ObjectAnnotation, FieldAnnotation]


@dataclass(frozen=True)
class CountFieldConfig:
    """Resolved configuration for one field-level ``@count`` occurrence.

    Attributes:
        owner_type: Type declaring the annotated list field.
        field_name: The annotated list field.
        related_type: Base type of the list; its table is scanned.
        table: Backing table of ``related_type``.
        counter_fields: Explicit names, or the single shadow counter name.
        synthesized: True when ``counter_fields`` holds the shadow name and the
            field is added to ``related_type``.
        filter_input_name: Filter input accepted by the synthesized counter field.
        index_name: Index scanned instead of the base table, if any.
    """

    owner_type: str
    field_name: str
    related_type: str
    table: TableReference
    counter_fields: Tuple[str, ...]
    synthesized: bool
    filter_input_name: Optional[str] = None
    index_name: Optional[str] = None
    count_type: CountType = CountType.scan

    @property
    def binding_type(self) -> str:
        """Type hosting the counter field(s)."""
        return self.related_type if self.synthesized else self.owner_type
