"""Filter-input types accepted by the generated count fields.

Each type is created on first reference only: when a type of the same name is
already present in the output schema (for instance emitted by the model
transformer) it is left untouched.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from graphql import EnumTypeDefinitionNode, ObjectTypeDefinitionNode, parse

from .core.directives import unwrap_type
from .core.naming import to_pascal_case
from .schema import OutputSchema

__all__ = ['FilterInputBuilder', 'SCALAR_FILTER_INPUTS']

logger = logging.getLogger(__name__)

_COMPARISONS = ('ne', 'eq', 'le', 'lt', 'ge', 'gt')

# Base scalar -> (filter input name, comparison scalar, string operators)
SCALAR_FILTER_INPUTS = {
    'String': ('ModelStringInput', 'String', True),
    'ID': ('ModelIDInput', 'ID', True),
    'Int': ('ModelIntInput', 'Int', False),
    'Float': ('ModelFloatInput', 'Float', False),
    'Boolean': ('ModelBooleanInput', 'Boolean', False),
    'AWSDate': ('ModelStringInput', 'String', True),
    'AWSTime': ('ModelStringInput', 'String', True),
    'AWSDateTime': ('ModelStringInput', 'String', True),
    'AWSEmail': ('ModelStringInput', 'String', True),
    'AWSJSON': ('ModelStringInput', 'String', True),
    'AWSURL': ('ModelStringInput', 'String', True),
    'AWSPhone': ('ModelStringInput', 'String', True),
    'AWSIPAddress': ('ModelStringInput', 'String', True),
    'AWSTimestamp': ('ModelIntInput', 'Int', False),
}

_ATTRIBUTE_TYPES_SDL = """
enum ModelAttributeTypes {
  binary
  binarySet
  bool
  list
  map
  number
  numberSet
  string
  stringSet
  _null
}
"""

_SIZE_INPUT_SDL = """
input ModelSizeInput {
  ne: Int
  eq: Int
  le: Int
  lt: Int
  ge: Int
  gt: Int
  between: [Int]
}
"""


def _scalar_input_sdl(name: str, scalar: str, string_ops: bool) -> str:
    lines = [f"  {op}: {scalar}" for op in _COMPARISONS]
    if scalar == 'Boolean':
        lines = [f"  ne: {scalar}", f"  eq: {scalar}"]
    if string_ops:
        lines += [
            f"  contains: {scalar}",
            f"  notContains: {scalar}",
            f"  between: [{scalar}]",
            f"  beginsWith: {scalar}",
        ]
    elif scalar != 'Boolean':
        lines.append(f"  between: [{scalar}]")
    lines += ["  attributeExists: Boolean", "  attributeType: ModelAttributeTypes"]
    if string_ops:
        lines.append("  size: ModelSizeInput")
    body = '\n'.join(lines)
    return f"input {name} {{\n{body}\n}}"


class FilterInputBuilder:
    """Create ``Model*FilterInput`` types (and their supporting inputs) on demand."""

    def __init__(self, output: OutputSchema):
        self.output = output

    def _add_sdl(self, name: str, sdl: str) -> bool:
        if self.output.has_type(name):
            return False
        definition = parse(sdl, no_location=True).definitions[0]
        self.output.add_type(definition)
        logger.debug("Added filter input type %s", name)
        return True

    def ensure_support_types(self, scalar_input: str) -> None:
        self._add_sdl('ModelAttributeTypes', _ATTRIBUTE_TYPES_SDL)
        if scalar_input in ('ModelStringInput', 'ModelIDInput'):
            self._add_sdl('ModelSizeInput', _SIZE_INPUT_SDL)

    def scalar_input(self, base_type: str) -> Optional[str]:
        """Name of the filter input for a scalar or enum base type, creating it if needed."""
        if base_type in SCALAR_FILTER_INPUTS:
            name, scalar, string_ops = SCALAR_FILTER_INPUTS[base_type]
            self.ensure_support_types(name)
            self._add_sdl(name, _scalar_input_sdl(name, scalar, string_ops))
            return name
        definition = self.output.get_type(base_type)
        if isinstance(definition, EnumTypeDefinitionNode):
            name = to_pascal_case(['Model', base_type, 'Input'])
            self._add_sdl(name, f"input {name} {{\n  eq: {base_type}\n  ne: {base_type}\n}}")
            return name
        return None

    def ensure_filter_input(self, name: str, source: ObjectTypeDefinitionNode) -> str:
        """Create ``name`` describing the scalar and enum fields of ``source``.

        Returns:
            ``name``, whether it was created now or already existed.
        """
        if self.output.has_type(name):
            return name
        lines: List[str] = []
        for field in source.fields or ():
            input_name = self.scalar_input(unwrap_type(field.type))
            if input_name is not None:
                lines.append(f"  {field.name.value}: {input_name}")
        lines += [f"  and: [{name}]", f"  or: [{name}]", f"  not: {name}"]
        body = '\n'.join(lines)
        self._add_sdl(name, f"input {name} {{\n{body}\n}}")
        logger.info("Generated filter input %s from type %s", name, source.name.value)
        return name
