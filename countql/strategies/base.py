from __future__ import annotations

from typing import Optional, Tuple

from graphql import FieldDefinitionNode

from ..core.directives import directive_arguments, find_directive


class BaseStrategy:
    """How a field-level ``@count`` locates the table it scans.

    Exactly one strategy is active per deployment; a field must carry one of
    the strategy's directives.
    """

    name = 'base'
    directives: Tuple[str, ...] = ()
    # Directive argument naming the index to scan, per directive.
    index_arguments: Tuple[Tuple[str, str], ...] = ()

    def supports(self, field: FieldDefinitionNode) -> bool:
        return any(find_directive(field, d) is not None for d in self.directives)

    def describe(self) -> str:
        return ' or '.join(f"@{d}" for d in self.directives)

    def index_name(self, field: FieldDefinitionNode) -> Optional[str]:
        for directive_name, argument in self.index_arguments:
            directive = find_directive(field, directive_name)
            if directive is None:
                continue
            value = directive_arguments(directive).get(argument)
            if value:
                return str(value)
        return None
