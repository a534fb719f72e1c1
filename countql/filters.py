"""Filter boundary between the API gateway and the Count Executor.

Translating a structured ``filter`` argument into a store expression is the job
of an external compiler (``$util.transform.toDynamoDBFilterExpression`` on the
managed gateway). Only its output shape is defined here.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol, TypedDict

__all__ = ['DynamoFilter', 'FilterCompiler', 'is_blank_filter', 'prune_filter']


class DynamoFilter(TypedDict, total=False):
    expression: str
    expressionNames: Dict[str, str]
    expressionValues: Dict[str, Any]


class FilterCompiler(Protocol):
    def compile(self, filter_argument: Mapping[str, Any]) -> DynamoFilter:
        ...


def is_blank_filter(dynamo: Optional[Mapping[str, Any]]) -> bool:
    if not dynamo:
        return True
    expression = dynamo.get('expression')
    return expression is None or not str(expression).strip()


def prune_filter(dynamo: Optional[Mapping[str, Any]]) -> Optional[DynamoFilter]:
    """Drop a blank filter entirely and an empty ``expressionValues`` map."""
    if is_blank_filter(dynamo):
        return None
    out: DynamoFilter = dict(dynamo)  # type: ignore[assignment]
    if not out.get('expressionValues'):
        out.pop('expressionValues', None)
    return out
