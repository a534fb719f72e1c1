"""Resolve a count field in-process, the way the API gateway would.

Chains request transform -> executor -> response transform for one binding.
Useful against DynamoDB Local and in tests; deployed APIs use the rendered
mapping templates instead.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from .executor.handler import error_payload
from .executor.scan import CountExecutor
from .filters import FilterCompiler
from .registry import ResolverBinding

__all__ = ['resolve_count']


def resolve_count(
    binding: ResolverBinding,
    context: Mapping[str, Any],
    executor: CountExecutor,
    table_name: str,
    compiler: Optional[FilterCompiler] = None,
) -> Any:
    """Answer ``binding`` for one request context.

    Raises:
        ResolverError: carrying the executor failure's message and type.
    """
    if binding.request is None or binding.response is None:
        raise ValueError(f"Binding {binding.type_name}.{binding.field_name} has no transforms attached")
    payload = binding.request.build_payload(context, table_name, compiler)
    upstream = dict(context)
    try:
        upstream['result'] = executor.count_event(payload)
    except Exception as e:
        upstream['error'] = error_payload(e)
    return binding.response.resolve(upstream)
