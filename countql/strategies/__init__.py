from __future__ import annotations

from .base import BaseStrategy
from .relationship import RelationshipStrategy
from .index import IndexStrategy


def get_strategy(name: str) -> BaseStrategy:
    n = (getattr(name, 'value', name) or '').lower()
    if n == 'index':
        return IndexStrategy()
    if n == 'relationship':
        return RelationshipStrategy()
    raise ValueError(f"Unknown binding strategy: {name!r}")


__all__ = [
    'BaseStrategy',
    'RelationshipStrategy',
    'IndexStrategy',
    'get_strategy',
]
