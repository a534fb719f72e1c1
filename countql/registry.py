from __future__ import annotations

import logging
from dataclasses import dataclass, fields as dc_fields
from typing import Dict, Iterator, Optional, Tuple

from .core.annotations import TableReference
from .templates import RequestTransform, ResponseTransform

__all__ = ['ResolverBinding', 'BindingRegistry']

logger = logging.getLogger(__name__)

Identity = Tuple[str, str]


@dataclass
class ResolverBinding:
    """Wiring between one generated field and the shared count executor.

    Identity is ``(type_name, field_name)``.
    """

    type_name: str
    field_name: str
    table: TableReference
    executor: str
    index_name: Optional[str] = None
    request: Optional[RequestTransform] = None
    response: Optional[ResponseTransform] = None

    @property
    def identity(self) -> Identity:
        return (self.type_name, self.field_name)

    def merge(self, other: 'ResolverBinding') -> None:
        """Fill attributes left unset here with the values of ``other``."""
        for f in dc_fields(self):
            if getattr(self, f.name) is None and getattr(other, f.name) is not None:
                setattr(self, f.name, getattr(other, f.name))


class BindingRegistry:
    """Resolver bindings keyed by identity; registration is an idempotent upsert."""

    def __init__(self):
        self._bindings: Dict[Identity, ResolverBinding] = {}

    def register(self, binding: ResolverBinding) -> ResolverBinding:
        existing = self._bindings.get(binding.identity)
        if existing is None:
            self._bindings[binding.identity] = binding
            logger.debug("Registered count resolver for %s.%s", *binding.identity)
            return binding
        existing.merge(binding)
        logger.debug("Merged repeated registration for %s.%s", *binding.identity)
        return existing

    def get(self, type_name: str, field_name: str) -> Optional[ResolverBinding]:
        return self._bindings.get((type_name, field_name))

    def __iter__(self) -> Iterator[ResolverBinding]:
        return iter(list(self._bindings.values()))

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, identity: object) -> bool:
        return identity in self._bindings
