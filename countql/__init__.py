"""CountQL public API and lightweight lazy exports.

The executor side (``countql.executor``) is deployed on its own and should not
pull in graphql-core, so nothing heavy is imported eagerly here.

Exposes:
- Lazy attributes: CountTransformer, TransformResult, TransformConfig, BindingStrategy
- Lazy attributes: CountExecutor, ExecutorSettings, BindingRegistry, ResolverBinding
- Errors: every class of countql.errors
"""
from __future__ import annotations

from .errors import (
    CountTransformError,
    MissingModelAnnotation,
    MissingRelationshipAnnotation,
    NotAListType,
    UnknownField,
    UnresolvableRelatedType,
    UnsupportedCountType,
    CountExecutionError,
    FilterEncodingError,
    ScanLimitExceeded,
    InvalidInvocation,
    ResolverError,
)

__version__ = '0.1.0'

_LAZY = {
    'CountTransformer': 'transform',
    'TransformResult': 'transform',
    'TransformConfig': 'config',
    'BindingStrategy': 'config',
    'ExecutorSettings': 'config',
    'CountExecutor': 'executor.scan',
    'BindingRegistry': 'registry',
    'ResolverBinding': 'registry',
    'CountType': 'core.directives',
}


def __getattr__(name: str):  # PEP 562 lazy exports
    import importlib as _importlib
    module = _LAZY.get(name)
    if module is None:
        raise AttributeError(name)
    return getattr(_importlib.import_module(f"{__name__}.{module}"), name)


__all__ = [
    'CountTransformer', 'TransformResult', 'TransformConfig', 'BindingStrategy',
    'ExecutorSettings', 'CountExecutor', 'BindingRegistry', 'ResolverBinding', 'CountType',
    'CountTransformError', 'MissingModelAnnotation', 'MissingRelationshipAnnotation',
    'NotAListType', 'UnknownField', 'UnresolvableRelatedType', 'UnsupportedCountType',
    'CountExecutionError', 'FilterEncodingError', 'ScanLimitExceeded', 'InvalidInvocation',
    'ResolverError',
]
