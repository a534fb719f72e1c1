"""Error taxonomy for CountQL.

Schema validation errors derive from :class:`CountTransformError` and abort the
whole transform run. Runtime errors raised by the Count Executor derive from
:class:`CountExecutionError`.
"""
from __future__ import annotations

from typing import Optional

__all__ = [
    'CountTransformError',
    'MissingModelAnnotation',
    'MissingRelationshipAnnotation',
    'NotAListType',
    'UnknownField',
    'UnresolvableRelatedType',
    'UnsupportedCountType',
    'CountExecutionError',
    'FilterEncodingError',
    'ScanLimitExceeded',
    'InvalidInvocation',
    'ResolverError',
]


class CountTransformError(ValueError):
    """Raised when an annotated schema fails validation."""

    def __init__(self, message: str, *, type_name: Optional[str] = None, field_name: Optional[str] = None):
        super().__init__(message)
        self.type_name = type_name
        self.field_name = field_name


class MissingModelAnnotation(CountTransformError):
    def __init__(self, type_name: str, referenced_by: Optional[str] = None):
        if referenced_by:
            message = (
                f"Type '{type_name}' is counted by @count on '{referenced_by}' but is missing @model; "
                "only @model types have a backing table to scan."
            )
        else:
            message = (
                f"Type '{type_name}' is annotated with @count but is missing @model. "
                "Any type annotated with @count must also be annotated with @model, "
                "as it re-uses the table and filter types of that directive."
            )
        super().__init__(message, type_name=type_name)


class MissingRelationshipAnnotation(CountTransformError):
    def __init__(self, type_name: str, field_name: str, required: str = '@hasMany or @index'):
        super().__init__(
            f"Field '{type_name}.{field_name}' is annotated with @count but has no {required} directive.",
            type_name=type_name,
            field_name=field_name,
        )


class NotAListType(CountTransformError):
    def __init__(self, type_name: str, field_name: str):
        super().__init__(
            f"Field '{type_name}.{field_name}' is annotated with @count but is not a list type.",
            type_name=type_name,
            field_name=field_name,
        )


class UnknownField(CountTransformError):
    def __init__(self, type_name: str, field_name: str, name: Optional[str], reason: Optional[str] = None):
        if name is None:
            message = f"@count on '{type_name}.{field_name}' was given an empty 'fields' list."
        else:
            message = f"@count on '{type_name}.{field_name}' references unknown field '{name}' on type '{type_name}'."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message, type_name=type_name, field_name=field_name)
        self.name = name


class UnresolvableRelatedType(CountTransformError):
    def __init__(self, type_name: str, field_name: str, related: str):
        super().__init__(
            f"Field '{type_name}.{field_name}' is annotated with @count but its type '{related}' "
            "is not an object type defined in the schema.",
            type_name=type_name,
            field_name=field_name,
        )
        self.related = related


class UnsupportedCountType(CountTransformError):
    def __init__(self, type_name: str, field_name: str, count_type: str):
        super().__init__(
            f"@count(type: {count_type}) on '{type_name}.{field_name}' is not supported; only 'scan' is implemented.",
            type_name=type_name,
            field_name=field_name,
        )


class CountExecutionError(RuntimeError):
    """Base class for errors raised while answering a count query."""


class FilterEncodingError(CountExecutionError):
    """Raised when filter expression values contain a leaf that cannot be stringified."""

    def __init__(self, path: str, value: object):
        super().__init__(
            f"Cannot encode filter value at '{path}': unsupported {type(value).__name__} leaf {value!r}"
        )
        self.path = path


class ScanLimitExceeded(CountExecutionError):
    """Raised when a scan exceeds the configured page or wall-clock ceiling."""

    def __init__(self, table_name: str, pages: int, count: int, reason: str):
        super().__init__(
            f"Count scan of table '{table_name}' aborted after {pages} page(s) "
            f"({count} item(s) counted so far): {reason}"
        )
        self.table_name = table_name
        self.pages = pages
        self.count = count


class InvalidInvocation(CountExecutionError):
    """Raised when the executor receives a malformed invocation payload."""


class ResolverError(Exception):
    """Error propagated verbatim from the upstream resolver context."""

    def __init__(self, message: str, error_type: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
