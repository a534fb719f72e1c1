"""Naming rules for generated schema elements.

All generated names are derived deterministically from type and field names
so that repeated transform runs address the same schema elements.
"""
from __future__ import annotations

import re
from typing import Iterable

__all__ = [
    'to_camel_case',
    'to_pascal_case',
    'count_query_name',
    'filter_input_name',
    'shadow_field_name',
    'logical_id',
]

_non_alnum = re.compile(r'[^0-9A-Za-z]')


def _upper_first(word: str) -> str:
    return word[:1].upper() + word[1:]


def _lower_first(word: str) -> str:
    return word[:1].lower() + word[1:]


def to_camel_case(words: Iterable[str]) -> str:
    """Join words into lowerCamelCase, keeping the inner casing of each word.

    ``to_camel_case(['count', 'BlogPost']) == 'countBlogPost'``
    """
    parts = [w for w in words if w]
    if not parts:
        return ''
    return _lower_first(parts[0]) + ''.join(_upper_first(p) for p in parts[1:])


def to_pascal_case(words: Iterable[str]) -> str:
    """Join words into UpperCamelCase, keeping the inner casing of each word."""
    return ''.join(_upper_first(w) for w in words if w)


def count_query_name(type_name: str) -> str:
    return to_camel_case(['count', type_name])


def filter_input_name(name: str) -> str:
    """``Model<Name>FilterInput`` for a model type or a shadow counter field."""
    return to_pascal_case(['Model', name, 'FilterInput'])


def shadow_field_name(owner_type: str, field_name: str) -> str:
    """Counter field name synthesized when ``@count`` has no explicit ``fields``.

    The trailing ``Id`` mirrors the foreign-key naming of to-many relationships
    (``Blog.posts`` -> ``blogPostsId``) even though the field holds a count.
    """
    return to_camel_case([owner_type, field_name, 'Id'])


def logical_id(*parts: str) -> str:
    """CloudFormation logical ID: alphanumeric PascalCase of ``parts``."""
    return to_pascal_case(_non_alnum.sub('', p) for p in parts)
