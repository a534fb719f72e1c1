from __future__ import annotations

from .base import BaseStrategy


class RelationshipStrategy(BaseStrategy):
    """Bind through a to-many relationship; scans the related type's table."""

    name = 'relationship'
    directives = ('hasMany', 'connection')
    index_arguments = (('hasMany', 'indexName'), ('connection', 'keyName'))
