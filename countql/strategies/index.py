from __future__ import annotations

from .base import BaseStrategy


class IndexStrategy(BaseStrategy):
    """Bind through an explicit ``@index`` on the list field; scans that index."""

    name = 'index'
    directives = ('index',)
    index_arguments = (('index', 'name'),)
