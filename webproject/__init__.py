"""Assemble a single HTML page from a script and the files it references."""

from .builder import PageBuilder, Resource
from .filters import CSSFilter, JSFilter
from .materialize import BuildMode
from .paths import Category, SearchPaths

__all__ = [
    "BuildMode",
    "CSSFilter",
    "Category",
    "JSFilter",
    "PageBuilder",
    "Resource",
    "SearchPaths",
]
