"""Article creation and lookup."""

from linkvote.catalog.catalog import ArticleCatalog
from linkvote.catalog.models import Article


__all__ = [
    "Article",
    "ArticleCatalog",
]
