"""
核心层：文章校验器和存储
"""

from .store import REFERENCE_ARRAYS, ArticleStore
from .validators import validate_article

__all__ = [
    "ArticleStore",
    "REFERENCE_ARRAYS",
    "validate_article",
]
