"""
服务层：文章业务逻辑
"""

from .article_service import ArticleService

__all__ = ["ArticleService"]
