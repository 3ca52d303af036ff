"""
文章领域模块

文章是被整理的基本单元，通过 topics_ids / categories_ids / events_ids
引用话题、分类和事件。

核心功能：
- 单篇 CRUD
- 按发布者、作者、发布时间过滤的分页列表
- 标题/摘要/关键字搜索
- 按话题、分类、事件反查
- 优先级、未读列表
"""

from .core.store import ArticleStore
from .services.article_service import ArticleService

__all__ = [
    'ArticleStore',
    'ArticleService',
]
