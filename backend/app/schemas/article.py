"""Article API schemas."""

from typing import List

from pydantic import BaseModel

from app.schemas.common import Document, Pagination


class PagePagination(Pagination):
    """分页信息（含总数）"""

    total: int
    hasMore: bool


class ArticlePage(BaseModel):
    """文章分页列表"""

    articles: List[Document]
    pagination: PagePagination


class ArticleSearchResult(BaseModel):
    """文章搜索结果"""

    articles: List[Document]
    query: str
    count: int
    pagination: Pagination
