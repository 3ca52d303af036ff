"""Pydantic schemas for API requests and responses."""

from app.schemas.article import ArticlePage, ArticleSearchResult, PagePagination
from app.schemas.common import DocumentList, ErrorDetail, ErrorResponse, HealthResponse, Pagination
from app.schemas.entity import ReferenceChange, TagsChange

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "Pagination",
    "HealthResponse",
    "DocumentList",
    "ArticlePage",
    "ArticleSearchResult",
    "PagePagination",
    "ReferenceChange",
    "TagsChange",
]
