"""
文章校验器

创建时 title、url 必填；url 和 image_urls 必须是合法 URI。
"""

from datetime import datetime
from typing import Any, Optional

from domains.doc_core.validation import (
    DocumentPayload,
    DocumentValidator,
    IdList,
    Priority,
    Text,
    Trimmed,
    TrimmedOrEmpty,
    UnreadCount,
    Uri,
)


class ArticleUpdate(DocumentPayload):
    id: Optional[Trimmed] = None
    title: Optional[Trimmed] = None
    publisher: Optional[TrimmedOrEmpty] = None
    author: Optional[TrimmedOrEmpty] = None
    published_date: Optional[datetime] = None
    url: Optional[Uri] = None
    summary: Optional[Text] = None
    image_urls: Optional[list[Uri]] = None
    keywords: Optional[IdList] = None
    topics_ids: Optional[IdList] = None
    categories_ids: Optional[IdList] = None
    related_topics_ids: Optional[IdList] = None
    events_ids: Optional[IdList] = None
    topics_scores: Optional[dict[str, Any]] = None
    events_scores: Optional[dict[str, Any]] = None
    original_article: Optional[dict[str, Any]] = None
    unread_count: Optional[UnreadCount] = None
    priority: Optional[Priority] = None


class ArticleCreate(ArticleUpdate):
    title: Trimmed
    url: Uri


validate_article = DocumentValidator(ArticleCreate, ArticleUpdate)
