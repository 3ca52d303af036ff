"""
文章服务层

提供文章的业务逻辑封装:
- 单篇 CRUD（不存在 404，校验失败 400，ID 重复 409）
- 过滤/排序/分页列表
- 关键字搜索
- 按话题、分类、事件反查
- 优先级和未读列表
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from domains.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    StoreOperationError,
    ValidationError,
)
from domains.doc_core.base.store import Document, generate_id, utc_now

from ..core.store import ArticleStore
from ..core.validators import validate_article

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_PRIORITY_LIMIT = 10

_DATETIME = TypeAdapter(datetime)
_DATE = TypeAdapter(date)

# 反查参数名，与响应中回显的键一致
_REFERENCE_KEYS = {
    "topic": "topicId",
    "category": "categoryId",
    "event": "eventId",
}


def _date_bound(value: str, name: str) -> str:
    """把查询参数中的日期规范化为存储使用的 ISO-8601 文本，纯日期按 UTC 零点处理"""
    try:
        parsed = _DATETIME.validate_python(value)
    except PydanticValidationError:
        try:
            parsed = datetime.combine(_DATE.validate_python(value), time.min)
        except PydanticValidationError:
            raise BadRequestError(f'"{name}" must be a valid date') from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return _DATETIME.dump_python(parsed.astimezone(timezone.utc), mode="json")


class ArticleService:
    """
    文章服务层

    封装文章相关的业务逻辑，代理存储层操作。
    """

    def __init__(self, store: ArticleStore):
        self.store = store

    # ==================== CRUD ====================

    def get_article(self, article_id: str) -> Document:
        """获取文章详情，不存在抛出 NotFoundError"""
        article = self.store.find_by_id(article_id)
        if article is None:
            raise NotFoundError("Article", article_id)
        return article

    def create_article(self, data: Any) -> Document:
        """
        创建文章

        默认值: published_date=当前时间, unread_count=1, priority=0

        Raises:
            ValidationError: 数据不合法
            ConflictError: ID 已存在
        """
        result = validate_article(data, is_update=False)
        if result.error is not None:
            raise ValidationError("Invalid article data", errors=result.error.details)

        article = dict(result.value)
        article["id"] = article.get("id") or generate_id()
        article["published_date"] = article.get("published_date") or utc_now()
        article["unread_count"] = article.get("unread_count") or 1
        article["priority"] = article.get("priority") or 0

        if self.store.find_by_id(article["id"]) is not None:
            raise ConflictError("Article", "ID", article["id"])

        created = self.store.create(article)
        if created is None:
            raise ConflictError("Article", "ID", article["id"])

        logger.info(f"article_created: {article['id']}")
        return created

    def update_article(self, article_id: str, data: Any) -> Document:
        """部分更新文章，返回更新后的文档"""
        self.get_article(article_id)

        result = validate_article(data, is_update=True)
        if result.error is not None:
            raise ValidationError("Invalid article data", errors=result.error.details)

        if not self.store.update(article_id, result.value):
            raise StoreOperationError("Failed to update article")

        logger.info(f"article_updated: {article_id}, fields={sorted(result.value)}")
        return self.get_article(article_id)

    def delete_article(self, article_id: str) -> None:
        """删除文章"""
        self.get_article(article_id)
        if not self.store.delete(article_id):
            raise StoreOperationError("Failed to delete article")
        logger.info(f"article_deleted: {article_id}")

    # ==================== 列表/查询 ====================

    def list_articles(
        self,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
        sort: Optional[str] = None,
        order: Optional[str] = None,
        publisher: Optional[str] = None,
        author: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        过滤、排序、分页列出文章

        Args:
            sort: 排序字段，默认 published_date
            order: "asc" 为升序，其余为降序
            publisher / author: 精确匹配
            from_date / to_date: 发布时间闭区间
        """
        limit = limit or DEFAULT_LIMIT
        skip = skip or 0
        direction = "ASC" if order == "asc" else "DESC"

        match: Document = {}
        if publisher:
            match["publisher"] = publisher
        if author:
            match["author"] = author

        bounds = []
        if from_date:
            bounds.append(">=" + _date_bound(from_date, "fromDate"))
        if to_date:
            bounds.append("<=" + _date_bound(to_date, "toDate"))
        conditions = {"published_date": bounds} if bounds else {}

        articles, total = self.store.query(
            match=match,
            conditions=conditions,
            order_by=f"{sort or 'published_date'} {direction}",
            limit=limit,
            skip=skip,
        )
        return {
            "articles": articles,
            "pagination": {
                "total": total,
                "limit": limit,
                "skip": skip,
                "hasMore": skip + limit < total,
            },
        }

    def search_articles(
        self,
        q: Optional[str],
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> dict[str, Any]:
        """按标题、摘要、关键字搜索"""
        if q is None or not q.strip():
            raise BadRequestError("Search query is required")

        limit = limit or DEFAULT_LIMIT
        skip = skip or 0
        articles = self.store.search(q, limit, skip)
        return {
            "articles": articles,
            "query": q,
            "count": len(articles),
            "pagination": {"limit": limit, "skip": skip},
        }

    def articles_for(
        self,
        reference: str,
        ref_id: str,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        反查引用了指定话题/分类/事件的文章

        Args:
            reference: "topic" / "category" / "event"
            ref_id: 被引用实体的 ID
        """
        limit = limit or DEFAULT_LIMIT
        skip = skip or 0
        articles = self.store.find_by_reference(reference, ref_id, limit, skip)
        return {
            "articles": articles,
            _REFERENCE_KEYS[reference]: ref_id,
            "count": len(articles),
            "pagination": {"limit": limit, "skip": skip},
        }

    def priority_articles(self, limit: Optional[int] = None) -> dict[str, Any]:
        articles = self.store.get_priority_articles(limit or DEFAULT_PRIORITY_LIMIT)
        return {"articles": articles, "count": len(articles)}

    def unread_articles(self, limit: Optional[int] = None) -> dict[str, Any]:
        articles = self.store.get_unread_articles(limit or DEFAULT_LIMIT)
        return {"articles": articles, "count": len(articles)}
