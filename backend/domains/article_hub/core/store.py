"""
文章存储层 - PostgreSQL JSONB 数据源

除通用 DocumentStore 接口外，提供文章列表需要的过滤/排序/计数查询，
以及按话题、分类、事件反查，优先级和未读列表。
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from domains.doc_core.base.store import Document, JsonbDocumentStore

logger = logging.getLogger(__name__)

# 按引用反查时使用的数组字段
REFERENCE_ARRAYS = {
    "topic": "topics_ids",
    "category": "categories_ids",
    "event": "events_ids",
}


class ArticleStore(JsonbDocumentStore):
    """文章存储：默认按发布时间降序"""

    table_name = "articles"
    allowed_fields = {
        "id", "title", "publisher", "author", "published_date", "url", "summary",
        "keywords", "topics_ids", "categories_ids", "related_topics_ids", "events_ids",
        "unread_count", "priority",
    }

    text_fields = ("title", "summary")
    array_text_fields = ("keywords",)
    default_order = ("published_date DESC",)

    indexes = {
        "title": "(doc->>'title')",
        "published_date": "(doc->>'published_date')",
    }

    def query(
        self,
        match: Optional[Document] = None,
        conditions: Optional[Dict[str, Any]] = None,
        order_by: str = "published_date DESC",
        limit: int = 20,
        skip: int = 0,
    ) -> Tuple[List[Document], int]:
        """
        过滤、排序、分页查询

        Args:
            match: JSON 包含匹配条件（精确相等）
            conditions: 字段 -> 条件值（格式见 QueryBuilder.where），如 {"published_date": [">=...", "<=..."]}
            order_by: 排序表达式
            limit: 返回数量
            skip: 跳过数量

        Returns:
            (文档列表, 满足条件的总数)
        """
        builder = self._create_query_builder().where_contains(match or {})
        for field_name, value in (conditions or {}).items():
            builder.where(field_name, value)

        count_sql, count_params = builder.build_count()
        items = self._fetch(builder, [order_by], limit, skip)

        with self.database.cursor() as cursor:
            cursor.execute(count_sql, count_params)
            total = cursor.fetchone()['count']

        return items, total

    def find_by_reference(self, reference: str, ref_id: str, limit: int = 20, skip: int = 0) -> List[Document]:
        """按话题/分类/事件 ID 反查文章，发布时间降序"""
        field_name = REFERENCE_ARRAYS[reference]
        return self.find({field_name: [ref_id]}, limit, skip, order=["published_date DESC"])

    def get_priority_articles(self, limit: int = 10) -> List[Document]:
        """按优先级降序、发布时间降序"""
        return self.find({}, limit, 0, order=["priority DESC", "published_date DESC"])

    def get_unread_articles(self, limit: int = 20) -> List[Document]:
        """未读数大于 0 的文章，排序同优先级列表"""
        builder = self._create_query_builder().where("unread_count", ">0")
        return self._fetch(builder, ["priority DESC", "published_date DESC"], limit, 0)
