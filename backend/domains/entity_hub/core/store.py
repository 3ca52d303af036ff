"""
实体存储层 - PostgreSQL JSONB 数据源

每种实体一张表，继承 JsonbDocumentStore，只声明：
- 搜索字段和默认排序
- 创建时的嵌套结构初始化（Category.subcategories、Event.timeline、Note 时间戳）
- 更新时的字段处理（Note.updated_at）
- 表达式索引
"""

import logging
from dataclasses import dataclass
from typing import Iterator

from domains.doc_core.base.store import (
    Document,
    DocumentDatabase,
    DocumentStore,
    JsonbDocumentStore,
    utc_now,
)

from .models import EntityKind, generate_id

logger = logging.getLogger(__name__)


def _with_id(data: Document) -> Document:
    """缺少 ID 时生成"""
    if not data.get("id"):
        data["id"] = generate_id()
    return data


class TopicStore(JsonbDocumentStore):
    """话题存储：按 priority 降序、name 升序排列"""

    table_name = "topics"
    allowed_fields = {
        "id", "name", "description", "keywords", "image_urls",
        "articles_ids", "categories_ids", "related_topics_ids", "timeline",
        "unread_count", "priority",
    }

    text_fields = ("name", "description")
    array_text_fields = ("keywords",)
    default_order = ("priority DESC", "name ASC")
    search_order = ("priority DESC",)

    indexes = {
        "name": "(doc->>'name')",
        "priority": "((doc->>'priority')::numeric)",
    }

    def prepare_create(self, data: Document) -> Document:
        return _with_id(data)


class CategoryStore(JsonbDocumentStore):
    """分类存储：子分类嵌入在文档中，名称同样参与搜索"""

    table_name = "categories"
    allowed_fields = {
        "id", "name", "description", "keywords", "image_urls",
        "topics_ids", "subcategories", "unread_count", "priority",
    }

    text_fields = ("name", "description")
    array_text_fields = ("keywords",)
    nested_text_fields = {"subcategories": "name"}
    default_order = ("name ASC",)

    indexes = {
        "name": "(doc->>'name')",
    }

    def prepare_create(self, data: Document) -> Document:
        data = _with_id(data)
        if not data.get("subcategories"):
            data["subcategories"] = []
        return data


class EventStore(JsonbDocumentStore):
    """事件存储：按日期降序排列"""

    table_name = "events"
    allowed_fields = {
        "id", "date", "description", "image_urls",
        "related_events_ids", "articles_ids", "timeline",
        "unread_count", "priority",
    }

    text_fields = ("description",)
    default_order = ("date DESC",)

    indexes = {
        "date": "(doc->>'date')",
    }

    def prepare_create(self, data: Document) -> Document:
        data = _with_id(data)
        if not data.get("timeline"):
            data["timeline"] = {"events": []}
        return data


class NoteStore(JsonbDocumentStore):
    """笔记存储：列表和搜索只包含未归档笔记，按创建时间降序"""

    table_name = "notes"
    allowed_fields = {
        "id", "content", "created_at", "updated_at",
        "reference_type", "reference_id", "tags", "metadata",
        "priority", "is_archived",
    }
    numeric_fields = {"priority"}

    text_fields = ("content",)
    default_order = ("created_at DESC",)
    base_filter = {"is_archived": False}

    indexes = {
        "reference": "(doc->>'reference_type'), (doc->>'reference_id')",
        "created_at": "(doc->>'created_at')",
    }

    def prepare_create(self, data: Document) -> Document:
        data = _with_id(data)
        now = utc_now()
        data["created_at"] = data.get("created_at") or now
        data["updated_at"] = data.get("updated_at") or now
        data["tags"] = data.get("tags") or []
        data["metadata"] = data.get("metadata") or {}
        data["is_archived"] = bool(data.get("is_archived", False))
        return data

    def prepare_update(self, fields: Document) -> Document:
        fields["updated_at"] = utc_now()
        return fields


@dataclass
class EntityStores:
    """四种实体的 store 集合，启动时创建一次"""
    topics: DocumentStore
    categories: DocumentStore
    events: DocumentStore
    notes: DocumentStore

    def for_kind(self, kind: EntityKind) -> DocumentStore:
        return getattr(self, kind.value)

    def __iter__(self) -> Iterator[tuple[EntityKind, DocumentStore]]:
        for kind in EntityKind:
            yield kind, self.for_kind(kind)


def create_entity_stores(database: DocumentDatabase) -> EntityStores:
    """基于共享数据库句柄创建全部实体 store"""
    return EntityStores(
        topics=TopicStore(database),
        categories=CategoryStore(database),
        events=EventStore(database),
        notes=NoteStore(database),
    )
