"""
实体数据模型定义

四种实体（Topic / Category / Event / Note）以 JSON 文档形式存储，
这里只定义在协调器和引用服务之间流转的值类型：
- EntityKind: 实体种类及其展示名、批量查询参数名
- ReferenceType / NoteReference: 笔记的多态引用 (kind, id)，不校验目标是否存在
- Subcategory: 嵌入在 Category 中的子分类，只能通过父分类修改
- TimelineEntry: 嵌入在 Event.timeline.events 中的时间线条目
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from domains.doc_core.base.store import generate_id


class EntityKind(str, Enum):
    """
    批量接口处理的实体种类

    值即集合名，也是批量请求体和响应中的键。
    """
    TOPICS = "topics"
    CATEGORIES = "categories"
    EVENTS = "events"
    NOTES = "notes"

    @property
    def label(self) -> str:
        """单数展示名，用于错误信息，如 "Topic" """
        return _LABELS[self]

    @property
    def ids_param(self) -> str:
        """批量读取/删除时的 ID 参数名，如 "topicIds" """
        return _IDS_PARAMS[self]

    @classmethod
    def parse(cls, value: str) -> "EntityKind | None":
        """解析种类名（忽略大小写和空白），未知返回 None"""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_LABELS = {
    EntityKind.TOPICS: "Topic",
    EntityKind.CATEGORIES: "Category",
    EntityKind.EVENTS: "Event",
    EntityKind.NOTES: "Note",
}

_IDS_PARAMS = {
    EntityKind.TOPICS: "topicIds",
    EntityKind.CATEGORIES: "categoryIds",
    EntityKind.EVENTS: "eventIds",
    EntityKind.NOTES: "noteIds",
}


class ReferenceType(str, Enum):
    """笔记可以引用的实体类型"""
    ARTICLE = "article"
    TOPIC = "topic"
    CATEGORY = "category"
    EVENT = "event"


@dataclass(frozen=True)
class NoteReference:
    """
    笔记的多态引用

    (reference_type, reference_id) 指向任一种实体中的一个文档。
    写入时不检查目标是否存在，允许悬空引用。
    """
    reference_type: ReferenceType
    reference_id: str

    def to_match(self) -> dict[str, Any]:
        """转换为文档包含匹配条件"""
        return {
            "reference_type": self.reference_type.value,
            "reference_id": self.reference_id,
        }


@dataclass
class Subcategory:
    """
    子分类（嵌入在 Category.subcategories 中）

    ID 只在父分类内唯一。
    """
    id: str = field(default_factory=generate_id)
    name: str = ""
    description: str | None = None
    keywords: list[str] = field(default_factory=list)
    topics_ids: list[str] = field(default_factory=list)
    unread_count: int = 0
    priority: int = 0

    def to_dict(self) -> dict[str, Any]:
        """转换为字典，省略未设置的描述"""
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "keywords": list(self.keywords),
            "topics_ids": list(self.topics_ids),
            "unread_count": self.unread_count,
            "priority": self.priority,
        }
        if self.description is None:
            del data["description"]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Subcategory":
        """从字典创建"""
        valid_fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if not valid_fields.get("id"):
            valid_fields.pop("id", None)
        return cls(**valid_fields)


@dataclass
class TimelineEntry:
    """事件时间线条目"""
    date: str
    description: str
    articles_ids: list[str] = field(default_factory=list)
    event_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        data: dict[str, Any] = {
            "date": self.date,
            "description": self.description,
            "articles_ids": list(self.articles_ids),
        }
        if self.event_id:
            data["event_id"] = self.event_id
        return data
