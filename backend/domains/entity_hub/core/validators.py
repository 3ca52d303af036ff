"""
实体校验器

每种实体一对模型：创建模型（必填字段）和更新模型（全部可选）。
校验器签名统一为 ``validate(data, is_update) -> ValidationResult``，无副作用。

规则:
- Topic: 创建时 name 必填
- Category: 创建时 name 必填；subcategories 中每项 id、name 必填
- Event: 创建时 date、description 必填；timeline 条目 date、description 必填，
  timeline 既可以是条目列表，也可以是 ``{"events": [...]}``，统一输出为后者
- Note: 创建时 content、reference_type、reference_id 必填，
  reference_type 只能是 article / topic / category / event
- priority 范围 [0, 10]，unread_count >= 0
"""

from datetime import datetime
from typing import Annotated, Any, Optional

from pydantic import field_validator, model_validator
from pydantic_core import PydanticCustomError

from domains.doc_core.validation import (
    DocumentPayload,
    DocumentValidator,
    IdList,
    NonEmpty,
    Priority,
    Text,
    Trimmed,
    UnreadCount,
    Uri,
    one_of,
    validate_document,
    ValidationResult,
)

from .models import ReferenceType

ReferenceTypeName = Annotated[str, one_of(*(t.value for t in ReferenceType))]


# ==================== Topic ====================

class TopicUpdate(DocumentPayload):
    id: Optional[Trimmed] = None
    name: Optional[Trimmed] = None
    description: Optional[Text] = None
    image_urls: Optional[list[Uri]] = None
    keywords: Optional[IdList] = None
    articles_ids: Optional[IdList] = None
    categories_ids: Optional[IdList] = None
    related_topics_ids: Optional[IdList] = None
    timeline: Optional[dict[str, Any]] = None
    unread_count: Optional[UnreadCount] = None
    priority: Optional[Priority] = None


class TopicCreate(TopicUpdate):
    name: Trimmed


# ==================== Category ====================

class SubcategoryPatch(DocumentPayload):
    """子分类的部分更新（不允许修改 ID）"""
    name: Optional[Trimmed] = None
    description: Optional[Text] = None
    keywords: Optional[IdList] = None
    topics_ids: Optional[IdList] = None
    unread_count: Optional[UnreadCount] = None
    priority: Optional[Priority] = None


class SubcategoryDraft(SubcategoryPatch):
    """新增子分类，ID 可由服务端生成"""
    id: Optional[Trimmed] = None
    name: Trimmed


class SubcategoryPayload(SubcategoryDraft):
    """随 Category 一起提交的子分类，ID 必填"""
    id: Trimmed


class CategoryUpdate(DocumentPayload):
    id: Optional[Trimmed] = None
    name: Optional[Trimmed] = None
    description: Optional[Text] = None
    image_urls: Optional[list[Uri]] = None
    keywords: Optional[IdList] = None
    topics_ids: Optional[IdList] = None
    subcategories: Optional[list[SubcategoryPayload]] = None
    unread_count: Optional[UnreadCount] = None
    priority: Optional[Priority] = None

    @field_validator("subcategories")
    @classmethod
    def _unique_subcategory_ids(cls, value: Optional[list[SubcategoryPayload]]) -> Any:
        # 子分类 ID 在父分类内唯一
        seen: set[str] = set()
        for sub in value or []:
            if sub.id in seen:
                raise PydanticCustomError(
                    "array_unique", "contains a duplicate id \"{id}\"", {"id": sub.id}
                )
            seen.add(sub.id)
        return value


class CategoryCreate(CategoryUpdate):
    name: Trimmed


# ==================== Event ====================

class TimelineItem(DocumentPayload):
    date: datetime
    description: NonEmpty
    articles_ids: Optional[IdList] = None
    event_id: Optional[Trimmed] = None


class EventTimeline(DocumentPayload):
    events: list[TimelineItem] = []

    @model_validator(mode="before")
    @classmethod
    def _accept_list(cls, data: Any) -> Any:
        # 条目列表等价于 {"events": [...]}
        if isinstance(data, list):
            return {"events": data}
        if isinstance(data, dict) and "events" not in data:
            return {**data, "events": []}
        return data


class EventUpdate(DocumentPayload):
    id: Optional[Trimmed] = None
    date: Optional[datetime] = None
    description: Optional[NonEmpty] = None
    image_urls: Optional[list[Uri]] = None
    related_events_ids: Optional[IdList] = None
    articles_ids: Optional[IdList] = None
    timeline: Optional[EventTimeline] = None
    unread_count: Optional[UnreadCount] = None
    priority: Optional[Priority] = None


class EventCreate(EventUpdate):
    date: datetime
    description: NonEmpty


# ==================== Note ====================

class NoteUpdate(DocumentPayload):
    id: Optional[Trimmed] = None
    content: Optional[NonEmpty] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    reference_type: Optional[ReferenceTypeName] = None
    reference_id: Optional[Trimmed] = None
    tags: Optional[IdList] = None
    metadata: Optional[dict[str, Any]] = None
    priority: Optional[Priority] = None
    is_archived: Optional[bool] = None


class NoteCreate(NoteUpdate):
    content: NonEmpty
    reference_type: ReferenceTypeName
    reference_id: Trimmed


validate_topic = DocumentValidator(TopicCreate, TopicUpdate)
validate_category = DocumentValidator(CategoryCreate, CategoryUpdate)
validate_event = DocumentValidator(EventCreate, EventUpdate)
validate_note = DocumentValidator(NoteCreate, NoteUpdate)
validate_subcategory = DocumentValidator(SubcategoryDraft, SubcategoryPatch)


def validate_timeline_entry(data: Any) -> ValidationResult:
    """校验单个事件时间线条目"""
    return validate_document(TimelineItem, data)


__all__ = [
    "validate_topic",
    "validate_category",
    "validate_event",
    "validate_note",
    "validate_subcategory",
    "validate_timeline_entry",
]
