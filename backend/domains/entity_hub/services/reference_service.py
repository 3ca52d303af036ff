"""
引用维护服务层

维护实体之间的 ID 引用数组以及笔记的附属状态:
- 引用数组的增删（集合语义：重复添加只保留一份，保持原有顺序）
- 事件时间线追加条目
- 笔记标签、归档状态
- 按多态引用 (reference_type, reference_id) 查找笔记

引用写入时不检查目标是否存在，删除实体也不会清理其他实体中的引用。
"""

import logging
from typing import Any, Iterable

from domains.core.exceptions import NotFoundError, StoreOperationError, ValidationError
from domains.doc_core.base.store import Document

from ..core.models import EntityKind, NoteReference, TimelineEntry
from ..core.store import EntityStores
from ..core.validators import validate_timeline_entry

logger = logging.getLogger(__name__)

# 各种类允许维护的引用字段，"timeline.events" 指向嵌套对象中的数组
REFERENCE_FIELDS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.TOPICS: ("articles_ids", "categories_ids", "related_topics_ids", "timeline.events"),
    EntityKind.CATEGORIES: ("topics_ids",),
    EntityKind.EVENTS: ("articles_ids", "related_events_ids"),
    EntityKind.NOTES: (),
}


def _clean_values(values: Any, name: str) -> list[str]:
    """校验并规范化字符串列表（去空白，丢弃空项）"""
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        message = f'"{name}" must be an array of strings'
        raise ValidationError(message, errors=[{"path": name, "message": message}])
    cleaned = [v.strip() for v in values if v.strip()]
    if not cleaned:
        message = f'"{name}" must contain at least 1 items'
        raise ValidationError(message, errors=[{"path": name, "message": message}])
    return cleaned


def add_to_set(current: Iterable[str], values: Iterable[str]) -> list[str]:
    """追加不存在的值，保持原有顺序"""
    result = list(current)
    for value in values:
        if value not in result:
            result.append(value)
    return result


def pull_all(current: Iterable[str], values: Iterable[str]) -> list[str]:
    """移除全部指定值"""
    removed = set(values)
    return [v for v in current if v not in removed]


class ReferenceService:
    """引用数组、时间线和笔记状态的维护"""

    def __init__(self, stores: EntityStores):
        self.stores = stores

    def _load(self, kind: EntityKind, entity_id: str) -> Document:
        doc = self.stores.for_kind(kind).find_by_id(entity_id)
        if doc is None:
            raise NotFoundError(kind.label, entity_id)
        return doc

    def _apply(self, kind: EntityKind, entity_id: str, fields: Document) -> Document:
        """写入字段并返回更新后的文档"""
        store = self.stores.for_kind(kind)
        if not store.update(entity_id, fields):
            raise StoreOperationError(
                f"Failed to update {kind.label.lower()} with ID {entity_id}"
            )
        return store.find_by_id(entity_id)

    # ==================== 引用数组 ====================

    def _check_field(self, kind: EntityKind, field_name: Any) -> str:
        allowed = REFERENCE_FIELDS[kind]
        if field_name not in allowed:
            message = (
                f'"field" must be one of [{", ".join(allowed)}]' if allowed
                else f"{kind.label} has no reference fields"
            )
            raise ValidationError(message, errors=[{"path": "field", "message": message}])
        return field_name

    def _change_references(self, kind: EntityKind, entity_id: str, field_name: Any, ids: Any, op) -> Document:
        field_name = self._check_field(kind, field_name)
        ids = _clean_values(ids, "ids")
        doc = self._load(kind, entity_id)

        if "." in field_name:
            parent, child = field_name.split(".", 1)
            container = dict(doc.get(parent) or {})
            container[child] = op(container.get(child) or [], ids)
            fields = {parent: container}
        else:
            fields = {field_name: op(doc.get(field_name) or [], ids)}

        return self._apply(kind, entity_id, fields)

    def add_references(self, kind: EntityKind, entity_id: str, field_name: Any, ids: Any) -> Document:
        """
        向引用数组添加 ID

        Args:
            kind: 实体种类
            entity_id: 实体 ID
            field_name: 引用字段名（见 REFERENCE_FIELDS）
            ids: 要添加的 ID 列表

        Returns:
            更新后的文档
        """
        doc = self._change_references(kind, entity_id, field_name, ids, add_to_set)
        logger.info(f"references_added: {kind.value}/{entity_id}.{field_name} +{len(ids)}")
        return doc

    def remove_references(self, kind: EntityKind, entity_id: str, field_name: Any, ids: Any) -> Document:
        """从引用数组移除 ID"""
        doc = self._change_references(kind, entity_id, field_name, ids, pull_all)
        logger.info(f"references_removed: {kind.value}/{entity_id}.{field_name} -{len(ids)}")
        return doc

    # ==================== 事件时间线 ====================

    def add_timeline_entry(self, event_id: str, entry: Any) -> Document:
        """在事件时间线末尾追加一个条目"""
        doc = self._load(EntityKind.EVENTS, event_id)

        result = validate_timeline_entry(entry)
        if result.error is not None:
            raise ValidationError(result.error.message, errors=result.error.details)

        timeline = dict(doc.get("timeline") or {})
        item = TimelineEntry(**result.value).to_dict()
        timeline["events"] = list(timeline.get("events") or []) + [item]

        updated = self._apply(EntityKind.EVENTS, event_id, {"timeline": timeline})
        logger.info(f"timeline_entry_added: {event_id}, entries={len(timeline['events'])}")
        return updated

    # ==================== 笔记 ====================

    def set_archived(self, note_id: str, archived: bool) -> Document:
        """归档或取消归档笔记"""
        self._load(EntityKind.NOTES, note_id)
        doc = self._apply(EntityKind.NOTES, note_id, {"is_archived": archived})
        logger.info(f"note_{'archived' if archived else 'unarchived'}: {note_id}")
        return doc

    def add_tags(self, note_id: str, tags: Any) -> Document:
        """添加标签（已存在的标签忽略）"""
        tags = _clean_values(tags, "tags")
        doc = self._load(EntityKind.NOTES, note_id)
        return self._apply(EntityKind.NOTES, note_id, {"tags": add_to_set(doc.get("tags") or [], tags)})

    def remove_tags(self, note_id: str, tags: Any) -> Document:
        """移除标签"""
        tags = _clean_values(tags, "tags")
        doc = self._load(EntityKind.NOTES, note_id)
        return self._apply(EntityKind.NOTES, note_id, {"tags": pull_all(doc.get("tags") or [], tags)})

    def notes_for_reference(self, reference: NoteReference, limit: int = 20, skip: int = 0) -> list[Document]:
        """查找引用指定实体的未归档笔记，按创建时间降序"""
        match = {**reference.to_match(), "is_archived": False}
        return self.stores.notes.find(match, limit, skip, order=["created_at DESC"])
