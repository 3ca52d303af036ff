"""
核心层：实体模型、校验器、存储和降级数据
"""

from .fallback import get_fallback_entities
from .models import (
    EntityKind,
    NoteReference,
    ReferenceType,
    Subcategory,
    TimelineEntry,
    generate_id,
)
from .store import (
    CategoryStore,
    EntityStores,
    EventStore,
    NoteStore,
    TopicStore,
    create_entity_stores,
)
from .validators import (
    validate_category,
    validate_event,
    validate_note,
    validate_subcategory,
    validate_timeline_entry,
    validate_topic,
)

__all__ = [
    "EntityKind",
    "NoteReference",
    "ReferenceType",
    "Subcategory",
    "TimelineEntry",
    "generate_id",
    "TopicStore",
    "CategoryStore",
    "EventStore",
    "NoteStore",
    "EntityStores",
    "create_entity_stores",
    "get_fallback_entities",
    "validate_topic",
    "validate_category",
    "validate_event",
    "validate_note",
    "validate_subcategory",
    "validate_timeline_entry",
]
