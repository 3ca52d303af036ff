"""
实体整理领域模块

管理围绕文章组织的四种实体：
- topic: 话题，聚合相关文章和分类
- category: 分类，内嵌子分类
- event: 事件，带有有序时间线
- note: 笔记，通过 (reference_type, reference_id) 引用任一实体

核心功能：
- 批量创建/更新/读取/删除，逐项校验、部分成功（207）
- 跨种类搜索
- 列表降级：存储不可用时返回固定数据
- 子分类、引用数组、时间线、笔记标签与归档的维护
"""

from .core.models import EntityKind, NoteReference, ReferenceType
from .core.store import EntityStores, create_entity_stores
from .services import EntityService, ReferenceService, SubcategoryService

__all__ = [
    'EntityKind',
    'NoteReference',
    'ReferenceType',
    'EntityStores',
    'create_entity_stores',
    'EntityService',
    'SubcategoryService',
    'ReferenceService',
]
