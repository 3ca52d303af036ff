"""
子分类服务层

子分类嵌入在 Category.subcategories 中，没有独立的集合，
所有修改都是 "读取父分类 -> 修改数组 -> 整体写回 subcategories 字段"。
子分类 ID 只在父分类内唯一。
"""

import logging
from typing import Any, Optional

from domains.core.exceptions import (
    ConflictError,
    NotFoundError,
    StoreOperationError,
    ValidationError,
)
from domains.doc_core.base.store import Document, DocumentStore

from ..core.models import Subcategory
from ..core.validators import validate_subcategory

logger = logging.getLogger(__name__)


class SubcategoryService:
    """嵌入式子分类的增删改查"""

    def __init__(self, store: DocumentStore):
        """
        Args:
            store: 分类存储
        """
        self.store = store

    def _get_category(self, category_id: str) -> Document:
        category = self.store.find_by_id(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def _save(self, category_id: str, subcategories: list[Document], action: str) -> None:
        if not self.store.update(category_id, {"subcategories": subcategories}):
            raise StoreOperationError(f"Failed to {action} subcategory in category {category_id}")

    @staticmethod
    def _index_of(subcategories: list[Document], subcategory_id: str) -> Optional[int]:
        for i, sub in enumerate(subcategories):
            if sub.get("id") == subcategory_id:
                return i
        return None

    def list_subcategories(self, category_id: str) -> list[Document]:
        """列出分类下的全部子分类"""
        return self._get_category(category_id).get("subcategories") or []

    def get_subcategory(self, category_id: str, subcategory_id: str) -> Document:
        """获取单个子分类"""
        subcategories = self.list_subcategories(category_id)
        index = self._index_of(subcategories, subcategory_id)
        if index is None:
            raise NotFoundError("Subcategory", subcategory_id)
        return subcategories[index]

    def add_subcategory(self, category_id: str, data: Any) -> Document:
        """
        新增子分类

        未提供 ID 时自动生成；同一分类下 ID 重复返回冲突。

        Raises:
            NotFoundError: 分类不存在
            ValidationError: 数据不合法
            ConflictError: ID 已存在
        """
        category = self._get_category(category_id)

        result = validate_subcategory(data, is_update=False)
        if result.error is not None:
            raise ValidationError(result.error.message, errors=result.error.details)

        subcategory = Subcategory.from_dict(result.value).to_dict()
        subcategories = list(category.get("subcategories") or [])
        if self._index_of(subcategories, subcategory["id"]) is not None:
            raise ConflictError("Subcategory", "ID", subcategory["id"])

        subcategories.append(subcategory)
        self._save(category_id, subcategories, "add")

        logger.info(f"subcategory_added: {category_id}/{subcategory['id']}")
        return subcategory

    def update_subcategory(self, category_id: str, subcategory_id: str, data: Any) -> Document:
        """部分更新子分类（ID 不可修改）"""
        category = self._get_category(category_id)
        subcategories = list(category.get("subcategories") or [])
        index = self._index_of(subcategories, subcategory_id)
        if index is None:
            raise NotFoundError("Subcategory", subcategory_id)

        result = validate_subcategory(data, is_update=True)
        if result.error is not None:
            raise ValidationError(result.error.message, errors=result.error.details)

        updated = {**subcategories[index], **result.value, "id": subcategory_id}
        subcategories[index] = updated
        self._save(category_id, subcategories, "update")

        logger.info(f"subcategory_updated: {category_id}/{subcategory_id}")
        return updated

    def remove_subcategory(self, category_id: str, subcategory_id: str) -> None:
        """删除子分类"""
        category = self._get_category(category_id)
        subcategories = list(category.get("subcategories") or [])
        index = self._index_of(subcategories, subcategory_id)
        if index is None:
            raise NotFoundError("Subcategory", subcategory_id)

        del subcategories[index]
        self._save(category_id, subcategories, "remove")
        logger.info(f"subcategory_removed: {category_id}/{subcategory_id}")
