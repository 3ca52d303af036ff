"""
实体批量协调服务

一次请求可以同时携带 topics / categories / events / notes 多种实体，
每一项独立校验、独立写入，结果按种类汇总：

    {"success": bool, "created": {kind: [...]}, "updated": {...}, "errors": {...}}

- 请求中没有出现的种类不会出现在响应中
- 空列表在输出前被剪除
- 某一项失败不影响同批其他项，也不回滚已经成功的项
- success 为 False 时 HTTP 状态码为 207
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from domains.core.exceptions import BadRequestError, NotFoundError, StoreUnavailableError
from domains.doc_core.base.store import Document, DocumentStore, utc_now
from domains.doc_core.validation import DocumentValidator

import psycopg2

from ..core.fallback import get_fallback_entities
from ..core.models import EntityKind, generate_id
from ..core.store import EntityStores
from ..core.validators import validate_category, validate_event, validate_note, validate_topic

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 10
DEFAULT_PAGE_LIMIT = 20

_VALIDATORS: dict[EntityKind, DocumentValidator] = {
    EntityKind.TOPICS: validate_topic,
    EntityKind.CATEGORIES: validate_category,
    EntityKind.EVENTS: validate_event,
    EntityKind.NOTES: validate_note,
}


def _counter_defaults(doc: Document) -> Document:
    doc["unread_count"] = doc.get("unread_count") or 0
    doc["priority"] = doc.get("priority") or 0
    return doc


def _note_defaults(doc: Document) -> Document:
    now = utc_now()
    doc["created_at"] = doc.get("created_at") or now
    doc["updated_at"] = doc.get("updated_at") or now
    doc["is_archived"] = doc.get("is_archived") or False
    doc["priority"] = doc.get("priority") or 0
    return doc


_DEFAULTS: dict[EntityKind, Callable[[Document], Document]] = {
    EntityKind.TOPICS: _counter_defaults,
    EntityKind.CATEGORIES: _counter_defaults,
    EntityKind.EVENTS: _counter_defaults,
    EntityKind.NOTES: _note_defaults,
}


def parse_ids(value: Any) -> list[str]:
    """解析 ID 列表：逗号分隔字符串或字符串数组，去空白并丢弃空项"""
    if value is None:
        return []
    if isinstance(value, str):
        parts: Iterable[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        parts = value
    else:
        return []
    return [str(p).strip() for p in parts if p is not None and str(p).strip()]


def parse_kinds(types: Optional[str]) -> list[EntityKind]:
    """解析逗号分隔的种类名，未知名称忽略；未指定时返回全部种类"""
    if types is None:
        return list(EntityKind)
    kinds = []
    for name in types.split(","):
        kind = EntityKind.parse(name)
        if kind is not None and kind not in kinds:
            kinds.append(kind)
    return kinds


@dataclass(frozen=True)
class KindBinding:
    """一种实体的 store、校验器和创建默认值"""
    kind: EntityKind
    store: DocumentStore
    validate: DocumentValidator
    apply_defaults: Callable[[Document], Document]

    @property
    def label(self) -> str:
        return self.kind.label

    @property
    def noun(self) -> str:
        return self.kind.label.lower()


class BatchResult:
    """
    批量操作结果

    sections 为成功结果的分组名（如 "created"、"updated"），
    errors 单独记录。输出时剪除空列表。
    """

    def __init__(self, *sections: str):
        self._sections: dict[str, dict[str, list]] = {name: {} for name in sections}
        self._errors: dict[str, list] = {}

    def add(self, section: str, kind: EntityKind, item: Any) -> None:
        self._sections[section].setdefault(kind.value, []).append(item)

    def add_error(self, kind: EntityKind, entry: dict[str, Any]) -> None:
        self._errors.setdefault(kind.value, []).append(entry)

    def items(self, section: str, kind: EntityKind) -> list:
        return self._sections[section].get(kind.value, [])

    def errors(self, kind: EntityKind) -> list:
        return self._errors.get(kind.value, [])

    @property
    def success(self) -> bool:
        return not any(self._errors.values())

    @property
    def status_code(self) -> int:
        return 200 if self.success else 207

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success}
        for name, by_kind in self._sections.items():
            result[name] = {kind: items for kind, items in by_kind.items() if items}
        result["errors"] = {kind: items for kind, items in self._errors.items() if items}
        return result


class EntityService:
    """
    实体批量协调服务

    所有方法都是同步的，路由层通过 run_sync 放到线程池执行。
    """

    def __init__(
        self,
        stores: EntityStores,
        debug: bool = False,
        page_limit: int = DEFAULT_PAGE_LIMIT,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
    ):
        """
        Args:
            stores: 四种实体的 store
            debug: 为 True 时，存储异常的原始信息写入错误项的 details 字段
            page_limit: 列表默认分页大小
            search_limit: 搜索默认返回数量
        """
        self.debug = debug
        self.page_limit = page_limit
        self.search_limit = search_limit
        self._bindings = {
            kind: KindBinding(
                kind=kind,
                store=stores.for_kind(kind),
                validate=_VALIDATORS[kind],
                apply_defaults=_DEFAULTS[kind],
            )
            for kind in EntityKind
        }

    def binding(self, kind: EntityKind) -> KindBinding:
        return self._bindings[kind]

    # ==================== 批量创建/更新 ====================

    def create_or_update(self, batch: Mapping[str, Any]) -> BatchResult:
        """
        批量创建或更新

        只处理请求中以非空列表形式出现的种类。
        带非空 id 的项按更新处理，否则按创建处理。
        """
        result = BatchResult("created", "updated")

        for kind in EntityKind:
            items = batch.get(kind.value)
            if not isinstance(items, list) or not items:
                continue

            binding = self._bindings[kind]
            for item in items:
                self._write_item(binding, item, result)

        logger.info(
            "entity_batch_written: "
            + ", ".join(
                f"{kind.value}=+{len(result.items('created', kind))}"
                f"/~{len(result.items('updated', kind))}"
                f"/!{len(result.errors(kind))}"
                for kind in EntityKind
                if isinstance(batch.get(kind.value), list) and batch.get(kind.value)
            )
        )
        return result

    def _write_item(self, binding: KindBinding, item: Any, result: BatchResult) -> None:
        """处理单个实体：校验 -> 更新或创建，失败记录到 errors"""
        kind = binding.kind
        is_update = isinstance(item, dict) and bool(item.get("id"))

        validation = binding.validate(item, is_update)
        if validation.error is not None:
            result.add_error(kind, {
                "data": item,
                "error": f"Validation error: {validation.error.message}",
            })
            return

        value = validation.value
        if is_update:
            failure = f"Failed to update {binding.noun} with ID {value['id']}"
        else:
            failure = f"Failed to create {binding.noun}"

        try:
            if is_update:
                self._update_item(binding, item, value, failure, result)
            else:
                self._create_item(binding, item, value, failure, result)
        except Exception as e:
            logger.exception(f"entity_write_failed: {kind.value}, {e}")
            result.add_error(kind, self._error_entry({"data": item}, failure, e))

    def _update_item(
        self,
        binding: KindBinding,
        item: Any,
        value: Document,
        failure: str,
        result: BatchResult,
    ) -> None:
        entity_id = value["id"]
        if binding.store.find_by_id(entity_id) is None:
            result.add_error(binding.kind, {
                "data": item,
                "error": f"{binding.label} with ID {entity_id} not found",
            })
            return

        if not binding.store.update(entity_id, value):
            result.add_error(binding.kind, {"data": item, "error": failure})
            return

        result.add("updated", binding.kind, binding.store.find_by_id(entity_id))
        logger.debug(f"entity_updated: {binding.kind.value}/{entity_id}")

    def _create_item(
        self,
        binding: KindBinding,
        item: Any,
        value: Document,
        failure: str,
        result: BatchResult,
    ) -> None:
        doc = binding.apply_defaults(dict(value))
        doc["id"] = doc.get("id") or generate_id()

        created = binding.store.create(doc)
        if created is None:
            result.add_error(binding.kind, {"data": item, "error": failure})
            return

        result.add("created", binding.kind, created)
        logger.debug(f"entity_created: {binding.kind.value}/{doc['id']}")

    # ==================== 批量读取/删除 ====================

    def get_by_ids(self, ids_by_kind: Mapping[EntityKind, Any]) -> BatchResult:
        """
        按 ID 批量读取

        每个 ID 单独查询，缺失的 ID 产生一条错误而不是静默缺席。
        """
        result = BatchResult("data")

        for kind in EntityKind:
            binding = self._bindings[kind]
            for entity_id in parse_ids(ids_by_kind.get(kind)):
                try:
                    doc = binding.store.find_by_id(entity_id)
                except Exception as e:
                    logger.exception(f"entity_read_failed: {kind.value}/{entity_id}, {e}")
                    result.add_error(kind, self._error_entry(
                        {"id": entity_id},
                        f"Failed to retrieve {binding.noun} with ID {entity_id}",
                        e,
                    ))
                    continue

                if doc is None:
                    result.add_error(kind, {
                        "id": entity_id,
                        "error": f"{binding.label} with ID {entity_id} not found",
                    })
                    continue
                result.add("data", kind, doc)

        return result

    def delete_by_ids(self, body: Mapping[str, Any]) -> BatchResult:
        """
        按 ID 批量删除

        先检查存在性，以区分 "不存在" 和 "删除失败"。不级联删除其他实体中的引用。
        """
        result = BatchResult("deleted")

        for kind in EntityKind:
            ids = body.get(kind.ids_param)
            if not isinstance(ids, list) or not ids:
                continue

            binding = self._bindings[kind]
            for entity_id in ids:
                failure = f"Failed to delete {binding.noun} with ID {entity_id}"
                try:
                    if not isinstance(entity_id, str) or binding.store.find_by_id(entity_id) is None:
                        result.add_error(kind, {
                            "id": entity_id,
                            "error": f"{binding.label} with ID {entity_id} not found",
                        })
                        continue

                    if not binding.store.delete(entity_id):
                        result.add_error(kind, {"id": entity_id, "error": failure})
                        continue
                except Exception as e:
                    logger.exception(f"entity_delete_failed: {kind.value}/{entity_id}, {e}")
                    result.add_error(kind, self._error_entry({"id": entity_id}, failure, e))
                    continue

                result.add("deleted", kind, entity_id)
                logger.info(f"entity_deleted: {kind.value}/{entity_id}")

        return result

    # ==================== 查询 ====================

    def search(
        self,
        q: Optional[str],
        types: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        跨种类搜索

        q 为空时直接失败，不访问任何 store。
        """
        if q is None or not q.strip():
            raise BadRequestError("Search query is required")

        limit = limit or self.search_limit
        response: dict[str, Any] = {"query": q}
        for kind in parse_kinds(types):
            response[kind.value] = self._bindings[kind].store.search(q, limit, 0)
        return response

    def list_kind(
        self,
        kind: EntityKind,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        分页列出某种实体

        存储不可用时返回固定的降级数据，不向调用方报错。
        """
        limit = limit or self.page_limit
        skip = skip or 0

        try:
            items = self._bindings[kind].store.get_all(limit, skip)
        except (StoreUnavailableError, psycopg2.Error) as e:
            logger.warning(f"store_unavailable_fallback: {kind.value}, {e}")
            items = get_fallback_entities(kind)

        return {
            kind.value: items,
            "count": len(items),
            "pagination": {"limit": limit, "skip": skip},
        }

    def get_one(self, kind: EntityKind, entity_id: str) -> Document:
        """获取单个实体，不存在抛出 NotFoundError"""
        doc = self._bindings[kind].store.find_by_id(entity_id)
        if doc is None:
            raise NotFoundError(kind.label, entity_id)
        return doc

    def _error_entry(self, entry: dict[str, Any], message: str, exc: Exception) -> dict[str, Any]:
        entry["error"] = message
        if self.debug:
            entry["details"] = str(exc)
        return entry
