"""Entity API routes.

topics / categories / events / notes 四种实体的统一接口。

支持:
- 批量创建/更新、批量读取、批量删除（部分失败返回 207）
- 跨种类搜索
- 按种类分页列表（存储不可用时返回降级数据）
- 子分类、引用数组、事件时间线、笔记标签与归档

NOTE: 固定路径（/search、/notes/by-reference 等）必须注册在 /{kind} 之前。
所有同步服务调用都使用 run_sync 包装，避免阻塞 event loop。
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Response
from fastapi.responses import JSONResponse

from app.core.async_utils import run_sync
from app.core.deps import get_entity_service, get_reference_service, get_subcategory_service
from app.schemas.entity import ReferenceChange, TagsChange
from domains.core import NotFoundError, ValidationError
from domains.entity_hub import EntityKind, NoteReference, ReferenceType

logger = logging.getLogger(__name__)

router = APIRouter()


def resolve_kind(kind: str = Path(..., description="实体种类: topics/categories/events/notes")) -> EntityKind:
    """解析路径中的实体种类，未知种类按不存在的资源处理"""
    parsed = EntityKind.parse(kind)
    if parsed is None:
        raise NotFoundError("Entity kind", kind, message=f"Unknown entity kind: {kind}")
    return parsed


# ============================================================================
# 批量操作
# ============================================================================

@router.post("")
async def create_or_update_entities(
    batch: Dict[str, Any] = Body(..., description="按种类分组的实体列表"),
    service=Depends(get_entity_service),
):
    """
    批量创建或更新实体

    带 id 的项按更新处理，否则创建。全部成功返回 200，部分失败返回 207。
    """
    result = await run_sync(service.create_or_update, batch)
    return JSONResponse(status_code=result.status_code, content=result.to_dict())


@router.get("")
async def get_entities(
    topic_ids: Optional[str] = Query(None, alias="topicIds"),
    category_ids: Optional[str] = Query(None, alias="categoryIds"),
    event_ids: Optional[str] = Query(None, alias="eventIds"),
    note_ids: Optional[str] = Query(None, alias="noteIds"),
    service=Depends(get_entity_service),
):
    """按 ID 批量读取（逗号分隔），缺失的 ID 记录为错误项"""
    ids_by_kind = {
        EntityKind.TOPICS: topic_ids,
        EntityKind.CATEGORIES: category_ids,
        EntityKind.EVENTS: event_ids,
        EntityKind.NOTES: note_ids,
    }
    result = await run_sync(service.get_by_ids, ids_by_kind)
    return JSONResponse(status_code=result.status_code, content=result.to_dict())


@router.delete("")
async def delete_entities(
    body: Dict[str, Any] = Body(..., description="按种类分组的 ID 数组，如 {\"topicIds\": [...]}"),
    service=Depends(get_entity_service),
):
    """按 ID 批量删除，不级联清理引用"""
    result = await run_sync(service.delete_by_ids, body)
    return JSONResponse(status_code=result.status_code, content=result.to_dict())


@router.get("/search")
async def search_entities(
    q: Optional[str] = Query(None, description="搜索关键字"),
    types: Optional[str] = Query(None, description="逗号分隔的种类，默认全部"),
    limit: Optional[int] = Query(None, ge=1),
    service=Depends(get_entity_service),
):
    """跨种类搜索"""
    return await run_sync(service.search, q, types, limit)


# ============================================================================
# 笔记
# ============================================================================

@router.get("/notes/by-reference")
async def get_notes_by_reference(
    reference_type: str = Query(..., description="article/topic/category/event"),
    reference_id: str = Query(..., description="被引用实体 ID"),
    limit: int = Query(20, ge=1),
    skip: int = Query(0, ge=0),
    service=Depends(get_reference_service),
):
    """查找引用指定实体的未归档笔记"""
    try:
        ref_type = ReferenceType(reference_type)
    except ValueError:
        valids = ", ".join(t.value for t in ReferenceType)
        raise ValidationError(f'"reference_type" must be one of [{valids}]') from None

    reference = NoteReference(ref_type, reference_id)
    notes = await run_sync(service.notes_for_reference, reference, limit, skip)
    return {
        "notes": notes,
        "reference_type": reference_type,
        "reference_id": reference_id,
        "count": len(notes),
        "pagination": {"limit": limit, "skip": skip},
    }


@router.post("/notes/{note_id}/archive")
async def archive_note(note_id: str, service=Depends(get_reference_service)):
    """归档笔记"""
    return await run_sync(service.set_archived, note_id, True)


@router.post("/notes/{note_id}/unarchive")
async def unarchive_note(note_id: str, service=Depends(get_reference_service)):
    """取消归档"""
    return await run_sync(service.set_archived, note_id, False)


@router.post("/notes/{note_id}/tags")
async def add_note_tags(note_id: str, request: TagsChange, service=Depends(get_reference_service)):
    """添加标签"""
    return await run_sync(service.add_tags, note_id, request.tags)


@router.delete("/notes/{note_id}/tags")
async def remove_note_tags(note_id: str, request: TagsChange, service=Depends(get_reference_service)):
    """移除标签"""
    return await run_sync(service.remove_tags, note_id, request.tags)


# ============================================================================
# 事件时间线
# ============================================================================

@router.post("/events/{event_id}/timeline")
async def add_timeline_entry(
    event_id: str,
    entry: Dict[str, Any] = Body(...),
    service=Depends(get_reference_service),
):
    """在事件时间线末尾追加条目"""
    return await run_sync(service.add_timeline_entry, event_id, entry)


# ============================================================================
# 子分类
# ============================================================================

@router.get("/categories/{category_id}/subcategories")
async def list_subcategories(category_id: str, service=Depends(get_subcategory_service)):
    """列出分类下的子分类"""
    subcategories = await run_sync(service.list_subcategories, category_id)
    return {"subcategories": subcategories, "categoryId": category_id, "count": len(subcategories)}


@router.post("/categories/{category_id}/subcategories", status_code=201)
async def add_subcategory(
    category_id: str,
    data: Dict[str, Any] = Body(...),
    service=Depends(get_subcategory_service),
):
    """新增子分类"""
    return await run_sync(service.add_subcategory, category_id, data)


@router.get("/categories/{category_id}/subcategories/{subcategory_id}")
async def get_subcategory(
    category_id: str,
    subcategory_id: str,
    service=Depends(get_subcategory_service),
):
    """获取子分类"""
    return await run_sync(service.get_subcategory, category_id, subcategory_id)


@router.patch("/categories/{category_id}/subcategories/{subcategory_id}")
async def update_subcategory(
    category_id: str,
    subcategory_id: str,
    data: Dict[str, Any] = Body(...),
    service=Depends(get_subcategory_service),
):
    """部分更新子分类"""
    return await run_sync(service.update_subcategory, category_id, subcategory_id, data)


@router.delete("/categories/{category_id}/subcategories/{subcategory_id}", status_code=204)
async def remove_subcategory(
    category_id: str,
    subcategory_id: str,
    service=Depends(get_subcategory_service),
):
    """删除子分类"""
    await run_sync(service.remove_subcategory, category_id, subcategory_id)
    return Response(status_code=204)


# ============================================================================
# 引用数组
# ============================================================================

@router.post("/{kind}/{entity_id}/references")
async def add_references(
    entity_id: str,
    request: ReferenceChange,
    kind: EntityKind = Depends(resolve_kind),
    service=Depends(get_reference_service),
):
    """向引用数组添加 ID（已存在的忽略）"""
    return await run_sync(service.add_references, kind, entity_id, request.field, request.ids)


@router.delete("/{kind}/{entity_id}/references")
async def remove_references(
    entity_id: str,
    request: ReferenceChange,
    kind: EntityKind = Depends(resolve_kind),
    service=Depends(get_reference_service),
):
    """从引用数组移除 ID"""
    return await run_sync(service.remove_references, kind, entity_id, request.field, request.ids)


# ============================================================================
# 按种类列表/详情
# ============================================================================

@router.get("/{kind}")
async def list_entities(
    kind: EntityKind = Depends(resolve_kind),
    limit: Optional[int] = Query(None, ge=1),
    skip: Optional[int] = Query(None, ge=0),
    service=Depends(get_entity_service),
):
    """分页列出某种实体"""
    return await run_sync(service.list_kind, kind, limit, skip)


@router.get("/{kind}/{entity_id}")
async def get_entity(
    entity_id: str,
    kind: EntityKind = Depends(resolve_kind),
    service=Depends(get_entity_service),
):
    """获取单个实体"""
    return await run_sync(service.get_one, kind, entity_id)
