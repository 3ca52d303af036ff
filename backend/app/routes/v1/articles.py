"""Article API routes.

提供文章的 CRUD、列表、搜索和反查接口。

NOTE: /search、/priority、/unread、/topic/... 等固定路径必须注册在 /{article_id} 之前。
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from app.core.async_utils import run_sync
from app.core.deps import get_article_service
from app.schemas.article import ArticlePage, ArticleSearchResult
from app.schemas.common import DocumentList

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ArticlePage)
async def list_articles(
    limit: Optional[int] = Query(None, ge=1),
    skip: Optional[int] = Query(None, ge=0),
    sort: Optional[str] = Query(None, description="排序字段，默认 published_date"),
    order: Optional[str] = Query(None, description="asc / desc，默认 desc"),
    publisher: Optional[str] = None,
    author: Optional[str] = None,
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    service=Depends(get_article_service),
):
    """
    获取文章列表

    支持分页、排序和按发布者、作者、发布时间筛选。
    """
    return await run_sync(
        service.list_articles,
        limit=limit,
        skip=skip,
        sort=sort,
        order=order,
        publisher=publisher,
        author=author,
        from_date=from_date,
        to_date=to_date,
    )


@router.get("/search", response_model=ArticleSearchResult)
async def search_articles(
    q: Optional[str] = Query(None, description="搜索关键字"),
    limit: Optional[int] = Query(None, ge=1),
    skip: Optional[int] = Query(None, ge=0),
    service=Depends(get_article_service),
):
    """按标题、摘要、关键字搜索文章"""
    return await run_sync(service.search_articles, q, limit, skip)


@router.get("/priority", response_model=DocumentList)
async def get_priority_articles(
    limit: Optional[int] = Query(None, ge=1),
    service=Depends(get_article_service),
):
    """按优先级排列的文章"""
    return await run_sync(service.priority_articles, limit)


@router.get("/unread", response_model=DocumentList)
async def get_unread_articles(
    limit: Optional[int] = Query(None, ge=1),
    service=Depends(get_article_service),
):
    """未读文章"""
    return await run_sync(service.unread_articles, limit)


@router.get("/topic/{topic_id}")
async def get_articles_by_topic(
    topic_id: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: Optional[int] = Query(None, ge=0),
    service=Depends(get_article_service),
):
    """引用指定话题的文章"""
    return await run_sync(service.articles_for, "topic", topic_id, limit, skip)


@router.get("/category/{category_id}")
async def get_articles_by_category(
    category_id: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: Optional[int] = Query(None, ge=0),
    service=Depends(get_article_service),
):
    """引用指定分类的文章"""
    return await run_sync(service.articles_for, "category", category_id, limit, skip)


@router.get("/event/{event_id}")
async def get_articles_by_event(
    event_id: str,
    limit: Optional[int] = Query(None, ge=1),
    skip: Optional[int] = Query(None, ge=0),
    service=Depends(get_article_service),
):
    """引用指定事件的文章"""
    return await run_sync(service.articles_for, "event", event_id, limit, skip)


@router.get("/{article_id}")
async def get_article(article_id: str, service=Depends(get_article_service)):
    """获取文章详情"""
    return await run_sync(service.get_article, article_id)


@router.post("", status_code=201)
async def create_article(
    data: Dict[str, Any] = Body(...),
    service=Depends(get_article_service),
):
    """创建文章"""
    return await run_sync(service.create_article, data)


@router.put("/{article_id}")
async def update_article(
    article_id: str,
    data: Dict[str, Any] = Body(...),
    service=Depends(get_article_service),
):
    """更新文章（部分字段）"""
    return await run_sync(service.update_article, article_id, data)


@router.delete("/{article_id}", status_code=204)
async def delete_article(article_id: str, service=Depends(get_article_service)):
    """删除文章"""
    await run_sync(service.delete_article, article_id)
    return Response(status_code=204)
