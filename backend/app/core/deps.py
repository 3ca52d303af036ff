"""Dependency injection for FastAPI routes.

服务由 lifespan 中构建的 ServiceRegistry 管理，挂在 ``app.state.registry`` 上。
路由通过 Depends 获取服务，测试时注入自己的 registry 即可替换实现。
"""

from fastapi import Request

from domains.core import ServiceRegistry


def get_registry(request: Request) -> ServiceRegistry:
    """Get the ServiceRegistry attached to the application."""
    return request.app.state.registry


# ============================================================================
# Service getters
# ============================================================================

def get_entity_service(request: Request):
    """Get EntityService instance."""
    return get_registry(request).get("entity_service")


def get_subcategory_service(request: Request):
    """Get SubcategoryService instance."""
    return get_registry(request).get("subcategory_service")


def get_reference_service(request: Request):
    """Get ReferenceService instance."""
    return get_registry(request).get("reference_service")


def get_article_service(request: Request):
    """Get ArticleService instance."""
    return get_registry(request).get("article_service")
