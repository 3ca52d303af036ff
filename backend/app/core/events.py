"""Application lifecycle event handlers.

启动时构建 ServiceRegistry 并初始化表结构，关闭时统一释放资源。
"""

from typing import Callable

from fastapi import FastAPI

from domains.core import ServiceRegistry, register_core_services
from domains.doc_core.logging import get_logger

from .config import get_settings

logger = get_logger(__name__)


def create_start_handler(app: FastAPI) -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("api_starting", component="api")

        # 测试等场景下可以预先注入 registry
        registry = getattr(app.state, "registry", None)
        if registry is None:
            settings = get_settings()
            registry = register_core_services(
                ServiceRegistry(),
                database_url=settings.DATABASE_URL,
                debug=settings.DEBUG,
                page_limit=settings.DEFAULT_PAGE_LIMIT,
                search_limit=settings.DEFAULT_SEARCH_LIMIT,
            )
            app.state.registry = registry

            # 存储不可用时服务仍然启动，列表接口走降级数据
            try:
                stores = [store for _, store in registry.get("entity_stores")]
                stores.append(registry.get("article_store"))
                for store in stores:
                    store.ensure_schema()
                logger.info("document_schema_ready", component="store", collections=len(stores))
            except Exception as e:
                logger.warning("document_schema_init_skipped", component="store", error=str(e))

        logger.info(
            "services_initialized",
            component="registry",
            services=registry.initialized_services,
        )
        logger.info("api_started", component="api", status="success")

    return start_app


def create_stop_handler(app: FastAPI) -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("api_stopping", component="api")

        registry = getattr(app.state, "registry", None)
        if registry is not None:
            try:
                await registry.shutdown()
            except Exception as e:
                logger.warning("service_registry_stop_error", component="registry", error=str(e))

        logger.info("api_stopped", component="api", status="success")

    return stop_app
