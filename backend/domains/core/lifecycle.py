"""
服务生命周期管理

提供集中式的服务注册、获取和清理。注册表由应用在启动时显式创建，
挂在 ``app.state.registry`` 上，不使用进程级单例。

使用示例:
    registry = ServiceRegistry()
    register_core_services(registry, database_url="postgresql://...")

    # 获取服务
    entity_service = registry.get("entity_service")

    # 应用关闭时
    await registry.shutdown()
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ServiceDefinition:
    """服务定义"""
    name: str
    factory: Callable[[], Any]
    instance: Any | None = None
    dependencies: list[str] = field(default_factory=list)
    cleanup: Callable[[Any], None] | None = None
    initialized: bool = False


class ServiceRegistry:
    """
    服务注册表

    集中管理所有服务的生命周期，提供:
    - 延迟初始化（首次访问时创建）
    - 依赖注入（按顺序创建依赖）
    - 统一关闭（逆序清理资源）
    - 测试支持（直接注入替身实例）
    """

    def __init__(self):
        self._services: dict[str, ServiceDefinition] = {}
        self._init_order: list[str] = []

    def register(
        self,
        name: str,
        factory: Callable[[], T],
        dependencies: list[str] | None = None,
        cleanup: Callable[[T], None] | None = None,
    ) -> "ServiceRegistry":
        """
        注册服务

        Args:
            name: 服务名称（唯一标识）
            factory: 服务工厂函数（无参数，返回服务实例）
            dependencies: 依赖的其他服务名称
            cleanup: 清理函数（接收服务实例）

        Returns:
            self，支持链式调用
        """
        if name in self._services:
            logger.warning(f"service_overridden: {name}")

        self._services[name] = ServiceDefinition(
            name=name,
            factory=factory,
            dependencies=dependencies or [],
            cleanup=cleanup,
        )
        return self

    def get(self, name: str) -> Any:
        """
        获取服务实例

        首次访问时创建实例，后续返回缓存的实例。
        会自动先初始化依赖的服务。

        Raises:
            KeyError: 服务未注册
        """
        if name not in self._services:
            raise KeyError(f"Service not registered: {name}")

        definition = self._services[name]

        if definition.initialized and definition.instance is not None:
            return definition.instance

        # 先初始化依赖
        for dep_name in definition.dependencies:
            self.get(dep_name)

        try:
            definition.instance = definition.factory()
            definition.initialized = True
            self._init_order.append(name)
            logger.debug(f"service_initialized: {name}")
        except Exception as e:
            logger.error(f"service_initialization_failed: {name}, {e}")
            raise

        return definition.instance

    def set(self, name: str, instance: Any) -> None:
        """
        直接设置服务实例（用于测试或外部注入）
        """
        if name not in self._services:
            self._services[name] = ServiceDefinition(
                name=name,
                factory=lambda: instance,
            )

        self._services[name].instance = instance
        self._services[name].initialized = True

        if name not in self._init_order:
            self._init_order.append(name)

    async def shutdown(self) -> None:
        """
        关闭所有服务

        按初始化的逆序关闭服务，确保依赖关系正确。
        """
        for name in reversed(self._init_order.copy()):
            definition = self._services.get(name)
            if definition and definition.initialized:
                await asyncio.to_thread(self._cleanup_service, definition)
                definition.instance = None
                definition.initialized = False
                logger.debug(f"service_closed: {name}")

        self._init_order.clear()

    def _cleanup_service(self, definition: ServiceDefinition) -> None:
        """清理单个服务，失败只记录日志"""
        if definition.instance is None or definition.cleanup is None:
            return
        try:
            definition.cleanup(definition.instance)
        except Exception as e:
            logger.warning(f"service_cleanup_failed: {definition.name}, {e}")

    @property
    def registered_services(self) -> list[str]:
        """获取所有已注册的服务名称"""
        return list(self._services.keys())

    @property
    def initialized_services(self) -> list[str]:
        """获取所有已初始化的服务名称"""
        return self._init_order.copy()


# ==================== 服务注册辅助函数 ====================

def register_core_services(
    registry: ServiceRegistry,
    database_url: str | None = None,
    debug: bool = False,
    page_limit: int = 20,
    search_limit: int = 10,
) -> ServiceRegistry:
    """
    注册核心服务

    一个 DocumentDatabase 句柄被所有 store 共享；store 之上是
    实体协调器、子分类/引用服务和文章服务。
    使用延迟导入避免循环依赖。
    """

    # ============ Store 层 ============
    def _create_database():
        from domains.doc_core.base.store import DocumentDatabase
        return DocumentDatabase(database_url)

    def _create_entity_stores():
        from domains.entity_hub.core.store import create_entity_stores
        return create_entity_stores(registry.get("database"))

    def _create_article_store():
        from domains.article_hub.core.store import ArticleStore
        return ArticleStore(registry.get("database"))

    registry.register(
        "database",
        _create_database,
        cleanup=lambda db: db.close_all(),
    )
    registry.register(
        "entity_stores",
        _create_entity_stores,
        dependencies=["database"],
    )
    registry.register(
        "article_store",
        _create_article_store,
        dependencies=["database"],
    )

    # ============ Service 层 ============
    def _create_entity_service():
        from domains.entity_hub.services import EntityService
        return EntityService(
            registry.get("entity_stores"),
            debug=debug,
            page_limit=page_limit,
            search_limit=search_limit,
        )

    def _create_subcategory_service():
        from domains.entity_hub.services import SubcategoryService
        stores = registry.get("entity_stores")
        return SubcategoryService(stores.categories)

    def _create_reference_service():
        from domains.entity_hub.services import ReferenceService
        return ReferenceService(registry.get("entity_stores"))

    def _create_article_service():
        from domains.article_hub.services import ArticleService
        return ArticleService(registry.get("article_store"))

    registry.register(
        "entity_service",
        _create_entity_service,
        dependencies=["entity_stores"],
    )
    registry.register(
        "subcategory_service",
        _create_subcategory_service,
        dependencies=["entity_stores"],
    )
    registry.register(
        "reference_service",
        _create_reference_service,
        dependencies=["entity_stores"],
    )
    registry.register(
        "article_service",
        _create_article_service,
        dependencies=["article_store"],
    )

    logger.info(f"services_registered: {len(registry.registered_services)}")
    return registry


__all__ = [
    "ServiceRegistry",
    "ServiceDefinition",
    "register_core_services",
]
