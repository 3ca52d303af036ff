"""
Core - 通用应用基础设施

提供与具体实体无关的基础设施组件:
- 统一异常体系
- 服务生命周期管理
- 依赖注入
"""

from .exceptions import (
    ApplicationError,
    BadRequestError,
    ConflictError,
    ErrorCategory,
    NotFoundError,
    StoreOperationError,
    StoreUnavailableError,
    ValidationError,
)
from .lifecycle import (
    ServiceDefinition,
    ServiceRegistry,
    register_core_services,
)

__all__ = [
    # Exceptions
    "ErrorCategory",
    "ApplicationError",
    "NotFoundError",
    "ValidationError",
    "BadRequestError",
    "ConflictError",
    "StoreOperationError",
    "StoreUnavailableError",
    # Lifecycle
    "ServiceRegistry",
    "ServiceDefinition",
    "register_core_services",
]
