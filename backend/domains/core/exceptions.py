"""
统一异常体系

提供业务层和存储层的统一错误处理，包括:
- 应用异常基类 (ApplicationError)
- 常用异常类型
- HTTP 状态码映射
"""

from enum import Enum
from typing import Any, Dict, Optional, List
from dataclasses import dataclass


class ErrorCategory(str, Enum):
    """错误分类"""
    VALIDATION = "validation"      # 参数验证错误
    BAD_REQUEST = "bad_request"    # 请求缺少必要参数
    NOT_FOUND = "not_found"        # 资源不存在
    CONFLICT = "conflict"          # 资源冲突
    STORE = "store"                # 存储操作失败
    UNAVAILABLE = "unavailable"    # 存储不可用
    INTERNAL = "internal"          # 内部错误


@dataclass(eq=False)
class ApplicationError(Exception):
    """
    应用层异常基类

    所有业务相关的异常都应继承此类。
    提供统一的错误结构，由 app.core.exceptions 渲染为
    ``{"error": {"message": ..., "details": ...}}``。

    使用示例:
        raise NotFoundError("Topic", "t1")
        raise ValidationError("Invalid article data", errors=[{"path": "url", "message": ...}])
        raise BadRequestError("Search query is required")
    """
    code: str                                    # 错误码 (如 "NOT_FOUND", "VALIDATION_ERROR")
    message: str                                 # 用户可读的错误信息
    category: ErrorCategory = ErrorCategory.INTERNAL
    details: Optional[Any] = None               # 附加详情
    cause: Optional[Exception] = None           # 原始异常

    def __post_init__(self):
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    @property
    def http_status_code(self) -> int:
        """映射到 HTTP 状态码"""
        mapping = {
            ErrorCategory.VALIDATION: 400,
            ErrorCategory.BAD_REQUEST: 400,
            ErrorCategory.NOT_FOUND: 404,
            ErrorCategory.CONFLICT: 409,
            ErrorCategory.STORE: 500,
            ErrorCategory.UNAVAILABLE: 503,
            ErrorCategory.INTERNAL: 500,
        }
        return mapping.get(self.category, 500)

    def to_dict(self, include_details: bool = True) -> Dict[str, Any]:
        """转换为 API 错误体"""
        error: Dict[str, Any] = {"message": self.message}
        if include_details and self.details:
            error["details"] = self.details
        return {"error": error}


# ==================== 常用异常 ====================

class NotFoundError(ApplicationError):
    """资源不存在"""
    def __init__(
        self,
        resource_type: str,
        resource_id: Any,
        message: Optional[str] = None
    ):
        super().__init__(
            code="NOT_FOUND",
            message=message or f"{resource_type} with ID {resource_id} not found",
            category=ErrorCategory.NOT_FOUND,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ValidationError(ApplicationError):
    """参数验证错误"""
    def __init__(
        self,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
        field: Optional[str] = None
    ):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            category=ErrorCategory.VALIDATION,
            details=errors or None
        )
        self.errors = errors
        self.field = field


class BadRequestError(ApplicationError):
    """请求级错误（缺少必要参数），不做任何部分处理"""
    def __init__(self, message: str):
        super().__init__(
            code="BAD_REQUEST",
            message=message,
            category=ErrorCategory.BAD_REQUEST,
        )


class ConflictError(ApplicationError):
    """资源冲突（如重复创建）"""
    def __init__(
        self,
        resource_type: str,
        conflict_field: str,
        conflict_value: Any,
        message: Optional[str] = None
    ):
        super().__init__(
            code="CONFLICT",
            message=message or f"{resource_type} with {conflict_field} {conflict_value} already exists",
            category=ErrorCategory.CONFLICT,
        )
        self.resource_type = resource_type
        self.conflict_field = conflict_field
        self.conflict_value = conflict_value


class StoreOperationError(ApplicationError):
    """存储操作未生效（目标存在但写入失败）"""
    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None
    ):
        super().__init__(
            code="STORE_OPERATION_FAILED",
            message=message,
            category=ErrorCategory.STORE,
            cause=cause
        )


class StoreUnavailableError(ApplicationError):
    """存储不可用（连接失败）"""
    def __init__(
        self,
        message: str = "Document store is unavailable",
        cause: Optional[Exception] = None
    ):
        super().__init__(
            code="STORE_UNAVAILABLE",
            message=message,
            category=ErrorCategory.UNAVAILABLE,
            cause=cause
        )


# ==================== 导出 ====================

__all__ = [
    "ErrorCategory",
    "ApplicationError",
    "NotFoundError",
    "ValidationError",
    "BadRequestError",
    "ConflictError",
    "StoreOperationError",
    "StoreUnavailableError",
]
