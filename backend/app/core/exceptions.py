"""Exception handling utilities for FastAPI routes.

统一异常处理，集成 domains.core 的 ApplicationError 体系。

所有单实体错误响应统一为 ``{"error": {"message": ..., "details": ...}}``:
- ApplicationError: 使用其 HTTP 状态码
- 请求参数/请求体校验失败: 400
- 其他未处理异常: 500，仅 DEBUG 模式下附带 details
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from domains.core import ApplicationError
from domains.doc_core.validation import describe_errors

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """
    注册 FastAPI 异常处理器

    使用示例:
        app = FastAPI()
        register_exception_handlers(app)
    """

    @app.exception_handler(ApplicationError)
    async def application_error_handler(
        request: Request,
        exc: ApplicationError
    ) -> JSONResponse:
        """处理 ApplicationError 及其子类"""
        logger.warning(
            f"application_error: [{exc.code}] {exc.message}",
            extra={"path": request.url.path, "details": exc.details}
        )

        return JSONResponse(
            status_code=exc.http_status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """请求参数校验失败（如 limit 不是整数、请求体不是合法 JSON）"""
        details = describe_errors(exc.errors(), skip_prefix=1)
        message = details[0]["message"] if details else "Invalid request"
        logger.warning(f"request_validation_error: {request.url.path}, {message}")

        return JSONResponse(
            status_code=400,
            content={"error": {"message": message, "details": details}},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """全局异常处理器 - 捕获所有未处理的异常"""
        logger.exception(
            f"unhandled_exception: {type(exc).__name__}: {exc}",
            extra={
                "path": request.url.path,
                "method": request.method,
            }
        )

        error = {"message": "Internal server error"}
        if get_settings().DEBUG:
            error["details"] = str(exc)
        return JSONResponse(status_code=500, content={"error": error})


__all__ = [
    "register_exception_handlers",
]
