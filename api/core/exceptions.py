"""
异常与异常处理器

采集接口拒绝请求时只返回 400 状态码，不带响应体；
其余接口的错误统一为 {"status", "code", "message", "detail"}。
"""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.core.logging import get_logger

logger = get_logger(__name__)


class InvalidRequestError(Exception):
    """采集请求被拒绝：非同源/非异步请求、JSON 无法解析、结构不符"""

    def __init__(self, message: str, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


def _error(status_code: int, code: str, message: str, detail: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": status_code, "code": code, "message": message, "detail": detail},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        logger.info(f"Request rejected: {request.method} {request.url.path} - {exc.message}")
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error: {exc.errors()}")
        return _error(422, "VALIDATION_ERROR", "Request validation failed", exc.errors())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _error(exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail or "HTTP Error"))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        detail = str(exc) if logger.isEnabledFor(logging.DEBUG) else None
        return _error(500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred", detail)
