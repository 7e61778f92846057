"""
HTTP 中间件

采集接口只接受同源请求，因此不注册 CORS 中间件。
"""

import asyncio

from fastapi import FastAPI, Request, Response, status

from api.core.correlation import correlator, generate_request_id
from api.core.logging import get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def setup_middlewares(app: FastAPI) -> None:
    @app.middleware("http")
    async def request_scope(request: Request, call_next):
        """
        在关联作用域内处理请求

        - 沿用请求头中的 X-Correlation-ID，没有时生成 R 开头的新 ID
        - 响应头回写同一 ID
        - 请求被取消时返回 503
        """
        cid = request.headers.get(CORRELATION_HEADER) or f"R{generate_request_id()}"
        with correlator.scope(cid):
            try:
                response = await call_next(request)
            except asyncio.CancelledError:
                logger.info(f"Request cancelled: {request.method} {request.url.path}")
                return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

            response.headers[CORRELATION_HEADER] = cid
            logger.info(f"{request.method} {request.url.path} [{response.status_code}]")
            return response
