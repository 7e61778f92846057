"""
模块使用采集路由模块

提供采集接口（浏览器上报）和客户端采集脚本
"""

import json
from urllib.parse import urlsplit

from fastapi import APIRouter, Query, Request, Response
from pydantic import ValidationError

from api.container import AppContextDep, UsageCollectorDep
from api.core.exceptions import InvalidRequestError
from api.core.logging import get_logger
from api.models import DependencyReport, DependencyResult
from api.services.instrumentation import render_script

logger = get_logger(__name__)

AJAX_HEADER_VALUE = "XMLHttpRequest"


def _host_of(url: str) -> str:
    return urlsplit(url).netloc.lower()


def ensure_same_origin_ajax(request: Request) -> None:
    """
    校验请求来自同源页面的异步 POST

    Origin 优先，缺失时使用 Referer；两者都缺失时只校验 X-Requested-With
    """
    if request.headers.get("x-requested-with") != AJAX_HEADER_VALUE:
        raise InvalidRequestError("Not an asynchronous request")

    host = request.headers.get("host", "").lower()
    source = request.headers.get("origin") or request.headers.get("referer")
    if source and _host_of(source) != host:
        raise InvalidRequestError(f"Cross-origin request from {source}")


def parse_report(body: bytes) -> DependencyReport:
    """解析上报内容，JSON 非法或结构不符时拒绝"""
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidRequestError(f"Malformed JSON: {e}")

    if not isinstance(payload, dict):
        raise InvalidRequestError("Payload must be a JSON object")

    try:
        return DependencyReport.model_validate(payload)
    except ValidationError as e:
        raise InvalidRequestError("Payload shape mismatch", detail=e.errors())


def create_router() -> APIRouter:
    """
    创建采集路由器（工厂函数）

    Returns:
        配置完成的 APIRouter 实例
    """
    router = APIRouter()

    @router.post(
        "/performance/retrieve/dependency",
        name="collect_dependencies",
        response_model=DependencyResult,
        responses={400: {"description": "Rejected (empty body)"}},
        summary="模块使用上报",
        description="记录页面类型实际加载的模块，重复上报直接忽略",
    )
    async def collect_dependencies(request: Request, collector: UsageCollectorDep):
        """
        采集接口

        **请求示例**：
        ```json
        {
            "route": "checkout",
            "deps": ["mage/common.min.js", "ui/template/form/field.html"],
            "paths": {"text": "mage/requirejs/text"}
        }
        ```

        **响应**：`{"result": true}`，拒绝时返回 400 且无响应体
        """
        ensure_same_origin_ajax(request)
        report = parse_report(await request.body())

        await collector.collect(report)
        return DependencyResult(result=True)

    @router.get(
        "/performance/retrieve/script",
        summary="客户端采集脚本",
        description="返回嵌入页面的采集脚本",
    )
    async def instrumentation_script(
        request: Request,
        ctx: AppContextDep,
        route: str = Query(..., min_length=1, description="页面类型"),
    ):
        url = request.url_for("collect_dependencies").path
        script = render_script(route, url, ctx.bundler_config.bundle_dir)
        return Response(content=script, media_type="application/javascript")

    return router
