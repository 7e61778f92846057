"""
健康检查路由模块

提供服务健康状态检查接口
"""

from fastapi import APIRouter

from api.models import HealthResponse
from api.container import AppContextDep, RepositoryManagerDep


def create_router() -> APIRouter:
    """
    创建健康检查路由器（工厂函数）

    Returns:
        配置完成的 APIRouter 实例
    """
    router = APIRouter()

    @router.get(
        "/health",
        response_model=HealthResponse,
        summary="健康检查",
        description="检查 API 服务和采集存储的健康状态",
    )
    async def health_check(ctx: AppContextDep, repos: RepositoryManagerDep):
        """健康检查"""
        from api import __version__

        return HealthResponse(
            status="healthy",
            store="mongodb" if repos.is_persistent else "memory",
            records=await repos.usage_records.count(),
            version=__version__,
            uptime=ctx.uptime,
        )

    return router
