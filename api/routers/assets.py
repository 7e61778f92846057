"""
静态资源路由模块

按页面类型返回需要引用的 bundle 文件
"""

from fastapi import APIRouter

from api.container import AppContextDep, BundleServiceDep
from api.models import BundleSelection


def create_router() -> APIRouter:
    """
    创建静态资源路由器（工厂函数）

    Returns:
        配置完成的 APIRouter 实例
    """
    router = APIRouter()

    @router.get(
        "/bundles/{page_type}",
        response_model=BundleSelection,
        summary="页面 bundle 列表",
        description="生产模式下只返回当前页面类型的 requirejs-config 文件",
    )
    async def select_bundles(page_type: str, ctx: AppContextDep, service: BundleServiceDep):
        """筛选当前页面类型需要引用的 bundle 文件"""
        bundles = service.select_bundles(ctx.static_package, page_type)
        return BundleSelection(page_type=page_type, bundles=bundles)

    return router
