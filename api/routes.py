"""
API 路由模块

汇总所有路由：
- collection_router: 采集接口，挂载在根路径（页面脚本直接访问）
- router: 管理接口，挂载在 /api/v1
"""

from fastapi import APIRouter

from api.routers import assets, dependency, health

collection_router = dependency.create_router()

router = APIRouter()
router.include_router(assets.create_router())
router.include_router(health.create_router())
