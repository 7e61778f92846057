"""
API 请求/响应模型

定义 FastAPI 的 Pydantic 模型（请求和响应）
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class DependencyReport(BaseModel):
    """模块使用上报 - 浏览器在页面加载后上报实际加载的模块"""

    route: str = Field(..., description="页面类型（路由名）", min_length=1)
    deps: List[str] = Field(default_factory=list, description="实际加载的模块路径")
    paths: Dict[str, Any] = Field(
        default_factory=dict,
        description="RequireJS paths 配置（别名 -> 路径，或路径数组形式的 fallback）",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "route": "checkout",
                "deps": [
                    "mage/common.min.js",
                    "jquery/jquery.storageapi.min.js",
                    "ui/template/form/field.html",
                ],
                "paths": {
                    "jquery/ui": "jquery/jquery-ui",
                    "text": "mage/requirejs/text",
                },
            }
        }
    )


class DependencyResult(BaseModel):
    """上报结果（始终为 true）"""

    result: bool = True


class BundleSelection(BaseModel):
    """当前页面类型应加载的 bundle 文件"""

    page_type: str = Field(..., description="页面类型")
    bundles: List[str] = Field(default_factory=list, description="bundle 文件路径")


class HealthResponse(BaseModel):
    """健康检查响应"""

    status: str = Field(..., description="健康状态：healthy | unhealthy")
    store: str = Field(..., description="存储类型：memory | mongodb")
    records: int = Field(..., description="已采集的记录数")
    version: str = Field(..., description="API 版本")
    uptime: Optional[float] = Field(default=None, description="运行时间（秒）")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "store": "mongodb",
                "records": 1280,
                "version": "1.0.0",
                "uptime": 3600.5,
            }
        }
    )
