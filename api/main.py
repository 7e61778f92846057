"""
JS Bundle API 应用入口

    uvicorn api.main:app

挂载：
- 采集接口（根路径，由页面脚本直接访问）
- /api/v1 下的 bundle 筛选与健康检查
"""

import asyncio
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from starlette.types import Receive, Scope, Send

from api import __version__
from api.container import AppContext
from api.core import get_logger, setup_exception_handlers, setup_logging, setup_middlewares
from api.routes import collection_router, router

load_dotenv()

_log_file = setup_logging()
logger = get_logger(__name__)
if _log_file:
    logger.info(f"Log file: {_log_file}")

DESCRIPTION = "RequireJS module usage collection and page-specific bundling"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """启动时创建 AppContext，关闭时释放数据库连接"""
    ctx = await AppContext.create()
    store = "mongodb" if ctx.repository_manager.is_persistent else "memory"
    logger.info(f"JS Bundle API started - store={store}, package={ctx.config.static_package}")
    try:
        yield
    finally:
        await ctx.shutdown()
        logger.info("JS Bundle API stopped")


class AppWrapper:
    """
    吞掉进程退出时的 asyncio.CancelledError

    FastAPI 的异常处理器不处理 BaseException，否则服务会以 traceback 退出。
    """

    def __init__(self, app: FastAPI) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await self.app(scope, receive, send)
        except asyncio.CancelledError:
            pass


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="JS Bundle API", description=DESCRIPTION, version=__version__, lifespan=lifespan)
    setup_middlewares(fastapi_app)
    setup_exception_handlers(fastapi_app)

    fastapi_app.include_router(collection_router, tags=["Collection"])
    fastapi_app.include_router(router, prefix="/api/v1", tags=["JS Bundle"])

    @fastapi_app.get("/", tags=["Root"])
    async def root():
        return {
            "name": "JS Bundle API",
            "version": __version__,
            "description": DESCRIPTION,
            "docs": "/docs",
            "collect": "/performance/retrieve/dependency",
            "health": "/api/v1/health",
        }

    return fastapi_app


app = AppWrapper(create_app())


if __name__ == "__main__":
    import uvicorn

    debug = os.getenv("DEBUG", "false").lower() == "true"
    reload = os.getenv("RELOAD", str(debug)).lower() == "true"

    # reload 模式只接受字符串形式的应用路径，且不支持多 worker
    uvicorn.run(
        "api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=reload,
        reload_dirs=["api", "jsbundle"] if reload else None,
        workers=None if reload else int(os.getenv("WORKERS", "1")),
        log_level="debug" if debug else "info",
    )
