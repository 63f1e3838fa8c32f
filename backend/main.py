"""
Blog CMS - 主入口
基于FastAPI的博客内容管理服务

- JSON API: /api/v1/blog
- 后台管理页面: /blog/admin
- 健康检查: /health
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from core.config import get_settings
from core.database import init_db, close_db
from core.bootstrap import ensure_blog_defaults
from core.events import event_bus, Events, Event
from core.event_handlers import register_event_handlers
from core.middleware import RequestLoggingMiddleware
from core.errors import register_exception_handlers

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# 减少第三方库的日志输出
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # ==================== 启动阶段 ====================
    current_settings = get_settings()
    logger.info(f"🚀 正在启动 {current_settings.app_name} v{current_settings.app_version}...")

    # 1. 初始化数据库
    await init_db()

    # 2. 默认作者和根分类
    try:
        result = await ensure_blog_defaults()
        if result.get("root_created"):
            logger.info("✅ 已创建根分类")
    except Exception as e:
        logger.error(f"❌ 初始化博客基础数据失败: {e}")

    # 3. 事件处理器
    register_event_handlers()

    await event_bus.publish(Event(name=Events.SYSTEM_STARTUP, source="kernel"))
    logger.info(f"🎉 {current_settings.app_name} 启动完成!")

    yield

    # ==================== 关闭阶段 ====================
    logger.info("🛑 系统关闭中...")
    await event_bus.publish(Event(name=Events.SYSTEM_SHUTDOWN, source="kernel"))
    await close_db()
    logger.info("👋 系统已关闭")


# ==================== 创建应用 ====================
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="博客分类与文章管理",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)


# ==================== 中间件配置 ====================
app.add_middleware(
    RequestLoggingMiddleware,
    skip_paths=["/health", "/api/docs", "/api/redoc", "/api/openapi.json"],
    slow_request_threshold=settings.slow_request_threshold
)


# ==================== 异常处理器 ====================
register_exception_handlers(app)


# ==================== 注册路由 ====================
from modules.blog.blog_router import router as blog_router
from modules.blog.blog_admin import admin_router as blog_admin_router
from core.health import router as health_router

app.include_router(blog_router, prefix="/api/v1/blog", tags=["博客"])
app.include_router(blog_admin_router, prefix="/blog/admin", tags=["博客后台"], include_in_schema=False)
app.include_router(health_router)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/api/docs"
    }


# ==================== 启动入口 ====================
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
