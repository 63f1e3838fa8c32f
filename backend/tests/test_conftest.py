"""
测试配置和 Fixtures
提供测试用的数据库会话、客户端和通用工具
"""

import os
import sys

# 立即设置测试环境变量，确保核心模块加载时使用测试配置
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENV", "test")

from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

# 确保可以导入项目模块
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.database import Base, engine as global_engine
from core.database import async_session as TestSessionLocal
from core.bootstrap import ensure_default_user, ensure_root_category
import models  # 强制加载核心模型以注册 Base.metadata
import modules.blog.blog_models  # noqa: F401
from main import app


# ==================== 测试夹具 (Fixtures) ====================

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    创建测试用数据库会话
    每个测试函数使用独立的会话，并自动注入到 FastAPI 中
    """
    # 使用全局引擎（已经通过环境变量配置为内存数据库）
    async with global_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = TestSessionLocal()

    try:
        # 重写依赖注入，确保 app 使用测试会话
        from core.database import get_db

        async def _get_test_db():
            yield session

        app.dependency_overrides[get_db] = _get_test_db

        yield session

    finally:
        await session.rollback()
        await session.close()
        app.dependency_overrides.clear()

        # 清理所有表，并释放连接（每个测试使用各自的事件循环）
        async with global_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await global_engine.dispose()


@pytest.fixture
def db(db_session):
    """db_session 测试夹具的别名"""
    return db_session


@pytest_asyncio.fixture(scope="function")
async def blog_defaults(db_session: AsyncSession) -> AsyncSession:
    """
    默认作者和根分类

    ASGITransport 不会触发 lifespan，需要手动初始化
    """
    await ensure_default_user(db_session)
    await ensure_root_category(db_session)
    await db_session.commit()
    return db_session


@pytest_asyncio.fixture(scope="function")
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """创建异步测试客户端"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ==================== 工具函数 ====================

async def create_test_category(
    session: AsyncSession,
    title: str,
    slug: Optional[str] = None,
    parent_id: Optional[int] = None
):
    """通过服务层创建分类"""
    from modules.blog.blog_schemas import CategoryCreate
    from modules.blog.blog_services import BlogService

    service = BlogService(session)
    return await service.create_category(CategoryCreate(title=title, slug=slug, parent_id=parent_id))


async def create_test_post(
    session: AsyncSession,
    title: str,
    category_id: int,
    is_published: bool = False,
    **fields
):
    """通过服务层创建文章（作者为默认作者）"""
    from core.config import get_settings
    from modules.blog.blog_schemas import PostCreate
    from modules.blog.blog_services import BlogService

    service = BlogService(session)
    data = PostCreate(
        title=title,
        category_id=category_id,
        content_raw=fields.pop("content_raw", "正文"),
        is_published=is_published,
        **fields
    )
    return await service.create_post(data, get_settings().blog_default_user_id)
