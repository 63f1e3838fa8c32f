"""
系统引导初始化
首次启动时创建默认作者和根分类
"""

import logging
from sqlalchemy import select

from .database import async_session
from .config import get_settings
from models import User
from utils.text import generate_slug

logger = logging.getLogger(__name__)


async def ensure_default_user(db) -> bool:
    """
    确保默认作者存在（文章归属此用户）

    Returns:
        是否新建
    """
    settings = get_settings()
    user = await db.get(User, settings.blog_default_user_id)
    if user:
        logger.debug(f"默认作者已存在: {user.name}")
        return False

    db.add(User(id=settings.blog_default_user_id, name=settings.blog_default_user_name))
    logger.info(f"创建默认作者: id={settings.blog_default_user_id}")
    return True


async def ensure_root_category(db) -> bool:
    """
    确保根分类存在

    根分类ID固定为配置值，slug由根标签生成
    """
    from modules.blog.blog_models import BlogCategory

    settings = get_settings()
    result = await db.execute(
        select(BlogCategory).where(BlogCategory.id == settings.blog_root_category_id)
    )
    if result.scalar_one_or_none():
        return False

    slug = generate_slug(settings.blog_root_label) or "root"
    db.add(BlogCategory(
        id=settings.blog_root_category_id,
        title=settings.blog_root_label,
        slug=slug,
        parent_id=None
    ))
    logger.info(f"创建根分类: id={settings.blog_root_category_id} slug={slug}")
    return True


async def ensure_blog_defaults() -> dict:
    """初始化博客基础数据，已存在则跳过"""
    async with async_session() as db:
        try:
            user_created = await ensure_default_user(db)
            root_created = await ensure_root_category(db)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"初始化博客基础数据失败: {e}")
            raise

    return {"user_created": user_created, "root_created": root_created}
