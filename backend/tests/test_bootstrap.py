"""
系统引导初始化测试
"""

import pytest
from sqlalchemy import select, func

from core.bootstrap import ensure_default_user, ensure_root_category
from models import User


class TestBootstrap:
    """默认作者与根分类"""

    @pytest.mark.asyncio
    async def test_creates_once(self, db_session):
        from modules.blog.blog_models import BlogCategory

        assert await ensure_default_user(db_session) is True
        assert await ensure_root_category(db_session) is True
        await db_session.commit()

        assert await ensure_default_user(db_session) is False
        assert await ensure_root_category(db_session) is False
        await db_session.commit()

        users = (await db_session.execute(select(func.count(User.id)))).scalar()
        categories = (await db_session.execute(select(func.count(BlogCategory.id)))).scalar()
        assert users == 1
        assert categories == 1

    @pytest.mark.asyncio
    async def test_root_slug_from_label(self, db_session):
        from modules.blog.blog_models import BlogCategory

        await ensure_root_category(db_session)
        await db_session.commit()
        root = (await db_session.execute(select(BlogCategory))).scalar_one()
        assert root.id == 1
        assert root.slug == "gen-fen-lei"
