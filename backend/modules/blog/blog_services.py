"""
博客业务逻辑
"""

import logging
from typing import Dict, List, Optional, Type, Union

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.errors import ValidationException, SlugConflictException
from core.pagination import paginate, PageResult
from utils.text import generate_slug, resolve_unique_slug_async
from utils.timezone import utc_now, to_naive_utc

from .blog_models import BlogPost, BlogCategory
from .blog_rules import can_reassign_parent, can_delete_category, derive_published_at
from .blog_schemas import PostCreate, PostUpdate, CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)

SluggedModel = Union[Type[BlogCategory], Type[BlogPost]]


def is_slug_conflict(error: IntegrityError) -> bool:
    """完整性错误是否为slug唯一索引冲突（SQLite / MySQL 的报错文本）"""
    message = str(error.orig).lower()
    return "slug" in message and ("unique" in message or "duplicate" in message)


class BlogService:
    """博客服务"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============ 通用 ============

    async def _commit(self, entity: str):
        """
        提交事务

        只有slug唯一索引冲突转换为可重试的 409，其他完整性错误原样抛出
        """
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if not is_slug_conflict(e):
                logger.error(f"{entity} 写入失败（完整性约束）: {e.orig}")
                raise
            logger.warning(f"{entity} 写入时违反唯一约束（并发占用slug）: {e.orig}")
            raise SlugConflictException(entity) from e

    async def _reload(self, model: SluggedModel, entity_id: int):
        """重新加载实体及其关联（提交后关联可能已过期）"""
        query = select(model).where(model.id == entity_id)
        if model is BlogCategory:
            query = query.options(selectinload(BlogCategory.parent))
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one()

    # ============ slug ============

    async def _slug_taken(self, model: SluggedModel, slug: str, exclude_id: Optional[int]) -> bool:
        query = select(func.count(model.id)).where(model.slug == slug)
        if exclude_id is not None:
            query = query.where(model.id != exclude_id)
        result = await self.db.execute(query)
        return (result.scalar() or 0) > 0

    async def assign_slug(
        self,
        model: SluggedModel,
        explicit: Optional[str],
        title: str,
        exclude_id: Optional[int] = None
    ) -> str:
        """
        确定要写入的slug

        显式指定的slug原样使用，被占用时报校验错误；
        未指定时根据标题生成，冲突时追加数字后缀
        """
        if explicit:
            if await self._slug_taken(model, explicit, exclude_id):
                raise ValidationException.for_field("slug", "该slug已被使用")
            return explicit

        candidate = generate_slug(title)
        if not candidate:
            raise ValidationException.for_field("title", "无法根据标题生成slug，请手动填写")

        # 逐个候选查库，比较规则与唯一索引一致（跟随列排序规则）
        slug = await resolve_unique_slug_async(
            candidate, lambda s: self._slug_taken(model, s, exclude_id)
        )
        if slug != candidate:
            logger.info(f"{model.__tablename__} slug冲突，{candidate} -> {slug}")
        return slug

    # ============ 分类 ============

    def _active_categories(self):
        return (
            select(BlogCategory)
            .options(selectinload(BlogCategory.parent))
            .where(BlogCategory.deleted_at.is_(None))
        )

    async def get_categories(self, page: int = 1, per_page: int = 10) -> PageResult:
        """分页获取分类（按ID倒序）"""
        query = self._active_categories().order_by(BlogCategory.id.desc())
        return await paginate(self.db, query, page, per_page)

    async def get_all_categories(self) -> List[BlogCategory]:
        """获取所有分类（按标题排序，用于下拉选择）"""
        result = await self.db.execute(
            self._active_categories().order_by(BlogCategory.title, BlogCategory.id)
        )
        return list(result.scalars().all())

    async def get_category(self, category_id: int) -> Optional[BlogCategory]:
        """获取分类"""
        result = await self.db.execute(
            self._active_categories().where(BlogCategory.id == category_id)
        )
        return result.scalar_one_or_none()

    async def get_category_by_slug(self, slug: str) -> Optional[BlogCategory]:
        """通过slug获取分类"""
        result = await self.db.execute(
            self._active_categories().where(BlogCategory.slug == slug)
        )
        return result.scalar_one_or_none()

    async def category_title_exists(self, title: str, exclude_id: Optional[int] = None) -> bool:
        """标题是否已被其他分类使用"""
        query = select(func.count(BlogCategory.id)).where(
            BlogCategory.title == title,
            BlogCategory.deleted_at.is_(None)
        )
        if exclude_id is not None:
            query = query.where(BlogCategory.id != exclude_id)
        result = await self.db.execute(query)
        return (result.scalar() or 0) > 0

    async def count_children(self, category_id: int) -> int:
        """子分类数量"""
        result = await self.db.execute(
            select(func.count(BlogCategory.id)).where(
                BlogCategory.parent_id == category_id,
                BlogCategory.deleted_at.is_(None)
            )
        )
        return result.scalar() or 0

    async def count_posts(self, category_id: int) -> int:
        """分类下的文章数量"""
        counts = await self.count_posts_by_category([category_id])
        return counts.get(category_id, 0)

    async def count_posts_by_category(self, category_ids: List[int]) -> Dict[int, int]:
        """批量统计文章数量（避免 N+1 查询）"""
        if not category_ids:
            return {}
        result = await self.db.execute(
            select(BlogPost.category_id, func.count(BlogPost.id).label("count"))
            .where(
                BlogPost.category_id.in_(category_ids),
                BlogPost.deleted_at.is_(None)
            )
            .group_by(BlogPost.category_id)
        )
        return {row.category_id: row.count for row in result}

    async def _ensure_parent_exists(self, parent_id: Optional[int]):
        if parent_id is not None and await self.get_category(parent_id) is None:
            raise ValidationException.for_field("parent_id", "父分类不存在")

    async def create_category(self, data: CategoryCreate) -> BlogCategory:
        """创建分类"""
        await self._ensure_parent_exists(data.parent_id)

        category_data = data.model_dump()
        category_data["slug"] = await self.assign_slug(BlogCategory, data.slug, data.title)

        category = BlogCategory(**category_data)
        self.db.add(category)
        await self._commit("category")

        logger.info(f"创建分类: id={category.id} slug={category.slug}")
        return await self._reload(BlogCategory, category.id)

    async def update_category(self, category_id: int, data: CategoryUpdate) -> Optional[BlogCategory]:
        """
        更新分类

        父分类指向自身时抛出 GuardDeniedException
        """
        category = await self.get_category(category_id)
        if not category:
            return None

        update_data = data.model_dump(exclude_unset=True)

        if "parent_id" in update_data:
            decision = can_reassign_parent(category.id, update_data["parent_id"])
            if not decision:
                logger.info(f"拒绝修改分类父级: id={category.id} reason={decision.reason.value}")
                raise decision.to_exception()
            await self._ensure_parent_exists(update_data["parent_id"])

        if "title" in update_data and update_data["title"] is None:
            update_data.pop("title")

        if "slug" in update_data:
            title = update_data.get("title", category.title)
            update_data["slug"] = await self.assign_slug(
                BlogCategory, update_data["slug"], title, exclude_id=category.id
            )

        for key, value in update_data.items():
            setattr(category, key, value)

        await self._commit("category")
        logger.info(f"更新分类: id={category.id}")
        return await self._reload(BlogCategory, category.id)

    async def delete_category(self, category_id: int) -> bool:
        """
        软删除分类

        根分类、有子分类或文章的分类拒绝删除，抛出 GuardDeniedException
        """
        category = await self.get_category(category_id)
        if not category:
            return False

        child_count = await self.count_children(category.id)
        post_count = await self.count_posts(category.id)
        decision = can_delete_category(category, child_count, post_count)
        if not decision:
            logger.info(
                f"拒绝删除分类: id={category.id} reason={decision.reason.value} "
                f"children={child_count} posts={post_count}"
            )
            raise decision.to_exception()

        category.mark_deleted(utc_now())
        await self._commit("category")
        logger.info(f"软删除分类: id={category.id}")
        return True

    # ============ 文章 ============

    def _active_posts(self):
        return select(BlogPost).where(BlogPost.deleted_at.is_(None))

    async def get_posts(
        self,
        page: int = 1,
        per_page: int = 10,
        category_id: Optional[int] = None
    ) -> PageResult:
        """分页获取文章（按ID倒序）"""
        query = self._active_posts()
        if category_id is not None:
            query = query.where(BlogPost.category_id == category_id)
        query = query.order_by(BlogPost.id.desc())
        return await paginate(self.db, query, page, per_page)

    async def get_post(self, post_id: int) -> Optional[BlogPost]:
        """获取文章"""
        result = await self.db.execute(
            self._active_posts().where(BlogPost.id == post_id)
        )
        return result.scalar_one_or_none()

    async def get_post_by_slug(self, slug: str) -> Optional[BlogPost]:
        """通过slug获取文章"""
        result = await self.db.execute(
            self._active_posts().where(BlogPost.slug == slug)
        )
        return result.scalar_one_or_none()

    async def _ensure_category_exists(self, category_id: int):
        if await self.get_category(category_id) is None:
            raise ValidationException.for_field("category_id", "分类不存在")

    async def create_post(self, data: PostCreate, user_id: int) -> BlogPost:
        """创建文章"""
        await self._ensure_category_exists(data.category_id)

        post_data = data.model_dump()
        post_data["user_id"] = user_id
        post_data["slug"] = await self.assign_slug(BlogPost, data.slug, data.title)
        post_data["published_at"] = derive_published_at(
            data.is_published, to_naive_utc(data.published_at), utc_now()
        )

        post = BlogPost(**post_data)
        self.db.add(post)
        await self._commit("post")

        logger.info(f"创建文章: id={post.id} slug={post.slug} published={post.is_published}")
        return await self._reload(BlogPost, post.id)

    async def update_post(self, post_id: int, data: PostUpdate) -> Optional[BlogPost]:
        """
        更新文章

        发布时间按合并后的发布状态重新推导，取消发布总会清空发布时间
        """
        post = await self.get_post(post_id)
        if not post:
            return None

        update_data = data.model_dump(exclude_unset=True)

        for key in ("title", "content_raw", "is_published", "category_id"):
            if key in update_data and update_data[key] is None:
                update_data.pop(key)

        if "category_id" in update_data:
            await self._ensure_category_exists(update_data["category_id"])

        if "slug" in update_data:
            title = update_data.get("title", post.title)
            update_data["slug"] = await self.assign_slug(
                BlogPost, update_data["slug"], title, exclude_id=post.id
            )

        is_published = update_data.get("is_published", post.is_published)
        if "published_at" in update_data:
            explicit = to_naive_utc(update_data["published_at"])
        else:
            explicit = post.published_at
        update_data["published_at"] = derive_published_at(is_published, explicit, utc_now())

        for key, value in update_data.items():
            setattr(post, key, value)

        await self._commit("post")
        logger.info(f"更新文章: id={post.id} published={post.is_published}")
        return await self._reload(BlogPost, post.id)

    async def delete_post(self, post_id: int) -> bool:
        """软删除文章"""
        post = await self.get_post(post_id)
        if not post:
            return False

        post.mark_deleted(utc_now())
        await self._commit("post")
        logger.info(f"软删除文章: id={post.id}")
        return True
