"""
博客API路由
RESTful风格
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.database import get_db
from core.errors import ErrorCode, NotFoundException
from core.events import event_bus, Events
from core.pagination import PaginationParams, get_pagination_params
from schemas import success, paginate

from .blog_models import BlogCategory, BlogPost
from .blog_rules import parent_title, is_root_category
from .blog_schemas import (
    PostCreate, PostUpdate, PostInfo, PostListItem,
    CategoryCreate, CategoryUpdate, CategoryInfo, CategorySummary
)
from .blog_services import BlogService

router = APIRouter()


def _category_data(category: BlogCategory, posts_count: int = 0) -> dict:
    """分类响应数据（附加父分类标题、文章数）"""
    data = CategoryInfo.model_validate(category).model_dump()
    data["parent_title"] = parent_title(category)
    data["is_root"] = is_root_category(category)
    data["posts_count"] = posts_count
    return data


def _post_data(post: BlogPost, schema=PostListItem) -> dict:
    return schema.model_validate(post).model_dump()


def _category_not_found(key) -> NotFoundException:
    return NotFoundException("分类", key, code=ErrorCode.BLOG_CATEGORY_NOT_FOUND)


def _post_not_found(key) -> NotFoundException:
    return NotFoundException("文章", key, code=ErrorCode.BLOG_POST_NOT_FOUND)


# ============ 分类接口 ============

@router.get("/categories")
async def list_categories(
    request: Request,
    params: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db)
):
    """获取分类列表（分页，按ID倒序）"""
    service = BlogService(db)
    result = await service.get_categories(params.page, params.per_page)
    counts = await service.count_posts_by_category([c.id for c in result.items])
    result.items = [_category_data(c, counts.get(c.id, 0)) for c in result.items]
    return paginate(result, request.url)


@router.get("/categories-all")
async def list_all_categories(db: AsyncSession = Depends(get_db)):
    """获取全部分类（按标题排序，用于下拉选择）"""
    service = BlogService(db)
    categories = await service.get_all_categories()
    counts = await service.count_posts_by_category([c.id for c in categories])
    return success([_category_data(c, counts.get(c.id, 0)) for c in categories])


@router.get("/categories/{slug}")
async def get_category(slug: str, db: AsyncSession = Depends(get_db)):
    """通过slug获取分类"""
    service = BlogService(db)
    category = await service.get_category_by_slug(slug)
    if not category:
        raise _category_not_found(slug)
    return success(_category_data(category, await service.count_posts(category.id)))


@router.get("/categories/{slug}/posts")
async def list_category_posts(
    slug: str,
    request: Request,
    params: PaginationParams = Depends(get_pagination_params),
    db: AsyncSession = Depends(get_db)
):
    """获取分类下的文章（附带分类摘要）"""
    service = BlogService(db)
    category = await service.get_category_by_slug(slug)
    if not category:
        raise _category_not_found(slug)

    result = await service.get_posts(params.page, params.per_page, category_id=category.id)
    result.items = [_post_data(p) for p in result.items]
    return paginate(
        result,
        request.url,
        extra={"category": CategorySummary.model_validate(category).model_dump()}
    )


@router.post("/categories", status_code=201)
async def create_category(data: CategoryCreate, db: AsyncSession = Depends(get_db)):
    """创建分类"""
    service = BlogService(db)
    category = await service.create_category(data)

    event_bus.emit(Events.CONTENT_CREATED, "blog", {
        "type": "category",
        "id": category.id,
        "slug": category.slug
    })

    return success(_category_data(category), "创建成功")


@router.put("/categories/{category_id}")
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db)
):
    """更新分类"""
    service = BlogService(db)
    category = await service.update_category(category_id, data)
    if not category:
        raise _category_not_found(category_id)

    event_bus.emit(Events.CONTENT_UPDATED, "blog", {
        "type": "category",
        "id": category.id,
        "slug": category.slug
    })

    return success(_category_data(category, await service.count_posts(category.id)), "更新成功")


@router.delete("/categories/{category_id}")
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)):
    """删除分类（软删除）"""
    service = BlogService(db)
    if not await service.delete_category(category_id):
        raise _category_not_found(category_id)

    event_bus.emit(Events.CONTENT_DELETED, "blog", {
        "type": "category",
        "id": category_id
    })

    return success(message="删除成功")


# ============ 文章接口 ============

@router.get("/posts")
async def list_posts(
    request: Request,
    params: PaginationParams = Depends(get_pagination_params),
    category_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """获取文章列表（分页，按ID倒序）"""
    service = BlogService(db)
    result = await service.get_posts(params.page, params.per_page, category_id=category_id)
    result.items = [_post_data(p) for p in result.items]
    return paginate(result, request.url)


@router.get("/posts/{slug}")
async def get_post(slug: str, db: AsyncSession = Depends(get_db)):
    """通过slug获取文章详情"""
    service = BlogService(db)
    post = await service.get_post_by_slug(slug)
    if not post:
        raise _post_not_found(slug)
    return success(_post_data(post, schema=PostInfo))


@router.post("/posts", status_code=201)
async def create_post(data: PostCreate, db: AsyncSession = Depends(get_db)):
    """创建文章（作者为默认作者）"""
    service = BlogService(db)
    post = await service.create_post(data, get_settings().blog_default_user_id)

    event_bus.emit(Events.CONTENT_CREATED, "blog", {
        "type": "post",
        "id": post.id,
        "slug": post.slug
    })

    return success(_post_data(post, schema=PostInfo), "创建成功")


@router.put("/posts/{post_id}")
async def update_post(
    post_id: int,
    data: PostUpdate,
    db: AsyncSession = Depends(get_db)
):
    """更新文章"""
    service = BlogService(db)
    post = await service.update_post(post_id, data)
    if not post:
        raise _post_not_found(post_id)

    event_bus.emit(Events.CONTENT_UPDATED, "blog", {
        "type": "post",
        "id": post.id,
        "slug": post.slug
    })

    return success(_post_data(post, schema=PostInfo), "更新成功")


@router.delete("/posts/{post_id}")
async def delete_post(post_id: int, db: AsyncSession = Depends(get_db)):
    """删除文章（软删除）"""
    service = BlogService(db)
    if not await service.delete_post(post_id):
        raise _post_not_found(post_id)

    event_bus.emit(Events.CONTENT_DELETED, "blog", {
        "type": "post",
        "id": post_id
    })

    return success(message="删除成功")
