"""
博客后台管理页面
服务端渲染（Jinja2），表单提交后重定向或带错误信息重新渲染
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.database import get_db
from core.errors import AppException, GuardDeniedException
from utils.text import truncate

from .blog_rules import parent_title, GuardReason
from .blog_schemas import CategoryCreate, CategoryUpdate
from .blog_services import BlogService

logger = logging.getLogger(__name__)

admin_router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
templates.env.filters["truncate_text"] = truncate
templates.env.globals["parent_title"] = parent_title

# 后台表单规则比接口更严格
TITLE_MIN = 5
TITLE_MAX = 200
SLUG_MAX = 200
DESCRIPTION_MAX = 500


def _form_values(form) -> Dict[str, str]:
    return {
        "title": (form.get("title") or "").strip(),
        "slug": (form.get("slug") or "").strip(),
        "description": (form.get("description") or "").strip(),
        "parent_id": (form.get("parent_id") or "").strip(),
    }


async def _validate_category_form(
    service: BlogService,
    values: Dict[str, str],
    category_id: Optional[int] = None
) -> Tuple[Optional[int], Dict[str, str]]:
    """
    校验后台分类表单

    Returns:
        (父分类ID, 字段错误)
    """
    errors: Dict[str, str] = {}

    title = values["title"]
    if not title:
        errors["title"] = "标题不能为空"
    elif not TITLE_MIN <= len(title) <= TITLE_MAX:
        errors["title"] = f"标题长度需在 {TITLE_MIN}-{TITLE_MAX} 个字符之间"
    elif category_id is None and await service.category_title_exists(title):
        errors["title"] = "标题已存在"

    if len(values["slug"]) > SLUG_MAX:
        errors["slug"] = f"slug 不能超过 {SLUG_MAX} 个字符"

    if len(values["description"]) > DESCRIPTION_MAX:
        errors["description"] = f"描述不能超过 {DESCRIPTION_MAX} 个字符"

    parent_id = None
    if values["parent_id"]:
        try:
            parent_id = int(values["parent_id"])
        except ValueError:
            errors["parent_id"] = "父分类无效"
        else:
            if await service.get_category(parent_id) is None:
                errors["parent_id"] = "父分类不存在"

    return parent_id, errors


def _errors_from_exception(exc: AppException) -> Dict[str, str]:
    """把业务异常转换为表单错误"""
    if isinstance(exc, GuardDeniedException):
        field = "parent_id" if exc.data.get("reason") == GuardReason.SELF_PARENT.value else "general"
        return {field: exc.message}
    if exc.data and exc.data.get("errors"):
        return {e["field"]: e["message"] for e in exc.data["errors"]}
    return {"general": exc.message}


def _errors_from_validation(exc: ValidationError) -> Dict[str, str]:
    return {".".join(str(loc) for loc in e["loc"]): e["msg"] for e in exc.errors()}


async def _render_form(
    request: Request,
    service: BlogService,
    category=None,
    values: Optional[Dict[str, str]] = None,
    errors: Optional[Dict[str, str]] = None,
    saved: bool = False,
    status_code: int = 200
):
    if values is None:
        values = {
            "title": category.title if category else "",
            "slug": category.slug if category else "",
            "description": (category.description or "") if category else "",
            "parent_id": str(category.parent_id) if category and category.parent_id else "",
        }
    # 父分类下拉框不包含自身
    parents = [
        c for c in await service.get_all_categories()
        if category is None or c.id != category.id
    ]
    return templates.TemplateResponse(
        request,
        "blog_admin/category_edit.html",
        {
            "category": category,
            "values": values,
            "errors": errors or {},
            "parents": parents,
            "saved": saved,
        },
        status_code=status_code
    )


# ============ 分类 ============

@admin_router.get("/categories", name="admin_categories")
async def category_index(request: Request, page: int = 1, db: AsyncSession = Depends(get_db)):
    """分类列表"""
    service = BlogService(db)
    result = await service.get_categories(max(page, 1), get_settings().blog_admin_per_page)
    return templates.TemplateResponse(
        request,
        "blog_admin/categories.html",
        {
            "page": result,
            "links": result.links(request.url),
            "deleted": request.query_params.get("deleted") == "1",
        }
    )


@admin_router.get("/categories/create", name="admin_category_create")
async def category_create(request: Request, db: AsyncSession = Depends(get_db)):
    """新建分类表单"""
    return await _render_form(request, BlogService(db))


@admin_router.post("/categories", name="admin_category_store")
async def category_store(request: Request, db: AsyncSession = Depends(get_db)):
    """保存新分类"""
    service = BlogService(db)
    values = _form_values(await request.form())
    parent_id, errors = await _validate_category_form(service, values)

    if not errors:
        try:
            category = await service.create_category(CategoryCreate(
                title=values["title"],
                slug=values["slug"] or None,
                description=values["description"] or None,
                parent_id=parent_id
            ))
        except ValidationError as e:
            errors = _errors_from_validation(e)
        except AppException as e:
            errors = _errors_from_exception(e)
        else:
            logger.info(f"后台创建分类: id={category.id}")
            url = request.url_for("admin_category_edit", category_id=category.id)
            return RedirectResponse(f"{url}?saved=1", status_code=303)

    return await _render_form(request, service, values=values, errors=errors, status_code=422)


@admin_router.get("/categories/{category_id}/edit", name="admin_category_edit")
async def category_edit(category_id: int, request: Request, db: AsyncSession = Depends(get_db)):
    """编辑分类表单"""
    service = BlogService(db)
    category = await service.get_category(category_id)
    if not category:
        return templates.TemplateResponse(
            request, "blog_admin/not_found.html", {"resource": "分类"}, status_code=404
        )
    saved = request.query_params.get("saved") == "1"
    return await _render_form(request, service, category=category, saved=saved)


@admin_router.post("/categories/{category_id}", name="admin_category_update")
async def category_update(category_id: int, request: Request, db: AsyncSession = Depends(get_db)):
    """保存分类修改"""
    service = BlogService(db)
    category = await service.get_category(category_id)
    if not category:
        return templates.TemplateResponse(
            request, "blog_admin/not_found.html", {"resource": "分类"}, status_code=404
        )

    values = _form_values(await request.form())
    parent_id, errors = await _validate_category_form(service, values, category_id=category.id)

    if not errors:
        try:
            # slug 留空表示按标题重新生成
            await service.update_category(category.id, CategoryUpdate(
                title=values["title"],
                slug=values["slug"] or None,
                description=values["description"] or None,
                parent_id=parent_id
            ))
        except ValidationError as e:
            errors = _errors_from_validation(e)
        except AppException as e:
            errors = _errors_from_exception(e)
        else:
            url = request.url_for("admin_category_edit", category_id=category_id)
            return RedirectResponse(f"{url}?saved=1", status_code=303)

        # 提交失败回滚后实体已过期，重新加载
        category = await service.get_category(category_id)

    return await _render_form(
        request, service, category=category, values=values, errors=errors, status_code=422
    )


@admin_router.post("/categories/{category_id}/delete", name="admin_category_delete")
async def category_delete(category_id: int, request: Request, db: AsyncSession = Depends(get_db)):
    """删除分类"""
    service = BlogService(db)
    category = await service.get_category(category_id)
    if not category:
        return templates.TemplateResponse(
            request, "blog_admin/not_found.html", {"resource": "分类"}, status_code=404
        )

    try:
        await service.delete_category(category.id)
    except GuardDeniedException as e:
        return await _render_form(
            request, service, category=category, errors={"general": e.message}, status_code=422
        )

    url = request.url_for("admin_categories")
    return RedirectResponse(f"{url}?deleted=1", status_code=303)


# ============ 文章 ============

@admin_router.get("/posts", name="admin_posts")
async def post_index(request: Request, page: int = 1, db: AsyncSession = Depends(get_db)):
    """文章列表"""
    service = BlogService(db)
    result = await service.get_posts(max(page, 1), get_settings().blog_admin_per_page)
    return templates.TemplateResponse(
        request,
        "blog_admin/posts.html",
        {"page": result, "links": result.links(request.url)}
    )
