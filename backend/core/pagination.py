"""
统一分页工具
提供标准化的分页查询功能
"""

import math
from typing import List, Optional, Any, Callable
from fastapi import Query
from pydantic import BaseModel, ConfigDict, Field

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import URL

from .config import get_settings


class PaginationParams(BaseModel):
    """分页参数"""
    page: int = Field(default=1, ge=1, description="页码，从1开始")
    per_page: int = Field(default=10, ge=1, description="每页数量")

    @property
    def offset(self) -> int:
        """计算偏移量"""
        return (self.page - 1) * self.per_page

    @property
    def limit(self) -> int:
        """获取限制数量"""
        return self.per_page


class PageResult(BaseModel):
    """
    分页结果

    items 为当前页数据，其余字段描述分页位置
    """
    items: List[Any] = Field(description="数据列表")
    total: int = Field(description="总记录数")
    page: int = Field(description="当前页码")
    per_page: int = Field(description="每页数量")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def last_page(self) -> int:
        """最后一页页码（无数据时为1）"""
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page > 0 else 1

    @property
    def first_item(self) -> Optional[int]:
        """当前页第一条记录的序号（从1开始），空页为 None"""
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + 1

    @property
    def last_item(self) -> Optional[int]:
        """当前页最后一条记录的序号，空页为 None"""
        if not self.items:
            return None
        return self.first_item + len(self.items) - 1

    @property
    def has_next(self) -> bool:
        return self.page < self.last_page

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def page_url(self, url: Optional[URL], page: int) -> Optional[str]:
        """生成指定页的链接，保留其他查询参数"""
        if url is None:
            return None
        return str(url.include_query_params(page=page))

    def meta(self) -> dict:
        return {
            "current_page": self.page,
            "from": self.first_item,
            "last_page": self.last_page,
            "per_page": self.per_page,
            "to": self.last_item,
            "total": self.total,
        }

    def links(self, url: Optional[URL] = None) -> dict:
        return {
            "first": self.page_url(url, 1),
            "last": self.page_url(url, self.last_page),
            "prev": self.page_url(url, self.page - 1) if self.has_prev else None,
            "next": self.page_url(url, self.page + 1) if self.has_next else None,
        }

    def to_dict(self, url: Optional[URL] = None) -> dict:
        """转换为字典（用于API响应）"""
        return {
            "items": self.items,
            "meta": self.meta(),
            "links": self.links(url),
        }


def get_pagination_params(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1)
) -> PaginationParams:
    """
    FastAPI 依赖注入函数

    per_page 缺省取配置值，超过上限时截断
    """
    settings = get_settings()
    if per_page is None:
        per_page = settings.blog_per_page
    per_page = min(per_page, settings.blog_max_per_page)
    return PaginationParams(page=page, per_page=per_page)


async def paginate(
    db: AsyncSession,
    query,
    page: int = 1,
    per_page: int = 10,
    transformer: Optional[Callable] = None
) -> PageResult:
    """
    通用分页查询

    Args:
        db: 数据库会话
        query: SQLAlchemy 查询对象
        page: 页码（从1开始）
        per_page: 每页数量
        transformer: 可选的数据转换函数

    Usage:
        query = select(BlogPost).where(BlogPost.deleted_at.is_(None))
        result = await paginate(db, query, page=1, per_page=10)
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    offset = (page - 1) * per_page
    result = await db.execute(query.offset(offset).limit(per_page))
    items = list(result.scalars().all())

    if transformer:
        items = [transformer(item) for item in items]

    return PageResult(items=items, total=total, page=page, per_page=per_page)
