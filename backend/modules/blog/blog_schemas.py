"""
博客数据验证模式
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SlugInput(BaseModel):
    """
    带标题和可选 slug 的输入

    空白 slug 视为未填写；标题提交时不能为空白
    """

    @field_validator("slug", mode="before", check_fields=False)
    @classmethod
    def blank_slug_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("title", check_fields=False)
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("标题不能为空")
        return v


# ============ 分类 ============

class CategoryCreate(SlugInput):
    """创建分类"""
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    parent_id: Optional[int] = None


class CategoryUpdate(SlugInput):
    """
    更新分类

    slug 显式传空字符串表示按标题重新生成
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    parent_id: Optional[int] = None


class CategoryInfo(BaseModel):
    """分类信息"""
    id: int
    title: str
    slug: str
    description: Optional[str]
    parent_id: Optional[int]
    parent_title: Optional[str] = None
    posts_count: int = 0
    is_root: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CategorySummary(BaseModel):
    """分类摘要（文章列表中使用）"""
    id: int
    title: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


# ============ 文章 ============

class PostCreate(SlugInput):
    """创建文章"""
    title: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    category_id: int
    excerpt: Optional[str] = Field(None, max_length=500)
    content_raw: str
    is_published: bool = False
    published_at: Optional[datetime] = None


class PostUpdate(SlugInput):
    """更新文章"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    category_id: Optional[int] = None
    excerpt: Optional[str] = Field(None, max_length=500)
    content_raw: Optional[str] = None
    is_published: Optional[bool] = None
    published_at: Optional[datetime] = None


class AuthorInfo(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class PostListItem(BaseModel):
    """文章列表项"""
    id: int
    title: str
    slug: str
    excerpt: Optional[str]
    is_published: bool
    published_at: Optional[datetime]
    user: Optional[AuthorInfo] = None
    category: Optional[CategorySummary] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostInfo(PostListItem):
    """文章详情"""
    content_raw: str
