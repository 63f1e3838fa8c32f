"""
博客数据模型
表名遵循隔离协议：blog_前缀

软删除是显式的状态变更（deleted_at），查询方需要自行过滤
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from models import User
from utils.timezone import utc_now


class SoftDeleteMixin:
    """软删除标记"""

    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self, now: datetime):
        """标记为已删除，保留数据行"""
        self.deleted_at = now


class BlogCategory(SoftDeleteMixin, Base):
    """博客分类"""
    __tablename__ = "blog_categories"
    __table_args__ = {"extend_existing": True, "comment": "博客分类表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # 父分类
    parent_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("blog_categories.id"),
        nullable=True,
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, onupdate=utc_now)

    # 关联关系
    parent: Mapped[Optional["BlogCategory"]] = relationship(
        "BlogCategory",
        remote_side=[id],
        lazy="selectin",
        join_depth=1,
        viewonly=True
    )


class BlogPost(SoftDeleteMixin, Base):
    """博客文章"""
    __tablename__ = "blog_posts"
    __table_args__ = {"extend_existing": True, "comment": "博客文章表"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    excerpt: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    content_raw: Mapped[str] = mapped_column(Text)

    # 分类
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("blog_categories.id"),
        index=True
    )

    # 作者
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("sys_users.id"), index=True)

    # 发布状态：published_at 仅在 is_published 为真时有值（写入时保证）
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now, onupdate=utc_now)

    # 关联关系
    category: Mapped["BlogCategory"] = relationship("BlogCategory", lazy="selectin", viewonly=True)
    user: Mapped[Optional[User]] = relationship(User, lazy="selectin", viewonly=True)
