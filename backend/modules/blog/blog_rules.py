"""
博客业务规则
分类树校验、文章发布时间推导、展示字段推导

这里只做判断，不读写数据库；子分类数、文章数由调用方查好后传入
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Protocol

from core.config import get_settings
from core.errors import ErrorCode, ERROR_MESSAGES, GuardDeniedException


class CategoryLike(Protocol):
    id: Optional[int]
    title: str
    parent: Optional["CategoryLike"]


class GuardReason(str, Enum):
    """分类校验拒绝原因"""
    SELF_PARENT = "SelfParentError"
    ROOT_DELETION = "RootDeletionError"
    HAS_CHILDREN = "HasChildrenError"
    HAS_POSTS = "HasPostsError"


_REASON_CODES = {
    GuardReason.SELF_PARENT: ErrorCode.BLOG_CATEGORY_SELF_PARENT,
    GuardReason.ROOT_DELETION: ErrorCode.BLOG_CATEGORY_IS_ROOT,
    GuardReason.HAS_CHILDREN: ErrorCode.BLOG_CATEGORY_HAS_CHILDREN,
    GuardReason.HAS_POSTS: ErrorCode.BLOG_CATEGORY_HAS_POSTS,
}


@dataclass(frozen=True)
class GuardDecision:
    """校验结果：allowed 为假时 reason/message 说明原因"""
    allowed: bool
    reason: Optional[GuardReason] = None
    message: Optional[str] = None

    @classmethod
    def allow(cls) -> "GuardDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: GuardReason) -> "GuardDecision":
        return cls(allowed=False, reason=reason, message=ERROR_MESSAGES[_REASON_CODES[reason]])

    def __bool__(self) -> bool:
        return self.allowed

    @property
    def error_code(self) -> Optional[ErrorCode]:
        return _REASON_CODES.get(self.reason) if self.reason else None

    def to_exception(self) -> GuardDeniedException:
        """转换为接口层异常（422，data.reason 为原因码）"""
        return GuardDeniedException(self.error_code, self.reason.value, self.message)


# ============ 分类树 ============

def root_category_id() -> int:
    return get_settings().blog_root_category_id


def is_root_category(category: CategoryLike) -> bool:
    """是否为根分类"""
    return category.id is not None and category.id == root_category_id()


def can_reassign_parent(category_id: int, new_parent_id: Optional[int]) -> GuardDecision:
    """
    修改父分类前的校验

    只禁止指向自身；更深的环（A->B->A）不在此处检查
    """
    if new_parent_id is not None and new_parent_id == category_id:
        return GuardDecision.deny(GuardReason.SELF_PARENT)
    return GuardDecision.allow()


def can_delete_category(category: CategoryLike, child_count: int, post_count: int) -> GuardDecision:
    """
    删除分类前的校验

    根分类、有子分类、有文章的分类都不能删除
    """
    if is_root_category(category):
        return GuardDecision.deny(GuardReason.ROOT_DELETION)
    if child_count > 0:
        return GuardDecision.deny(GuardReason.HAS_CHILDREN)
    if post_count > 0:
        return GuardDecision.deny(GuardReason.HAS_POSTS)
    return GuardDecision.allow()


def parent_title(category: CategoryLike) -> Optional[str]:
    """
    父分类标题（展示用）

    没有父分类时，根分类显示根标签，其余返回 None
    """
    if category.parent is not None:
        return category.parent.title
    if is_root_category(category):
        return get_settings().blog_root_label
    return None


# ============ 文章发布 ============

def derive_published_at(
    is_published: bool,
    explicit: Optional[datetime],
    now: datetime
) -> Optional[datetime]:
    """
    推导发布时间

    - 发布且未指定时间：使用 now
    - 发布且指定了时间：使用指定时间
    - 未发布：总是 None
    """
    if not is_published:
        return None
    if explicit is None:
        return now
    return explicit
