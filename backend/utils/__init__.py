"""
工具函数目录
按功能分类组织
"""

from .text import generate_slug, resolve_unique_slug, resolve_unique_slug_async, truncate
from .timezone import utc_now

__all__ = [
    # 文本处理
    "generate_slug",
    "resolve_unique_slug",
    "resolve_unique_slug_async",
    "truncate",
    # 时间
    "utc_now",
]
