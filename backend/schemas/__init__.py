"""
数据验证模式目录
"""

from .response import success, paginate

__all__ = [
    # 响应
    "success", "paginate"
]
