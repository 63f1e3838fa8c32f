"""
统一响应格式
API返回的标准JSON结构：{"code": 0, "message": "...", "data": ...}
"""

from typing import Any, Optional
from starlette.datastructures import URL

from core.errors import ErrorCode
from core.pagination import PageResult


def success(data: Any = None, message: str = "success") -> dict:
    """成功响应"""
    return {
        "code": int(ErrorCode.SUCCESS),
        "message": message,
        "data": data
    }


def paginate(result: PageResult, url: Optional[URL] = None, extra: Optional[dict] = None) -> dict:
    """
    分页响应

    data 中包含 items、meta、links；extra 用于附加同级字段（如分类摘要）
    """
    data = result.to_dict(url)
    if extra:
        data.update(extra)
    return success(data)
