# -*- coding: utf-8 -*-
"""
时区工具模块
数据库统一存储不带时区信息的UTC时间
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    获取当前UTC时间（不带时区信息，用于写入数据库）

    Returns:
        datetime: 当前UTC时间
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    将任意时间转换为不带时区信息的UTC时间

    Args:
        dt: 待转换的时间对象，无时区信息时视为UTC

    Returns:
        datetime: 转换后的UTC时间
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt

    return dt.astimezone(timezone.utc).replace(tzinfo=None)
