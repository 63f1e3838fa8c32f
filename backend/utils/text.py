"""
文本处理工具
"""

import re
from typing import Awaitable, Callable, Iterator

from unidecode import unidecode


def generate_slug(text: str) -> str:
    """
    生成URL友好的slug

    非ASCII字符先音译为拉丁字母（如 "Привіт" -> "privit"，"你好" -> "ni-hao"），
    结果只包含 [a-z0-9-]，同样的输入总是得到同样的slug

    Args:
        text: 原始文本（通常是标题）

    Returns:
        slug字符串，无法生成时返回空字符串
    """
    if not text:
        return ""

    # 音译为ASCII并转小写
    slug = unidecode(str(text)).lower()
    # 非字母数字的连续字符替换为单个横线
    slug = re.sub(r'[^a-z0-9]+', '-', slug)
    # 去除首尾横线
    return slug.strip('-')


def resolve_unique_slug(candidate: str, exists: Callable[[str], bool]) -> str:
    """
    保证slug唯一：candidate, candidate-1, candidate-2, ...

    已有的数字后缀不做解析，冲突时总是在完整字符串后追加
    （"news-1" 冲突时得到 "news-1-1"）

    Args:
        candidate: 候选slug
        exists: exists(slug) -> bool，判断slug是否已被占用

    Returns:
        未被占用的slug
    """
    for slug in _slug_candidates(candidate):
        if not exists(slug):
            return slug


async def resolve_unique_slug_async(candidate: str, exists: Callable[[str], Awaitable[bool]]) -> str:
    """resolve_unique_slug 的异步版本，exists 为协程（如逐个查询数据库）"""
    for slug in _slug_candidates(candidate):
        if not await exists(slug):
            return slug


def _slug_candidates(candidate: str) -> Iterator[str]:
    yield candidate
    counter = 1
    while True:
        yield f"{candidate}-{counter}"
        counter += 1


def truncate(text: str, length: int, suffix: str = "...") -> str:
    """
    截取文本

    Args:
        text: 原始文本
        length: 最大长度
        suffix: 省略后缀

    Returns:
        截取后的文本
    """
    if not text or len(text) <= length:
        return text or ""
    return text[:length] + suffix
