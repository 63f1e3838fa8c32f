"""
Blog CMS 核心模块
提供框架的基础设施和通用功能

导出列表：
- 配置管理: get_settings, Settings
- 数据库: Base, get_db, async_session
- 事件系统: event_bus, Events, Event
- 分页工具: paginate, PageResult, PaginationParams
- 错误处理: ErrorCode, AppException, register_exception_handlers
"""

# 配置管理
from .config import get_settings, Settings, reload_settings

# 数据库
from .database import Base, get_db, async_session, init_db, close_db

# 事件系统
from .events import event_bus, Events, Event, EventBus

# 分页工具
from .pagination import (
    paginate,
    PageResult,
    PaginationParams,
    get_pagination_params
)

# 错误处理
from .errors import (
    ErrorCode,
    AppException,
    ValidationException,
    NotFoundException,
    GuardDeniedException,
    SlugConflictException,
    register_exception_handlers
)

# 中间件
from .middleware import RequestLoggingMiddleware


__all__ = [
    # 配置
    "get_settings",
    "Settings",
    "reload_settings",

    # 数据库
    "Base",
    "get_db",
    "async_session",
    "init_db",
    "close_db",

    # 事件
    "event_bus",
    "Events",
    "Event",
    "EventBus",

    # 分页
    "paginate",
    "PageResult",
    "PaginationParams",
    "get_pagination_params",

    # 错误
    "ErrorCode",
    "AppException",
    "ValidationException",
    "NotFoundException",
    "GuardDeniedException",
    "SlugConflictException",
    "register_exception_handlers",

    # 中间件
    "RequestLoggingMiddleware",
]
