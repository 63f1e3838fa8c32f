"""
标准错误码体系
提供统一的错误码定义和异常处理
"""

import logging
from typing import Optional, Any, Dict
from enum import IntEnum
from fastapi import status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode(IntEnum):
    """
    标准错误码

    错误码规范：
    - 0: 成功
    - 1xxx: 系统级错误
    - 3xxx: 业务通用错误
    - 4xxx: 模块级错误（各模块自定义）
    """

    # ==================== 成功 ====================
    SUCCESS = 0

    # ==================== 系统级错误 (1xxx) ====================
    INTERNAL_ERROR = 1000           # 服务器内部错误
    DATABASE_ERROR = 1001           # 数据库错误

    # ==================== 业务通用错误 (3xxx) ====================
    VALIDATION_ERROR = 3001         # 参数验证失败
    RESOURCE_NOT_FOUND = 3002       # 资源不存在
    RESOURCE_CONFLICT = 3004        # 资源冲突
    OPERATION_FAILED = 3005         # 操作失败

    # ==================== 模块级错误 (4xxx) ====================
    # 4000-4099: 博客模块
    BLOG_POST_NOT_FOUND = 4001
    BLOG_CATEGORY_NOT_FOUND = 4002
    BLOG_CATEGORY_SELF_PARENT = 4010
    BLOG_CATEGORY_IS_ROOT = 4011
    BLOG_CATEGORY_HAS_CHILDREN = 4012
    BLOG_CATEGORY_HAS_POSTS = 4013
    BLOG_SLUG_CONFLICT = 4020


# 错误码对应的默认消息
ERROR_MESSAGES: Dict[int, str] = {
    ErrorCode.SUCCESS: "操作成功",

    # 系统级
    ErrorCode.INTERNAL_ERROR: "服务器内部错误，请稍后重试",
    ErrorCode.DATABASE_ERROR: "数据库操作失败",

    # 业务通用
    ErrorCode.VALIDATION_ERROR: "参数验证失败",
    ErrorCode.RESOURCE_NOT_FOUND: "请求的资源不存在",
    ErrorCode.RESOURCE_CONFLICT: "资源冲突",
    ErrorCode.OPERATION_FAILED: "操作失败",

    # 博客
    ErrorCode.BLOG_POST_NOT_FOUND: "文章不存在",
    ErrorCode.BLOG_CATEGORY_NOT_FOUND: "分类不存在",
    ErrorCode.BLOG_CATEGORY_SELF_PARENT: "分类不能作为自己的父分类",
    ErrorCode.BLOG_CATEGORY_IS_ROOT: "不能删除根分类",
    ErrorCode.BLOG_CATEGORY_HAS_CHILDREN: "不能删除包含子分类的分类",
    ErrorCode.BLOG_CATEGORY_HAS_POSTS: "不能删除包含文章的分类",
    ErrorCode.BLOG_SLUG_CONFLICT: "slug已被占用，请重试",
}

# 错误码对应的 HTTP 状态码
ERROR_HTTP_STATUS: Dict[int, int] = {
    ErrorCode.SUCCESS: status.HTTP_200_OK,

    # 系统级 -> 500
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.DATABASE_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,

    # 业务通用 -> 422/404/409
    ErrorCode.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RESOURCE_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.OPERATION_FAILED: status.HTTP_400_BAD_REQUEST,

    # 博客
    ErrorCode.BLOG_POST_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.BLOG_CATEGORY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.BLOG_CATEGORY_SELF_PARENT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.BLOG_CATEGORY_IS_ROOT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.BLOG_CATEGORY_HAS_CHILDREN: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.BLOG_CATEGORY_HAS_POSTS: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.BLOG_SLUG_CONFLICT: status.HTTP_409_CONFLICT,
}


class AppException(Exception):
    """
    应用异常基类

    用于抛出业务异常，包含错误码和详细信息

    Usage:
        raise AppException(ErrorCode.RESOURCE_NOT_FOUND, "分类不存在")
        raise AppException(ErrorCode.VALIDATION_ERROR, data={"field": "slug", "error": "已被占用"})
    """

    def __init__(
        self,
        code: int = ErrorCode.INTERNAL_ERROR,
        message: Optional[str] = None,
        data: Any = None
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "未知错误")
        self.data = data
        self.http_status = ERROR_HTTP_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        """转换为 JSONResponse"""
        return JSONResponse(
            status_code=self.http_status,
            content=self.to_dict()
        )

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            "code": int(self.code),
            "message": self.message,
            "data": self.data
        }


class ValidationException(AppException):
    """参数验证异常"""

    def __init__(self, message: str = "参数验证失败", errors: Optional[list] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            data={"errors": errors} if errors else None
        )

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationException":
        """单个字段校验失败"""
        return cls(errors=[{"field": field, "message": message, "type": "value_error"}])


class NotFoundException(AppException):
    """资源不存在异常"""

    def __init__(
        self,
        resource: str = "资源",
        resource_id: Any = None,
        code: int = ErrorCode.RESOURCE_NOT_FOUND
    ):
        message = f"{resource}不存在"
        if resource_id is not None:
            message = f"{resource} ({resource_id}) 不存在"
        super().__init__(code=code, message=message)


class GuardDeniedException(AppException):
    """规则校验未通过，data.reason 携带机器可读的原因码"""

    def __init__(self, code: int, reason: str, message: Optional[str] = None):
        super().__init__(code=code, message=message, data={"reason": reason})


class SlugConflictException(AppException):
    """
    slug唯一约束冲突

    生成slug后到写入之间被并发请求抢先占用，由数据库唯一索引兜底，
    客户端可以直接重试
    """

    def __init__(self, entity: str):
        super().__init__(
            code=ErrorCode.BLOG_SLUG_CONFLICT,
            data={"entity": entity, "retryable": True}
        )


# ==================== 异常处理器 ====================

async def app_exception_handler(request, exc: AppException):
    """AppException 异常处理器"""
    if exc.http_status >= 500:
        logger.error(f"业务异常 [{exc.code}]: {exc.message}")
    return exc.to_response()


def register_exception_handlers(app):
    """
    注册异常处理器

    在 main.py 中调用：
        from core.errors import register_exception_handlers
        register_exception_handlers(app)
    """
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException as StarletteHTTPException

    app.add_exception_handler(AppException, app_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            errors.append({
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"]
            })

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "code": int(ErrorCode.VALIDATION_ERROR),
                "message": "参数验证失败",
                "data": {"errors": errors}
            }
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request, exc: StarletteHTTPException):
        # 映射 HTTP 状态码到业务错误码
        code_mapping = {
            404: ErrorCode.RESOURCE_NOT_FOUND,
            409: ErrorCode.RESOURCE_CONFLICT,
            422: ErrorCode.VALIDATION_ERROR,
            500: ErrorCode.INTERNAL_ERROR,
        }

        code = code_mapping.get(exc.status_code, ErrorCode.OPERATION_FAILED)
        message = str(exc.detail) if exc.detail else ERROR_MESSAGES.get(code, "请求失败")

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "code": int(code),
                "message": message,
                "data": None
            }
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request, exc: Exception):
        logger.error(f"未处理异常: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "code": int(ErrorCode.INTERNAL_ERROR),
                "message": ERROR_MESSAGES[ErrorCode.INTERNAL_ERROR],
                "data": None
            }
        )
