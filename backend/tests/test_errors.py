"""
错误处理模块测试
"""
import json

import pytest
from fastapi import FastAPI, status
from httpx import AsyncClient, ASGITransport
from pydantic import BaseModel

from core.errors import (
    ErrorCode,
    AppException,
    ValidationException,
    NotFoundException,
    GuardDeniedException,
    SlugConflictException,
    app_exception_handler,
    register_exception_handlers,
    ERROR_MESSAGES
)


class TestErrors:
    """错误处理测试"""

    def test_error_codes(self):
        """测试错误码定义"""
        assert ErrorCode.SUCCESS == 0
        assert ErrorCode.INTERNAL_ERROR == 1000
        assert ErrorCode.VALIDATION_ERROR == 3001

    def test_app_exception(self):
        """测试应用异常基类"""
        exc = AppException(code=ErrorCode.RESOURCE_NOT_FOUND)
        assert exc.http_status == status.HTTP_404_NOT_FOUND
        assert exc.message == ERROR_MESSAGES[ErrorCode.RESOURCE_NOT_FOUND]

        d = exc.to_dict()
        assert d == {"code": 3002, "message": exc.message, "data": None}

    def test_unknown_code_defaults_to_500(self):
        exc = AppException(code=9999)
        assert exc.http_status == 500
        assert exc.message == "未知错误"

    def test_validation_exception_for_field(self):
        exc = ValidationException.for_field("slug", "该slug已被使用")
        assert exc.http_status == 422
        assert exc.data == {
            "errors": [{"field": "slug", "message": "该slug已被使用", "type": "value_error"}]
        }

    def test_not_found_exception(self):
        exc = NotFoundException("分类", "news", code=ErrorCode.BLOG_CATEGORY_NOT_FOUND)
        assert exc.http_status == 404
        assert exc.message == "分类 (news) 不存在"

    @pytest.mark.parametrize("code", [
        ErrorCode.BLOG_CATEGORY_SELF_PARENT,
        ErrorCode.BLOG_CATEGORY_IS_ROOT,
        ErrorCode.BLOG_CATEGORY_HAS_CHILDREN,
        ErrorCode.BLOG_CATEGORY_HAS_POSTS,
    ])
    def test_guard_denied_is_422(self, code):
        exc = GuardDeniedException(code, "SomeReason")
        assert exc.http_status == 422
        assert exc.data == {"reason": "SomeReason"}
        assert exc.message == ERROR_MESSAGES[code]

    def test_slug_conflict_is_retryable_409(self):
        exc = SlugConflictException("post")
        assert exc.http_status == 409
        assert exc.data == {"entity": "post", "retryable": True}

    @pytest.mark.asyncio
    async def test_app_exception_handler(self):
        exc = NotFoundException("文章")
        response = await app_exception_handler(None, exc)
        assert response.status_code == 404
        body = json.loads(response.body)
        assert body["code"] == ErrorCode.RESOURCE_NOT_FOUND
        assert body["message"] == "文章不存在"


class Payload(BaseModel):
    title: str


def _make_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret details")

    @app.get("/missing")
    async def missing():
        raise NotFoundException("分类", 7)

    @app.post("/payload")
    async def payload(data: Payload):
        return {"ok": True}

    return app


class TestExceptionHandlers:
    """注册到应用后的异常处理"""

    @pytest.mark.asyncio
    async def test_app_exception_envelope(self):
        transport = ASGITransport(app=_make_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/missing")
        assert response.status_code == 404
        assert response.json() == {"code": 3002, "message": "分类 (7) 不存在", "data": None}

    @pytest.mark.asyncio
    async def test_request_validation_error(self):
        transport = ASGITransport(app=_make_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.post("/payload", json={})
        assert response.status_code == 422
        body = response.json()
        assert body["code"] == ErrorCode.VALIDATION_ERROR
        assert body["data"]["errors"][0]["field"] == "body.title"

    @pytest.mark.asyncio
    async def test_unknown_route_404(self):
        transport = ASGITransport(app=_make_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/nope")
        assert response.status_code == 404
        assert response.json()["code"] == ErrorCode.RESOURCE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_unexpected_error_hides_details(self):
        transport = ASGITransport(app=_make_app(), raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/boom")
        assert response.status_code == 500
        body = response.json()
        assert body["code"] == ErrorCode.INTERNAL_ERROR
        assert "secret" not in body["message"]
