"""
请求日志中间件测试
"""

import logging

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from core.middleware import RequestLoggingMiddleware


def _make_app(threshold: float = 1.0) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware, skip_paths=["/health"], slow_request_threshold=threshold)

    @app.get("/ok")
    async def ok():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/bad")
    async def bad():
        from fastapi import HTTPException
        raise HTTPException(status_code=404)

    return app


class TestRequestLoggingMiddleware:
    """请求日志中间件测试"""

    @pytest.mark.asyncio
    async def test_headers_added(self):
        transport = ASGITransport(app=_make_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/ok")
        assert response.status_code == 200
        assert response.headers["X-Request-ID"]
        assert response.headers["X-Response-Time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_request_id_passthrough(self):
        transport = ASGITransport(app=_make_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/ok", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_skip_paths(self):
        transport = ASGITransport(app=_make_app())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/health")
        assert "X-Request-ID" not in response.headers

    @pytest.mark.asyncio
    async def test_error_request_logged(self, caplog):
        transport = ASGITransport(app=_make_app())
        with caplog.at_level(logging.WARNING, logger="core.middleware"):
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                await ac.get("/bad")
        assert "[请求错误]" in caplog.text
        assert "/bad" in caplog.text

    @pytest.mark.asyncio
    async def test_slow_request_logged(self, caplog):
        transport = ASGITransport(app=_make_app(threshold=-1))
        with caplog.at_level(logging.WARNING, logger="core.middleware"):
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                await ac.get("/ok")
        assert "[慢请求]" in caplog.text
