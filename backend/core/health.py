"""
健康检查
只检查数据库连接
"""

import time
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["健康检查"])

_start_time = time.time()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    健康检查端点

    数据库不可用时返回 503
    """
    settings = get_settings()
    start = time.time()
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"数据库健康检查失败: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "message": f"数据库连接失败: {str(e)[:100]}"}
        )

    return {
        "status": "healthy",
        "version": settings.app_version,
        "uptime": int(time.time() - _start_time),
        "db_latency_ms": round((time.time() - start) * 1000, 2)
    }
