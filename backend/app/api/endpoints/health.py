"""
Health check endpoints

- /health/live  - Basic liveness (app is running)
- /health/ready - Readiness check (database reachable)
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from typing import Dict, Any
import time

from app.core.logging_config import logger


router = APIRouter(prefix="/health", tags=["Health Checks"])


async def check_database(request: Request) -> Dict[str, Any]:
    """Check database connectivity"""
    start = time.time()
    try:
        async with request.app.state.database.session() as session:
            await session.execute(text("SELECT 1"))

        latency = (time.time() - start) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(latency, 2),
        }
    except Exception as e:
        latency = (time.time() - start) * 1000
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round(latency, 2),
            "message": "Database connection failed",
        }


@router.get("/live")
async def liveness():
    """Liveness probe"""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request):
    """Readiness probe - 503 until the database answers"""
    database = await check_database(request)
    ready = database["status"] == "healthy"
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "not_ready", "database": database},
    )
