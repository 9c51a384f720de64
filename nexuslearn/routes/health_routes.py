"""
Health endpoint.

Reports Redis connectivity (and the Postgres mirror when configured) so the
UI can show a queue availability banner instead of failing submissions.
"""

import time
from typing import Any

from fastapi import APIRouter
from sqlalchemy import text

from nexuslearn.configs import db
from nexuslearn.configs.redis_config import RedisConfig
from nexuslearn.core.job_queue import job_queue

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health() -> dict[str, Any]:
    """Return basic health info for Redis and DB connectivity."""
    redis_info: dict[str, Any] = {"ok": False}
    try:
        redis = RedisConfig.get_redis_client()
        t0 = time.perf_counter()
        pong = await redis.ping()
        redis_info["ok"] = bool(pong)
        redis_info["latency_ms"] = round((time.perf_counter() - t0) * 1000.0, 2)
        redis_info["queue_length"] = await job_queue.length()
    except Exception as e:  # noqa: BLE001 - reported in the payload
        redis_info["ok"] = False
        redis_info["error"] = str(e)

    info: dict[str, Any] = {"redis": redis_info}
    checks = [redis_info["ok"]]

    if db.db_enabled:
        db_info: dict[str, Any] = {"ok": False}
        try:
            t0 = time.perf_counter()
            async with db.get_session() as s:
                await s.execute(text("SELECT 1"))
            db_info["ok"] = True
            db_info["latency_ms"] = round((time.perf_counter() - t0) * 1000.0, 2)
        except Exception as e:  # noqa: BLE001 - reported in the payload
            db_info["error"] = str(e)
        info["db"] = db_info
        checks.append(db_info["ok"])

    if all(checks):
        info["status"] = "ok"
    elif any(checks):
        info["status"] = "degraded"
    else:
        info["status"] = "down"
    return info
