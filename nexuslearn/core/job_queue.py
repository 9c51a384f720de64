"""
Redis list used to hand podcast jobs from the API to the worker process.

The API pushes ``{user_id, job_id}`` with RPUSH and returns immediately; the
worker pops from the head with BLPOP, so jobs are served in submission order.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

import redis.asyncio as redis
from loguru import logger


@dataclass(frozen=True)
class QueuedJob:
    user_id: str
    job_id: str


class RedisJobQueue:
    """FIFO queue of podcast jobs waiting for a worker"""

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        if redis_client is None:
            from nexuslearn.configs.redis_config import RedisConfig

            redis_client = RedisConfig.get_redis_client()
        self.redis_client = redis_client
        self.queue_key = "nl:podcast_job_queue"

    async def enqueue(self, user_id: str, job_id: str) -> None:
        payload = json.dumps({"user_id": user_id, "job_id": job_id})
        length = await self.redis_client.rpush(self.queue_key, payload)  # type: ignore
        logger.info(f"Podcast job {job_id} queued (queue length: {length})")

    async def next_job(self, timeout: int = 1) -> QueuedJob | None:
        """Pop the next job, waiting up to ``timeout`` seconds."""
        item = await self.redis_client.blpop(self.queue_key, timeout=timeout)  # type: ignore
        if not item:
            return None
        raw = item[1]
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            data = json.loads(raw)
            return QueuedJob(user_id=str(data["user_id"]), job_id=str(data["job_id"]))
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            logger.error(f"Dropping malformed queue entry {raw!r}: {e}")
            return None

    async def length(self) -> int:
        return int(await self.redis_client.llen(self.queue_key))  # type: ignore


job_queue = RedisJobQueue()
