"""
Redis-backed store for podcast job documents.

Each job lives under a per-user key so a user can only ever address their own
jobs; a per-user sorted set indexes jobs by creation time for listing. When
Postgres is configured every write is mirrored there as well.
"""

from __future__ import annotations

import uuid
from typing import Any

import redis.asyncio as redis
from loguru import logger

from nexuslearn.configs.db import db_enabled
from nexuslearn.core.job_state import (
    InvalidJobTransitionError,
    PodcastJob,
    PodcastJobOptions,
    utc_now,
    validate_transition,
)
from nexuslearn.repository.podcast_job import insert_job, update_job

# Fields the pipeline may set besides status
_UPDATABLE_FIELDS = {"audio_url", "transcript", "title", "error_message"}


class JobNotFoundError(LookupError):
    """Raised when updating a job that does not exist for the given user."""


class RedisJobStore:
    """Redis document store for :class:`PodcastJob`."""

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        if redis_client is None:
            from nexuslearn.configs.redis_config import RedisConfig

            redis_client = RedisConfig.get_redis_client()
        self.redis_client = redis_client
        self.key_prefix = "nl:user"

    def _job_key(self, user_id: str, job_id: str) -> str:
        return f"{self.key_prefix}:{user_id}:podcast_job:{job_id}"

    def _index_key(self, user_id: str) -> str:
        return f"{self.key_prefix}:{user_id}:podcast_jobs"

    async def _save(self, job: PodcastJob) -> None:
        await self.redis_client.set(self._job_key(job.user_id, job.id), job.to_json())

    async def create_job(
        self,
        user_id: str,
        options: PodcastJobOptions,
        pdf_storage_path: str,
        job_id: str | None = None,
    ) -> PodcastJob:
        """Create a ``queued`` job document and index it for the user."""
        job = PodcastJob(
            id=job_id or uuid.uuid4().hex,
            user_id=user_id,
            status="queued",
            options=options,
            pdf_storage_path=pdf_storage_path,
        )
        await self._save(job)
        await self.redis_client.zadd(
            self._index_key(user_id), {job.id: job.created_at.timestamp()}
        )
        logger.info(f"Podcast job {job.id} created for user {user_id}")

        if db_enabled:
            try:
                await insert_job(job)
            except Exception as e:
                logger.warning(f"Failed to persist podcast job {job.id} in DB: {e}")
        return job

    async def get_job(self, user_id: str, job_id: str) -> PodcastJob | None:
        raw = await self.redis_client.get(self._job_key(user_id, job_id))
        if not raw:
            return None
        try:
            return PodcastJob.from_json(raw)
        except ValueError as e:
            logger.error(f"Corrupt podcast job document {job_id}: {e}")
            return None

    async def update_job(
        self,
        user_id: str,
        job_id: str,
        status: str | None = None,
        **fields: Any,
    ) -> PodcastJob:
        """Apply a status change and/or field updates to a job.

        Raises:
            JobNotFoundError: If the job does not exist
            InvalidJobTransitionError: If the job is terminal or the status
                change is not a single forward step
        """
        job = await self.get_job(user_id, job_id)
        if job is None:
            raise JobNotFoundError(f"Podcast job {job_id} not found")

        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update podcast job fields: {sorted(unknown)}")

        new_status = status or job.status
        validate_transition(job.status, new_status)

        updated = job.model_copy(
            update={**fields, "status": new_status, "updated_at": utc_now()}
        )
        await self._save(updated)
        if status and status != job.status:
            logger.info(f"Podcast job {job_id} status {job.status} -> {status}")

        if db_enabled:
            try:
                await update_job(updated)
            except Exception as e:
                logger.warning(f"Failed to update podcast job {job_id} in DB: {e}")
        return updated

    async def list_jobs(self, user_id: str, limit: int = 50) -> list[PodcastJob]:
        """Return the user's jobs, newest first."""
        job_ids = await self.redis_client.zrevrange(
            self._index_key(user_id), 0, max(limit, 1) - 1
        )
        jobs: list[PodcastJob] = []
        for job_id in job_ids:
            job = await self.get_job(user_id, str(job_id))
            if job is not None:
                jobs.append(job)
        return jobs

    async def fail_job(self, user_id: str, job_id: str, message: str) -> PodcastJob:
        """Force a non-terminal job into ``error``; used by operators."""
        return await self.update_job(
            user_id, job_id, status="error", error_message=message
        )


__all__ = [
    "InvalidJobTransitionError",
    "JobNotFoundError",
    "RedisJobStore",
    "job_store",
]

job_store = RedisJobStore()
