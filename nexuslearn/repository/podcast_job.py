"""
Podcast job repository backed by Postgres.

Mirrors the Redis job documents. Callers check ``db_enabled`` first; this
module assumes the database is configured and available.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import update

from nexuslearn.configs.db import get_session
from nexuslearn.core.job_state import PodcastJob
from nexuslearn.core.models import PodcastJobRow


def _row_values(job: PodcastJob) -> dict[str, Any]:
    return {
        "user_id": job.user_id,
        "status": job.status,
        "options": job.options.model_dump(),
        "pdf_storage_path": job.pdf_storage_path,
        "audio_url": job.audio_url,
        "title": job.title,
        "transcript": job.transcript,
        "error_message": job.error_message,
        "created_at": job.created_at,
        "updated_at": job.updated_at,
    }


async def insert_job(job: PodcastJob) -> None:
    async with get_session() as session:
        session.add(PodcastJobRow(id=job.id, **_row_values(job)))
        await session.commit()


async def update_job(job: PodcastJob) -> None:
    """Overwrite the mirrored row with the job's current document."""
    async with get_session() as session:
        result = await session.execute(
            update(PodcastJobRow)
            .where(PodcastJobRow.id == job.id)
            .values(**_row_values(job))
        )
        if not getattr(result, "rowcount", 0):
            session.add(PodcastJobRow(id=job.id, **_row_values(job)))
        await session.commit()