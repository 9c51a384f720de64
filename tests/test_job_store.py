"""
Unit tests for the Redis job store and job queue.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from nexuslearn.core.job_state import InvalidJobTransitionError, PodcastJobOptions
from nexuslearn.core.job_store import JobNotFoundError


async def _create(store, user_id="u1", job_id=None):
    return await store.create_job(
        user_id, PodcastJobOptions(), f"pdfs/{user_id}/x.pdf", job_id=job_id
    )


class TestRedisJobStore:
    @pytest.mark.asyncio
    async def test_create_and_get(self, store):
        job = await _create(store, job_id="job-1")

        assert job.status == "queued"
        fetched = await store.get_job("u1", "job-1")
        assert fetched == job

    @pytest.mark.asyncio
    async def test_jobs_are_scoped_to_their_owner(self, store):
        await _create(store, user_id="u1", job_id="job-1")

        assert await store.get_job("u2", "job-1") is None

    @pytest.mark.asyncio
    async def test_corrupt_document_reads_as_missing(self, store, fake_redis):
        fake_redis.values[store._job_key("u1", "bad")] = "{not json"

        assert await store.get_job("u1", "bad") is None

    @pytest.mark.asyncio
    async def test_update_moves_forward_and_refreshes_timestamp(self, store):
        job = await _create(store, job_id="job-1")

        updated = await store.update_job("u1", "job-1", status="extracting_text")

        assert updated.status == "extracting_text"
        assert updated.updated_at >= job.updated_at
        assert (await store.get_job("u1", "job-1")).status == "extracting_text"

    @pytest.mark.asyncio
    async def test_field_only_update_keeps_status(self, store):
        await _create(store, job_id="job-1")
        await store.update_job("u1", "job-1", status="extracting_text")
        await store.update_job("u1", "job-1", status="generating_script")

        updated = await store.update_job(
            "u1", "job-1", transcript="Speaker 1: Hi", title="Ep 1"
        )

        assert updated.status == "generating_script"
        assert updated.transcript == "Speaker 1: Hi"
        assert updated.title == "Ep 1"

    @pytest.mark.asyncio
    async def test_terminal_job_rejects_writes(self, store):
        await _create(store, job_id="job-1")
        await store.fail_job("u1", "job-1", "boom")

        with pytest.raises(InvalidJobTransitionError):
            await store.update_job("u1", "job-1", status="extracting_text")
        with pytest.raises(InvalidJobTransitionError):
            await store.update_job("u1", "job-1", title="late")

        job = await store.get_job("u1", "job-1")
        assert job.status == "error"
        assert job.error_message == "boom"

    @pytest.mark.asyncio
    async def test_unknown_fields_are_rejected(self, store):
        await _create(store, job_id="job-1")

        with pytest.raises(ValueError):
            await store.update_job("u1", "job-1", user_id="someone-else")

    @pytest.mark.asyncio
    async def test_update_missing_job_raises(self, store):
        with pytest.raises(JobNotFoundError):
            await store.update_job("u1", "missing", status="extracting_text")

    @pytest.mark.asyncio
    async def test_list_jobs_newest_first(self, store):
        first = await _create(store, job_id="job-1")
        second = await _create(store, job_id="job-2")
        # Force distinct scores regardless of clock resolution
        store.redis_client.zsets[store._index_key("u1")] = {"job-1": 1.0, "job-2": 2.0}

        jobs = await store.list_jobs("u1", limit=10)

        assert [job.id for job in jobs] == [second.id, first.id]
        assert [job.id for job in await store.list_jobs("u1", limit=1)] == ["job-2"]

    @pytest.mark.asyncio
    async def test_db_mirror_failure_does_not_fail_the_job(self, store):
        with (
            patch("nexuslearn.core.job_store.db_enabled", True),
            patch(
                "nexuslearn.core.job_store.insert_job",
                AsyncMock(side_effect=RuntimeError("db down")),
            ) as mock_insert,
            patch(
                "nexuslearn.core.job_store.update_job",
                AsyncMock(side_effect=RuntimeError("db down")),
            ) as mock_update,
        ):
            await _create(store, job_id="job-1")
            updated = await store.update_job("u1", "job-1", status="extracting_text")

        mock_insert.assert_awaited_once()
        mock_update.assert_awaited_once()
        assert updated.status == "extracting_text"


class TestRedisJobQueue:
    @pytest.mark.asyncio
    async def test_jobs_come_out_in_submission_order(self, queue):
        await queue.enqueue("u1", "job-1")
        await queue.enqueue("u2", "job-2")

        assert await queue.length() == 2
        first = await queue.next_job()
        second = await queue.next_job()

        assert (first.user_id, first.job_id) == ("u1", "job-1")
        assert (second.user_id, second.job_id) == ("u2", "job-2")
        assert await queue.next_job() is None

    @pytest.mark.asyncio
    async def test_malformed_entry_is_dropped(self, queue, fake_redis):
        fake_redis.lists[queue.queue_key] = ["not-json", json.dumps({"job_id": "x"})]

        assert await queue.next_job() is None
        assert await queue.next_job() is None
        assert await queue.length() == 0
