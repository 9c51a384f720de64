"""
Tests for the podcast worker dispatch loop.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from nexuslearn.core.job_state import PodcastJobOptions
from worker import PodcastWorker


async def _queued(store, queue, job_id, user_id="u1"):
    job = await store.create_job(
        user_id, PodcastJobOptions(), f"pdfs/{user_id}/{job_id}.pdf", job_id=job_id
    )
    await queue.enqueue(user_id, job_id)
    return job


class TestPodcastWorker:
    @pytest.mark.asyncio
    async def test_dispatches_queued_job(self, store, queue):
        job = await _queued(store, queue, "job-1")
        worker = PodcastWorker(queue=queue, store=store, max_workers=2)

        with patch("worker.run_podcast_job", AsyncMock()) as mock_run:
            assert await worker.poll_once() is True
            await worker.wait_for_running()

        mock_run.assert_awaited_once_with(job, store=store)
        assert worker.active_jobs == []

    @pytest.mark.asyncio
    async def test_empty_queue_dispatches_nothing(self, store, queue):
        worker = PodcastWorker(queue=queue, store=store, max_workers=1)

        with patch("worker.run_podcast_job", AsyncMock()) as mock_run:
            assert await worker.poll_once() is False

        mock_run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_skips_missing_and_already_started_jobs(self, store, queue):
        await queue.enqueue("u1", "ghost")
        await _queued(store, queue, "job-1")
        await store.update_job("u1", "job-1", status="extracting_text")
        worker = PodcastWorker(queue=queue, store=store, max_workers=1)

        with patch("worker.run_podcast_job", AsyncMock()) as mock_run:
            assert await worker.poll_once() is False
            assert await worker.poll_once() is False

        mock_run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrency_is_capped(self, store, queue):
        for idx in range(3):
            await _queued(store, queue, f"job-{idx}")
        worker = PodcastWorker(queue=queue, store=store, max_workers=2)
        release = asyncio.Event()
        started: list[str] = []

        async def _slow_job(job, store=None):
            started.append(job.id)
            await release.wait()

        with patch("worker.run_podcast_job", _slow_job):
            await worker.poll_once()
            await worker.poll_once()
            await asyncio.sleep(0)
            third = asyncio.create_task(worker.poll_once())
            await asyncio.sleep(0.05)

            assert sorted(worker.active_jobs) == ["job-0", "job-1"]
            assert not third.done()

            release.set()
            assert await asyncio.wait_for(third, timeout=1) is True
            await worker.wait_for_running()

        assert sorted(started) == ["job-0", "job-1", "job-2"]
        assert await queue.length() == 0

    @pytest.mark.asyncio
    async def test_job_that_fails_to_load_is_requeued(self, store, queue):
        await _queued(store, queue, "job-1")
        worker = PodcastWorker(queue=queue, store=store, max_workers=1)

        with (
            patch.object(
                store, "get_job", AsyncMock(side_effect=ConnectionError("redis down"))
            ),
            patch("worker.run_podcast_job", AsyncMock()) as mock_run,
        ):
            assert await worker.poll_once() is False

        mock_run.assert_not_awaited()
        assert await queue.length() == 1
        assert (await queue.next_job()).job_id == "job-1"

    @pytest.mark.asyncio
    async def test_crashed_job_task_frees_its_slot(self, store, queue):
        await _queued(store, queue, "job-1")
        worker = PodcastWorker(queue=queue, store=store, max_workers=1)

        with patch(
            "worker.run_podcast_job", AsyncMock(side_effect=RuntimeError("boom"))
        ):
            assert await worker.poll_once() is True
            await worker.wait_for_running()

        assert worker.active_jobs == []
        assert not worker._slots.locked()
