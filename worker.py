#!/usr/bin/env python3
"""
Podcast worker for NexusLearn.

Pops queued podcast jobs from Redis and runs each one as an independent
asyncio task, with at most MAX_WORKERS jobs in flight. A job that has started
runs to a terminal status; shutdown waits for in-flight jobs to finish.
"""

import asyncio
import signal
import sys
from typing import Any

from loguru import logger

from nexuslearn.configs.config import config
from nexuslearn.configs.logging_config import setup_logging
from nexuslearn.configs.redis_config import RedisConfig
from nexuslearn.core.job_queue import QueuedJob, RedisJobQueue, job_queue
from nexuslearn.core.job_store import RedisJobStore, job_store
from nexuslearn.pipeline.podcast import run_podcast_job


class PodcastWorker:
    """Dispatches queued podcast jobs to concurrent pipeline tasks"""

    def __init__(
        self,
        queue: RedisJobQueue | None = None,
        store: RedisJobStore | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.queue = queue or job_queue
        self.store = store or job_store
        self.max_workers = max(1, max_workers or config.max_workers)
        self.should_stop = False
        self._slots = asyncio.Semaphore(self.max_workers)
        self._running: dict[str, asyncio.Task[None]] = {}

    def signal_handler(self, signum: int, frame: Any) -> None:
        """Handle shutdown signals gracefully"""
        logger.info("Received shutdown signal, stopping podcast worker...")
        self.should_stop = True

    @property
    def active_jobs(self) -> list[str]:
        return list(self._running)

    async def dispatch(self, queued: QueuedJob) -> bool:
        """Start the pipeline for a popped job.

        Returns False when the job document is gone or already past ``queued``,
        or could not be loaded, in which case the job goes back on the queue.
        """
        try:
            job = await self.store.get_job(queued.user_id, queued.job_id)
        except Exception as e:
            logger.error(f"Could not load podcast job {queued.job_id}: {e}")
            await self._requeue(queued)
            return False
        if job is None:
            logger.warning(f"Skipping podcast job {queued.job_id}: job not found")
            return False
        if job.status != "queued":
            logger.info(
                f"Skipping podcast job {queued.job_id}: status is {job.status}"
            )
            return False

        await self._slots.acquire()
        task = asyncio.create_task(
            run_podcast_job(job, store=self.store), name=f"podcast-{job.id}"
        )
        self._running[job.id] = task
        task.add_done_callback(lambda t, job_id=job.id: self._finished(job_id, t))
        logger.info(
            f"Started podcast job {job.id} for user {job.user_id} "
            f"({len(self._running)}/{self.max_workers} active)"
        )
        return True

    async def _requeue(self, queued: QueuedJob) -> None:
        """Put a popped job back at the tail so it is not lost."""
        try:
            await self.queue.enqueue(queued.user_id, queued.job_id)
        except Exception as e:
            logger.error(f"Podcast job {queued.job_id} dropped, requeue failed: {e}")

    def _finished(self, job_id: str, task: asyncio.Task[None]) -> None:
        self._running.pop(job_id, None)
        self._slots.release()
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error(
                f"Podcast job {job_id} task crashed"
            )
        logger.debug(f"Podcast job {job_id} task finished")

    async def poll_once(self, timeout: int = 1) -> bool:
        """Wait for a free slot, then pop and dispatch at most one job."""
        # Hold a slot while blocking on the queue so a popped job never waits
        async with self._slots:
            queued = await self.queue.next_job(timeout=timeout)
        if queued is None:
            return False
        return await self.dispatch(queued)

    async def wait_for_running(self) -> None:
        if self._running:
            logger.info(f"Waiting for {len(self._running)} podcast job(s) to finish")
            await asyncio.gather(*self._running.values(), return_exceptions=True)

    async def run(self) -> None:
        """Run the worker main loop"""
        logger.info(f"Starting podcast worker with up to {self.max_workers} jobs")
        logger.info(f"Redis: {RedisConfig.get_connection_info()}")

        try:
            pong = await self.queue.redis_client.ping()
            logger.info(f"Podcast worker Redis ping result: {pong}")
            logger.info(f"Found {await self.queue.length()} job(s) in queue")
        except Exception as e:
            logger.error(f"Podcast worker Redis connection error: {e}")
            logger.error("Cannot continue without Redis connection. Exiting...")
            return

        signal.signal(signal.SIGINT, self.signal_handler)
        signal.signal(signal.SIGTERM, self.signal_handler)

        try:
            while not self.should_stop:
                try:
                    await self.poll_once()
                except Exception as e:
                    logger.error(f"Podcast worker poll failed: {e}")
                    await asyncio.sleep(2)
        finally:
            logger.info("Shutting down podcast worker...")
            await self.wait_for_running()
            logger.info("Podcast worker shutdown complete")


if __name__ == "__main__":
    setup_logging(
        config.log_level,
        config.log_file,
        enable_file_logging=config.log_file is not None,
        component="worker",
    )
    worker = PodcastWorker()
    try:
        asyncio.run(worker.run())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    except Exception as e:
        logger.error(f"Podcast worker failed to start: {e}")
        sys.exit(1)
