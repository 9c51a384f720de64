"""
Podcast pipeline coordinator (PDF to two-host WAV).

Drives one job through extracting_text -> generating_script ->
generating_audio -> completed, recording each transition in the job store.
Any failure marks the job ``error`` and stops; stages are never retried.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from nexuslearn.audio import PodcastSpeechSynthesizer, concat_pcm, pcm_to_wav
from nexuslearn.configs.config import config, get_storage_provider
from nexuslearn.core.job_state import PodcastJob
from nexuslearn.core.job_store import RedisJobStore
from nexuslearn.document import extract_pdf_text
from nexuslearn.storage import StorageProvider
from nexuslearn.storage.paths import podcast_audio_object_key

from .script import generate_podcast_script

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


async def _load_pdf_bytes(storage: StorageProvider, job: PodcastJob) -> bytes:
    return await asyncio.to_thread(storage.download_bytes, job.pdf_storage_path)


async def _run_stages(
    job: PodcastJob,
    store: RedisJobStore,
    storage: StorageProvider,
    synthesizer: PodcastSpeechSynthesizer,
) -> None:
    uid, job_id = job.user_id, job.id

    # 1. Extract text
    await store.update_job(uid, job_id, status="extracting_text")
    pdf_bytes = await _load_pdf_bytes(storage, job)
    text = await asyncio.to_thread(extract_pdf_text, pdf_bytes, config.pdf_text_limit)
    logger.info(f"Extracted {len(text)} characters of text for job {job_id}")

    # 2. Script
    await store.update_job(uid, job_id, status="generating_script")
    script = await generate_podcast_script(text, job.options)
    await store.update_job(
        uid, job_id, transcript=script.transcript(), title=script.title
    )

    # 3. Audio, one TTS call per line
    await store.update_job(uid, job_id, status="generating_audio")
    buffers = await synthesizer.synthesize_script(script.script)
    wav_bytes = pcm_to_wav(concat_pcm(buffers))

    # 4. Upload and finish
    audio_key = podcast_audio_object_key(uid, job_id)
    await asyncio.to_thread(storage.upload_bytes, wav_bytes, audio_key, "audio/wav")
    audio_url = await asyncio.to_thread(storage.get_file_url, audio_key)
    await store.update_job(uid, job_id, status="completed", audio_url=audio_url)
    logger.info(f"Podcast job {job_id} completed ({len(wav_bytes)} bytes of WAV)")


async def run_podcast_job(
    job: PodcastJob,
    store: RedisJobStore | None = None,
    storage: StorageProvider | None = None,
    synthesizer: PodcastSpeechSynthesizer | None = None,
) -> None:
    """Run the whole pipeline for one job; never raises.

    Errors from any stage are recorded on the job as ``status=error`` with
    the exception message.
    """
    if store is None:
        from nexuslearn.core.job_store import job_store

        store = job_store
    logger.info(f"Starting podcast job {job.id} for user {job.user_id}")
    try:
        storage = storage or get_storage_provider()
        synthesizer = synthesizer or PodcastSpeechSynthesizer()
        await _run_stages(job, store, storage, synthesizer)
    except Exception as exc:
        message = str(exc) or UNKNOWN_ERROR_MESSAGE
        logger.exception(f"Error in PDF to podcast pipeline for job {job.id}: {exc}")
        try:
            await store.update_job(
                job.user_id, job.id, status="error", error_message=message
            )
        except Exception as update_err:
            logger.error(
                f"Could not record failure for podcast job {job.id}: {update_err}"
            )
