"""
Podcast job routes.

Accepts a PDF upload, stores it, creates a ``queued`` job document and hands
the job to the worker queue. Clients then poll the job until it reaches
``completed`` or ``error``.
"""

import uuid
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from nexuslearn.auth import extract_user_id, require_authenticated_user
from nexuslearn.configs.config import config, get_storage_provider
from nexuslearn.core.job_queue import job_queue
from nexuslearn.core.job_state import PodcastJobOptions
from nexuslearn.core.job_store import job_store
from nexuslearn.core.rate_limit import PODCAST_SUBMIT_LIMIT, limiter
from nexuslearn.storage.paths import pdf_object_key

router = APIRouter(prefix="/api", tags=["podcast-jobs"])

PDF_CONTENT_TYPE = "application/pdf"


def _require_user_id(user: dict[str, Any]) -> str:
    user_id = extract_user_id(user)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


async def _read_limited(upload: UploadFile, limit: int) -> bytes | None:
    """Read the upload, returning None as soon as it exceeds ``limit`` bytes."""
    chunks: list[bytes] = []
    total = 0
    while True:
        data = await upload.read(1024 * 1024)
        if not data:
            break
        total += len(data)
        if total > limit:
            return None
        chunks.append(data)
    return b"".join(chunks)


def _server_error(exc: Exception) -> JSONResponse:
    message = str(exc) or "An internal server error occurred."
    return JSONResponse(status_code=500, content={"error": message})


async def _fail_unqueued_job(user_id: str, job_id: str, exc: Exception) -> None:
    """A job that never reached the queue must not stay ``queued``."""
    message = f"Could not queue podcast job: {exc}"
    try:
        await job_store.fail_job(user_id, job_id, message)
    except Exception as fail_err:
        logger.warning(
            f"Could not mark unqueued podcast job {job_id} failed: {fail_err}"
        )


def _parse_options(length: Any, tone: Any) -> PodcastJobOptions:
    values: dict[str, str] = {}
    if isinstance(length, str) and length.strip():
        values["length"] = length.strip().lower()
    if isinstance(tone, str) and tone.strip():
        values["tone"] = tone.strip().lower()
    try:
        return PodcastJobOptions(**values)
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors())
        raise HTTPException(
            status_code=400, detail=f"Invalid podcast options: {fields}."
        ) from exc


@router.post("/podcast-jobs")
@limiter.limit(PODCAST_SUBMIT_LIMIT)
async def create_podcast_job(
    request: Request,
    user: Annotated[dict[str, Any], Depends(require_authenticated_user)],
) -> Any:
    """Upload a PDF and queue a podcast job for it."""
    user_id = _require_user_id(user)
    form = await request.form()
    upload = form.get("file")

    if not isinstance(upload, UploadFile):
        raise HTTPException(status_code=400, detail="File is required.")
    if (upload.content_type or "").lower() != PDF_CONTENT_TYPE:
        raise HTTPException(status_code=400, detail="Only PDF files are allowed.")
    pdf_bytes = await _read_limited(upload, config.max_pdf_bytes)
    await upload.close()
    if pdf_bytes is None:
        limit_mb = config.max_pdf_bytes // (1024 * 1024)
        raise HTTPException(
            status_code=400, detail=f"File size cannot exceed {limit_mb}MB."
        )

    options = _parse_options(form.get("length"), form.get("tone"))
    job_id = str(uuid.uuid4())
    pdf_storage_path = pdf_object_key(user_id, job_id)

    try:
        storage = get_storage_provider()
        await run_in_threadpool(
            storage.upload_bytes, pdf_bytes, pdf_storage_path, PDF_CONTENT_TYPE
        )
        job = await job_store.create_job(
            user_id, options, pdf_storage_path, job_id=job_id
        )
    except Exception as exc:
        logger.error(f"Error creating podcast job: {exc}")
        return _server_error(exc)

    try:
        await job_queue.enqueue(user_id, job_id)
    except Exception as exc:
        logger.error(f"Error queueing podcast job {job_id}: {exc}")
        await _fail_unqueued_job(user_id, job_id, exc)
        return _server_error(exc)

    logger.info(
        f"Queued podcast job {job_id} for user {user_id} "
        f"({len(pdf_bytes)} bytes, {upload.filename})"
    )
    return job.to_public_dict()


@router.get("/podcast-jobs")
async def list_podcast_jobs(
    user: Annotated[dict[str, Any], Depends(require_authenticated_user)],
    limit: int = Query(50, ge=1, le=200),
) -> dict[str, Any]:
    user_id = _require_user_id(user)
    jobs = await job_store.list_jobs(user_id, limit=limit)
    return {"jobs": [job.to_public_dict() for job in jobs]}


@router.get("/podcast-jobs/{job_id}")
async def get_podcast_job(
    job_id: str,
    user: Annotated[dict[str, Any], Depends(require_authenticated_user)],
) -> dict[str, Any]:
    """Poll a single job owned by the caller."""
    user_id = _require_user_id(user)
    job = await job_store.get_job(user_id, job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Podcast job not found")
    return job.to_public_dict()
