"""
Helpers for building storage object keys.
"""

from __future__ import annotations

PDFS_PREFIX = "pdfs"
PODCASTS_PREFIX = "podcasts"


def _clean_segment(value: str) -> str:
    cleaned = str(value).strip().strip("/\\")
    if not cleaned or "/" in cleaned or "\\" in cleaned or cleaned in {".", ".."}:
        raise ValueError(f"Invalid object key segment: {value!r}")
    return cleaned


def pdf_object_key(user_id: str, job_id: str) -> str:
    """Return the object key of the PDF uploaded for a podcast job."""
    return f"{PDFS_PREFIX}/{_clean_segment(user_id)}/{_clean_segment(job_id)}.pdf"


def podcast_audio_object_key(user_id: str, job_id: str) -> str:
    """Return the object key of the generated podcast WAV file."""
    return (
        f"{PODCASTS_PREFIX}/{_clean_segment(user_id)}/{_clean_segment(job_id)}.wav"
    )
