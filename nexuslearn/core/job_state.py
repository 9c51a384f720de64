"""
Podcast job documents and their status machine.

A job moves strictly forward through ``JOB_STATUS_ORDER`` and ends in either
``completed`` or ``error``. The JSON form uses camelCase field names, which is
what clients poll.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import Field

from nexuslearn.schemas.base import CamelModel

JobStatus = Literal[
    "queued",
    "extracting_text",
    "generating_script",
    "generating_audio",
    "completed",
    "error",
]
PodcastLength = Literal["short", "medium", "long"]
PodcastTone = Literal["formal", "casual", "explainer"]

JOB_STATUS_ORDER: tuple[str, ...] = (
    "queued",
    "extracting_text",
    "generating_script",
    "generating_audio",
    "completed",
)
TERMINAL_STATUSES = frozenset({"completed", "error"})


class InvalidJobTransitionError(Exception):
    """Raised when a job update would move the status backwards or out of a terminal state."""


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def validate_transition(current: str, new: str) -> None:
    """Ensure ``current -> new`` is a legal status change.

    Staying in the same non-terminal status is allowed (field-only updates such
    as writing the transcript). ``error`` is reachable from any non-terminal
    status.
    """
    if is_terminal(current):
        raise InvalidJobTransitionError(
            f"Job is already {current}; cannot move to {new}"
        )
    if new == "error" or new == current:
        return
    if new not in JOB_STATUS_ORDER:
        raise InvalidJobTransitionError(f"Unknown job status: {new}")
    if JOB_STATUS_ORDER.index(new) != JOB_STATUS_ORDER.index(current) + 1:
        raise InvalidJobTransitionError(f"Illegal transition {current} -> {new}")


def utc_now() -> datetime:
    return datetime.now(UTC)


class PodcastJobOptions(CamelModel):
    length: PodcastLength = "medium"
    tone: PodcastTone = "casual"


class PodcastJob(CamelModel):
    """Status document for one PDF-to-podcast request."""

    id: str
    user_id: str
    status: JobStatus = "queued"
    options: PodcastJobOptions = Field(default_factory=PodcastJobOptions)
    pdf_storage_path: str
    audio_url: str | None = None
    transcript: str | None = None
    title: str | None = None
    error_message: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.status)

    def to_public_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, dropping unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> PodcastJob:
        return cls.model_validate_json(raw)
