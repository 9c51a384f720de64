"""
Pydantic models for podcast script generation.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Speaker = Literal["Speaker 1", "Speaker 2"]


class ScriptLine(BaseModel):
    speaker: Speaker = Field(..., description="Which of the two hosts speaks")
    dialogue: str = Field(..., description="What the speaker says")

    def as_prompt(self) -> str:
        return f"{self.speaker}: {self.dialogue}"


class PodcastScript(BaseModel):
    """LLM output for a two-host podcast episode."""

    title: str = Field(..., description="A catchy title for the episode")
    script: list[ScriptLine] = Field(
        ..., description="Dialogue lines in speaking order"
    )

    def transcript(self) -> str:
        return "\n".join(line.as_prompt() for line in self.script)
