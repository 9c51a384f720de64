"""
Generate a two-speaker podcast script from extracted document text.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from nexuslearn.configs.config import config
from nexuslearn.core.job_state import PodcastJobOptions
from nexuslearn.llm import generate_structured
from nexuslearn.schemas.podcast import PodcastScript

LENGTH_GUIDANCE = {
    "short": "5-8 mins",
    "medium": "10-15 mins",
    "long": "20+ mins",
}

PODCAST_SCRIPT_PROMPT = """You are a podcast scriptwriter. Your task is to convert the following document text into a conversational podcast script between two speakers: "Speaker 1" and "Speaker 2".

**Instructions:**
- Podcast Length: {length} (about {duration}). Adjust segment count and depth accordingly.
- Podcast Tone: {tone}.
- Create a catchy title for the episode.
- The script should have an introduction, several segments discussing the key points of the document, and a conclusion.
- Make the conversation engaging and natural. DO NOT just read the document. Explain concepts, add context, and make it easy to understand.
- Ensure the dialogue flows logically between the two speakers.

**Document Text:**
{text}
"""


class EmptyScriptError(Exception):
    """Raised when the model returns a script without any dialogue."""


def build_script_prompt(text: str, options: PodcastJobOptions) -> str:
    return PODCAST_SCRIPT_PROMPT.format(
        length=options.length,
        duration=LENGTH_GUIDANCE[options.length],
        tone=options.tone,
        text=text,
    )


async def generate_podcast_script(
    text: str, options: PodcastJobOptions, model: str | None = None
) -> PodcastScript:
    """Ask the script model for a validated :class:`PodcastScript`."""
    model_spec = model or config.script_generate_model
    prompt = build_script_prompt(text, options)
    logger.info(
        f"Generating podcast script with {model_spec} "
        f"(length={options.length}, tone={options.tone})"
    )
    script = await asyncio.to_thread(
        generate_structured,
        [{"role": "user", "content": prompt}],
        model_spec,
        PodcastScript,
    )
    if not script.script:
        raise EmptyScriptError("The generated podcast script has no dialogue.")
    logger.info(f"Podcast script '{script.title}' has {len(script.script)} lines")
    return script
