"""
Per-line speech synthesis for two-host podcast scripts.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from loguru import logger

from nexuslearn.configs.config import config
from nexuslearn.llm import tts_pcm
from nexuslearn.schemas.podcast import ScriptLine


class AudioGenerationError(Exception):
    """Raised when no script line produced any audio."""


class PodcastSpeechSynthesizer:
    """Turns script lines into raw PCM, one TTS call per line."""

    def __init__(
        self,
        model: str | None = None,
        speaker_voices: dict[str, str] | None = None,
    ) -> None:
        self.model = model or config.tts_model
        self.speaker_voices = speaker_voices or {
            "Speaker 1": config.podcast_speaker_1_voice,
            "Speaker 2": config.podcast_speaker_2_voice,
        }

    def voice_for(self, speaker: str) -> str:
        return self.speaker_voices.get(speaker) or self.speaker_voices["Speaker 1"]

    async def synthesize_line(self, line: ScriptLine) -> bytes:
        voice = self.voice_for(line.speaker)
        return await asyncio.to_thread(tts_pcm, self.model, voice, line.as_prompt())

    async def synthesize_script(self, script: Sequence[ScriptLine]) -> list[bytes]:
        """Synthesize lines sequentially, in script order.

        Lines that come back without audio are skipped.

        Raises:
            AudioGenerationError: If no line produced audio
        """
        buffers: list[bytes] = []
        for idx, line in enumerate(script, start=1):
            pcm = await self.synthesize_line(line)
            if not pcm:
                logger.warning(
                    f"No audio returned for line {idx}/{len(script)} ({line.speaker}); skipping"
                )
                continue
            buffers.append(pcm)
        if not buffers:
            raise AudioGenerationError("Audio generation failed, no buffers created.")
        logger.info(f"Synthesized {len(buffers)}/{len(script)} podcast lines")
        return buffers
