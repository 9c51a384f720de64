"""
WAV container helpers for raw PCM produced by the TTS models.
"""

from __future__ import annotations

import io
import wave
from collections.abc import Iterable

SAMPLE_RATE = 24000
CHANNELS = 1
SAMPLE_WIDTH = 2  # bytes, 16-bit


def concat_pcm(buffers: Iterable[bytes]) -> bytes:
    return b"".join(buffers)


def pcm_to_wav(
    pcm: bytes,
    *,
    sample_rate: int = SAMPLE_RATE,
    channels: int = CHANNELS,
    sample_width: int = SAMPLE_WIDTH,
) -> bytes:
    """Wrap raw little-endian PCM in a WAV container."""
    frame_size = channels * sample_width
    if len(pcm) % frame_size:
        # Drop a trailing partial frame
        pcm = pcm[: len(pcm) - (len(pcm) % frame_size)]
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(sample_width)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()


def pcm_duration_seconds(
    pcm: bytes,
    *,
    sample_rate: int = SAMPLE_RATE,
    channels: int = CHANNELS,
    sample_width: int = SAMPLE_WIDTH,
) -> float:
    return len(pcm) / float(sample_rate * channels * sample_width)


def wav_duration_seconds(wav_bytes: bytes) -> float:
    with wave.open(io.BytesIO(wav_bytes), "rb") as wav_file:
        return wav_file.getnframes() / float(wav_file.getframerate())
