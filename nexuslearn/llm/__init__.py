"""
LLM package exposing a provider-agnostic facade.

Backed by Google Gemini by default, with OpenAI available through
``openai/<model>`` specs.
"""

from .provider import (
    StructuredOutputError,
    chat_completion,
    chat_completion_stream,
    generate_structured,
    tts_pcm,
)

__all__ = [
    "StructuredOutputError",
    "chat_completion",
    "chat_completion_stream",
    "generate_structured",
    "tts_pcm",
]
