"""Google Gemini client built on the google-genai SDK."""

from __future__ import annotations

import base64
from collections.abc import Iterable, Iterator
from typing import Any

from google import genai
from google.genai import types as genai_types

from nexuslearn.configs.config import config

from .base import ChatMessages, LLMClient, RetryPolicy, split_system

# Generation options forwarded to GenerateContentConfig
GENERATION_OPTIONS = frozenset(
    {
        "temperature",
        "top_p",
        "top_k",
        "max_output_tokens",
        "stop_sequences",
        "seed",
        "safety_settings",
        "thinking_config",
    }
)


def _timeout_ms(seconds: float) -> int | None:
    return max(1, round(seconds * 1000)) if seconds and seconds > 0 else None


def _parts(response: Any) -> Iterable[Any]:
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        yield from getattr(content, "parts", None) or []


def response_text(response: Any) -> str:
    text = getattr(response, "text", None)
    if isinstance(text, str) and text:
        return text
    return next((str(p.text) for p in _parts(response) if getattr(p, "text", None)), "")


def response_audio(response: Any) -> bytes:
    """Concatenate inline audio parts; the SDK may hand them back base64 encoded."""
    audio = bytearray()
    for part in _parts(response):
        blob = getattr(getattr(part, "inline_data", None), "data", None)
        if blob:
            audio += base64.b64decode(blob) if isinstance(blob, str) else blob
    return bytes(audio)


class GeminiLLMClient(LLMClient):
    def __init__(self) -> None:
        if not config.google_gemini_api_key:
            raise ValueError("GOOGLE_GEMINI_API_KEY is required for Gemini client")
        endpoint = config.google_gemini_endpoint
        self._client = genai.Client(
            api_key=config.google_gemini_api_key,
            http_options={"base_url": endpoint} if endpoint else None,
        )
        self.policy = RetryPolicy(
            config.google_gemini_retries,
            config.google_gemini_backoff,
            config.google_gemini_timeout,
        )

    def _request(
        self, messages: ChatMessages, timeout: float, options: dict[str, Any]
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        system, turns = split_system(messages)
        contents = [
            {
                "role": "model" if m["role"] == "assistant" else "user",
                "parts": [{"text": m["content"]}],
            }
            for m in turns
        ]
        settings = {
            k: v for k, v in options.items() if k in GENERATION_OPTIONS and v is not None
        }
        if system:
            settings["system_instruction"] = {"parts": [{"text": system}]}
        if ms := _timeout_ms(timeout):
            settings["http_options"] = {"timeout": ms}
        return contents, settings

    def chat_completion(
        self,
        messages: ChatMessages,
        model: str,
        *,
        json_output: bool = False,
        retries: int | None = None,
        backoff: float | None = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> str:
        policy = self.policy.override(retries, backoff, timeout)
        contents, settings = self._request(messages, policy.timeout, kwargs)
        if json_output:
            settings["response_mime_type"] = "application/json"

        return policy.run(
            lambda: response_text(
                self._client.models.generate_content(
                    model=model, contents=contents, config=settings or None
                )
            ),
            f"Gemini {model}",
        )

    def chat_completion_stream(
        self,
        messages: ChatMessages,
        model: str,
        *,
        retries: int | None = None,
        backoff: float | None = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> Iterator[str]:
        policy = self.policy.override(retries, backoff, timeout)
        contents, settings = self._request(messages, policy.timeout, kwargs)
        # Retries cover opening the stream only; emitted chunks are never replayed
        stream = policy.run(
            lambda: self._client.models.generate_content_stream(
                model=model, contents=contents, config=settings or None
            ),
            f"Gemini stream {model}",
        )
        for chunk in stream:
            if text := getattr(chunk, "text", None):
                yield str(text)

    def tts_pcm(
        self,
        model: str,
        voice: str,
        input_text: str,
        *,
        retries: int | None = None,
        backoff: float | None = None,
        timeout: float | None = None,
    ) -> bytes:
        policy = self.policy.override(retries, backoff, timeout)
        ms = _timeout_ms(policy.timeout)
        voice_config = genai_types.VoiceConfig(
            prebuilt_voice_config=genai_types.PrebuiltVoiceConfig(voice_name=voice)
        )
        speech = genai_types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=genai_types.SpeechConfig(voice_config=voice_config),
            http_options=genai_types.HttpOptions(timeout=ms) if ms else None,
        )
        return policy.run(
            lambda: response_audio(
                self._client.models.generate_content(
                    model=model, contents=input_text, config=speech
                )
            ),
            f"Gemini TTS {model}",
        )
