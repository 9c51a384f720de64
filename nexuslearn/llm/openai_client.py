"""
OpenAI (or OpenAI-compatible endpoint) client.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, cast

from openai import OpenAI

from nexuslearn.configs.config import config

from .base import ChatMessages, LLMClient, RetryPolicy


class OpenAILLMClient(LLMClient):
    def __init__(self) -> None:
        if not config.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for OpenAI client")
        options: dict[str, Any] = {"api_key": config.openai_api_key}
        if config.openai_base_url:
            options["base_url"] = config.openai_base_url
        self._client = cast(Any, OpenAI(**options))
        self.policy = RetryPolicy(
            config.openai_retries, config.openai_backoff, config.openai_timeout
        )

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
        if json_output:
            kwargs["response_format"] = {"type": "json_object"}

        def _call() -> str:
            resp = self._client.chat.completions.create(
                model=model, messages=list(messages), timeout=policy.timeout, **kwargs
            )
            if not resp.choices:
                return ""
            return resp.choices[0].message.content or ""

        return policy.run(_call, f"OpenAI {model}")

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
        stream = policy.run(
            lambda: self._client.chat.completions.create(
                model=model,
                messages=list(messages),
                timeout=policy.timeout,
                stream=True,
                **kwargs,
            ),
            f"OpenAI stream {model}",
        )
        for chunk in stream:
            for choice in getattr(chunk, "choices", None) or []:
                text = getattr(getattr(choice, "delta", None), "content", None)
                if text:
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

        def _call() -> bytes:
            # "pcm" is raw 24 kHz 16-bit little-endian mono
            resp = self._client.audio.speech.create(
                model=model,
                voice=voice,
                input=input_text,
                response_format="pcm",
                timeout=policy.timeout,
            )
            content = getattr(resp, "content", None)
            return bytes(content) if isinstance(content, bytes | bytearray) else resp.read()

        return policy.run(_call, f"OpenAI TTS {model}")
