"""
Shared types for LLM clients: chat messages, retry policy and the client ABC.
"""

from __future__ import annotations

import abc
import time
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Literal, TypedDict, TypeVar

from loguru import logger

MessageRole = Literal["system", "user", "assistant"]

# HTTP status codes worth another attempt
TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

T = TypeVar("T")


class ChatMessage(TypedDict):
    role: MessageRole
    content: str


ChatMessages = Sequence[ChatMessage]


def split_system(messages: ChatMessages) -> tuple[str, list[ChatMessage]]:
    """Separate system prompts (joined) from the conversation turns."""
    system = [m["content"] for m in messages if m["role"] == "system"]
    turns = [m for m in messages if m["role"] != "system"]
    return "\n\n".join(system), turns


@dataclass(frozen=True)
class RetryPolicy:
    retries: int
    backoff: float
    timeout: float

    def override(
        self,
        retries: int | None = None,
        backoff: float | None = None,
        timeout: float | None = None,
    ) -> RetryPolicy:
        return RetryPolicy(
            self.retries if retries is None else retries,
            self.backoff if backoff is None else backoff,
            self.timeout if timeout is None else timeout,
        )

    def run(self, func: Callable[[], T], label: str) -> T:
        return call_with_retries(
            func, retries=self.retries, backoff=self.backoff, label=label
        )


def is_transient_error(err: BaseException) -> bool:
    """Rate limits, 5xx responses, timeouts and dropped connections."""
    if isinstance(err, TimeoutError | ConnectionError):
        return True
    for attr in ("status_code", "code", "status"):
        value = getattr(err, attr, None)
        if isinstance(value, int):
            return value in TRANSIENT_STATUS_CODES
    name = type(err).__name__
    return "Timeout" in name or name == "APIConnectionError"


def call_with_retries(
    func: Callable[[], T],
    *,
    retries: int,
    backoff: float,
    label: str = "LLM call",
) -> T:
    """Call ``func`` up to ``retries`` times, sleeping ``backoff * 2**n`` between
    transient failures. Anything else is raised immediately."""
    attempt = 0
    while True:
        try:
            return func()
        except Exception as err:
            attempt += 1
            if attempt >= max(1, retries) or not is_transient_error(err):
                raise
            delay = backoff * (2 ** (attempt - 1))
            logger.warning(f"{label}: {err}; attempt {attempt + 1} in {delay:.2f}s")
            time.sleep(delay)


class LLMClient(abc.ABC):
    """Provider client; ``model`` is the provider's own model name."""

    policy: RetryPolicy

    @abc.abstractmethod
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
        """Return the reply text (may be empty). ``json_output`` switches the
        provider into JSON mode."""

    @abc.abstractmethod
    def chat_completion_stream(
        self,
        messages: ChatMessages,
        model: str,
        *,
        retries: int | None = None,
        backoff: float | None = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> Iterator[str]: ...

    @abc.abstractmethod
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
        """Return raw 24 kHz 16-bit mono PCM for the text (empty when none)."""
