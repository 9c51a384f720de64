"""Unit tests for the Gemini LLM client."""

from __future__ import annotations

import base64
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

from nexuslearn.llm import gemini_client


@pytest.fixture(autouse=True)
def _patch_gemini_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure the Gemini client sees fake credentials during tests."""
    monkeypatch.setattr(
        gemini_client.config, "google_gemini_api_key", "test-key", raising=False
    )
    monkeypatch.setattr(
        gemini_client.config,
        "google_gemini_endpoint",
        "https://example.com",
        raising=False,
    )
    monkeypatch.setattr(
        gemini_client.config, "google_gemini_timeout", 0.0, raising=False
    )
    monkeypatch.setattr(gemini_client.config, "google_gemini_retries", 3, raising=False)
    monkeypatch.setattr(
        gemini_client.config, "google_gemini_backoff", 0.0, raising=False
    )


@dataclass
class _InlineData:
    data: Any
    mime_type: str = "audio/L16;codec=pcm;rate=24000"


@dataclass
class _Part:
    text: str | None = None
    inline_data: _InlineData | None = None


@dataclass
class _Content:
    parts: list[_Part] = field(default_factory=list)


@dataclass
class _Candidate:
    content: _Content


@dataclass
class _Response:
    candidates: list[_Candidate]
    text: str | None = None


class _ServerError(Exception):
    def __init__(self, code: int) -> None:
        super().__init__(f"server error {code}")
        self.code = code


class _MockModels:
    def __init__(
        self, record: dict[str, Any], responder: Callable[[], Any]
    ) -> None:
        self._record = record
        self._responder = responder

    def generate_content(
        self, *, model: str, contents: Any, config: Any = None
    ) -> Any:
        self._record.setdefault("calls", []).append(
            {"model": model, "contents": contents, "config": config}
        )
        return self._responder()

    def generate_content_stream(
        self, *, model: str, contents: Any, config: Any = None
    ) -> Any:
        self._record.setdefault("calls", []).append(
            {"model": model, "contents": contents, "config": config}
        )
        return iter(self._responder())


class _MockClient:
    def __init__(
        self, *, record: dict[str, Any], responder: Callable[[], Any], **kwargs: Any
    ) -> None:
        record["client_kwargs"] = kwargs
        self.models = _MockModels(record, responder)


def _install(
    monkeypatch: pytest.MonkeyPatch, responder: Callable[[], Any]
) -> dict[str, Any]:
    record: dict[str, Any] = {}
    monkeypatch.setattr(
        gemini_client.genai,
        "Client",
        lambda **kwargs: _MockClient(record=record, responder=responder, **kwargs),
    )
    return record


def test_missing_api_key_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gemini_client.config, "google_gemini_api_key", None)

    with pytest.raises(ValueError, match="GOOGLE_GEMINI_API_KEY"):
        gemini_client.GeminiLLMClient()


def test_chat_completion_splits_system_instruction(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    record = _install(monkeypatch, lambda: _Response(candidates=[], text="Hello!"))

    client = gemini_client.GeminiLLMClient()
    reply = client.chat_completion(
        [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
            {"role": "user", "content": "Again"},
        ],
        model="gemini-2.5-flash",
        json_output=True,
        temperature=0.2,
        timeout=2.4,
    )

    assert reply == "Hello!"
    assert record["client_kwargs"]["api_key"] == "test-key"
    assert record["client_kwargs"]["http_options"] == {"base_url": "https://example.com"}
    call = record["calls"][0]
    assert call["model"] == "gemini-2.5-flash"
    assert [c["role"] for c in call["contents"]] == ["user", "model", "user"]
    config = call["config"]
    assert config["system_instruction"] == {"parts": [{"text": "Be brief."}]}
    assert config["response_mime_type"] == "application/json"
    assert config["temperature"] == 0.2
    assert config["http_options"]["timeout"] == 2400


def test_chat_completion_reads_text_from_parts(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(
        monkeypatch,
        lambda: _Response(candidates=[_Candidate(_Content([_Part(text="From parts")]))]),
    )

    client = gemini_client.GeminiLLMClient()

    assert client.chat_completion([{"role": "user", "content": "Hi"}], "m") == (
        "From parts"
    )


def test_chat_completion_retries_transient_errors(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    outcomes: list[Any] = [_ServerError(503), _ServerError(429), "ok"]

    def _responder() -> Any:
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return _Response(candidates=[], text=outcome)

    record = _install(monkeypatch, _responder)
    client = gemini_client.GeminiLLMClient()

    assert client.chat_completion([{"role": "user", "content": "Hi"}], "m") == "ok"
    assert len(record["calls"]) == 3


def test_chat_completion_does_not_retry_bad_request(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _responder() -> Any:
        raise _ServerError(400)

    record = _install(monkeypatch, _responder)
    client = gemini_client.GeminiLLMClient()

    with pytest.raises(_ServerError):
        client.chat_completion([{"role": "user", "content": "Hi"}], "m")
    assert len(record["calls"]) == 1


def test_chat_completion_stream_yields_text_chunks(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _install(
        monkeypatch,
        lambda: [_Response([], text="Hel"), _Response([], text=None), _Response([], text="lo")],
    )
    client = gemini_client.GeminiLLMClient()

    chunks = list(
        client.chat_completion_stream([{"role": "user", "content": "Hi"}], "m")
    )

    assert chunks == ["Hel", "lo"]


def test_tts_pcm_returns_inline_audio(monkeypatch: pytest.MonkeyPatch) -> None:
    pcm = b"\x01\x00\x02\x00"
    record = _install(
        monkeypatch,
        lambda: _Response(
            candidates=[
                _Candidate(
                    _Content(
                        [
                            _Part(inline_data=_InlineData(pcm[:2])),
                            _Part(inline_data=_InlineData(base64.b64encode(pcm[2:]).decode())),
                        ]
                    )
                )
            ]
        ),
    )
    client = gemini_client.GeminiLLMClient()

    audio = client.tts_pcm("gemini-2.5-flash-preview-tts", "Algenib", "Speaker 1: Hi")

    assert audio == pcm
    call = record["calls"][0]
    assert call["contents"] == "Speaker 1: Hi"
    config = call["config"]
    assert config.response_modalities == ["AUDIO"]
    voice = config.speech_config.voice_config.prebuilt_voice_config.voice_name
    assert voice == "Algenib"


def test_tts_pcm_without_audio_returns_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    _install(monkeypatch, lambda: _Response(candidates=[]))
    client = gemini_client.GeminiLLMClient()

    assert client.tts_pcm("tts", "Achernar", "Speaker 2: Bye") == b""
