"""
Provider registry and the module-level facade used by the rest of the app.

Models are addressed as ``provider/model`` (``google/gemini-2.5-flash``,
``openai/gpt-4o-mini``); a bare model name is a Gemini model.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from typing import Any, TypeVar

from loguru import logger
from pydantic import TypeAdapter, ValidationError, create_model

from .base import ChatMessage, ChatMessages, LLMClient
from .gemini_client import GeminiLLMClient
from .openai_client import OpenAILLMClient

T = TypeVar("T")

PROVIDER_ALIASES = {"gemini": "google"}
_CLIENT_FACTORIES: dict[str, type[LLMClient]] = {
    "google": GeminiLLMClient,
    "openai": OpenAILLMClient,
}
_llm_clients: dict[str, LLMClient] = {}
ENVELOPE_KEY = "result"
_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class StructuredOutputError(ValueError):
    """The model reply is not valid JSON for the requested schema."""

    def __init__(self, message: str, raw_output: str = "") -> None:
        super().__init__(message)
        self.raw_output = raw_output


def _get_llm(provider: str | None = None) -> LLMClient:
    name = (provider or "google").lower()
    name = PROVIDER_ALIASES.get(name, name)
    if name not in _llm_clients:
        factory = _CLIENT_FACTORIES.get(name)
        if factory is None:
            raise ValueError(f"Unsupported provider: {name}")
        _llm_clients[name] = factory()
    return _llm_clients[name]


def _route(model: str) -> tuple[LLMClient, str]:
    provider, sep, name = model.partition("/")
    if not sep:
        return _get_llm("google"), provider
    if not name:
        raise ValueError(f"Invalid model '{model}', expected provider/model")
    return _get_llm(provider), name


def chat_completion(messages: ChatMessages, model: str, **kwargs: Any) -> str:
    client, name = _route(model)
    return client.chat_completion(messages, name, **kwargs)


def chat_completion_stream(
    messages: ChatMessages, model: str, **kwargs: Any
) -> Iterator[str]:
    client, name = _route(model)
    return client.chat_completion_stream(messages, name, **kwargs)


def strip_code_fences(text: str) -> str:
    stripped = text.strip()
    match = _CODE_FENCE_RE.match(stripped)
    return match.group(1) if match else stripped


def parse_structured(raw: str, schema: Any, envelope_key: str | None = None) -> Any:
    """Validate a JSON reply against ``schema`` (a pydantic model or type).

    With ``envelope_key`` an object reply is unwrapped to that member first.
    """
    payload = strip_code_fences(raw)
    if not payload:
        raise StructuredOutputError("Model returned an empty response", raw)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise StructuredOutputError(f"Model returned invalid JSON: {exc}", raw) from exc
    if envelope_key and isinstance(data, dict) and envelope_key in data:
        data = data[envelope_key]
    try:
        return TypeAdapter(schema).validate_python(data)
    except ValidationError as exc:
        label = getattr(schema, "__name__", schema)
        raise StructuredOutputError(
            f"Model output does not match {label}: {exc}", raw
        ) from exc


def _response_schema(schema: Any) -> tuple[dict[str, Any], str | None]:
    """JSON schema to request, plus the envelope key for non-object schemas.

    JSON output modes (OpenAI ``json_object``) only return objects, so arrays
    and scalars are requested inside ``{"result": ...}``.
    """
    json_schema = TypeAdapter(schema).json_schema(by_alias=True)
    if json_schema.get("type") == "object":
        return json_schema, None
    envelope = create_model("StructuredResult", result=(schema, ...))
    return TypeAdapter(envelope).json_schema(by_alias=True), ENVELOPE_KEY


def generate_structured(
    messages: ChatMessages, model: str, schema: type[T], **kwargs: Any
) -> T:
    """Ask for JSON matching ``schema`` and return the validated object.

    The JSON schema goes out as a trailing system message and the provider
    runs in JSON mode.

    Raises:
        StructuredOutputError: If the reply is not valid JSON for the schema
    """
    json_schema, envelope_key = _response_schema(schema)
    instruction: ChatMessage = {
        "role": "system",
        "content": (
            "Respond only with a JSON document that conforms to this JSON schema:\n"
            f"{json.dumps(json_schema)}"
        ),
    }
    client, name = _route(model)
    raw = client.chat_completion(
        [*messages, instruction], name, json_output=True, **kwargs
    )
    result: T = parse_structured(raw, schema, envelope_key)
    logger.debug(f"Structured output from {model} validated as {schema!r}")
    return result


def tts_pcm(model: str, voice: str, input_text: str, **kwargs: Any) -> bytes:
    """Synthesize ``input_text``; ``voice`` may carry a ``provider/`` prefix."""
    client, name = _route(model)
    return client.tts_pcm(name, voice.rpartition("/")[2], input_text, **kwargs)
