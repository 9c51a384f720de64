"""
AI tutor: streamed answers grounded in the running conversation.
"""

from __future__ import annotations

from collections.abc import Iterator

from nexuslearn.configs.config import config
from nexuslearn.llm import chat_completion_stream
from nexuslearn.llm.base import ChatMessage, MessageRole
from nexuslearn.schemas.flows import AskTutorInput

TUTOR_SYSTEM_PROMPT = """You are an expert tutor for a student in India. The student is studying {topic}.

You will receive the chat history as a series of messages. And then you will receive the user's question.

Answer the user's question in a way that is helpful and encouraging.
"""


def build_tutor_messages(payload: AskTutorInput) -> list[ChatMessage]:
    messages: list[ChatMessage] = [
        {"role": "system", "content": TUTOR_SYSTEM_PROMPT.format(topic=payload.topic)}
    ]
    for message in payload.history:
        role: MessageRole = "user" if message.role == "user" else "assistant"
        messages.append({"role": role, "content": message.content})
    messages.append({"role": "user", "content": payload.question})
    return messages


def ask_tutor(payload: AskTutorInput, model: str | None = None) -> Iterator[str]:
    """Yield the tutor's reply as text chunks."""
    return chat_completion_stream(
        build_tutor_messages(payload), model or config.chat_model
    )
