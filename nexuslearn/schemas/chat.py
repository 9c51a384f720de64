"""
Pydantic models for the free-form chat endpoint.
"""

from pydantic import BaseModel


class ChatRequest(BaseModel):
    prompt: str | None = None


class ChatResponse(BaseModel):
    text: str
