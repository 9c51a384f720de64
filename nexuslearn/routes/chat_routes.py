"""
Free-form chat endpoint: one prompt in, one model reply out.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from loguru import logger

from nexuslearn.configs.config import config
from nexuslearn.core.rate_limit import MODEL_CALL_LIMIT, limiter
from nexuslearn.llm import chat_completion
from nexuslearn.schemas.chat import ChatRequest, ChatResponse

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat")
@limiter.limit(MODEL_CALL_LIMIT)
async def chat(request: Request, payload: ChatRequest) -> Any:
    """Send the prompt to the chat model and return its text reply."""
    prompt = (payload.prompt or "").strip()
    if not prompt:
        raise HTTPException(status_code=400, detail="Prompt is required.")

    try:
        text = await run_in_threadpool(
            chat_completion,
            [{"role": "user", "content": prompt}],
            config.chat_model,
        )
    except Exception as exc:
        logger.error(f"Chat completion failed: {exc}")
        message = str(exc) or "An internal server error occurred."
        return JSONResponse(status_code=500, content={"error": message})

    return ChatResponse(text=text).model_dump()
