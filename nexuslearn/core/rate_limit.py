"""
Rate limiting for the NexusLearn API.

Limits are per client address. Exceeding one yields a 429 with the same
``{"error": ...}`` body as every other API error.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Applied to every endpoint that triggers a model call
MODEL_CALL_LIMIT = "20/minute"
PODCAST_SUBMIT_LIMIT = "5/minute"


async def rate_limit_exceeded(request: Request, exc: Exception) -> JSONResponse:
    detail = exc.detail if isinstance(exc, RateLimitExceeded) else str(exc)
    response = JSONResponse(
        status_code=429, content={"error": f"Rate limit exceeded: {detail}"}
    )
    view_limit = getattr(request.state, "view_rate_limit", None)
    if view_limit is not None:
        response = request.app.state.limiter._inject_headers(response, view_limit)
    return response


def add_rate_limiting(app: FastAPI) -> None:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded)
