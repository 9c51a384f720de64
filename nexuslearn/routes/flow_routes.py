"""
Study-tool flow endpoints.

Each endpoint validates its body, runs one flow and returns the flow's JSON.
Model failures surface as 502 (bad model output) or 500 (provider error).
"""

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from typing import Any, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import iterate_in_threadpool, run_in_threadpool
from fastapi.responses import StreamingResponse
from loguru import logger
from pydantic import BaseModel

from nexuslearn import flows
from nexuslearn.auth import require_authenticated_user
from nexuslearn.core.rate_limit import MODEL_CALL_LIMIT, limiter
from nexuslearn.document import PdfTextExtractionError
from nexuslearn.llm import StructuredOutputError
from nexuslearn.schemas.flows import (
    AskTutorInput,
    FlashcardInput,
    GradeEssayInput,
    HomeworkHelpInput,
    MindMapInput,
    MistakeAnalysisInput,
    QuizFeedbackInput,
    QuizInput,
    RecommendationsInput,
    StudyPlanInput,
)

router = APIRouter(
    prefix="/api/flows",
    tags=["flows"],
    dependencies=[Depends(require_authenticated_user)],
)

P = TypeVar("P", bound=BaseModel)


def _dump(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(result, list):
        return [_dump(item) for item in result]
    return result


async def _run_flow(
    name: str, flow: Callable[[P], Awaitable[Any]], payload: P
) -> Any:
    try:
        return _dump(await flow(payload))
    except PdfTextExtractionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StructuredOutputError as exc:
        logger.error(f"Flow {name} got unusable model output: {exc}")
        raise HTTPException(
            status_code=502, detail="The AI model returned an invalid response."
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Flow {name} failed: {exc}")
        raise HTTPException(status_code=500, detail=str(exc) or name) from exc


async def _prepend(first: str, rest: Iterator[str]) -> AsyncIterator[str]:
    if first:
        yield first
    async for chunk in iterate_in_threadpool(rest):
        yield chunk


@router.post("/tutor")
@limiter.limit(MODEL_CALL_LIMIT)
async def ask_tutor(request: Request, payload: AskTutorInput) -> StreamingResponse:
    """Stream the tutor's answer as plain text."""
    # Pull the first chunk before responding so setup errors still get a status code
    try:
        chunks: Iterator[str] = flows.ask_tutor(payload)
        first = await run_in_threadpool(next, chunks, "")
    except Exception as exc:
        logger.exception(f"Flow tutor failed: {exc}")
        raise HTTPException(status_code=500, detail=str(exc) or "tutor") from exc
    return StreamingResponse(
        _prepend(first, chunks), media_type="text/plain; charset=utf-8"
    )


@router.post("/quiz")
@limiter.limit(MODEL_CALL_LIMIT)
async def generate_quiz(request: Request, payload: QuizInput) -> Any:
    return await _run_flow("quiz", flows.generate_quiz, payload)


@router.post("/quiz-feedback")
@limiter.limit(MODEL_CALL_LIMIT)
async def quiz_feedback(request: Request, payload: QuizFeedbackInput) -> Any:
    return await _run_flow("quiz-feedback", flows.quiz_feedback, payload)


@router.post("/essay-grade")
@limiter.limit(MODEL_CALL_LIMIT)
async def grade_essay(request: Request, payload: GradeEssayInput) -> Any:
    return await _run_flow("essay-grade", flows.grade_essay, payload)


@router.post("/flashcards")
@limiter.limit(MODEL_CALL_LIMIT)
async def generate_flashcards(request: Request, payload: FlashcardInput) -> Any:
    return await _run_flow("flashcards", flows.generate_flashcards, payload)


@router.post("/mind-map")
@limiter.limit(MODEL_CALL_LIMIT)
async def generate_mind_map(request: Request, payload: MindMapInput) -> Any:
    return await _run_flow("mind-map", flows.generate_mind_map, payload)


@router.post("/study-plan")
@limiter.limit(MODEL_CALL_LIMIT)
async def generate_study_plan(request: Request, payload: StudyPlanInput) -> Any:
    return await _run_flow("study-plan", flows.generate_study_plan, payload)


@router.post("/mistake-analysis")
@limiter.limit(MODEL_CALL_LIMIT)
async def analyze_mistakes(request: Request, payload: MistakeAnalysisInput) -> Any:
    return await _run_flow("mistake-analysis", flows.analyze_mistakes, payload)


@router.post("/homework-help")
@limiter.limit(MODEL_CALL_LIMIT)
async def homework_help(request: Request, payload: HomeworkHelpInput) -> Any:
    return await _run_flow("homework-help", flows.homework_help, payload)


@router.post("/recommendations")
@limiter.limit(MODEL_CALL_LIMIT)
async def get_recommendations(
    request: Request, payload: RecommendationsInput
) -> Any:
    return await _run_flow("recommendations", flows.get_recommendations, payload)
