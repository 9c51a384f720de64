"""
Essay grading.
"""

from __future__ import annotations

from nexuslearn.schemas.flows import GradeEssayInput, GradeEssayOutput

from .base import run_structured_prompt

ESSAY_GRADER_PROMPT = """You are an expert English teacher with a knack for providing clear, constructive feedback.
Your task is to grade the following essay. Provide a fair letter grade and detailed feedback.

Your feedback should be broken down into:
1.  **Strengths**: What did the student do well? (e.g., "Clear thesis statement," "Strong use of evidence").
2.  **Areas for Improvement**: What specific things could the student work on? (e.g., "Needs more textual evidence to support claims," "Transitions between paragraphs are abrupt").
3.  **Detailed Feedback**: A comprehensive paragraph summarizing the essay's quality and offering actionable advice.
4.  **Revised Essay**: A rewritten version of the essay that models the suggested improvements.

Please grade the following essay:

{essay}
"""


async def grade_essay(payload: GradeEssayInput) -> GradeEssayOutput:
    return await run_structured_prompt(
        ESSAY_GRADER_PROMPT.format(essay=payload.essay), GradeEssayOutput
    )
