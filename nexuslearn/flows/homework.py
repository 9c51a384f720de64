"""
Homework assistance.
"""

from __future__ import annotations

from nexuslearn.schemas.flows import HomeworkHelpInput, HomeworkHelpOutput

from .base import run_structured_prompt


def build_homework_prompt(payload: HomeworkHelpInput) -> str:
    parts = ["You are an AI tutor helping a student with their homework.", ""]
    if payload.grade_level:
        parts.append(f"The student is in grade level: {payload.grade_level}.")
    if payload.subject:
        parts.append(f"The subject is: {payload.subject}.")
    parts += ["", "Here is the question:", payload.question, ""]
    if payload.relevant_material:
        parts += ["Here is some relevant material:", payload.relevant_material, ""]
    parts += [
        "Provide a clear and concise answer to the question.",
        "If applicable, provide a step-by-step solution.",
        "Also, provide an explanation of the concepts involved.",
        "",
        "Make sure that the answer is appropriate for the student's grade level.",
    ]
    return "\n".join(parts)


async def homework_help(payload: HomeworkHelpInput) -> HomeworkHelpOutput:
    return await run_structured_prompt(
        build_homework_prompt(payload), HomeworkHelpOutput
    )
