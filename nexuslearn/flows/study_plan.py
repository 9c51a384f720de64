"""
Day-by-day study planner.
"""

from __future__ import annotations

from nexuslearn.schemas.flows import StudyPlan, StudyPlanInput

from .base import run_structured_prompt

STUDY_PLANNER_PROMPT = """You are an expert academic planner AI. Your task is to create a detailed, day-by-day study plan for a student.
The plan should be realistic, well-structured, and help the student achieve their goal within the given timeframe.

Student's Goal: {goal}
Subjects/Topics to Cover: {subjects}
Total Timeframe: {timeframe} days

Break down the subjects into manageable daily tasks. For each day, provide a clear topic, a focus, a list of tasks, and an estimated time commitment.
"""


async def generate_study_plan(payload: StudyPlanInput) -> StudyPlan:
    """Generate a plan; ``goal`` and ``timeframe`` always echo the request."""
    plan = await run_structured_prompt(
        STUDY_PLANNER_PROMPT.format(
            goal=payload.goal,
            subjects=payload.subjects,
            timeframe=payload.timeframe,
        ),
        StudyPlan,
    )
    return plan.model_copy(
        update={"goal": payload.goal, "timeframe": payload.timeframe}
    )
