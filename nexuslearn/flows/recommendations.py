"""
Personalized learning recommendations (exactly three).
"""

from __future__ import annotations

from nexuslearn.schemas.flows import RecommendationsInput, RecommendationsOutput

from .base import run_structured_prompt

RECOMMENDATIONS_PROMPT = """You are an AI learning assistant. Your goal is to provide 3 concise, actionable, and personalized learning recommendations for a student.

Student Profile:
- Grade: {student_grade}
- Board: {student_board}
- Recent Performance: {recent_performance}

Based on this profile, generate exactly 3 recommendations. Each recommendation must have a 'type' ('review', 'practice', or 'focus'), a short 'title', and a brief 'reason'.
- 'review': Suggest reviewing a specific topic where they seem weak.
- 'practice': Suggest taking a practice quiz or solving problems on a certain subject.
- 'focus': Suggest using a study technique, like a Pomodoro session, for a particular area.

Example Output:
{{"recommendations": [
  {{ "type": "review", "title": "Review 'Cellular Respiration'", "reason": "Your quiz scores indicate a weak area here." }},
  {{ "type": "focus", "title": "Try a 45-min Pomodoro session", "reason": "To improve focus on Physics numericals." }},
  {{ "type": "practice", "title": "Take a 5-mark question quiz", "reason": "To practice long-form answers in History." }}
]}}

Generate the recommendations now."""


async def get_recommendations(payload: RecommendationsInput) -> RecommendationsOutput:
    return await run_structured_prompt(
        RECOMMENDATIONS_PROMPT.format(
            student_grade=payload.student_grade,
            student_board=payload.student_board,
            recent_performance=payload.recent_performance,
        ),
        RecommendationsOutput,
    )
