"""
Mistake analysis over a student's quiz history.
"""

from __future__ import annotations

from loguru import logger

from nexuslearn.schemas.flows import MistakeAnalysis, MistakeAnalysisInput, QuizAttempt

from .base import run_structured_prompt

MISTAKE_ANALYZER_PROMPT = """You are an expert academic advisor AI. Your goal is to analyze a student's quiz history to find patterns in their mistakes and provide actionable advice.
Focus only on the questions the user answered incorrectly.

Based on the provided quiz history, please generate the following:
1.  **Common Themes**: Identify 2-3 high-level themes in the student's mistakes (e.g., "Misunderstanding of core definitions," "Difficulty with multi-step problems," "Confusion between similar concepts").
2.  **Concepts to Revisit**: List the specific concepts or topics that the student is struggling with, based on their incorrect answers.
3.  **Actionable Study Suggestions**: Provide a list of concrete, personalized study suggestions. For each suggestion, provide a brief implementation detail. For example: Suggestion: "Use flashcards for key terms.", Implementation: "Create a new flashcard for each bolded term in your textbook's chapter on Cellular Biology.".

Here is the student's quiz history:
{history}
"""


def only_mistakes(history: list[QuizAttempt]) -> list[QuizAttempt]:
    """Drop correctly answered questions, then quizzes left with no questions."""
    filtered: list[QuizAttempt] = []
    for quiz in history:
        wrong = [q for q in quiz.questions if not q.is_correct]
        if wrong:
            filtered.append(quiz.model_copy(update={"questions": wrong}))
    return filtered


def _format_history(history: list[QuizAttempt]) -> str:
    blocks = []
    for quiz in history:
        lines = [
            "---",
            f"Quiz Topic: {quiz.topic}",
            f"Score: {quiz.score:g}/{quiz.total_questions}",
            "",
            "Incorrect Answers:",
        ]
        for q in quiz.questions:
            lines.append(f'- Question: "{q.question}"')
            lines.append(f'  - Your Answer: "{q.user_answer}"')
            lines.append(f'  - Correct Answer: "{q.correct_answer}"')
        lines.append("---")
        blocks.append("\n".join(lines))
    return "\n".join(blocks)


async def analyze_mistakes(payload: MistakeAnalysisInput) -> MistakeAnalysis:
    mistakes = only_mistakes(payload.quiz_history)
    if not mistakes:
        logger.debug("No incorrect answers in quiz history; skipping model call")
        return MistakeAnalysis()
    return await run_structured_prompt(
        MISTAKE_ANALYZER_PROMPT.format(history=_format_history(mistakes)),
        MistakeAnalysis,
    )
