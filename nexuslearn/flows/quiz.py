"""
Quiz generation and per-question feedback.
"""

from __future__ import annotations

from nexuslearn.schemas.flows import (
    QuizFeedbackInput,
    QuizFeedbackOutput,
    QuizInput,
    QuizQuestion,
)

from .base import run_structured_prompt

QUIZ_PROMPT = """You are an AI assistant designed to create educational quizzes.
Generate a quiz based on the following criteria:

Topic: {topic}
Number of Questions: {num_questions}
Question Type: {question_type}

- For 'mcq' (Multiple Choice), provide 4 options.
- For 'true-false', provide 'True' and 'False' as options.
- For 'short-answer', do not provide any options.
- Ensure the 'correctAnswer' field matches one of the 'options' for MCQ and true/false questions.
"""

QUIZ_FEEDBACK_PROMPT = """You are an AI tutor providing feedback on a quiz.

Provide clear, concise, and helpful explanations for each answer, focusing on areas where the student can improve.
Address each question individually, and provide reasoning as to why the given correct answer is correct.
Return exactly one feedback entry per question, in the same order as the questions.

{questions}
"""


async def generate_quiz(payload: QuizInput) -> list[QuizQuestion]:
    prompt = QUIZ_PROMPT.format(
        topic=payload.topic,
        num_questions=payload.num_questions,
        question_type=payload.question_type,
    )
    questions = await run_structured_prompt(prompt, list[QuizQuestion])
    return questions[: payload.num_questions]


def _format_answers(payload: QuizFeedbackInput) -> str:
    blocks = []
    for idx, (question, user_answer, correct_answer) in enumerate(
        zip(
            payload.quiz_questions,
            payload.user_answers,
            payload.correct_answers,
            strict=True,
        ),
        start=1,
    ):
        blocks.append(
            f"Question {idx}: {question}\n"
            f"Student's Answer: {user_answer}\n"
            f"Correct Answer: {correct_answer}"
        )
    return "\n\n".join(blocks)


async def quiz_feedback(payload: QuizFeedbackInput) -> QuizFeedbackOutput:
    prompt = QUIZ_FEEDBACK_PROMPT.format(questions=_format_answers(payload))
    return await run_structured_prompt(prompt, QuizFeedbackOutput)
