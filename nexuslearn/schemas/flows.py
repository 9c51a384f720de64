"""
Pydantic models for the study-tool flows.

Request and response bodies use camelCase keys.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator, model_validator

from nexuslearn.schemas.base import CamelModel

# Tutor


class TutorMessage(CamelModel):
    role: Literal["user", "assistant", "model"]
    content: str


class AskTutorInput(CamelModel):
    history: list[TutorMessage] = Field(default_factory=list)
    question: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)


# Quiz


class QuizInput(CamelModel):
    topic: str = Field(..., min_length=1, description="The topic for the quiz.")
    num_questions: int = Field(
        ..., ge=1, le=10, description="The number of questions to generate."
    )
    question_type: Literal["mcq", "true-false", "short-answer"] = Field(
        ..., description="The type of questions to generate."
    )


class QuizQuestion(CamelModel):
    question: str = Field(..., description="The text of the question.")
    options: list[str] | None = Field(
        None, description="A list of possible answers for MCQ or True/False."
    )
    correct_answer: str = Field(..., description="The correct answer to the question.")


# Essay grading


class GradeEssayInput(CamelModel):
    essay: str = Field(
        ..., min_length=1, description="The full text of the student's essay."
    )


class GradeEssayOutput(CamelModel):
    grade: str = Field(..., description="The overall letter grade (e.g., A-, B+, C).")
    strengths: list[str] = Field(..., description="Specific strengths of the essay.")
    areas_for_improvement: list[str] = Field(
        ..., description="Specific areas where the essay could be improved."
    )
    detailed_feedback: str = Field(
        ..., description="A paragraph of overall constructive feedback."
    )
    revised_essay: str = Field(
        ..., description="A revised version incorporating the improvements."
    )


# Flashcards and mind maps accept either raw text or a PDF data URI


class _SourceTextInput(CamelModel):
    text: str | None = Field(None, description="The source text.")
    pdf_data_uri: str | None = Field(
        None, description="A PDF encoded as a data:application/pdf;base64 URI."
    )

    @model_validator(mode="after")
    def _require_source(self) -> _SourceTextInput:
        if not (self.text and self.text.strip()) and not self.pdf_data_uri:
            raise ValueError("Either text or pdfDataUri is required")
        return self

    @field_validator("pdf_data_uri")
    @classmethod
    def _validate_data_uri(cls, v: str | None) -> str | None:
        if v and not v.startswith("data:application/pdf;base64,"):
            raise ValueError("pdfDataUri must be a base64 PDF data URI")
        return v


class FlashcardInput(_SourceTextInput):
    pass


class Flashcard(CamelModel):
    question: str = Field(..., description="The question or term for the front.")
    answer: str = Field(..., description="The answer or definition for the back.")


class FlashcardOutput(CamelModel):
    cards: list[Flashcard]


class MindMapInput(_SourceTextInput):
    topic: str = Field(..., min_length=1, description="The central topic of the map.")


class MindMapOutput(CamelModel):
    map_data: str = Field(
        ..., description="A mind map visualization in Mermaid JS graph syntax."
    )


# Study planner


class StudyPlanInput(CamelModel):
    goal: str = Field(..., min_length=1, description="The primary academic goal.")
    subjects: str = Field(
        ..., min_length=1, description="Comma-separated subjects or topics."
    )
    timeframe: int = Field(..., ge=1, description="Number of days to cover.")


class DailyPlan(CamelModel):
    day: int
    topic: str
    focus: str
    tasks: list[str]
    estimated_time: str


class StudyPlan(CamelModel):
    title: str
    goal: str
    timeframe: int
    daily_breakdown: list[DailyPlan]


# Mistake analysis


class AnsweredQuestion(CamelModel):
    question: str
    user_answer: str
    correct_answer: str

    @property
    def is_correct(self) -> bool:
        return self.user_answer == self.correct_answer


class QuizAttempt(CamelModel):
    id: str
    topic: str
    score: float
    total_questions: int
    questions: list[AnsweredQuestion]


class MistakeAnalysisInput(CamelModel):
    quiz_history: list[QuizAttempt]


class StudySuggestion(CamelModel):
    suggestion: str
    implementation: str


class MistakeAnalysis(CamelModel):
    common_themes: list[str] = Field(default_factory=list)
    concepts_to_revisit: list[str] = Field(default_factory=list)
    study_suggestions: list[StudySuggestion] = Field(default_factory=list)


# Homework help


class HomeworkHelpInput(CamelModel):
    question: str = Field(..., min_length=1)
    subject: str | None = None
    grade_level: str | None = None
    relevant_material: str | None = None


class HomeworkHelpOutput(CamelModel):
    answer: str
    step_by_step_solution: str | None = None
    explanation: str | None = None


# Recommendations


class RecommendationsInput(CamelModel):
    student_grade: str = Field(..., min_length=1)
    student_board: str = Field(..., min_length=1)
    recent_performance: str = Field(..., min_length=1)


class Recommendation(CamelModel):
    type: Literal["review", "practice", "focus"]
    title: str
    reason: str


class RecommendationsOutput(CamelModel):
    recommendations: list[Recommendation] = Field(..., min_length=3, max_length=3)


# Quiz feedback


class QuizFeedbackInput(CamelModel):
    quiz_questions: list[str]
    user_answers: list[str]
    correct_answers: list[str]

    @model_validator(mode="after")
    def _same_length(self) -> QuizFeedbackInput:
        if not (
            len(self.quiz_questions)
            == len(self.user_answers)
            == len(self.correct_answers)
        ):
            raise ValueError(
                "quizQuestions, userAnswers and correctAnswers must have the same length"
            )
        return self


class QuizFeedbackOutput(CamelModel):
    feedback: list[str]
