"""
Tests for the study-tool flows with the model call stubbed out.
"""

import base64
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from nexuslearn import flows
from nexuslearn.document import PdfTextExtractionError
from nexuslearn.flows.homework import build_homework_prompt
from nexuslearn.flows.mistakes import only_mistakes
from nexuslearn.flows.tutor import build_tutor_messages
from nexuslearn.schemas.flows import (
    AskTutorInput,
    DailyPlan,
    FlashcardInput,
    FlashcardOutput,
    HomeworkHelpInput,
    MindMapInput,
    MindMapOutput,
    MistakeAnalysis,
    MistakeAnalysisInput,
    QuizFeedbackInput,
    QuizInput,
    QuizQuestion,
    RecommendationsOutput,
    StudyPlan,
    StudyPlanInput,
)

STRUCTURED = "nexuslearn.flows.base.generate_structured"


def _prompt(mock: MagicMock) -> str:
    messages = mock.call_args.args[0]
    return messages[0]["content"]


def _history(user_answers):
    return MistakeAnalysisInput.model_validate(
        {
            "quizHistory": [
                {
                    "id": "q1",
                    "topic": "Cells",
                    "score": 1,
                    "totalQuestions": 2,
                    "questions": [
                        {
                            "question": "Powerhouse of the cell?",
                            "userAnswer": user_answers[0],
                            "correctAnswer": "Mitochondria",
                        },
                        {
                            "question": "Plant cell wall is made of?",
                            "userAnswer": user_answers[1],
                            "correctAnswer": "Cellulose",
                        },
                    ],
                }
            ]
        }
    )


class TestQuiz:
    @pytest.mark.asyncio
    async def test_quiz_is_truncated_to_requested_count(self):
        questions = [
            QuizQuestion(question=f"Q{i}", options=["True", "False"], correct_answer="True")
            for i in range(5)
        ]
        with patch(STRUCTURED, return_value=questions) as mock_llm:
            result = await flows.generate_quiz(
                QuizInput(topic="Cells", num_questions=3, question_type="true-false")
            )

        assert [q.question for q in result] == ["Q0", "Q1", "Q2"]
        assert "Number of Questions: 3" in _prompt(mock_llm)
        assert mock_llm.call_args.args[2] == list[QuizQuestion]

    def test_question_count_is_bounded(self):
        with pytest.raises(ValidationError):
            QuizInput(topic="Cells", num_questions=11, question_type="mcq")
        with pytest.raises(ValidationError):
            QuizInput(topic="Cells", num_questions=0, question_type="mcq")

    def test_feedback_lists_must_match(self):
        with pytest.raises(ValidationError):
            QuizFeedbackInput(
                quiz_questions=["a", "b"], user_answers=["x"], correct_answers=["y", "z"]
            )


class TestMistakeAnalysis:
    def test_only_mistakes_drops_correct_answers(self):
        payload = _history(["Mitochondria", "Chitin"])

        filtered = only_mistakes(payload.quiz_history)

        assert len(filtered) == 1
        assert [q.question for q in filtered[0].questions] == [
            "Plant cell wall is made of?"
        ]

    @pytest.mark.asyncio
    async def test_no_mistakes_skips_model_call(self):
        with patch(STRUCTURED) as mock_llm:
            result = await flows.analyze_mistakes(
                _history(["Mitochondria", "Cellulose"])
            )

        mock_llm.assert_not_called()
        assert result == MistakeAnalysis()

    @pytest.mark.asyncio
    async def test_prompt_contains_only_incorrect_answers(self):
        with patch(STRUCTURED, return_value=MistakeAnalysis()) as mock_llm:
            await flows.analyze_mistakes(_history(["Mitochondria", "Chitin"]))

        prompt = _prompt(mock_llm)
        assert "Plant cell wall is made of?" in prompt
        assert "Powerhouse of the cell?" not in prompt
        assert 'Your Answer: "Chitin"' in prompt


class TestStudyPlan:
    @pytest.mark.asyncio
    async def test_goal_and_timeframe_echo_the_request(self):
        plan = StudyPlan(
            title="Exam prep",
            goal="something else",
            timeframe=99,
            daily_breakdown=[
                DailyPlan(
                    day=1, topic="Algebra", focus="Basics", tasks=["Read"], estimated_time="1h"
                )
            ],
        )
        with patch(STRUCTURED, return_value=plan):
            result = await flows.generate_study_plan(
                StudyPlanInput(goal="Pass finals", subjects="Math", timeframe=7)
            )

        assert result.goal == "Pass finals"
        assert result.timeframe == 7
        assert result.title == "Exam prep"

    def test_timeframe_must_be_positive(self):
        with pytest.raises(ValidationError):
            StudyPlanInput(goal="g", subjects="s", timeframe=0)


class TestSourceTextFlows:
    @pytest.mark.asyncio
    async def test_flashcards_from_text(self):
        with patch(
            STRUCTURED, return_value=FlashcardOutput(cards=[])
        ) as mock_llm:
            await flows.generate_flashcards(FlashcardInput(text="Osmosis is diffusion."))

        assert "Osmosis is diffusion." in _prompt(mock_llm)

    @pytest.mark.asyncio
    async def test_flashcards_from_pdf(self, pdf_factory):
        uri = "data:application/pdf;base64," + base64.b64encode(
            pdf_factory(["Osmosis moves water"])
        ).decode()
        with patch(STRUCTURED, return_value=FlashcardOutput(cards=[])) as mock_llm:
            await flows.generate_flashcards(FlashcardInput(pdf_data_uri=uri))

        assert "Osmosis moves water" in _prompt(mock_llm)

    @pytest.mark.asyncio
    async def test_unreadable_pdf_raises(self, pdf_factory):
        uri = "data:application/pdf;base64," + base64.b64encode(
            pdf_factory([])
        ).decode()
        with patch(STRUCTURED) as mock_llm, pytest.raises(PdfTextExtractionError):
            await flows.generate_flashcards(FlashcardInput(pdf_data_uri=uri))
        mock_llm.assert_not_called()

    def test_source_is_required(self):
        with pytest.raises(ValidationError):
            FlashcardInput()
        with pytest.raises(ValidationError):
            FlashcardInput(pdf_data_uri="data:text/plain;base64,aGk=")

    @pytest.mark.asyncio
    async def test_mind_map_strips_mermaid_fence(self):
        fenced = MindMapOutput(map_data="```mermaid\nmindmap\n  root((Cells))\n```")
        with patch(STRUCTURED, return_value=fenced) as mock_llm:
            result = await flows.generate_mind_map(
                MindMapInput(text="Cells are units of life.", topic="Cells")
            )

        assert result.map_data == "mindmap\n  root((Cells))"
        assert 'The central topic is "Cells"' in _prompt(mock_llm)


class TestPrompts:
    def test_tutor_messages_carry_history_and_topic(self):
        payload = AskTutorInput.model_validate(
            {
                "history": [
                    {"role": "user", "content": "What is a cell?"},
                    {"role": "model", "content": "The unit of life."},
                ],
                "question": "And a tissue?",
                "topic": "Biology",
            }
        )

        messages = build_tutor_messages(payload)

        assert messages[0]["role"] == "system"
        assert "studying Biology" in messages[0]["content"]
        assert [m["role"] for m in messages[1:]] == ["user", "assistant", "user"]
        assert messages[-1]["content"] == "And a tissue?"

    def test_tutor_streams_from_chat_model(self):
        payload = AskTutorInput(question="Why?", topic="Physics")
        with patch(
            "nexuslearn.flows.tutor.chat_completion_stream", return_value=iter(["a", "b"])
        ) as mock_stream:
            chunks = list(flows.ask_tutor(payload, model="google/test-model"))

        assert chunks == ["a", "b"]
        assert mock_stream.call_args.args[1] == "google/test-model"

    def test_homework_prompt_includes_optional_context(self):
        prompt = build_homework_prompt(
            HomeworkHelpInput(
                question="Solve 2x = 4",
                subject="Math",
                grade_level="7",
                relevant_material="Linear equations",
            )
        )

        assert "grade level: 7" in prompt
        assert "The subject is: Math." in prompt
        assert "Linear equations" in prompt

    def test_homework_prompt_without_optional_context(self):
        prompt = build_homework_prompt(HomeworkHelpInput(question="Solve 2x = 4"))

        assert "grade level:" not in prompt
        assert "relevant material" not in prompt

    def test_recommendations_require_exactly_three(self):
        item = {"type": "review", "title": "t", "reason": "r"}
        with pytest.raises(ValidationError):
            RecommendationsOutput.model_validate({"recommendations": [item, item]})
        assert len(
            RecommendationsOutput.model_validate(
                {"recommendations": [item, item, item]}
            ).recommendations
        ) == 3
