"""
Study-tool flows. Each renders one prompt and makes one model call.
"""

from .essay import grade_essay
from .homework import homework_help
from .mistakes import analyze_mistakes
from .quiz import generate_quiz, quiz_feedback
from .recommendations import get_recommendations
from .study_materials import generate_flashcards, generate_mind_map
from .study_plan import generate_study_plan
from .tutor import ask_tutor

__all__ = [
    "analyze_mistakes",
    "ask_tutor",
    "generate_flashcards",
    "generate_mind_map",
    "generate_quiz",
    "generate_study_plan",
    "get_recommendations",
    "grade_essay",
    "homework_help",
    "quiz_feedback",
]
