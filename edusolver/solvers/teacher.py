"""
Teacher mode: generate practice questions with an answer key.
"""

from ..models import AppMode
from .base import BaseSolver, SolveRequest
from .prompts import teacher_prompt


class QuestionGenerator(BaseSolver):
    """
    Writes N exam questions from the submitted material.

    The explanation style controls how detailed the answer key is.
    """

    name = "QuestionGenerator"
    description = "Practice questions and answer keys for teachers"
    mode = AppMode.TEACHER

    def build_prompt(self, request: SolveRequest) -> str:
        return teacher_prompt(
            level=request.level,
            subject_name=request.subject_name,
            style=request.style,
            question_count=request.question_count,
            language=request.language,
        )
