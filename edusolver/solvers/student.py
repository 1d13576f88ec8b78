"""
Student mode: solve and explain the submitted problem.
"""

from ..models import AppMode
from .base import BaseSolver, SolveRequest
from .prompts import student_prompt


class ProblemSolver(BaseSolver):
    """
    Solves homework problems from photos and typed text.

    The answer adapts its tone to the education level and its length
    to the explanation style.
    """

    name = "ProblemSolver"
    description = "Step-by-step solutions for student questions"
    mode = AppMode.STUDENT

    def build_prompt(self, request: SolveRequest) -> str:
        return student_prompt(
            level=request.level,
            subject_name=request.subject_name,
            style=request.style,
            language=request.language,
        )
