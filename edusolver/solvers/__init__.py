"""Solver layer: model-backed solvers for student and teacher mode."""

from .base import BaseSolver, SolveRequest, SolverResult, SolverRegistry
from .gemini import GeminiClient
from .student import ProblemSolver
from .teacher import QuestionGenerator

__all__ = [
    "BaseSolver",
    "SolveRequest",
    "SolverResult",
    "SolverRegistry",
    "GeminiClient",
    "ProblemSolver",
    "QuestionGenerator",
    "get_default_registry",
]


def get_default_registry(client: GeminiClient) -> SolverRegistry:
    """
    Create a registry with both solvers sharing one client.

    Priority order (lower = higher priority):
    - ProblemSolver: 10 (student mode)
    - QuestionGenerator: 20 (teacher mode)
    """
    registry = SolverRegistry()
    registry.register(ProblemSolver(client), priority=10)
    registry.register(QuestionGenerator(client), priority=20)
    return registry
