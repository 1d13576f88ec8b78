"""
Base solver interface and common result types.

All solvers inherit from BaseSolver and return SolverResult.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, List, Tuple

from ..models import AppMode, EducationLevel, ExplanationStyle, Scan, Subject, resolve_subject
from ..utils.config import DEFAULT_LANGUAGE
from ..utils.errors import EduSolverError
from .gemini import GeminiClient

logger = logging.getLogger(__name__)

DEFAULT_QUESTION_COUNT = 5
MIN_QUESTION_COUNT = 1
MAX_QUESTION_COUNT = 10


def clamp_question_count(count: int) -> int:
    return min(max(int(count), MIN_QUESTION_COUNT), MAX_QUESTION_COUNT)


@dataclass
class SolveRequest:
    """
    Everything a solver needs to build one model request.
    """

    images: List[bytes] = field(default_factory=list)
    texts: List[str] = field(default_factory=list)
    style: ExplanationStyle = ExplanationStyle.DETAILED
    level: EducationLevel = EducationLevel.AUTO
    subject: Subject = Subject.AUTO
    custom_subject: Optional[str] = None
    question_count: int = DEFAULT_QUESTION_COUNT
    language: str = DEFAULT_LANGUAGE

    def __post_init__(self):
        self.question_count = clamp_question_count(self.question_count)

    @property
    def subject_name(self) -> str:
        return resolve_subject(self.subject, self.custom_subject)

    @classmethod
    def from_scan(cls, scan: Scan, language: str = DEFAULT_LANGUAGE) -> "SolveRequest":
        return cls(
            images=list(scan.images),
            texts=list(scan.text_inputs),
            style=scan.explanation_style,
            level=scan.education_level,
            subject=scan.subject,
            custom_subject=scan.custom_subject,
            question_count=scan.question_count or DEFAULT_QUESTION_COUNT,
            language=language,
        )


@dataclass
class SolverResult:
    """
    Result from a solver operation.

    Wraps the model's markdown answer with metadata about the attempt.
    """

    success: bool
    text: Optional[str] = None
    error_message: Optional[str] = None
    solver_name: str = ""
    elapsed_ms: int = 0

    @classmethod
    def failure(cls, message: str, solver_name: str = "") -> "SolverResult":
        """Create a failed result."""
        return cls(success=False, error_message=message, solver_name=solver_name)

    @classmethod
    def from_text(cls, text: str, solver_name: str = "", elapsed_ms: int = 0) -> "SolverResult":
        """Create a successful result from the model's answer."""
        return cls(success=True, text=text, solver_name=solver_name, elapsed_ms=elapsed_ms)


class BaseSolver(ABC):
    """
    Abstract base class for model-backed solvers.

    Subclasses supply the prompt; the request itself is shared.
    """

    # Human-readable name for this solver
    name: str = "BaseSolver"

    # Description of what this solver produces
    description: str = "Base solver class"

    # App mode this solver serves
    mode: AppMode = AppMode.STUDENT

    def __init__(self, client: GeminiClient):
        self.client = client

    def can_solve(self, mode: AppMode) -> bool:
        """Check if this solver serves the given app mode."""
        return mode == self.mode

    @abstractmethod
    def build_prompt(self, request: SolveRequest) -> str:
        """
        Build the instruction text sent after the user's material.

        Args:
            request: SolveRequest with material and preferences

        Returns:
            Prompt string
        """
        pass

    def solve(self, request: SolveRequest) -> SolverResult:
        """
        Send the material and prompt to the model.

        Errors are reported in the result, never raised.
        """
        prompt = self.build_prompt(request)
        logger.info(
            "%s: %d image(s), %d text(s), level=%s, subject=%s",
            self.name,
            len(request.images),
            len(request.texts),
            request.level.value,
            request.subject_name,
        )

        try:
            text, elapsed_ms = self._timed_solve(
                self.client.generate, prompt, request.images, request.texts
            )
        except EduSolverError as e:
            logger.warning("%s failed: %s", self.name, e)
            return SolverResult.failure(e.user_message, self.name)

        return SolverResult.from_text(text, self.name, elapsed_ms)

    def _timed_solve(self, solve_func, *args, **kwargs) -> Tuple[str, int]:
        """
        Wrapper that times the solve operation.

        Returns (result, elapsed_ms)
        """
        start = time.perf_counter()
        result = solve_func(*args, **kwargs)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        return result, elapsed_ms


class SolverRegistry:
    """
    Registry of available solvers.

    Maintains priority order for solver selection.
    """

    def __init__(self):
        self._solvers: List[Tuple[int, BaseSolver]] = []

    def register(self, solver: BaseSolver, priority: int = 100):
        """
        Register a solver with given priority (lower = higher priority).
        """
        self._solvers.append((priority, solver))
        self._solvers.sort(key=lambda x: x[0])

    def get_solver(self, mode: AppMode) -> Optional[BaseSolver]:
        """
        Get the highest-priority solver serving this mode.
        """
        for _, solver in self._solvers:
            if solver.can_solve(mode):
                return solver
        return None

    @property
    def solvers(self) -> List[BaseSolver]:
        """Get all registered solvers in priority order."""
        return [solver for _, solver in self._solvers]
