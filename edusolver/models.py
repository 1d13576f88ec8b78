"""
Core data structures for EduSolver.

These dataclasses define the contract between layers. Enum values are
the strings written to local storage, so they must not be renamed.
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List


class AppMode(Enum):
    """Who is using the app: a student asking, or a teacher building exams."""

    STUDENT = "student"
    TEACHER = "teacher"


class ExplanationStyle(Enum):
    """How much explanation the answer should contain."""

    DETAILED = "detailed"
    BRIEF = "brief"
    DIRECT = "direct"

    @property
    def label(self) -> str:
        return {
            ExplanationStyle.DETAILED: "Detailed",
            ExplanationStyle.BRIEF: "Brief",
            ExplanationStyle.DIRECT: "Answer Only",
        }[self]


class EducationLevel(Enum):
    """Education levels of the Indonesian school system."""

    AUTO = "Auto"
    KINDERGARTEN = "TK"
    ELEMENTARY = "SD"
    JUNIOR_HIGH = "SMP"
    SENIOR_HIGH = "SMA/SMK"
    UNIVERSITY = "Kuliah (S1/D4)"
    GENERAL = "Umum"


class Subject(Enum):
    """School subjects. OTHER is paired with a free-text custom subject."""

    AUTO = "Auto"
    MATH = "Matematika"
    PHYSICS = "Fisika"
    CHEMISTRY = "Kimia"
    BIOLOGY = "Biologi"
    HISTORY = "Sejarah"
    GEOGRAPHY = "Geografi"
    ECONOMICS = "Ekonomi"
    SOCIOLOGY = "Sosiologi"
    INDONESIAN = "B. Indonesia"
    ENGLISH = "B. Inggris"
    COMPUTING = "Coding/TI"
    OTHER = "Lainnya"


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_scan_id() -> str:
    return uuid.uuid4().hex


def resolve_subject(subject: Subject, custom_subject: Optional[str]) -> str:
    """
    Name of the subject as shown to the user and the model.

    The custom subject only applies when OTHER is selected and it is not blank.
    """
    if subject == Subject.OTHER and custom_subject and custom_subject.strip():
        return custom_subject.strip()
    return subject.value


@dataclass
class UserPreferences:
    """Last-selected level and subject, restored on the next start."""

    level: EducationLevel = EducationLevel.AUTO
    subject: Subject = Subject.AUTO
    custom_subject: str = ""


@dataclass
class Scan:
    """
    One submitted problem batch and its eventual AI result.

    Created with loading=True, then updated exactly once with either
    a solution or an error.
    """

    images: List[bytes] = field(default_factory=list)  # JPEG buffers
    text_inputs: List[str] = field(default_factory=list)
    explanation_style: ExplanationStyle = ExplanationStyle.DETAILED
    education_level: EducationLevel = EducationLevel.AUTO
    subject: Subject = Subject.AUTO
    custom_subject: Optional[str] = None
    mode: AppMode = AppMode.STUDENT
    question_count: Optional[int] = None  # Teacher mode only
    loading: bool = False
    solution: Optional[str] = None
    error: Optional[str] = None
    id: str = field(default_factory=new_scan_id)
    timestamp: int = field(default_factory=now_ms)

    @property
    def display_subject(self) -> str:
        """Custom subject if one was given, else the subject value."""
        if self.custom_subject:
            return self.custom_subject
        return self.subject.value

    def summary(self, max_length: int = 60) -> str:
        """Short one-line description for list views."""
        if self.text_inputs:
            text = " ".join(self.text_inputs[0].split())
        else:
            count = len(self.images)
            text = f"{count} image" + ("s" if count != 1 else "")

        if len(text) > max_length:
            text = text[: max_length - 3] + "..."
        return text


@dataclass
class Category:
    """A history group: all scans of one level and subject."""

    level: str
    subject: str
    custom_subject: Optional[str]
    count: int
    last_time: int

    @property
    def key(self) -> str:
        return f"{self.level}|{self.subject}"
