"""
Error types for EduSolver and helpers to present them.

Every failure the user can act on is an EduSolverError subclass that
carries a title, a message, what to try next, and a severity. Anything
else is mapped to the same shape by ErrorContext.from_exception.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional


class ErrorSeverity(Enum):
    INFO = auto()  # Nothing was lost
    WARNING = auto()  # Fix the input and continue
    ERROR = auto()  # The operation failed, retrying may work
    CRITICAL = auto()  # Needs a restart or reinstall


@dataclass
class ErrorContext:
    """What the UI shows for one failure."""

    title: str
    message: str
    technical_details: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)
    severity: ErrorSeverity = ErrorSeverity.ERROR
    recoverable: bool = True

    @classmethod
    def from_exception(cls, exc: Exception, context: str = "") -> "ErrorContext":
        """Describe any exception; EduSolverError describes itself."""
        if isinstance(exc, EduSolverError):
            return exc.to_context()

        details = f"{type(exc).__name__}: {exc}"

        if isinstance(exc, (ConnectionError, TimeoutError)) or "timed out" in str(exc).lower():
            return cls(
                title="Connection Problem",
                message="Could not reach the AI service.",
                technical_details=details,
                suggestions=["Check your internet connection", "Try submitting again in a moment"],
            )

        if isinstance(exc, ImportError):
            return cls(
                title="Missing Dependency",
                message="A required component is not installed.",
                technical_details=details,
                suggestions=["Reinstall EduSolver with: pip install -e .", "Restart the application"],
                severity=ErrorSeverity.CRITICAL,
                recoverable=False,
            )

        if context:
            details += f"\nWhile {context}"
        return cls(
            title="Error",
            message=f"Something went wrong: {exc}",
            technical_details=details,
            suggestions=["Try again", "Restart the application"],
        )

    def status_line(self) -> str:
        """Message plus the first suggestion, for the status bar and the CLI."""
        if not self.suggestions:
            return self.message
        return f"{self.message} Try: {self.suggestions[0]}"

    def detailed_text(self) -> Optional[str]:
        """Numbered suggestions followed by technical details, or None."""
        sections = []
        if self.suggestions:
            lines = [f"  {i}. {s}" for i, s in enumerate(self.suggestions, 1)]
            sections.append("\n".join(["Suggestions:"] + lines))
        if self.technical_details:
            sections.append("Technical details:\n" + self.technical_details)
        return "\n\n".join(sections) or None


class EduSolverError(Exception):
    """
    Base class for errors shown to the user.

    Subclasses set default_title, default_suggestions and
    default_severity; instances may override suggestions and severity.
    """

    default_title = "Error"
    default_suggestions: List[str] = []
    default_severity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        *,
        suggestions: Optional[List[str]] = None,
        technical_details: Optional[str] = None,
        severity: Optional[ErrorSeverity] = None,
    ):
        super().__init__(message)
        self.user_message = message
        self.suggestions = list(suggestions or self.default_suggestions)
        self.technical_details = technical_details
        self.severity = severity or self.default_severity

    def to_context(self) -> ErrorContext:
        return ErrorContext(
            title=self.default_title,
            message=self.user_message,
            technical_details=self.technical_details,
            suggestions=self.suggestions,
            severity=self.severity,
            recoverable=self.severity is not ErrorSeverity.CRITICAL,
        )


# === AI Service Errors ===


class ApiKeyMissingError(EduSolverError):
    """Raised when a request is made before an API key was entered."""

    default_title = "API Key Required"
    default_severity = ErrorSeverity.WARNING
    default_suggestions = [
        "Enter your Gemini API key to continue",
        "Get a free key at https://aistudio.google.com/app/apikey",
    ]

    def __init__(self):
        super().__init__("No API key has been entered for this session.")


class InferenceError(EduSolverError):
    """Raised when the AI service call fails."""

    default_title = "AI Service Error"
    default_suggestions = [
        "Check your internet connection",
        "Verify that the API key is valid",
        "Try submitting again",
    ]


# === Capture Errors ===


class CameraError(EduSolverError):
    """Raised when the camera cannot deliver a frame."""

    default_title = "Camera Error"
    default_suggestions = [
        "Make sure no other application is using the camera",
        "Upload a photo from a file instead",
    ]


class CameraPermissionError(CameraError):
    """Raised when the camera device cannot be opened."""

    default_title = "Camera Access Denied"
    default_suggestions = [
        "Allow camera access for this application in your system settings",
        "Check that a camera is connected",
        "Upload a photo from a file instead",
    ]

    def __init__(self, device: object):
        super().__init__(
            "Cannot access the camera. Make sure permission is granted.",
            technical_details=f"Device: {device}",
        )


class ImageLoadError(EduSolverError):
    """Raised when an uploaded file is not a readable image."""

    default_title = "Image Error"
    default_suggestions = [
        "Choose a PNG, JPEG or WebP file",
        "The file may be corrupted, try another one",
    ]


# === Staging Errors ===


class StagingError(EduSolverError):
    """Raised when the staged batch cannot be changed or submitted."""

    default_title = "Cannot Submit"
    default_severity = ErrorSeverity.WARNING


class EmptyBatchError(StagingError):
    """Raised when submitting with no images and no text."""

    default_title = "Nothing to Submit"
    default_suggestions = [
        "Take a photo of the problem",
        "Upload an image",
        "Type the problem as text",
    ]

    def __init__(self):
        super().__init__("Please add material first (an image or text).")


class TooManyImagesError(StagingError):
    """Raised when the batch already holds the maximum number of images."""

    default_title = "Too Many Images"

    def __init__(self, limit: int):
        super().__init__(
            f"A maximum of {limit} images can be added per session.",
            suggestions=[
                "Remove an image before adding another",
                "Submit this batch and start a new one",
            ],
        )
        self.limit = limit


class EmptyTextError(StagingError):
    """Raised when a blank text item is added."""

    default_title = "Empty Text"
    default_suggestions = ["Type the problem before saving it"]

    def __init__(self):
        super().__init__("The text item is empty.")


class MissingSubjectError(StagingError):
    """Raised when 'other subject' is selected without naming it."""

    default_title = "Subject Required"
    default_suggestions = ["Type the subject name, e.g. Accounting"]

    def __init__(self):
        super().__init__("Please enter the subject name.")


# === Storage Errors ===


class StorageError(EduSolverError):
    """Raised when local data cannot be read or written."""

    default_title = "Storage Error"
    default_suggestions = [
        "Check that the data directory is writable",
        "Clear the history if the problem persists",
    ]


class ScanNotFoundError(StorageError):
    """Raised when a scan id does not exist in history."""

    default_title = "Not Found"
    default_severity = ErrorSeverity.WARNING
    default_suggestions = ["Refresh the history list"]

    def __init__(self, scan_id: str):
        super().__init__(f"No saved scan with id '{scan_id}'")
        self.scan_id = scan_id


# === Export Errors ===


class ExportError(EduSolverError):
    """Raised when history cannot be exported."""

    default_title = "Export Error"
    default_suggestions = [
        "Choose a folder you can write to",
        "Use a .txt, .csv or .md file name",
    ]


# === Presentation ===

_DIALOG_ICONS = {
    ErrorSeverity.INFO: "Information",
    ErrorSeverity.WARNING: "Warning",
    ErrorSeverity.ERROR: "Critical",
    ErrorSeverity.CRITICAL: "Critical",
}


def format_error_for_user(exc: Exception, context: str = "") -> str:
    """One line for the status bar or stderr."""
    return ErrorContext.from_exception(exc, context).status_line()


def format_error_for_dialog(exc: Exception, context: str = "") -> dict:
    """
    Keyword material for a QMessageBox.

    Returns:
        dict with 'title', 'text', 'detailed_text' and 'icon'
    """
    from PyQt6.QtWidgets import QMessageBox

    ctx = ErrorContext.from_exception(exc, context)
    return {
        "title": ctx.title,
        "text": ctx.message,
        "detailed_text": ctx.detailed_text(),
        "icon": getattr(QMessageBox.Icon, _DIALOG_ICONS[ctx.severity]),
    }
