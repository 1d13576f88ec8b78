"""
Tests for error handling module.

Tests the centralized error handling with rich context and suggestions.
"""

import pytest


class TestErrorContext:
    """Test ErrorContext creation and conversion."""

    def test_from_api_key_missing(self):
        """Missing key is a warning with a link to get one."""
        from edusolver.utils.errors import ApiKeyMissingError, ErrorContext, ErrorSeverity

        ctx = ErrorContext.from_exception(ApiKeyMissingError())

        assert ctx.title == "API Key Required"
        assert ctx.severity == ErrorSeverity.WARNING
        assert any("aistudio.google.com" in s for s in ctx.suggestions)
        assert ctx.recoverable is True

    def test_from_camera_permission_error(self):
        from edusolver.utils.errors import CameraPermissionError, ErrorContext

        ctx = ErrorContext.from_exception(CameraPermissionError(0))

        assert ctx.title == "Camera Access Denied"
        assert "permission" in ctx.message
        assert ctx.technical_details == "Device: 0"
        assert any("upload" in s.lower() for s in ctx.suggestions)

    def test_from_too_many_images(self):
        from edusolver.utils.errors import ErrorContext, TooManyImagesError

        ctx = ErrorContext.from_exception(TooManyImagesError(10))

        assert ctx.title == "Too Many Images"
        assert "10" in ctx.message

    def test_from_connection_error(self):
        from edusolver.utils.errors import ErrorContext

        ctx = ErrorContext.from_exception(ConnectionError("reset by peer"))

        assert ctx.title == "Connection Problem"
        assert "reset by peer" in ctx.technical_details

    def test_from_import_error(self):
        from edusolver.utils.errors import ErrorContext, ErrorSeverity

        ctx = ErrorContext.from_exception(ImportError("No module named 'cv2'"))

        assert ctx.title == "Missing Dependency"
        assert ctx.severity == ErrorSeverity.CRITICAL
        assert ctx.recoverable is False

    def test_from_generic_exception(self):
        """Test ErrorContext from generic exception."""
        from edusolver.utils.errors import ErrorContext

        exc = ValueError("Something went wrong")
        ctx = ErrorContext.from_exception(exc, context="exporting history")

        assert ctx.title == "Error"
        assert "Something went wrong" in ctx.message
        assert "While exporting history" in ctx.technical_details


class TestEduSolverError:
    """Test base EduSolverError class."""

    def test_custom_suggestions(self):
        from edusolver.utils.errors import InferenceError

        exc = InferenceError("Quota exceeded", suggestions=["Wait a minute"])

        assert exc.suggestions == ["Wait a minute"]
        assert exc.user_message == "Quota exceeded"

    def test_default_suggestions_are_copied(self):
        from edusolver.utils.errors import InferenceError

        exc = InferenceError("first")
        exc.suggestions.append("mutated")

        assert "mutated" not in InferenceError("second").suggestions

    def test_hierarchy(self):
        from edusolver.utils.errors import (
            CameraError,
            CameraPermissionError,
            EduSolverError,
            EmptyBatchError,
            ScanNotFoundError,
            StagingError,
            StorageError,
        )

        assert issubclass(CameraPermissionError, CameraError)
        assert issubclass(EmptyBatchError, StagingError)
        assert issubclass(ScanNotFoundError, StorageError)
        assert issubclass(StorageError, EduSolverError)

    def test_scan_not_found_keeps_id(self):
        from edusolver.utils.errors import ScanNotFoundError

        exc = ScanNotFoundError("abc123")

        assert exc.scan_id == "abc123"
        assert "abc123" in str(exc)


class TestFormatting:
    """Test user-facing formatting helpers."""

    def test_format_for_user(self):
        from edusolver.utils.errors import EmptyBatchError, format_error_for_user

        text = format_error_for_user(EmptyBatchError())

        assert text.startswith("Please add material first")
        assert "Try: Take a photo of the problem" in text

    def test_format_without_suggestions(self):
        from edusolver.utils.errors import EduSolverError, format_error_for_user

        assert format_error_for_user(EduSolverError("Plain")) == "Plain"

    def test_format_for_dialog(self):
        pytest.importorskip("PyQt6.QtWidgets")
        from PyQt6.QtWidgets import QMessageBox
        from edusolver.utils.errors import StorageError, format_error_for_dialog

        result = format_error_for_dialog(
            StorageError("Failed to write", technical_details="disk I/O error")
        )

        assert result["title"] == "Storage Error"
        assert result["text"] == "Failed to write"
        assert "Suggestions:" in result["detailed_text"]
        assert "disk I/O error" in result["detailed_text"]
        assert result["icon"] == QMessageBox.Icon.Critical
