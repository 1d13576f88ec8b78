"""PyQt6 user interface."""

from .main_window import MainWindow, run_app

__all__ = ["MainWindow", "run_app"]
