"""
Solution view for PyQt6.

Shows rendered answers in QtWebEngine when it is installed, and in a
rich-text label otherwise (formulas then stay as raw LaTeX).
"""

import html
from typing import Optional

try:
    from PyQt6.QtWebEngineWidgets import QWebEngineView

    WEBENGINE_AVAILABLE = True
except ImportError:
    WEBENGINE_AVAILABLE = False
    QWebEngineView = None

from PyQt6.QtWidgets import QFrame, QLabel, QScrollArea, QVBoxLayout, QWidget
from PyQt6.QtCore import Qt

from ..models import Scan
from .renderer import SolutionRenderer


class MathJaxWidget(QWidget):
    """
    Displays one scan: a loading notice, the error, or the answer.

    The full MathJax page is used with WebEngine; the label fallback only
    gets the Markdown body.
    """

    def __init__(self, parent=None, dark_mode: bool = False):
        super().__init__(parent)

        self.renderer = SolutionRenderer(dark_mode=dark_mode)
        self.web_view: Optional[QWebEngineView] = None
        self.fallback_label: Optional[QLabel] = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._build_web_view() if WEBENGINE_AVAILABLE else self._build_label())

    def _build_web_view(self) -> QWidget:
        self.web_view = QWebEngineView()
        return self.web_view

    def _build_label(self) -> QWidget:
        self.fallback_label = QLabel()
        self.fallback_label.setWordWrap(True)
        self.fallback_label.setTextFormat(Qt.TextFormat.RichText)
        self.fallback_label.setAlignment(Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignLeft)
        self.fallback_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)

        area = QScrollArea()
        area.setFrameShape(QFrame.Shape.NoFrame)
        area.setWidgetResizable(True)
        area.setWidget(self.fallback_label)
        return area

    def _show(self, page: str, fragment: str) -> None:
        if self.web_view is not None:
            self.web_view.setHtml(page)
        else:
            self.fallback_label.setText(fragment)

    def display_scan(self, scan: Scan):
        """Show whichever state the scan is in."""
        if scan.loading:
            fragment = "<i>Analysing your problem...</i>"
        elif scan.error:
            fragment = f"<b>{html.escape(scan.error)}</b>"
        else:
            fragment = self.renderer.body_html(scan.solution or "")
        self._show(self.renderer.render_scan(scan), fragment)

    def clear(self):
        self._show("", "")
