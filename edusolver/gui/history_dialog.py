"""
History dialog: every saved scan in one searchable table.

The home page only shows the current mode's categories; this dialog
spans both modes and offers export and bulk clearing.
"""

import html
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from PyQt6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QComboBox,
    QDialog,
    QFileDialog,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QSplitter,
    QTableWidget,
    QTableWidgetItem,
    QTextBrowser,
    QVBoxLayout,
)
from PyQt6.QtCore import Qt, pyqtSignal

from ..models import AppMode, Scan
from ..output.exporter import HistoryExporter
from ..output.renderer import SolutionRenderer
from ..utils.errors import EduSolverError, format_error_for_user

EXPORT_FILTERS = "Markdown (*.md);;Plain text (*.txt);;Spreadsheet (*.csv)"


def scan_status(scan: Scan) -> str:
    if scan.loading:
        return "Processing"
    if scan.error:
        return "Failed"
    return "Done"


def matches_query(scan: Scan, query: str) -> bool:
    """Case-insensitive match against text inputs, subject and result."""
    query = query.lower()
    haystack = [scan.display_subject, scan.education_level.value, scan.solution or ""]
    haystack.extend(scan.text_inputs)
    return any(query in item.lower() for item in haystack)


# Header and cell text for each table column
COLUMNS: List[Tuple[str, Callable[[Scan], str]]] = [
    ("Date", lambda s: datetime.fromtimestamp(s.timestamp / 1000).strftime("%Y-%m-%d %H:%M")),
    ("Mode", lambda s: s.mode.value.title()),
    ("Level", lambda s: s.education_level.value),
    ("Subject", lambda s: s.display_subject),
    ("Problem", lambda s: s.summary(50)),
    ("Status", scan_status),
]
PROBLEM_COLUMN = 4


class HistoryDialog(QDialog):
    """
    Browse, open, copy, delete and export saved scans.

    Signals:
        open_requested: scan id the user wants to see in the main window
    """

    open_requested = pyqtSignal(str)

    def __init__(self, session, parent=None):
        super().__init__(parent)
        self.session = session
        self.visible_scans: List[Scan] = []
        self._renderer = SolutionRenderer()

        self.setWindowTitle("History")
        self.setMinimumSize(860, 600)

        layout = QVBoxLayout(self)
        layout.addLayout(self._build_filter_bar())

        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(self._build_table())
        self.preview = QTextBrowser()
        self.preview.setOpenExternalLinks(False)
        splitter.addWidget(self.preview)
        splitter.setSizes([540, 320])
        layout.addWidget(splitter, stretch=1)

        self.count_label = QLabel()
        layout.addWidget(self.count_label)
        layout.addLayout(self._build_buttons())

        self.refresh()

    def _build_filter_bar(self) -> QHBoxLayout:
        bar = QHBoxLayout()

        self.search_input = QLineEdit()
        self.search_input.setPlaceholderText("Search questions, subjects, answers...")
        self.search_input.textChanged.connect(self.refresh)
        bar.addWidget(self.search_input, stretch=3)

        self.mode_filter = QComboBox()
        self.mode_filter.addItem("All Modes", None)
        for mode in AppMode:
            self.mode_filter.addItem(mode.value.title(), mode)
        self.mode_filter.currentIndexChanged.connect(self.refresh)
        bar.addWidget(QLabel("Show:"))
        bar.addWidget(self.mode_filter)
        return bar

    def _build_table(self) -> QTableWidget:
        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels([header for header, _ in COLUMNS])
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.horizontalHeader().setSectionResizeMode(
            PROBLEM_COLUMN, QHeaderView.ResizeMode.Stretch
        )
        self.table.itemSelectionChanged.connect(self._update_preview)
        self.table.cellDoubleClicked.connect(lambda row, col: self._on_open())
        return self.table

    def _build_buttons(self) -> QHBoxLayout:
        row = QHBoxLayout()

        def button(text: str, slot, needs_selection: bool = False) -> QPushButton:
            btn = QPushButton(text)
            btn.clicked.connect(slot)
            btn.setEnabled(not needs_selection)
            row.addWidget(btn)
            return btn

        self.open_btn = button("Open", self._on_open, needs_selection=True)
        self.copy_btn = button("Copy Answer", self._on_copy, needs_selection=True)
        self.delete_btn = button("Delete", self._on_delete, needs_selection=True)
        row.addStretch()
        button("Export All...", self._on_export)
        button("Clear History", self._on_clear)
        button("Close", self.reject)
        return row

    # === Data ===

    def refresh(self, *args):
        """Reload scans and apply the search text and mode filter."""
        mode = self.mode_filter.currentData()
        query = self.search_input.text().strip()

        self.visible_scans = [
            scan
            for scan in self.session.scans
            if (mode is None or scan.mode == mode) and (not query or matches_query(scan, query))
        ]

        self.table.setRowCount(len(self.visible_scans))
        for row, scan in enumerate(self.visible_scans):
            for col, (_, cell_text) in enumerate(COLUMNS):
                item = QTableWidgetItem(cell_text(scan))
                if col == PROBLEM_COLUMN and scan.text_inputs:
                    item.setToolTip(scan.text_inputs[0])
                self.table.setItem(row, col, item)

        self.count_label.setText(f"{len(self.visible_scans)} entries")
        self._update_preview()

    def selected_scan(self) -> Optional[Scan]:
        rows = self.table.selectionModel().selectedRows()
        if rows and rows[0].row() < len(self.visible_scans):
            return self.visible_scans[rows[0].row()]
        return None

    def _update_preview(self):
        scan = self.selected_scan()
        self.open_btn.setEnabled(scan is not None)
        self.delete_btn.setEnabled(scan is not None)
        self.copy_btn.setEnabled(bool(scan and scan.solution))

        if scan is None:
            self.preview.clear()
            return

        facts = [
            f"<b>Style:</b> {scan.explanation_style.label}",
            f"<b>Images:</b> {len(scan.images)}",
            f"<b>Texts:</b> {len(scan.text_inputs)}",
        ]
        if scan.question_count:
            facts.append(f"<b>Questions:</b> {scan.question_count}")
        if scan.loading:
            body = "<i>Still processing...</i>"
        elif scan.error:
            body = f"<b>{html.escape(scan.error)}</b>"
        else:
            body = self._renderer.body_html(scan.solution or "")
        self.preview.setHtml(" | ".join(facts) + "<hr>" + body)

    # === Actions ===

    def _on_open(self):
        scan = self.selected_scan()
        if scan is not None:
            self.open_requested.emit(scan.id)
            self.accept()

    def _on_copy(self):
        scan = self.selected_scan()
        if scan is not None and scan.solution:
            QApplication.clipboard().setText(scan.solution)

    def _on_delete(self):
        scan = self.selected_scan()
        if scan is None:
            return

        reply = QMessageBox.question(
            self,
            "Delete Entry",
            f"Delete this entry?\n\n{scan.summary(60)}",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self.session.delete_scan(scan.id)
            self.refresh()

    def _on_export(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Export History", "edusolver_history.md", EXPORT_FILTERS
        )
        if not path:
            return

        scans = self.session.scans
        try:
            HistoryExporter(scans).export(path)
        except EduSolverError as e:
            QMessageBox.critical(self, "Export Error", format_error_for_user(e))
            return
        QMessageBox.information(self, "Export Complete", f"Exported {len(scans)} entries to:\n{path}")

    def _on_clear(self):
        reply = QMessageBox.warning(
            self,
            "Clear History",
            "This will delete ALL saved scans.\n\nAre you sure?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            count = self.session.clear_history()
            self.refresh()
            QMessageBox.information(self, "History Cleared", f"Deleted {count} entries.")
