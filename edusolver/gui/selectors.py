"""
Level, subject and explanation style selectors.
"""

from PyQt6.QtWidgets import (
    QWidget,
    QHBoxLayout,
    QVBoxLayout,
    QLabel,
    QComboBox,
    QLineEdit,
    QRadioButton,
    QButtonGroup,
)
from PyQt6.QtCore import pyqtSignal

from ..models import EducationLevel, ExplanationStyle, Subject, UserPreferences


class SubjectSelector(QWidget):
    """
    Education level and subject combos.

    The custom subject field is only shown while "Lainnya" is selected.
    """

    levelChanged = pyqtSignal(object)  # EducationLevel
    subjectChanged = pyqtSignal(object)  # Subject
    customSubjectChanged = pyqtSignal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._init_ui()

    def _init_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        row = QHBoxLayout()
        row.addWidget(QLabel("Level:"))
        self.level_combo = QComboBox()
        for level in EducationLevel:
            self.level_combo.addItem(level.value, level)
        self.level_combo.currentIndexChanged.connect(self._on_level_changed)
        row.addWidget(self.level_combo)

        row.addWidget(QLabel("Subject:"))
        self.subject_combo = QComboBox()
        for subject in Subject:
            self.subject_combo.addItem(subject.value, subject)
        self.subject_combo.currentIndexChanged.connect(self._on_subject_changed)
        row.addWidget(self.subject_combo)
        row.addStretch()
        layout.addLayout(row)

        self.custom_input = QLineEdit()
        self.custom_input.setPlaceholderText("Subject name, e.g. Accounting")
        self.custom_input.textChanged.connect(self.customSubjectChanged.emit)
        self.custom_input.setVisible(False)
        layout.addWidget(self.custom_input)

    def set_preferences(self, prefs: UserPreferences):
        """Show stored preferences without emitting change signals."""
        for widget in (self.level_combo, self.subject_combo, self.custom_input):
            widget.blockSignals(True)
        self.level_combo.setCurrentIndex(self.level_combo.findData(prefs.level))
        self.subject_combo.setCurrentIndex(self.subject_combo.findData(prefs.subject))
        self.custom_input.setText(prefs.custom_subject)
        self.custom_input.setVisible(prefs.subject == Subject.OTHER)
        for widget in (self.level_combo, self.subject_combo, self.custom_input):
            widget.blockSignals(False)

    def _on_level_changed(self, index: int):
        self.levelChanged.emit(self.level_combo.itemData(index))

    def _on_subject_changed(self, index: int):
        subject = self.subject_combo.itemData(index)
        self.custom_input.setVisible(subject == Subject.OTHER)
        self.subjectChanged.emit(subject)


class ExplanationSelector(QWidget):
    """Three-way choice between detailed, brief and answer-only."""

    styleChanged = pyqtSignal(object)  # ExplanationStyle

    def __init__(self, parent=None):
        super().__init__(parent)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._label = QLabel("Explanation:")
        layout.addWidget(self._label)

        self._group = QButtonGroup(self)
        self._buttons = {}
        for style in ExplanationStyle:
            button = QRadioButton(style.label)
            self._group.addButton(button)
            self._buttons[style] = button
            button.toggled.connect(
                lambda checked, s=style: self._on_toggled(checked, s)
            )
            layout.addWidget(button)
        layout.addStretch()

        self._buttons[ExplanationStyle.DETAILED].setChecked(True)

    def _on_toggled(self, checked: bool, style: ExplanationStyle):
        if checked:
            self.styleChanged.emit(style)

    def set_label(self, text: str):
        self._label.setText(text)

    def set_style(self, style: ExplanationStyle):
        self._buttons[style].setChecked(True)

    def style(self) -> ExplanationStyle:
        for style, button in self._buttons.items():
            if button.isChecked():
                return style
        return ExplanationStyle.DETAILED
