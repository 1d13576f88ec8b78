"""
Dialog for typing a problem as text.
"""

from PyQt6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QTextEdit,
    QPushButton,
)


class TextInputDialog(QDialog):
    """Multi-line text entry; Save is enabled once something is typed."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Type a Problem")
        self.setMinimumSize(480, 320)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Type the question or material:"))

        self.text_edit = QTextEdit()
        self.text_edit.setAcceptRichText(False)
        self.text_edit.setPlaceholderText("e.g. Solve 2x + 3 = 7")
        self.text_edit.textChanged.connect(self._on_text_changed)
        layout.addWidget(self.text_edit)

        buttons = QHBoxLayout()
        buttons.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        buttons.addWidget(cancel_btn)

        self.save_btn = QPushButton("Save")
        self.save_btn.setEnabled(False)
        self.save_btn.clicked.connect(self.accept)
        buttons.addWidget(self.save_btn)
        layout.addLayout(buttons)

    def text(self) -> str:
        return self.text_edit.toPlainText().strip()

    def _on_text_changed(self):
        self.save_btn.setEnabled(bool(self.text()))
