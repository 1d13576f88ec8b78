"""
Dialog asking for the Gemini API key at the start of a session.
"""

from PyQt6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
)
from PyQt6.QtCore import Qt

API_KEY_URL = "https://aistudio.google.com/app/apikey"


class ApiKeyDialog(QDialog):
    """
    Collects the API key. The key lives in memory for this session only.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Gemini API Key")
        self.setMinimumWidth(420)
        self.setModal(True)

        layout = QVBoxLayout(self)

        intro = QLabel(
            "Enter your Gemini API key to start. The key is kept in memory "
            f'for this session and never saved. <a href="{API_KEY_URL}">Get a free key</a>.'
        )
        intro.setWordWrap(True)
        intro.setTextFormat(Qt.TextFormat.RichText)
        intro.setOpenExternalLinks(True)
        layout.addWidget(intro)

        self.key_input = QLineEdit()
        self.key_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.key_input.setPlaceholderText("Paste API key")
        self.key_input.textChanged.connect(self._on_text_changed)
        self.key_input.returnPressed.connect(self._on_accept)
        layout.addWidget(self.key_input)

        buttons = QHBoxLayout()
        buttons.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        buttons.addWidget(cancel_btn)

        self.ok_btn = QPushButton("Start")
        self.ok_btn.setDefault(True)
        self.ok_btn.setEnabled(False)
        self.ok_btn.clicked.connect(self._on_accept)
        buttons.addWidget(self.ok_btn)
        layout.addLayout(buttons)

    def api_key(self) -> str:
        return self.key_input.text().strip()

    def _on_text_changed(self, text: str):
        self.ok_btn.setEnabled(bool(text.strip()))

    def _on_accept(self):
        if self.api_key():
            self.accept()
