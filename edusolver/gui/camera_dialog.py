"""
Camera dialog: live preview with zoom and still capture.
"""

import logging
from typing import Optional

from PyQt6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSlider,
    QMessageBox,
)
from PyQt6.QtCore import Qt, QTimer

from ..input.camera import MAX_ZOOM, MIN_ZOOM, CameraCapture
from ..utils.errors import CameraError, format_error_for_dialog
from .crop_dialog import pil_to_pixmap

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 33
ZOOM_SLIDER_SCALE = 10
WHEEL_ZOOM_STEP = 1.1


class CameraDialog(QDialog):
    """
    Shows the camera stream and captures one still.

    The device is opened in start() and released when the dialog closes.
    After exec() returns Accepted, captured_jpeg holds the frame.
    """

    def __init__(self, device=0, parent=None, camera: Optional[CameraCapture] = None):
        super().__init__(parent)
        self.setWindowTitle("Camera")
        self.resize(800, 640)

        self.camera = camera or CameraCapture(device)
        self.captured_jpeg: Optional[bytes] = None

        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_frame)

        self._init_ui()

    def _init_ui(self):
        layout = QVBoxLayout(self)

        self.preview = QLabel("Starting camera...")
        self.preview.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.preview.setMinimumSize(480, 360)
        self.preview.setStyleSheet("background: black; color: white;")
        layout.addWidget(self.preview, stretch=1)

        zoom_row = QHBoxLayout()
        zoom_row.addWidget(QLabel("Zoom:"))
        self.zoom_slider = QSlider(Qt.Orientation.Horizontal)
        self.zoom_slider.setRange(int(MIN_ZOOM * ZOOM_SLIDER_SCALE), int(MAX_ZOOM * ZOOM_SLIDER_SCALE))
        self.zoom_slider.setValue(int(MIN_ZOOM * ZOOM_SLIDER_SCALE))
        self.zoom_slider.valueChanged.connect(self._on_zoom_slider)
        zoom_row.addWidget(self.zoom_slider)
        self.zoom_label = QLabel("1.0x")
        zoom_row.addWidget(self.zoom_label)
        layout.addLayout(zoom_row)

        buttons = QHBoxLayout()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        buttons.addWidget(cancel_btn)
        buttons.addStretch()

        self.capture_btn = QPushButton("Capture")
        self.capture_btn.setDefault(True)
        self.capture_btn.setStyleSheet("font-weight: bold; padding: 5px 20px;")
        self.capture_btn.clicked.connect(self._on_capture)
        buttons.addWidget(self.capture_btn)
        layout.addLayout(buttons)

    def start(self) -> bool:
        """
        Open the camera and begin the preview.

        Shows an alert and returns False if the camera cannot be opened.
        """
        try:
            self.camera.open()
        except CameraError as e:
            self._alert(e)
            return False
        self._timer.start(FRAME_INTERVAL_MS)
        return True

    def _alert(self, exc: Exception):
        error_info = format_error_for_dialog(exc, "opening the camera")
        msg_box = QMessageBox(self)
        msg_box.setWindowTitle(error_info["title"])
        msg_box.setText(error_info["text"])
        msg_box.setIcon(error_info["icon"])
        if error_info["detailed_text"]:
            msg_box.setDetailedText(error_info["detailed_text"])
        msg_box.exec()

    def _on_frame(self):
        try:
            frame = self.camera.read_frame()
        except CameraError as e:
            logger.warning("Camera preview stopped: %s", e)
            self._timer.stop()
            self.preview.setText(e.user_message)
            self.capture_btn.setEnabled(False)
            return

        pixmap = pil_to_pixmap(frame).scaled(
            self.preview.size(),
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
        self.preview.setPixmap(pixmap)

    def _on_zoom_slider(self, value: int):
        level = self.camera.set_zoom(value / ZOOM_SLIDER_SCALE)
        self.zoom_label.setText(f"{level:.1f}x")

    def wheelEvent(self, event):
        factor = WHEEL_ZOOM_STEP if event.angleDelta().y() > 0 else 1 / WHEEL_ZOOM_STEP
        level = self.camera.zoom_by(factor)
        self.zoom_slider.blockSignals(True)
        self.zoom_slider.setValue(round(level * ZOOM_SLIDER_SCALE))
        self.zoom_slider.blockSignals(False)
        self.zoom_label.setText(f"{level:.1f}x")

    def _on_capture(self):
        try:
            self.captured_jpeg = self.camera.capture_still()
        except CameraError as e:
            self._alert(e)
            return
        self.accept()

    def done(self, result: int):
        self._timer.stop()
        self.camera.release()
        super().done(result)
