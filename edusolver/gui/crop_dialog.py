"""
Crop dialog: drag and resize a selection over a still image.
"""

from typing import Optional

from PIL import Image
from PyQt6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QWidget,
    QLabel,
)
from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QColor, QImage, QPainter, QPen, QPixmap

from ..input.crop import CropInteraction, Handle, crop_image, fit_size
from ..input.images import CROP_JPEG_QUALITY, encode_jpeg

HANDLE_PX = 10


def pil_to_pixmap(image: Image.Image) -> QPixmap:
    """Convert an RGB Pillow image to a QPixmap."""
    rgb = image.convert("RGB")
    data = rgb.tobytes("raw", "RGB")
    qimage = QImage(data, rgb.width, rgb.height, rgb.width * 3, QImage.Format.Format_RGB888)
    # QImage does not own the buffer
    return QPixmap.fromImage(qimage.copy())


class CropCanvas(QWidget):
    """
    Paints the image fitted to the widget with the selection on top.

    Mouse positions are normalized to the displayed image before being
    passed to CropInteraction.
    """

    def __init__(self, image: Image.Image, parent=None):
        super().__init__(parent)
        self.image = image
        self.pixmap = pil_to_pixmap(image)
        self.interaction = CropInteraction()
        self.setMinimumSize(320, 240)
        self.setMouseTracking(True)

    def image_rect(self) -> QRectF:
        """Where the image is drawn, centered and aspect-preserving."""
        width, height = fit_size(
            self.width(), self.height(), self.pixmap.width(), self.pixmap.height()
        )
        left = (self.width() - width) / 2
        top = (self.height() - height) / 2
        return QRectF(left, top, width, height)

    def _normalize(self, pos: QPointF):
        rect = self.image_rect()
        if rect.width() <= 0 or rect.height() <= 0:
            return None
        return (
            (pos.x() - rect.left()) / rect.width(),
            (pos.y() - rect.top()) / rect.height(),
        )

    def selection_rect(self) -> QRectF:
        rect = self.image_rect()
        sel = self.interaction.selection
        return QRectF(
            rect.left() + sel.x * rect.width(),
            rect.top() + sel.y * rect.height(),
            sel.w * rect.width(),
            sel.h * rect.height(),
        )

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor("#111111"))

        img_rect = self.image_rect()
        painter.drawPixmap(img_rect, self.pixmap, QRectF(self.pixmap.rect()))

        sel = self.selection_rect()

        # Dim everything outside the selection
        shade = QColor(0, 0, 0, 140)
        painter.fillRect(
            QRectF(img_rect.left(), img_rect.top(), img_rect.width(), sel.top() - img_rect.top()),
            shade,
        )
        painter.fillRect(
            QRectF(img_rect.left(), sel.bottom(), img_rect.width(), img_rect.bottom() - sel.bottom()),
            shade,
        )
        painter.fillRect(
            QRectF(img_rect.left(), sel.top(), sel.left() - img_rect.left(), sel.height()),
            shade,
        )
        painter.fillRect(
            QRectF(sel.right(), sel.top(), img_rect.right() - sel.right(), sel.height()),
            shade,
        )

        # Rule-of-thirds guides
        painter.setPen(QPen(QColor(255, 255, 255, 90), 1))
        for i in (1, 2):
            x = sel.left() + sel.width() * i / 3
            y = sel.top() + sel.height() * i / 3
            painter.drawLine(QPointF(x, sel.top()), QPointF(x, sel.bottom()))
            painter.drawLine(QPointF(sel.left(), y), QPointF(sel.right(), y))

        painter.setPen(QPen(QColor("#ffffff"), 2))
        painter.drawRect(sel)

        painter.setBrush(QColor("#4f46e5"))
        for corner in (sel.topLeft(), sel.topRight(), sel.bottomLeft(), sel.bottomRight()):
            painter.drawEllipse(corner, HANDLE_PX, HANDLE_PX)

        painter.end()

    def mousePressEvent(self, event):
        point = self._normalize(event.position())
        if point is not None and self.interaction.pointer_down(*point) is not None:
            self.update()

    def mouseMoveEvent(self, event):
        point = self._normalize(event.position())
        if point is None:
            return

        if self.interaction.active_handle is not None:
            self.interaction.pointer_move(*point)
            self.update()
            return

        handle = self.interaction.hit_test(*point)
        if handle == Handle.MOVE:
            self.setCursor(Qt.CursorShape.SizeAllCursor)
        elif handle in (Handle.TOP_LEFT, Handle.BOTTOM_RIGHT):
            self.setCursor(Qt.CursorShape.SizeFDiagCursor)
        elif handle in (Handle.TOP_RIGHT, Handle.BOTTOM_LEFT):
            self.setCursor(Qt.CursorShape.SizeBDiagCursor)
        else:
            self.unsetCursor()

    def mouseReleaseEvent(self, event):
        self.interaction.pointer_up()

    def cropped(self) -> Image.Image:
        return crop_image(self.image, self.interaction.selection)


class CropDialog(QDialog):
    """
    Lets the user keep only part of a photo.

    After exec() returns Accepted, cropped_jpeg holds the selected region.
    """

    def __init__(self, image: Image.Image, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Crop Image")
        self.resize(800, 640)
        self.cropped_jpeg: Optional[bytes] = None

        layout = QVBoxLayout(self)

        hint = QLabel("Drag the corners to resize, drag inside to move.")
        hint.setStyleSheet("color: gray;")
        layout.addWidget(hint)

        self.canvas = CropCanvas(image)
        layout.addWidget(self.canvas, stretch=1)

        buttons = QHBoxLayout()
        retake_btn = QPushButton("Retake")
        retake_btn.clicked.connect(self.reject)
        buttons.addWidget(retake_btn)

        reset_btn = QPushButton("Reset")
        reset_btn.clicked.connect(self._on_reset)
        buttons.addWidget(reset_btn)

        buttons.addStretch()

        use_btn = QPushButton("Use Image")
        use_btn.setDefault(True)
        use_btn.setStyleSheet("font-weight: bold; padding: 5px 20px;")
        use_btn.clicked.connect(self._on_use)
        buttons.addWidget(use_btn)
        layout.addLayout(buttons)

    def _on_reset(self):
        self.canvas.interaction.reset()
        self.canvas.update()

    def _on_use(self):
        self.cropped_jpeg = encode_jpeg(self.canvas.cropped(), quality=CROP_JPEG_QUALITY)
        self.accept()
