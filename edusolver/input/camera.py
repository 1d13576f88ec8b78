"""
Camera capture via OpenCV.

Opens a video device, applies zoom, and grabs still frames as Pillow
images. The device is held only while a CameraCapture is open.
"""

import logging
from typing import Any, Callable, Optional, Union

from PIL import Image

from .images import CAMERA_JPEG_QUALITY, encode_jpeg
from ..utils.errors import CameraError, CameraPermissionError

logger = logging.getLogger(__name__)

MIN_ZOOM = 1.0
MAX_ZOOM = 4.0

Device = Union[int, str]


def _default_opener(device: Device) -> Any:
    import cv2

    return cv2.VideoCapture(device)


class CameraCapture:
    """
    Live camera with zoom and still capture.

    Zoom is first requested from the device (optical/hardware zoom).
    Devices that ignore CAP_PROP_ZOOM get a digital center-crop zoom.

    Usage:
        with CameraCapture(0) as camera:
            camera.set_zoom(2.0)
            jpeg = camera.capture_still()
    """

    def __init__(
        self,
        device: Device = 0,
        width: int = 1920,
        height: int = 1080,
        opener: Optional[Callable[[Device], Any]] = None,
    ):
        """
        Args:
            device: Camera index or stream URL.
            width, height: Requested (ideal) frame size.
            opener: Factory returning a cv2.VideoCapture-like object.
        """
        self.device = device
        self.width = width
        self.height = height
        self._opener = opener or _default_opener
        self._cap = None
        self._zoom = MIN_ZOOM
        self._hardware_zoom = False

    # === Lifecycle ===

    def open(self) -> "CameraCapture":
        """
        Acquire the device.

        Raises:
            CameraPermissionError: If the device cannot be opened.
        """
        if self._cap is not None:
            return self

        cap = self._opener(self.device)
        if cap is None or not cap.isOpened():
            if cap is not None:
                cap.release()
            logger.warning("Camera %s could not be opened", self.device)
            raise CameraPermissionError(self.device)

        import cv2

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._cap = cap
        self._zoom = MIN_ZOOM
        self._hardware_zoom = False
        logger.debug("Camera %s opened", self.device)
        return self

    def release(self) -> None:
        """Stop the stream and free the device."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.debug("Camera %s released", self.device)

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    def __enter__(self) -> "CameraCapture":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    # === Zoom ===

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def uses_hardware_zoom(self) -> bool:
        return self._hardware_zoom

    def set_zoom(self, level: float) -> float:
        """
        Set the zoom factor, clamped to [MIN_ZOOM, MAX_ZOOM].

        Returns:
            The zoom level actually applied
        """
        level = min(max(float(level), MIN_ZOOM), MAX_ZOOM)
        self._zoom = level

        if self._cap is not None:
            import cv2

            # Many webcams accept the property but ignore it
            accepted = bool(self._cap.set(cv2.CAP_PROP_ZOOM, level))
            self._hardware_zoom = accepted and self._cap.get(cv2.CAP_PROP_ZOOM) == level

        return level

    def zoom_by(self, factor: float) -> float:
        """Multiply the current zoom (pinch / wheel gestures)."""
        return self.set_zoom(self._zoom * factor)

    # === Frames ===

    def read_frame(self) -> Image.Image:
        """
        Grab the current frame as an RGB image with zoom applied.

        Raises:
            CameraError: If the camera is closed or returns no frame.
        """
        if self._cap is None:
            raise CameraError("The camera is not open.")

        ok, frame = self._cap.read()
        if not ok or frame is None:
            raise CameraError("The camera did not return a frame.")

        import cv2

        image = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))

        if self._zoom > MIN_ZOOM and not self._hardware_zoom:
            image = digital_zoom(image, self._zoom)
        return image

    def capture_still(self, quality: int = CAMERA_JPEG_QUALITY) -> bytes:
        """Grab a frame and encode it as JPEG."""
        return encode_jpeg(self.read_frame(), quality=quality)


def digital_zoom(image: Image.Image, level: float) -> Image.Image:
    """Center-crop by 1/level and scale back to the original size."""
    if level <= MIN_ZOOM:
        return image

    width, height = image.size
    crop_w = max(1, round(width / level))
    crop_h = max(1, round(height / level))
    left = (width - crop_w) // 2
    top = (height - crop_h) // 2

    cropped = image.crop((left, top, left + crop_w, top + crop_h))
    return cropped.resize((width, height), Image.Resampling.LANCZOS)


def check_camera_access(
    device: Device = 0, opener: Optional[Callable[[Device], Any]] = None
) -> bool:
    """Open and immediately release the camera. True if it worked."""
    camera = CameraCapture(device, opener=opener)
    try:
        camera.open()
    except CameraPermissionError:
        return False
    finally:
        camera.release()
    return True
