"""
Crop rectangle geometry and drag/resize interaction.

All coordinates are normalized to the displayed image (0..1 on both
axes), so the logic is independent of widget size and image resolution.
The Qt dialog in gui/crop_dialog.py only translates mouse events.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from PIL import Image

# Smallest selection, as a fraction of the image side
MIN_SIZE = 0.05

# Distance from a corner that still grabs the handle
HANDLE_RADIUS = 0.1

# Smallest output image side in pixels
MIN_OUTPUT_PX = 10


class Handle(Enum):
    """What a pointer-down grabbed."""

    TOP_LEFT = "tl"
    TOP_RIGHT = "tr"
    BOTTOM_LEFT = "bl"
    BOTTOM_RIGHT = "br"
    MOVE = "move"

    @property
    def moves_left_edge(self) -> bool:
        return self in (Handle.TOP_LEFT, Handle.BOTTOM_LEFT)

    @property
    def moves_top_edge(self) -> bool:
        return self in (Handle.TOP_LEFT, Handle.TOP_RIGHT)


@dataclass
class CropSelection:
    """Normalized rectangle. Defaults to the center 80% of the image."""

    x: float = 0.1
    y: float = 0.1
    w: float = 0.8
    h: float = 0.8

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def corners(self) -> Dict[Handle, Tuple[float, float]]:
        """Corner positions in hit-test order."""
        return {
            Handle.TOP_LEFT: (self.x, self.y),
            Handle.TOP_RIGHT: (self.right, self.y),
            Handle.BOTTOM_LEFT: (self.x, self.bottom),
            Handle.BOTTOM_RIGHT: (self.right, self.bottom),
        }

    def contains(self, px: float, py: float) -> bool:
        """Strictly inside the rectangle (edges excluded)."""
        return self.x < px < self.right and self.y < py < self.bottom

    def is_valid(self, min_size: float = MIN_SIZE, eps: float = 1e-9) -> bool:
        return (
            self.w >= min_size - eps
            and self.h >= min_size - eps
            and self.x >= -eps
            and self.y >= -eps
            and self.right <= 1 + eps
            and self.bottom <= 1 + eps
        )

    def to_pixel_box(self, width: int, height: int) -> Tuple[int, int, int, int]:
        """
        Pixel box (left, top, right, bottom) in an image of the given size.

        The box is at least MIN_OUTPUT_PX on each side (never more than the
        image itself) and is shifted back inside the image when rounding
        pushes it past the edge.
        """
        box_w = min(width, max(MIN_OUTPUT_PX, round(width * self.w)))
        box_h = min(height, max(MIN_OUTPUT_PX, round(height * self.h)))
        left = round(width * self.x)
        top = round(height * self.y)

        if left + box_w > width:
            left = max(0, width - box_w)
        if top + box_h > height:
            top = max(0, height - box_h)

        return (left, top, left + box_w, top + box_h)

    @classmethod
    def parse(cls, text: str) -> "CropSelection":
        """
        Parse "x,y,w,h" (as given on the command line).

        Raises:
            ValueError: If the text is malformed or out of bounds.
        """
        parts = [p.strip() for p in text.split(",")]
        if len(parts) != 4:
            raise ValueError(f"Expected x,y,w,h but got {text!r}")
        x, y, w, h = (float(p) for p in parts)
        selection = cls(x, y, w, h)
        if not selection.is_valid():
            raise ValueError(
                f"Crop {text!r} must lie within 0..1 and be at least {MIN_SIZE} wide and high"
            )
        return selection


def _distance(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


class CropInteraction:
    """
    Pointer-driven move/resize of a CropSelection.

    Usage:
        interaction = CropInteraction()
        interaction.pointer_down(0.1, 0.1)   # grabs the top-left corner
        interaction.pointer_move(0.2, 0.25)
        interaction.pointer_up()
        interaction.selection                # CropSelection(0.2, 0.25, 0.7, 0.65)
    """

    def __init__(
        self,
        selection: Optional[CropSelection] = None,
        handle_radius: float = HANDLE_RADIUS,
        min_size: float = MIN_SIZE,
    ):
        self.selection = selection or CropSelection()
        self.handle_radius = handle_radius
        self.min_size = min_size

        self._active: Optional[Handle] = None
        self._drag_start: Tuple[float, float] = (0.0, 0.0)
        self._start_selection = replace(self.selection)

    @property
    def active_handle(self) -> Optional[Handle]:
        return self._active

    def hit_test(self, px: float, py: float) -> Optional[Handle]:
        """Which handle a pointer at (px, py) would grab, if any."""
        for handle, corner in self.selection.corners().items():
            if _distance((px, py), corner) < self.handle_radius:
                return handle
        if self.selection.contains(px, py):
            return Handle.MOVE
        return None

    def pointer_down(self, px: float, py: float) -> Optional[Handle]:
        """Start a gesture. Returns the grabbed handle, or None."""
        handle = self.hit_test(px, py)
        if handle is not None:
            self._active = handle
            self._drag_start = (px, py)
            self._start_selection = replace(self.selection)
        return handle

    def pointer_move(self, px: float, py: float) -> CropSelection:
        """Apply the pointer delta since pointer_down to the snapshot."""
        if self._active is None:
            return self.selection

        dx = px - self._drag_start[0]
        dy = py - self._drag_start[1]

        if self._active == Handle.MOVE:
            self.selection = self._moved(dx, dy)
        else:
            self.selection = self._resized(self._active, dx, dy)
        return self.selection

    def pointer_up(self) -> None:
        self._active = None

    def reset(self) -> None:
        """Back to the default selection."""
        self._active = None
        self.selection = CropSelection()

    def _moved(self, dx: float, dy: float) -> CropSelection:
        start = self._start_selection
        x = min(max(start.x + dx, 0.0), 1.0 - start.w)
        y = min(max(start.y + dy, 0.0), 1.0 - start.h)
        return CropSelection(x, y, start.w, start.h)

    def _resized(self, handle: Handle, dx: float, dy: float) -> CropSelection:
        start = self._start_selection
        x, w = self._resize_axis(start.x, start.w, dx, handle.moves_left_edge)
        y, h = self._resize_axis(start.y, start.h, dy, handle.moves_top_edge)
        return CropSelection(x, y, w, h)

    def _resize_axis(
        self, origin: float, size: float, delta: float, moves_near_edge: bool
    ) -> Tuple[float, float]:
        """
        Resize along one axis, keeping the opposite edge fixed.

        The dragged edge is clamped to [0, 1] first, then the minimum size
        is restored by pushing the dragged edge away from the fixed one.
        """
        if moves_near_edge:
            far = origin + size
            near = min(max(origin + delta, 0.0), 1.0)
            if far - near < self.min_size:
                near = far - self.min_size
            return near, far - near

        far = min(max(origin + size + delta, 0.0), 1.0)
        if far - origin < self.min_size:
            far = origin + self.min_size
        return origin, far - origin


def fit_size(
    container_w: float, container_h: float, image_w: float, image_h: float
) -> Tuple[float, float]:
    """
    Largest size with the image's aspect ratio that fits the container.

    Returns (0, 0) for degenerate inputs.
    """
    if container_w <= 0 or container_h <= 0 or image_w <= 0 or image_h <= 0:
        return (0.0, 0.0)

    container_aspect = container_w / container_h
    image_aspect = image_w / image_h

    if container_aspect > image_aspect:
        height = container_h
        width = height * image_aspect
    else:
        width = container_w
        height = width / image_aspect
    return (width, height)


def crop_image(image: Image.Image, selection: CropSelection) -> Image.Image:
    """Rasterize only the selected region of image."""
    box = selection.to_pixel_box(*image.size)
    return image.crop(box)
