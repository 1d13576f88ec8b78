"""
Image loading and JPEG encoding for staged images.

Staged and stored images are always JPEG buffers, matching what the
AI request declares as its mime type.
"""

import io
import logging
from pathlib import Path
from typing import Union

from PIL import Image, ImageOps, UnidentifiedImageError

from ..utils.errors import ImageLoadError

logger = logging.getLogger(__name__)

CROP_JPEG_QUALITY = 90
CAMERA_JPEG_QUALITY = 80


def _to_rgb(image: Image.Image) -> Image.Image:
    # JPEG has no alpha channel or palette
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def load_image_file(path: Union[str, Path]) -> Image.Image:
    """
    Load an uploaded image file.

    EXIF orientation is applied so phone photos are upright.

    Raises:
        ImageLoadError: If the file is missing or not an image.
    """
    try:
        with Image.open(path) as img:
            img.load()
            image = ImageOps.exif_transpose(img)
            return _to_rgb(image)
    except FileNotFoundError:
        raise ImageLoadError(f"File not found: {path}")
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Failed to load image %s: %s", path, e)
        raise ImageLoadError(
            f"Failed to load image '{Path(path).name}'",
            technical_details=str(e),
        )


def decode_jpeg(data: bytes) -> Image.Image:
    """
    Open an image buffer.

    Raises:
        ImageLoadError: If the buffer is not a readable image.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        return _to_rgb(image)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError("Failed to decode image data", technical_details=str(e))


def encode_jpeg(image: Image.Image, quality: int = CROP_JPEG_QUALITY) -> bytes:
    """Encode a Pillow image as JPEG bytes."""
    buf = io.BytesIO()
    _to_rgb(image).save(buf, format="JPEG", quality=quality)
    return buf.getvalue()
