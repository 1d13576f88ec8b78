"""Input layer: camera capture, image upload, cropping, and staging."""

from .camera import CameraCapture, check_camera_access
from .crop import CropSelection, CropInteraction, crop_image
from .images import load_image_file, encode_jpeg, decode_jpeg
from .staging import StagingBatch

__all__ = [
    "CameraCapture",
    "check_camera_access",
    "CropSelection",
    "CropInteraction",
    "crop_image",
    "load_image_file",
    "encode_jpeg",
    "decode_jpeg",
    "StagingBatch",
]
