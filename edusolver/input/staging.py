"""
Staging: the images and texts collected for the next submission.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..models import AppMode, Subject
from ..utils.errors import (
    EmptyBatchError,
    EmptyTextError,
    MissingSubjectError,
    TooManyImagesError,
)

logger = logging.getLogger(__name__)

MAX_IMAGES = 10


@dataclass
class StagingBatch:
    """Ordered, not-yet-submitted images (JPEG bytes) and text items."""

    images: List[bytes] = field(default_factory=list)
    texts: List[str] = field(default_factory=list)
    max_images: int = MAX_IMAGES

    @property
    def is_empty(self) -> bool:
        return not self.images and not self.texts

    @property
    def can_add_image(self) -> bool:
        return len(self.images) < self.max_images

    def add_image(self, data: bytes) -> int:
        """
        Append an image.

        Returns:
            Index of the new image

        Raises:
            TooManyImagesError: If the batch is full.
        """
        if not self.can_add_image:
            raise TooManyImagesError(self.max_images)
        self.images.append(data)
        return len(self.images) - 1

    def add_text(self, text: str) -> int:
        """
        Append a text item (surrounding whitespace stripped).

        Raises:
            EmptyTextError: If the text is blank.
        """
        text = text.strip()
        if not text:
            raise EmptyTextError()
        self.texts.append(text)
        return len(self.texts) - 1

    def remove_image(self, index: int) -> bytes:
        return self.images.pop(index)

    def remove_text(self, index: int) -> str:
        return self.texts.pop(index)

    def clear(self) -> None:
        self.images.clear()
        self.texts.clear()

    def validate(
        self,
        mode: AppMode = AppMode.STUDENT,
        subject: Subject = Subject.AUTO,
        custom_subject: Optional[str] = None,
    ) -> None:
        """
        Check the batch can be submitted.

        Raises:
            EmptyBatchError: If there are no images and no texts.
            MissingSubjectError: In teacher mode, if OTHER is selected
                without a subject name.
        """
        if self.is_empty:
            raise EmptyBatchError()

        if (
            mode == AppMode.TEACHER
            and subject == Subject.OTHER
            and not (custom_subject or "").strip()
        ):
            raise MissingSubjectError()
