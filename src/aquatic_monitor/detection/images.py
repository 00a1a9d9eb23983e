"""
Image Store
===========

Resolves a record's image reference to image content.

This is the ONLY place in the codebase that loads images. No inference
is performed on the result; a successful load only means "a frame was
captured this cycle".

Components:
    - ImageStore: Protocol for image sources
    - FileImageStore: Loads images from a directory with OpenCV
    - NullImageStore: Always returns a blank frame (no image directory)
"""

import logging
from pathlib import Path
from typing import Optional, Protocol, Union

import cv2
import numpy as np

from aquatic_monitor.errors import ImageNotFoundError


logger = logging.getLogger(__name__)


class ImageStore(Protocol):
    """
    Protocol for image backends.

    Implementations return a BGR image as np.ndarray (H, W, 3) or raise
    ImageNotFoundError.
    """

    def load(self, image_ref: str) -> np.ndarray:
        ...


class FileImageStore:
    """
    Image store backed by files on disk.

    Relative references are resolved against ``root``; absolute
    references are used as-is.

    Attributes:
        root: Base directory for relative image references
        misses: Number of failed lookups
    """

    def __init__(self, root: Optional[Union[str, Path]] = None) -> None:
        self.root = Path(root) if root is not None else None
        self.misses: int = 0

    def _resolve(self, image_ref: str) -> Path:
        path = Path(image_ref)
        if self.root is not None and not path.is_absolute():
            path = self.root / path
        return path

    def load(self, image_ref: str) -> np.ndarray:
        """
        Load an image as BGR.

        Args:
            image_ref: File name or path of the image

        Returns:
            BGR image as np.ndarray (H, W, 3), dtype=uint8

        Raises:
            ImageNotFoundError: If the reference is empty, missing or unreadable
        """
        if not image_ref:
            self.misses += 1
            raise ImageNotFoundError(image_ref, "empty reference")

        path = self._resolve(image_ref)
        if not path.is_file():
            self.misses += 1
            raise ImageNotFoundError(image_ref, f"no file at {path}")

        bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if bgr is None:
            self.misses += 1
            raise ImageNotFoundError(image_ref, "cv2.imread returned None")

        if bgr.dtype != np.uint8 or bgr.ndim != 3:
            self.misses += 1
            raise ImageNotFoundError(image_ref, f"unexpected image shape {bgr.shape}")

        return bgr


class NullImageStore:
    """Returns a 1x1 black frame for any reference."""

    def load(self, image_ref: str) -> np.ndarray:
        return np.zeros((1, 1, 3), dtype=np.uint8)
