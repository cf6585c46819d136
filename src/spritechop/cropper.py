from pathlib import Path
from typing import Union

import cv2
import numpy as np

from .models import Rect


class SpriteBoundsError(ValueError):
    """The requested rectangle is not fully inside the sheet."""

    def __init__(self, rect: Rect, image_width: int, image_height: int):
        self.rect = rect
        self.image_width = image_width
        self.image_height = image_height
        super().__init__(
            f"bounds {rect.x},{rect.y} {rect.width}x{rect.height} outside image "
            f"{image_width}x{image_height}"
        )


def load_image(path: Union[str, Path]) -> np.ndarray:
    image_path = Path(path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    image = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError(f"Failed to load image: {path}")
    return image


def check_bounds(image: np.ndarray, rect: Rect):
    height, width = image.shape[:2]
    if (rect.width <= 0 or rect.height <= 0 or rect.x < 0 or rect.y < 0
            or rect.right > width or rect.bottom > height):
        raise SpriteBoundsError(rect, width, height)


def crop(image: np.ndarray, rect: Rect) -> np.ndarray:
    """Copy the pixels under rect, channels untouched."""
    check_bounds(image, rect)
    return image[rect.y:rect.bottom, rect.x:rect.right].copy()


def save_sprite(sprite: np.ndarray, path: Union[str, Path]):
    try:
        written = cv2.imwrite(str(path), sprite, [cv2.IMWRITE_PNG_COMPRESSION, 9])
    except cv2.error as e:
        raise IOError(f"Failed to write sprite: {path}: {e}") from e
    if not written:
        raise IOError(f"Failed to write sprite: {path}")
