"""
Geometry helpers for placing images on preview canvases.

This module handles:
- Rectangles in canvas pixel coordinates (float, with pixel rounding)
- Contain-fit of an image inside an arbitrary target rectangle
"""

import math
from dataclasses import dataclass
from typing import Tuple

from .errors import ValidationError


@dataclass(frozen=True)
class Rect:
    """A rectangle on a canvas, in (possibly fractional) pixels."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def contains(self, other: "Rect", tolerance: float = 1e-6) -> bool:
        """True when ``other`` lies completely inside this rectangle."""
        return (other.x >= self.x - tolerance
                and other.y >= self.y - tolerance
                and other.right <= self.right + tolerance
                and other.bottom <= self.bottom + tolerance)

    def to_pixels(self) -> Tuple[int, int, int, int]:
        """
        Round to an integer (left, top, width, height) box.

        Each edge is rounded on its own, so a rectangle nested inside another
        stays nested after both are rounded.
        """
        left = int(round(self.x))
        top = int(round(self.y))
        right = int(round(self.right))
        bottom = int(round(self.bottom))
        return (left, top, max(1, right - left), max(1, bottom - top))

    def __repr__(self) -> str:
        return f"Rect({self.x:.2f}, {self.y:.2f}, {self.width:.2f}, {self.height:.2f})"


def fit(image_size: Tuple[float, float], target: Rect) -> Rect:
    """
    Contain-fit an image of ``image_size`` into ``target``.

    Returns the largest centered rectangle inside ``target`` with the image's
    aspect ratio. The constraining axis spans the whole target; when both
    aspect ratios match the target is returned unchanged.
    """
    img_width, img_height = image_size
    if img_width <= 0 or img_height <= 0:
        raise ValidationError(
            f"Cannot fit image with non-positive size {image_size}",
            details={'image_size': image_size}
        )
    if target.width <= 0 or target.height <= 0:
        raise ValidationError(
            f"Cannot fit into empty target {target!r}",
            details={'target': (target.x, target.y, target.width, target.height)}
        )

    src_aspect = img_width / img_height
    dst_aspect = target.aspect

    if math.isclose(src_aspect, dst_aspect, rel_tol=1e-9):
        return target

    if src_aspect > dst_aspect:
        # Wider than the target: limited by width
        width = target.width
        height = width / src_aspect
        return Rect(target.x, target.y + (target.height - height) / 2, width, height)

    # Taller than the target: limited by height
    height = target.height
    width = height * src_aspect
    return Rect(target.x + (target.width - width) / 2, target.y, width, height)
