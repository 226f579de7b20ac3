"""
Scene placement for the art preview compositor.

Each scene names a "picture area" where the framed artwork hangs. The raw
scene entry (nominal box, optional scale, optional x/y given either as
fractions or as pixels on the reference canvas) is normalized once, while the
catalog is loaded, into a PlacementBox in fractional canvas units. Resolving a
scene at render time is then a lookup.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from loguru import logger

from .geometry import Rect


@dataclass(frozen=True)
class PlacementBox:
    """A rectangle in fractional (0..1) canvas coordinates."""
    x: float
    y: float
    w: float
    h: float

    def to_rect(self, width: int, height: int) -> Rect:
        """Scale to a pixel rectangle on a width x height canvas."""
        return Rect(self.x * width, self.y * height, self.w * width, self.h * height)


FULL_CANVAS = PlacementBox(0.0, 0.0, 1.0, 1.0)


@dataclass(frozen=True)
class Scene:
    """A named background plus the normalized placement of the artwork on it."""
    label: str
    background_source: Optional[str]
    placement: PlacementBox

    @property
    def is_plain(self) -> bool:
        return not self.background_source


def _to_fraction(value: float, reference: int) -> float:
    # Values above 1 are pixel offsets on the reference canvas
    return value if value <= 1 else value / reference


def normalize_scene(scene_config, reference_size: Tuple[int, int]) -> Scene:
    """
    Build a Scene from a raw scene entry.

    The nominal box is shrunk by ``scale`` about its own center, then moved
    so its top-left corner sits at the ``x``/``y`` overrides when given.
    Scenes without a background fill the whole canvas.
    """
    background = scene_config.background_source or None
    if background is None:
        return Scene(scene_config.label, None, FULL_CANVAS)

    box = scene_config.box
    x, y, w, h = box.x, box.y, box.w, box.h

    if scene_config.scale is not None and scene_config.scale != 1:
        scaled_w = w * scene_config.scale
        scaled_h = h * scene_config.scale
        x += (w - scaled_w) / 2
        y += (h - scaled_h) / 2
        w, h = scaled_w, scaled_h

    ref_width, ref_height = reference_size
    if scene_config.x is not None:
        x = _to_fraction(scene_config.x, ref_width)
    if scene_config.y is not None:
        y = _to_fraction(scene_config.y, ref_height)

    placement = PlacementBox(x, y, w, h)
    logger.debug(f"Normalized scene '{scene_config.label}' placement: {placement}")
    return Scene(scene_config.label, background, placement)


def resolve(scene: Scene) -> PlacementBox:
    """Return the fractional target box for the framed artwork in ``scene``."""
    if scene.is_plain:
        return FULL_CANVAS
    return scene.placement
