"""
Shadow rendering beneath the placed artwork.

Two paths, picked by the size of the output surface:
- Thumbnail: one small, soft, low-opacity rectangle
- Full: ambient halo, directional shadow (light from the upper left) and
  four radial corner falloffs, all sized relative to the placed artwork

A flat drop shadow can replace the full path through configuration.
Every pass is composited onto the canvas before the artwork is drawn.
"""

import math
from typing import Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFilter
from loguru import logger

from .geometry import Rect


class ShadowSettings:
    """Tunable parameters for the shadow passes."""

    def __init__(self,
                 style: str = "soft",
                 flat_opacity: float = 0.35,
                 flat_offset: float = 10.0,
                 flat_angle_deg: float = 45.0):
        self.style = style
        self.flat_opacity = flat_opacity
        self.flat_offset = flat_offset
        self.flat_angle_deg = flat_angle_deg

        # Thumbnail pass, in pixels
        self.thumb_offset = (1, 2)
        self.thumb_blur = 2
        self.thumb_opacity = 0.25

        # Full passes, as fractions of the artwork's shorter side
        self.halo_offset = (0.01, 0.015)
        self.halo_spread = 0.04
        self.halo_blur = 0.06
        self.halo_opacity = 0.12

        self.directional_offset = (0.025, 0.035)
        self.directional_blur = 0.02
        self.directional_opacity = 0.35

        self.corner_radius = 0.12
        self.corner_offset = (0.01, 0.015)
        # top-left, top-right, bottom-left, bottom-right
        self.corner_opacity = (0.04, 0.08, 0.08, 0.18)


class ShadowRenderer:
    """Draws shadows for a rectangle onto an RGBA canvas."""

    def __init__(self, settings: ShadowSettings = None):
        self.settings = settings or ShadowSettings()

    def render(self, canvas: Image.Image, rect: Rect, thumbnail: bool) -> None:
        """Composite the shadow for ``rect`` onto ``canvas`` in place."""
        style = self.settings.style
        if style == "none":
            return

        if thumbnail:
            self._thumbnail_shadow(canvas, rect)
        elif style == "flat":
            self._flat_shadow(canvas, rect)
        else:
            self._ambient_halo(canvas, rect)
            self._directional_shadow(canvas, rect)
            self._corner_falloffs(canvas, rect)

        logger.debug(f"Rendered {'thumbnail' if thumbnail else style} shadow for {rect!r}")

    def _thumbnail_shadow(self, canvas: Image.Image, rect: Rect) -> None:
        s = self.settings
        box = _offset_box(rect, s.thumb_offset, 0)
        _composite_mask(canvas, _blurred_rect_mask(canvas.size, box, s.thumb_opacity, s.thumb_blur))

    def _ambient_halo(self, canvas: Image.Image, rect: Rect) -> None:
        s = self.settings
        side = min(rect.width, rect.height)
        offset = (s.halo_offset[0] * side, s.halo_offset[1] * side)
        box = _offset_box(rect, offset, s.halo_spread * side)
        _composite_mask(canvas, _blurred_rect_mask(canvas.size, box, s.halo_opacity, s.halo_blur * side))

    def _directional_shadow(self, canvas: Image.Image, rect: Rect) -> None:
        s = self.settings
        side = min(rect.width, rect.height)
        offset = (s.directional_offset[0] * side, s.directional_offset[1] * side)
        box = _offset_box(rect, offset, 0)
        _composite_mask(canvas, _blurred_rect_mask(canvas.size, box, s.directional_opacity,
                                                   s.directional_blur * side))

    def _corner_falloffs(self, canvas: Image.Image, rect: Rect) -> None:
        s = self.settings
        side = min(rect.width, rect.height)
        radius = max(s.corner_radius * side, 1.0)
        dx, dy = s.corner_offset[0] * side, s.corner_offset[1] * side
        corners = [
            (rect.x + dx, rect.y + dy),
            (rect.right + dx, rect.y + dy),
            (rect.x + dx, rect.bottom + dy),
            (rect.right + dx, rect.bottom + dy),
        ]

        width, height = canvas.size
        ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
        remaining = np.ones((height, width), dtype=np.float32)
        for (cx, cy), peak in zip(corners, s.corner_opacity):
            distance = np.hypot(xs - cx, ys - cy) / radius
            falloff = peak * np.clip(1.0 - distance, 0.0, 1.0) ** 2
            remaining *= 1.0 - falloff

        alpha = np.rint((1.0 - remaining) * 255).astype(np.uint8)
        _composite_mask(canvas, Image.fromarray(alpha))

    def _flat_shadow(self, canvas: Image.Image, rect: Rect) -> None:
        s = self.settings
        angle = math.radians(s.flat_angle_deg)
        dx, dy = s.flat_offset * math.cos(angle), s.flat_offset * math.sin(angle)
        quad = [
            (rect.x + dx, rect.y + dy),
            (rect.right + dx, rect.y + dy),
            (rect.right + dx, rect.bottom + dy),
            (rect.x + dx, rect.bottom + dy),
        ]
        mask = Image.new('L', canvas.size, 0)
        ImageDraw.Draw(mask).polygon(quad, fill=_opacity_to_alpha(s.flat_opacity))
        _composite_mask(canvas, mask)


def _opacity_to_alpha(opacity: float) -> int:
    return int(round(min(max(opacity, 0.0), 1.0) * 255))


def _offset_box(rect: Rect, offset: Tuple[float, float], spread: float) -> Tuple[float, float, float, float]:
    return (rect.x + offset[0] - spread,
            rect.y + offset[1] - spread,
            rect.right + offset[0] + spread,
            rect.bottom + offset[1] + spread)


def _blurred_rect_mask(size: Tuple[int, int], box, opacity: float, blur: float) -> Image.Image:
    mask = Image.new('L', size, 0)
    ImageDraw.Draw(mask).rectangle(box, fill=_opacity_to_alpha(opacity))
    if blur > 0:
        mask = mask.filter(ImageFilter.GaussianBlur(blur))
    return mask


def _composite_mask(canvas: Image.Image, mask: Image.Image) -> None:
    shadow = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
    shadow.putalpha(mask)
    canvas.alpha_composite(shadow)


def create_shadow_renderer(config) -> ShadowRenderer:
    """Factory function to create a ShadowRenderer from the app configuration."""
    return ShadowRenderer(ShadowSettings(
        style=config.SHADOW_STYLE,
        flat_opacity=config.FLAT_SHADOW_OPACITY,
        flat_offset=config.FLAT_SHADOW_OFFSET_PX,
        flat_angle_deg=config.FLAT_SHADOW_ANGLE_DEG,
    ))
