"""
Frame rendering for one preview target.

This module handles:
- Filling the canvas and contain-fitting the scene background
- Resolving the scene's picture area to pixels for the target size
- Contain-fitting the framed artwork inside that area
- Drawing the shadow beneath the artwork, then the artwork itself

Everything is drawn on a fresh offscreen canvas; callers present the
returned frame only once it is complete.
"""

from typing import Optional, Tuple

from PIL import Image, ImageColor
from loguru import logger

from .geometry import Rect, fit
from .placement import Scene, resolve
from .shadow import ShadowRenderer


class FrameRenderer:
    """Draws a complete preview frame for one target size."""

    def __init__(self, shadow_renderer: ShadowRenderer, background_color: str = "#ffffff"):
        self.shadow_renderer = shadow_renderer
        self.background_color = background_color

    def render(self,
               size: Tuple[int, int],
               scene: Scene,
               framed_art: Optional[Image.Image],
               background: Optional[Image.Image],
               thumbnail: bool) -> Image.Image:
        """
        Render a full frame.

        Args:
            size: Output (width, height) in pixels
            scene: Scene whose placement box receives the artwork
            framed_art: Working surface from the compositor, or None to draw the scene only
            background: Decoded scene background, or None for a plain fill
                (a scene whose background failed to load keeps its placement box)
            thumbnail: Use the cheap shadow path

        Returns:
            A new RGBA image of ``size``
        """
        width, height = size
        canvas = Image.new('RGBA', size, ImageColor.getcolor(self.background_color, 'RGBA'))

        if background is not None:
            self._draw_contained(canvas, background, Rect(0, 0, width, height))

        if framed_art is None:
            logger.debug(f"Rendered {size} frame for scene '{scene.label}' without artwork")
            return canvas

        target = resolve(scene).to_rect(width, height)
        placed = fit(framed_art.size, target)

        # Plain scenes show the artwork alone
        if not scene.is_plain:
            self.shadow_renderer.render(canvas, placed, thumbnail)

        self._draw_contained(canvas, framed_art, target)
        logger.debug(f"Rendered {size} frame for scene '{scene.label}': art at {placed!r}")
        return canvas

    @staticmethod
    def _draw_contained(canvas: Image.Image, image: Image.Image, target: Rect) -> Rect:
        """Contain-fit ``image`` into ``target`` and composite it onto ``canvas``."""
        placed = fit(image.size, target)
        left, top, width, height = placed.to_pixels()

        layer = image.convert('RGBA')
        if layer.size != (width, height):
            layer = layer.resize((width, height), Image.Resampling.LANCZOS)

        # alpha_composite needs a non-negative destination; crop what hangs off
        # the top/left edge of the canvas
        crop_left, crop_top = max(0, -left), max(0, -top)
        if crop_left or crop_top:
            layer = layer.crop((crop_left, crop_top, width, height))
        canvas.alpha_composite(layer, dest=(left + crop_left, top + crop_top))
        return placed
