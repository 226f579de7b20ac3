"""
Layer compositor for the art preview.

This module builds the "framed artwork" working surface, in a fixed order:
- Matting fill (solid color or pre-rendered matting overlay)
- Art layer, with the color treatment applied to this layer only
- Frame mask clip (alpha intersection over art and matting)
- Decorative border stroke
- Frame overlay

The surface is always (art width + 2 * matting, art height + 2 * matting).
Any layer whose image is missing is skipped; the remaining steps still run.
"""

from typing import Optional, Tuple

from PIL import Image, ImageChops, ImageColor, ImageDraw
from loguru import logger

from .config import BorderOption, MattingOption
from .filters import ColorTreatment, apply_treatment


class LayerCompositor:
    """Builds the offscreen framed-art surface for one selection."""

    def composite(self,
                  art: Image.Image,
                  matting: Optional[MattingOption] = None,
                  border: Optional[BorderOption] = None,
                  treatment=ColorTreatment.ORIGINAL,
                  frame_overlay: Optional[Image.Image] = None,
                  frame_mask: Optional[Image.Image] = None,
                  matting_overlay: Optional[Image.Image] = None,
                  art_size: Optional[Tuple[int, int]] = None) -> Image.Image:
        """
        Composite all selected layers into a new RGBA surface.

        Args:
            art: Decoded artwork
            matting: Selected matting, or None for no matting
            border: Selected border, or None for no border
            treatment: Color treatment for the art layer
            frame_overlay: Frame image drawn on top, stretched to the surface
            frame_mask: Alpha mask clipping art and matting, stretched to the surface
            matting_overlay: Pre-rendered matting used instead of the solid fill
            art_size: Size of the art area; the art's native size if None

        Returns:
            The working surface in RGBA mode
        """
        art_width, art_height = art_size or art.size
        thickness = matting.thickness_px if matting is not None else 0
        surface_size = (art_width + 2 * thickness, art_height + 2 * thickness)

        surface = Image.new('RGBA', surface_size, (0, 0, 0, 0))

        if thickness > 0:
            self._draw_matting(surface, matting, matting_overlay)

        self._draw_art(surface, art, (art_width, art_height), thickness, treatment)

        if frame_mask is not None:
            surface = self._apply_mask(surface, frame_mask)

        if border is not None and border.thickness_px > 0:
            self._draw_border(surface, border)

        if frame_overlay is not None:
            self._draw_frame(surface, frame_overlay)

        logger.debug(f"Composited working surface {surface_size} "
                     f"(matting={thickness}, border={border.thickness_px if border else 0}, "
                     f"mask={'yes' if frame_mask is not None else 'no'}, "
                     f"frame={'yes' if frame_overlay is not None else 'no'})")
        return surface

    def _draw_matting(self, surface: Image.Image, matting: MattingOption,
                      matting_overlay: Optional[Image.Image]) -> None:
        if matting_overlay is not None:
            layer = matting_overlay.convert('RGBA').resize(surface.size, Image.Resampling.LANCZOS)
        else:
            layer = Image.new('RGBA', surface.size, ImageColor.getcolor(matting.color, 'RGBA'))
        surface.alpha_composite(layer)

    def _draw_art(self, surface: Image.Image, art: Image.Image, art_size: Tuple[int, int],
                  offset: int, treatment) -> None:
        layer = art.convert('RGBA')
        if layer.size != art_size:
            layer = layer.resize(art_size, Image.Resampling.LANCZOS)
        if ColorTreatment.from_name(treatment) is not ColorTreatment.ORIGINAL:
            layer = apply_treatment(layer, treatment)
        surface.alpha_composite(layer, dest=(offset, offset))

    def _apply_mask(self, surface: Image.Image, frame_mask: Image.Image) -> Image.Image:
        # destination-in: keep surface pixels only where the mask is opaque
        mask = frame_mask.convert('RGBA').resize(surface.size, Image.Resampling.LANCZOS)
        clipped_alpha = ImageChops.multiply(surface.getchannel('A'), mask.getchannel('A'))
        surface.putalpha(clipped_alpha)
        return surface

    def _draw_border(self, surface: Image.Image, border: BorderOption) -> None:
        width, height = surface.size
        # PIL grows the outline inward, so the stroke covers `thickness`
        # pixels in from each edge
        stroke = min(border.thickness_px, (min(width, height) + 1) // 2)
        layer = Image.new('RGBA', surface.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        draw.rectangle([0, 0, width - 1, height - 1],
                       outline=ImageColor.getcolor(border.color, 'RGBA'),
                       width=stroke)
        surface.alpha_composite(layer)

    def _draw_frame(self, surface: Image.Image, frame_overlay: Image.Image) -> None:
        layer = frame_overlay.convert('RGBA')
        if layer.size != surface.size:
            layer = layer.resize(surface.size, Image.Resampling.LANCZOS)
        surface.alpha_composite(layer)


def create_layer_compositor() -> LayerCompositor:
    """Factory function to create a LayerCompositor instance."""
    return LayerCompositor()
