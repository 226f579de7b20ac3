"""
Unit tests for the layer compositor.

Overlays and masks are built at the working surface size so pixel checks
don't depend on resampling.
"""

import pytest
from PIL import Image, ImageDraw

from artpreview.compositor import LayerCompositor, create_layer_compositor
from artpreview.config import BorderOption, MattingOption
from artpreview.filters import ColorTreatment

from .conftest import ART_COLOR, FRAME_COLOR


WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)
MEDIUM = MattingOption(label="Medium", thickness_px=60)
SURFACE = (320, 420)  # 200x300 art + 2 * 60


def frame_band(size, band, color=FRAME_COLOR):
    """Opaque frame band of ``band`` pixels with a transparent opening."""
    frame = Image.new('RGBA', size, color)
    ImageDraw.Draw(frame).rectangle([band, band, size[0] - band - 1, size[1] - band - 1],
                                    fill=(0, 0, 0, 0))
    return frame


def aperture_mask(size, ring):
    """Mask that hides an outer ring of ``ring`` pixels."""
    alpha = Image.new('L', size, 0)
    ImageDraw.Draw(alpha).rectangle([ring, ring, size[0] - ring - 1, size[1] - ring - 1], fill=255)
    mask = Image.new('RGBA', size, (0, 0, 0, 0))
    mask.putalpha(alpha)
    return mask


@pytest.fixture
def compositor():
    return create_layer_compositor()


class TestSurfaceSize:
    """Test working surface dimensions."""

    def test_no_matting_keeps_art_size(self, compositor, art_image):
        assert compositor.composite(art_image).size == (200, 300)

    def test_matting_grows_surface(self, compositor, art_image):
        assert compositor.composite(art_image, matting=MEDIUM).size == SURFACE

    def test_explicit_art_size(self, compositor, art_image):
        surface = compositor.composite(art_image, matting=MattingOption(label="Small", thickness_px=30),
                                       art_size=(100, 150))

        assert surface.size == (160, 210)
        assert surface.getpixel((80, 105)) == ART_COLOR


class TestLayerOrder:
    """Test the fixed layer order."""

    def test_matting_surrounds_art(self, compositor, art_image):
        surface = compositor.composite(art_image, matting=MEDIUM)

        assert surface.getpixel((10, 10)) == WHITE
        assert surface.getpixel((59, 200)) == WHITE
        assert surface.getpixel((60, 60)) == ART_COLOR
        assert surface.getpixel((259, 359)) == ART_COLOR
        assert surface.getpixel((260, 360)) == WHITE

    def test_layer_order(self, compositor, art_image):
        surface = compositor.composite(
            art_image,
            matting=MEDIUM,
            border=BorderOption(label="Heavy", thickness_px=30, color="#000000"),
            frame_overlay=frame_band(SURFACE, 20),
        )

        # Frame over border over matting over art
        assert surface.getpixel((5, 200)) == FRAME_COLOR
        assert surface.getpixel((25, 200)) == BLACK
        assert surface.getpixel((45, 200)) == WHITE
        assert surface.getpixel((160, 210)) == ART_COLOR

    def test_border_over_art_without_matting(self, compositor, art_image):
        surface = compositor.composite(
            art_image, border=BorderOption(label="Thin White", thickness_px=10, color="#ffffff")
        )

        assert surface.getpixel((0, 0)) == WHITE
        assert surface.getpixel((9, 150)) == WHITE
        assert surface.getpixel((10, 150)) == ART_COLOR
        assert surface.getpixel((199, 299)) == WHITE

    def test_border_thicker_than_surface_is_clamped(self, compositor):
        tiny = Image.new('RGBA', (6, 4), ART_COLOR)

        surface = compositor.composite(tiny, border=BorderOption(label="Huge", thickness_px=60,
                                                                 color="#000000"))

        assert surface.size == (6, 4)
        assert all(surface.getpixel((x, y)) == BLACK for x in range(6) for y in range(4))

    def test_treatment_applies_to_art_only(self, compositor, art_image):
        matting = MattingOption(label="Blue", thickness_px=20, color="#3366cc")

        surface = compositor.composite(art_image, matting=matting, treatment=ColorTreatment.MONO)

        assert surface.getpixel((5, 5)) == (0x33, 0x66, 0xcc, 255)
        r, g, b, a = surface.getpixel((120, 170))
        assert r == g == b
        assert a == 255

    def test_treatment_by_name(self, compositor, art_image):
        by_name = compositor.composite(art_image, treatment="mono")
        by_enum = compositor.composite(art_image, treatment=ColorTreatment.MONO)

        assert by_name.tobytes() == by_enum.tobytes()

    def test_matting_overlay_replaces_fill(self, compositor, art_image):
        overlay = Image.new('RGB', (10, 10), (10, 200, 30))

        surface = compositor.composite(art_image, matting=MEDIUM, matting_overlay=overlay)

        assert surface.getpixel((5, 5)) == (10, 200, 30, 255)
        assert surface.getpixel((160, 210)) == ART_COLOR


class TestFrameMask:
    """Test clipping by the frame mask."""

    def test_mask_clips_art_and_matting(self, compositor, art_image):
        surface = compositor.composite(art_image, matting=MEDIUM,
                                       frame_mask=aperture_mask(SURFACE, 15))

        assert surface.getpixel((5, 200))[3] == 0
        assert surface.getpixel((30, 200)) == WHITE
        assert surface.getpixel((160, 210)) == ART_COLOR

    def test_frame_drawn_after_clip(self, compositor, art_image):
        surface = compositor.composite(art_image, matting=MEDIUM,
                                       frame_mask=aperture_mask(SURFACE, 15),
                                       frame_overlay=frame_band(SURFACE, 20))

        # The overlay itself is never clipped
        assert surface.getpixel((5, 200)) == FRAME_COLOR

    def test_missing_mask_leaves_surface_unclipped(self, compositor, art_image):
        surface = compositor.composite(art_image, matting=MEDIUM,
                                       frame_overlay=frame_band(SURFACE, 10),
                                       frame_mask=None)

        assert surface.getpixel((12, 200)) == WHITE
        assert surface.getpixel((160, 210)) == ART_COLOR

    def test_mask_is_stretched_to_surface(self, compositor, art_image):
        small_mask = aperture_mask((32, 42), 5)

        surface = compositor.composite(art_image, matting=MEDIUM, frame_mask=small_mask)

        assert surface.size == SURFACE
        assert surface.getpixel((0, 0))[3] == 0
        assert surface.getpixel((160, 210))[3] == 255


class TestEquivalences:
    """Test properties that must hold for any selection."""

    def test_frame_without_mask_only_adds_overlay(self, compositor, art_image):
        overlay = frame_band(SURFACE, 20)

        framed = compositor.composite(art_image, matting=MEDIUM, frame_overlay=overlay)
        bare = compositor.composite(art_image, matting=MEDIUM)

        opening = (20, 20, SURFACE[0] - 20, SURFACE[1] - 20)
        assert framed.crop(opening).tobytes() == bare.crop(opening).tobytes()

    @pytest.mark.parametrize("treatment", [ColorTreatment.ORIGINAL, ColorTreatment.VINTAGE])
    def test_zero_thickness_layers_are_noops(self, compositor, art_image, treatment):
        omitted = compositor.composite(art_image, treatment=treatment)
        zero_matting = compositor.composite(art_image, treatment=treatment,
                                            matting=MattingOption(label="None", thickness_px=0))
        zero_border = compositor.composite(art_image, treatment=treatment,
                                           border=BorderOption(label="None", thickness_px=0))

        assert zero_matting.tobytes() == omitted.tobytes()
        assert zero_border.tobytes() == omitted.tobytes()

    def test_plain_selection_equals_artwork(self, compositor, art_image):
        surface = compositor.composite(art_image)

        assert surface.tobytes() == art_image.tobytes()

    def test_input_art_not_modified(self, compositor, art_image):
        before = art_image.tobytes()

        compositor.composite(art_image, matting=MEDIUM, treatment="warm",
                             frame_mask=aperture_mask(SURFACE, 15))

        assert art_image.tobytes() == before

    def test_factory(self):
        assert isinstance(create_layer_compositor(), LayerCompositor)
