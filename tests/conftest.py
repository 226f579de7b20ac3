"""
Pytest configuration and fixtures for Art Preview Compositor tests.

Provides shared fixtures that build synthetic artwork, frame, mask and
background assets in temporary directories, plus ready-made configuration
and catalog objects pointing at them.
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from PIL import Image, ImageDraw

from artpreview.config import (
    AppConfig, BorderOption, BoxConfig, Catalog, FrameOption, MattingOption, SceneConfig
)
from artpreview.placement import normalize_scene


ART_SIZE = (200, 300)
ART_COLOR = (200, 40, 40, 255)
FRAME_COLOR = (110, 60, 20, 255)
BACKGROUND_COLOR = (235, 235, 225, 255)


@pytest.fixture
def temp_work_dir():
    """Create a temporary work directory for test processing."""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    shutil.rmtree(temp_dir)


@pytest.fixture
def assets_dir(temp_work_dir):
    """Create sample artwork, frame, mask and background assets."""
    images_dir = temp_work_dir / "assets" / "images"
    images_dir.mkdir(parents=True)

    # Solid artwork so pixel checks are exact
    Image.new('RGBA', ART_SIZE, ART_COLOR).save(images_dir / "art1.png")

    # Frame: opaque band with a transparent opening, same aspect as the art
    frame = Image.new('RGBA', (100, 150), FRAME_COLOR)
    ImageDraw.Draw(frame).rectangle([10, 10, 89, 139], fill=(0, 0, 0, 0))
    frame.save(images_dir / "frame1.png")

    # Mask: opaque everywhere except a transparent 5px outer ring
    mask = Image.new('RGBA', (100, 150), (0, 0, 0, 0))
    ImageDraw.Draw(mask).rectangle([5, 5, 94, 144], fill=(0, 0, 0, 255))
    mask.save(images_dir / "frame1-mask.png")

    # Background with the main target's aspect
    Image.new('RGB', (256, 367), BACKGROUND_COLOR[:3]).save(images_dir / "bg1.png")

    # Not an image at all
    (images_dir / "broken.png").write_bytes(b"this is not a png")

    return temp_work_dir / "assets"


@pytest.fixture
def test_config(temp_work_dir, assets_dir):
    """Application configuration pointing at the synthetic assets."""
    return AppConfig(
        ENVIRONMENT="testing",
        LOG_LEVEL="DEBUG",
        LOG_FILE=str(temp_work_dir / "logs" / "test.log"),
        ASSETS_DIRECTORY=str(assets_dir),
        CATALOG_FILE=str(temp_work_dir / "catalog.yaml"),
    )


@pytest.fixture
def sample_catalog(test_config):
    """Catalog with one frame, a few mattings and borders, a plain and a room scene."""
    scene_configs = [
        SceneConfig(label="Plain"),
        SceneConfig(label="Bedroom", background_source="images/bg1.png",
                    box=BoxConfig(x=0.2, y=0.19, w=0.6, h=0.62), x=0.18, y=0.10),
    ]
    return Catalog(
        artwork_source="images/art1.png",
        frames=[FrameOption(id="walnut", label="Walnut",
                            overlay_source="images/frame1.png",
                            mask_source="images/frame1-mask.png")],
        mattings=[MattingOption(label="None", thickness_px=0),
                  MattingOption(label="Medium", thickness_px=60)],
        borders=[BorderOption(label="None", thickness_px=0),
                 BorderOption(label="Thin White", thickness_px=10, color="#ffffff")],
        scenes=[normalize_scene(s, test_config.reference_size) for s in scene_configs],
    )


@pytest.fixture
def art_image():
    """Decoded solid artwork."""
    return Image.new('RGBA', ART_SIZE, ART_COLOR)


CATALOG_YAML = """
artwork_source: "images/art1.png"

frames:
  - id: "walnut"
    label: "Walnut"
    overlay_source: "images/frame1.png"
    mask_source: "images/frame1-mask.png"
  - id: "broken"
    label: "Broken"

mattings:
  - label: "None"
    thickness_px: 0
  - label: "Medium"
    thickness_px: 60
  - label: "Negative"
    thickness_px: -5

borders:
  - label: "Thin White"
    thickness_px: 10
    color: "#ffffff"

scenes:
  - label: "Plain"
  - label: "Bedroom"
    background_source: "images/bg1.png"
    box: {x: 0.2, y: 0.19, w: 0.6, h: 0.62}
    x: 0.18
    y: 0.10
  - label: "Office"
    background_source: "images/bg1.png"
    box: {x: 0.2, y: 0.2, w: 0.6, h: 0.6}
    scale: 0.5
    x: 128
"""


@pytest.fixture
def catalog_file(temp_work_dir):
    """Catalog YAML with a couple of invalid entries mixed in."""
    path = temp_work_dir / "catalog.yaml"
    path.write_text(CATALOG_YAML, encoding='utf-8')
    return path
