"""
Color treatments applied to the art layer.

Each treatment is a fixed recipe of filter functions with the same semantics
as the CSS filter functions of the same name (sepia, hue-rotate, saturate,
grayscale, brightness, contrast). Every step is a 3x3 color matrix plus an
offset, evaluated with numpy on the RGB channels; alpha is left untouched.
"""

import math
from enum import Enum
from typing import Dict, List, Tuple

import numpy as np
from PIL import Image
from loguru import logger

from .errors import UnknownColorTreatmentError


class ColorTreatment(str, Enum):
    """Named color filters selectable for the art layer."""
    ORIGINAL = "original"
    WARM = "warm"
    COOL = "cool"
    VINTAGE = "vintage"
    MONO = "mono"

    @classmethod
    def from_name(cls, name) -> "ColorTreatment":
        """Look up a treatment by name; ``identity`` and ``none`` mean original."""
        if isinstance(name, ColorTreatment):
            return name
        key = str(name or "original").strip().lower()
        if key in ("identity", "none"):
            key = "original"
        try:
            return cls(key)
        except ValueError:
            raise UnknownColorTreatmentError(str(name), [t.value for t in cls])


FilterStep = Tuple[str, float]

# Recipes, applied left to right
TREATMENT_RECIPES: Dict[ColorTreatment, List[FilterStep]] = {
    ColorTreatment.ORIGINAL: [],
    ColorTreatment.WARM: [("sepia", 0.6), ("hue-rotate", 10.0), ("saturate", 1.5), ("brightness", 1.1)],
    ColorTreatment.COOL: [("hue-rotate", 180.0), ("saturate", 1.3), ("brightness", 1.05)],
    ColorTreatment.VINTAGE: [("sepia", 0.9), ("contrast", 1.1), ("brightness", 0.9)],
    ColorTreatment.MONO: [("grayscale", 1.0), ("contrast", 1.2)],
}


def _grayscale(amount: float) -> Tuple[np.ndarray, float]:
    a = 1.0 - min(max(amount, 0.0), 1.0)
    matrix = np.array([
        [0.2126 + 0.7874 * a, 0.7152 - 0.7152 * a, 0.0722 - 0.0722 * a],
        [0.2126 - 0.2126 * a, 0.7152 + 0.2848 * a, 0.0722 - 0.0722 * a],
        [0.2126 - 0.2126 * a, 0.7152 - 0.7152 * a, 0.0722 + 0.9278 * a],
    ])
    return matrix, 0.0


def _sepia(amount: float) -> Tuple[np.ndarray, float]:
    a = 1.0 - min(max(amount, 0.0), 1.0)
    matrix = np.array([
        [0.393 + 0.607 * a, 0.769 - 0.769 * a, 0.189 - 0.189 * a],
        [0.349 - 0.349 * a, 0.686 + 0.314 * a, 0.168 - 0.168 * a],
        [0.272 - 0.272 * a, 0.534 - 0.534 * a, 0.131 + 0.869 * a],
    ])
    return matrix, 0.0


def _saturate(amount: float) -> Tuple[np.ndarray, float]:
    s = max(amount, 0.0)
    matrix = np.array([
        [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
    ])
    return matrix, 0.0


def _hue_rotate(degrees: float) -> Tuple[np.ndarray, float]:
    rad = math.radians(degrees)
    cos, sin = math.cos(rad), math.sin(rad)
    luma = np.array([0.213, 0.715, 0.072])
    matrix = np.array([
        luma + cos * np.array([0.787, -0.715, -0.072]) + sin * np.array([-0.213, -0.715, 0.928]),
        luma + cos * np.array([-0.213, 0.285, -0.072]) + sin * np.array([0.143, 0.140, -0.283]),
        luma + cos * np.array([-0.213, -0.715, 0.928]) + sin * np.array([-0.787, 0.715, 0.072]),
    ])
    return matrix, 0.0


def _brightness(amount: float) -> Tuple[np.ndarray, float]:
    return np.eye(3) * max(amount, 0.0), 0.0


def _contrast(amount: float) -> Tuple[np.ndarray, float]:
    c = max(amount, 0.0)
    return np.eye(3) * c, 255.0 * (0.5 - 0.5 * c)


_STEP_BUILDERS = {
    "grayscale": _grayscale,
    "sepia": _sepia,
    "saturate": _saturate,
    "hue-rotate": _hue_rotate,
    "brightness": _brightness,
    "contrast": _contrast,
}


def apply_filter_steps(image: Image.Image, steps: List[FilterStep]) -> Image.Image:
    """Apply a list of filter steps to an image and return a new RGBA image."""
    rgba = image.convert('RGBA')
    if not steps:
        return rgba

    pixels = np.asarray(rgba, dtype=np.float32)
    rgb = pixels[..., :3]
    for name, amount in steps:
        matrix, offset = _STEP_BUILDERS[name](amount)
        rgb = rgb @ matrix.T.astype(np.float32) + offset
        # Each step is clamped before the next one sees it
        rgb = np.clip(rgb, 0.0, 255.0)

    out = np.empty_like(pixels, dtype=np.uint8)
    out[..., :3] = np.rint(rgb).astype(np.uint8)
    out[..., 3] = pixels[..., 3].astype(np.uint8)
    return Image.fromarray(out)


def apply_treatment(image: Image.Image, treatment) -> Image.Image:
    """Apply a named color treatment to the art image."""
    treatment = ColorTreatment.from_name(treatment)
    steps = TREATMENT_RECIPES[treatment]
    logger.debug(f"Applying color treatment '{treatment.value}' ({len(steps)} steps) to {image.size}")
    return apply_filter_steps(image, steps)
