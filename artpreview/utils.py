"""
Utility functions for exporting rendered previews
"""

import os
import re
from pathlib import Path
from typing import Dict, Iterable

from PIL import Image
from loguru import logger


def ensure_directory_exists(path: Path) -> None:
    """Ensure directory exists, create if necessary"""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create directory {path}: {e}")
        raise


def safe_filename(filename: str) -> str:
    """Generate safe filename by removing/replacing problematic characters"""
    # Remove path separators and other problematic chars
    safe_name = re.sub(r'[<>:"/\\|?*\s]', '_', filename)
    # Remove control characters
    safe_name = re.sub(r'[\x00-\x1f\x7f]', '', safe_name)
    # Limit length
    if len(safe_name) > 200:
        name, ext = os.path.splitext(safe_name)
        safe_name = name[:200-len(ext)] + ext

    return safe_name or 'unnamed_file'


def save_image(image: Image.Image, path: Path) -> Path:
    """Save a rendered surface as PNG, keeping transparency"""
    ensure_directory_exists(path.parent)
    image.save(path, 'PNG')
    logger.info(f"Saved {image.size[0]}x{image.size[1]} image to {path}")
    return path


def export_targets(targets: Iterable, output_dir: Path) -> Dict[str, Path]:
    """Write each target's current surface to ``output_dir``; returns name -> path"""
    output_dir = Path(output_dir)
    ensure_directory_exists(output_dir)

    written = {}
    for target in targets:
        suffix = "_active" if target.highlighted else ""
        path = output_dir / safe_filename(f"{target.name}{suffix}.png")
        written[target.name] = save_image(target.surface, path)
    return written
