"""
Configuration management for the art preview compositor
Loads settings and the option catalog from YAML files with environment variable overrides
"""

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, Field
from loguru import logger

from .errors import EmptyCatalogError
from .placement import Scene, normalize_scene


class AppConfig(BaseModel):
    """Main application configuration"""

    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/artpreview.log"

    # Paths
    ASSETS_DIRECTORY: str = "assets"
    CATALOG_FILE: str = "config/catalog.yaml"

    # Render targets (portrait 512x734)
    MAIN_WIDTH: int = 512
    MAIN_HEIGHT: int = 734
    THUMB_WIDTH: int = 70
    THUMB_HEIGHT: Optional[int] = None  # Derived from the main aspect if None

    # Outputs at or below either limit use the cheap shadow
    THUMBNAIL_MAX_WIDTH: int = 120
    THUMBNAIL_MAX_HEIGHT: int = 160

    # Canvas that pixel-valued scene offsets are measured against
    REFERENCE_WIDTH: int = 512
    REFERENCE_HEIGHT: int = 734

    # Art area of the working surface; native art size if None
    ART_WIDTH: Optional[int] = None
    ART_HEIGHT: Optional[int] = None

    BACKGROUND_COLOR: str = "#ffffff"

    # Shadows: "soft", "flat" or "none"
    SHADOW_STYLE: str = "soft"
    FLAT_SHADOW_OPACITY: float = 0.35
    FLAT_SHADOW_OFFSET_PX: float = 10.0
    FLAT_SHADOW_ANGLE_DEG: float = 45.0  # 0 = right, 90 = down

    # Image loading
    HTTP_TIMEOUT: float = 15.0
    LOADER_CACHE_ENABLED: bool = True
    LOADER_CACHE_SIZE: int = 32  # decoded images kept, least recently used evicted first

    @property
    def main_size(self) -> Tuple[int, int]:
        return (self.MAIN_WIDTH, self.MAIN_HEIGHT)

    @property
    def thumb_size(self) -> Tuple[int, int]:
        height = self.THUMB_HEIGHT
        if height is None:
            height = round(self.THUMB_WIDTH * self.MAIN_HEIGHT / self.MAIN_WIDTH)
        return (self.THUMB_WIDTH, height)

    @property
    def reference_size(self) -> Tuple[int, int]:
        return (self.REFERENCE_WIDTH, self.REFERENCE_HEIGHT)

    @property
    def art_size(self) -> Optional[Tuple[int, int]]:
        if self.ART_WIDTH and self.ART_HEIGHT:
            return (self.ART_WIDTH, self.ART_HEIGHT)
        return None

    def is_thumbnail_size(self, width: int, height: int) -> bool:
        """True when an output is small enough for the cheap shadow path"""
        return width <= self.THUMBNAIL_MAX_WIDTH or height <= self.THUMBNAIL_MAX_HEIGHT


class FrameOption(BaseModel):
    """Frame overlay with an optional aperture mask"""
    id: str
    label: str
    overlay_source: str
    mask_source: Optional[str] = None


class MattingOption(BaseModel):
    """Matting band drawn between the artwork and the frame"""
    label: str
    thickness_px: int = Field(default=0, ge=0)
    color: str = "#ffffff"
    overlay_source: Optional[str] = None


class BorderOption(BaseModel):
    """Decorative stroke around the matted artwork"""
    label: str
    thickness_px: int = Field(default=0, ge=0)
    color: str = "#000000"


class BoxConfig(BaseModel):
    """Nominal picture area of a scene, fractions of the canvas"""
    x: float = Field(default=0.0, ge=0)
    y: float = Field(default=0.0, ge=0)
    w: float = Field(default=1.0, gt=0, le=1)
    h: float = Field(default=1.0, gt=0, le=1)


class SceneConfig(BaseModel):
    """Raw scene entry as written in catalog.yaml"""
    label: str
    background_source: Optional[str] = None
    box: BoxConfig = Field(default_factory=BoxConfig)
    scale: Optional[float] = Field(default=None, gt=0)
    x: Optional[float] = Field(default=None, ge=0)  # fraction if <= 1, else reference pixels
    y: Optional[float] = Field(default=None, ge=0)


@dataclass
class Catalog:
    """Everything a shopper can pick from, with scenes already normalized"""
    artwork_source: Optional[str]
    frames: List[FrameOption] = field(default_factory=list)
    mattings: List[MattingOption] = field(default_factory=list)
    borders: List[BorderOption] = field(default_factory=list)
    scenes: List[Scene] = field(default_factory=list)

    def frame_by_id(self, frame_id: Optional[str]) -> Optional[FrameOption]:
        if not frame_id or frame_id.lower() == "none":
            return None
        for frame in self.frames:
            if frame.id == frame_id:
                return frame
        logger.warning(f"Unknown frame id: {frame_id}")
        return None

    def matting_by_label(self, label: Optional[str]) -> Optional[MattingOption]:
        return _find_by_label(self.mattings, label)

    def border_by_label(self, label: Optional[str]) -> Optional[BorderOption]:
        return _find_by_label(self.borders, label)

    def scene_index(self, label: str) -> int:
        for i, scene in enumerate(self.scenes):
            if scene.label.lower() == label.lower():
                return i
        return -1


def _find_by_label(options, label: Optional[str]):
    if not label:
        return None
    for option in options:
        if option.label.lower() == label.lower():
            return option
    logger.warning(f"Unknown option label: {label}")
    return None


def load_yaml_config(file_path: str) -> Dict:
    """Load configuration from YAML file"""
    path = Path(file_path)
    if not path.exists():
        logger.warning(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except Exception as e:
        logger.error(f"Error loading config file {file_path}: {e}")
        return {}


def load_config(environment: str = None, config_dir: str = "config") -> AppConfig:
    """Load configuration with environment-specific overrides"""
    environment = environment or os.getenv('ARTPREVIEW_ENV', 'development')

    # Load base settings
    base_config = load_yaml_config(f"{config_dir}/settings.yaml")

    # Load environment-specific settings
    env_config = load_yaml_config(f"{config_dir}/settings_{environment}.yaml")

    # Merge configurations (env overrides base)
    config_dict = {**base_config, **env_config}
    config_dict['ENVIRONMENT'] = environment

    # Apply environment variable overrides
    env_overrides = {
        'LOG_LEVEL': os.getenv('LOG_LEVEL'),
        'LOG_FILE': os.getenv('LOG_FILE'),
        'ASSETS_DIRECTORY': os.getenv('ASSETS_DIRECTORY'),
        'SHADOW_STYLE': os.getenv('SHADOW_STYLE'),
    }

    # Only include non-None values
    env_overrides = {k: v for k, v in env_overrides.items() if v is not None}
    config_dict.update(env_overrides)

    try:
        return AppConfig(**config_dict)
    except Exception as e:
        logger.error(f"Configuration validation error: {e}")
        # Return default config on validation error
        return AppConfig(ENVIRONMENT=environment)


# Global config instance
_config_instance = None

def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config_instance
    if _config_instance is None:
        _config_instance = load_config()
    return _config_instance


def _load_options(items: List[Dict], model, kind: str) -> List:
    options = []
    for item in items or []:
        try:
            options.append(model(**item))
        except Exception as e:
            logger.error(f"Error loading {kind} option {item.get('label', 'unknown')}: {e}")
    return options


def load_catalog(catalog_path: str = None, config: AppConfig = None) -> Catalog:
    """Load frames, mattings, borders and scenes from YAML"""
    config = config or get_config()
    catalog_path = catalog_path or config.CATALOG_FILE
    data = load_yaml_config(catalog_path)

    scenes = []
    for raw in _load_options(data.get("scenes"), SceneConfig, "scene"):
        scenes.append(normalize_scene(raw, config.reference_size))

    if not scenes:
        raise EmptyCatalogError(str(catalog_path))

    catalog = Catalog(
        artwork_source=data.get("artwork_source"),
        frames=_load_options(data.get("frames"), FrameOption, "frame"),
        mattings=_load_options(data.get("mattings"), MattingOption, "matting"),
        borders=_load_options(data.get("borders"), BorderOption, "border"),
        scenes=scenes,
    )

    logger.info(f"Loaded catalog: {len(catalog.frames)} frames, {len(catalog.mattings)} mattings, "
                f"{len(catalog.borders)} borders, {len(catalog.scenes)} scenes")
    return catalog
