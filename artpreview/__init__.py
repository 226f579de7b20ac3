"""
Art Preview Compositor - Preview Factory
Composites an artwork with frame, matting, border and color treatment and
places it into room scenes for a main preview and one thumbnail per scene
"""

import os
from pathlib import Path
from loguru import logger
from dotenv import load_dotenv

from .config import AppConfig, load_catalog, load_config
from .orchestrator import RenderOrchestrator, create_orchestrator


def create_preview(config_name=None, catalog_path=None, config_dir="config") -> RenderOrchestrator:
    """Preview factory: configuration, logging, catalog and render orchestrator"""

    # Load environment variables
    load_dotenv()

    # Load configuration
    environment = config_name or os.getenv('ARTPREVIEW_ENV', 'development')
    config = load_config(environment, config_dir)

    # Configure logging
    setup_logging(config)

    catalog = load_catalog(catalog_path, config)
    orchestrator = create_orchestrator(config, catalog)

    logger.info(f"Art preview initialized in {environment} mode "
                f"({len(catalog.scenes)} scenes, shadow style '{config.SHADOW_STYLE}')")

    return orchestrator


def setup_logging(config: AppConfig):
    """Configure loguru logging"""
    log_file = config.LOG_FILE

    # Ensure logs directory exists
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    return logger.add(
        log_file,
        rotation="1 day",
        retention="30 days",
        level=config.LOG_LEVEL,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
    )
