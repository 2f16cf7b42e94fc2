"""
Photo Sheet - Print Sheet Composition Engine
Lays out copies of a cropped photo on paper and renders a print-ready sheet
"""

from pathlib import Path
from loguru import logger

from .config import AppConfig, load_config
from .errors import (
    CompositionError, EmptySampleRectError, EncodingError, IncompleteSourceError,
    InvalidDimensionError, LayoutInfeasibleError,
)
from .models import (
    CropViewport, ExportFormat, FitToPaper, FixedTile, LayoutPlan,
    PhysicalSize, PrintSheet, SampleRect, SourceImage, PASSPORT_ASPECT,
)
from .pipeline import compose_sheet, default_viewport, render_sheet

__all__ = [
    'AppConfig', 'load_config', 'setup_logging',
    'CompositionError', 'EmptySampleRectError', 'EncodingError', 'IncompleteSourceError',
    'InvalidDimensionError', 'LayoutInfeasibleError',
    'CropViewport', 'ExportFormat', 'FitToPaper', 'FixedTile', 'LayoutPlan',
    'PhysicalSize', 'PrintSheet', 'SampleRect', 'SourceImage', 'PASSPORT_ASPECT',
    'compose_sheet', 'default_viewport', 'render_sheet',
]


def setup_logging(config: AppConfig = None) -> int:
    """Configure loguru file logging; returns the sink id"""
    config = config or load_config()
    log_file = config.LOG_FILE

    # Ensure logs directory exists
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    sink_id = logger.add(
        log_file,
        rotation="1 day",
        retention="30 days",
        level=config.LOG_LEVEL,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
    )
    logger.info(f"Photo sheet logging initialized in {config.ENV} mode")
    return sink_id
