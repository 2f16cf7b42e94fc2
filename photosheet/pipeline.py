"""
Print sheet composition pipeline.

One request runs: layout optimizer and crop resolver (independent of each
other), then the tile rasterizer, then the sheet compositor, then the
exporter. Nothing is cached between requests.
"""

import time
from typing import Optional, Union
from PIL import Image
from loguru import logger

from photosheet.composite import CompositeSettings, create_sheet_compositor
from photosheet.config import AppConfig, get_config
from photosheet.crop import resolve_sample_rect
from photosheet.errors import InvalidDimensionError
from photosheet.export import export_sheet
from photosheet.layout import plan_layout
from photosheet.models import (
    CropViewport, ExportFormat, FitToPaper, FixedTile, PhysicalSize,
    PrintSheet, SizingMode, SourceImage,
)
from photosheet.render import create_tile_rasterizer, tile_pixel_size


def mode_aspect(mode: SizingMode) -> float:
    """Width/height aspect of the tiles a sizing mode produces."""
    if isinstance(mode, FixedTile):
        return mode.tile.aspect
    if isinstance(mode, FitToPaper):
        return mode.aspect
    raise InvalidDimensionError('mode', mode, "must be FixedTile or FitToPaper")


def default_viewport(mode: SizingMode, config: AppConfig = None, **kwargs) -> CropViewport:
    """Untouched viewport whose preview box has the tile's aspect."""
    config = config or get_config()
    return CropViewport.for_aspect(mode_aspect(mode), config.PREVIEW_BOX_WIDTH_PX, **kwargs)


def _as_source(source: Union[SourceImage, Image.Image]) -> SourceImage:
    if isinstance(source, SourceImage):
        return source
    if isinstance(source, Image.Image):
        return SourceImage(source)
    raise InvalidDimensionError('source', type(source).__name__, "must be a decoded image")


def render_sheet(source: Union[SourceImage, Image.Image],
                 viewport: CropViewport,
                 mode: SizingMode,
                 paper: PhysicalSize,
                 gap_mm: Optional[float] = None,
                 *,
                 config: AppConfig = None,
                 composite_settings: CompositeSettings = None) -> PrintSheet:
    """
    Compose the print sheet buffer without encoding it.

    Args:
        source: Fully decoded source photo
        viewport: Crop state from the interactive editor
        mode: FixedTile or FitToPaper
        paper: Paper size in mm
        gap_mm: Gap between tiles; defaults to the configured gap

    Returns:
        PrintSheet with the paper-sized image and its LayoutPlan
    """
    config = config or get_config()
    source = _as_source(source)
    if not isinstance(paper, PhysicalSize):
        raise InvalidDimensionError('paper', paper, "must be a PhysicalSize")
    if gap_mm is None:
        gap_mm = config.DEFAULT_GAP_MM

    plan = plan_layout(mode, paper, gap_mm)
    rect = resolve_sample_rect(source.size, viewport, mode_aspect(mode))

    tile_px = tile_pixel_size(plan.tile_size)
    tile = create_tile_rasterizer(config).render_tile(source, rect, tile_px)

    sheet = create_sheet_compositor(composite_settings, config).compose(tile, plan)

    logger.info(f"Composed sheet {sheet.size} on {paper}: {plan.columns}x{plan.rows} grid, "
                f"{plan.count} x {plan.tile_size} tiles")
    return sheet


def compose_sheet(source: Union[SourceImage, Image.Image],
                  viewport: CropViewport,
                  mode: SizingMode,
                  paper: PhysicalSize,
                  gap_mm: Optional[float] = None,
                  output_format: Union[str, ExportFormat, None] = None,
                  *,
                  config: AppConfig = None,
                  composite_settings: CompositeSettings = None) -> bytes:
    """
    Render and encode a print sheet in one call.

    Raises a CompositionError subclass on failure; no partial output is
    ever returned.
    """
    config = config or get_config()
    if output_format is None:
        output_format = config.DEFAULT_EXPORT_FORMAT
    output_format = ExportFormat.parse(output_format)

    start_time = time.perf_counter()
    sheet = render_sheet(
        source, viewport, mode, paper, gap_mm,
        config=config,
        composite_settings=composite_settings,
    )
    data = export_sheet(sheet, output_format, config)

    logger.debug(f"compose_sheet finished in {time.perf_counter() - start_time:.2f}s "
                 f"({len(data)} bytes {output_format.value})")
    return data
