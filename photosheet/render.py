"""
Tile rasterizer for the print sheet composition engine.

This module handles:
- Normalizing the source photo to an RGB or RGBA working mode
- Resampling the resolved crop rectangle into one print-resolution tile
- Sizing the tile from the layout plan through the unit converter
"""

from typing import Dict, Tuple
from PIL import Image
from loguru import logger

from photosheet.config import AppConfig, get_config
from photosheet.errors import EmptySampleRectError, InvalidDimensionError
from photosheet.models import PhysicalSize, SampleRect, SourceImage
from photosheet.units import size_to_px


RESAMPLING_FILTERS: Dict[str, Image.Resampling] = {
    'nearest': Image.Resampling.NEAREST,
    'bilinear': Image.Resampling.BILINEAR,
    'bicubic': Image.Resampling.BICUBIC,
    'lanczos': Image.Resampling.LANCZOS,
}


def working_mode(source: SourceImage) -> str:
    """RGBA when the source carries transparency, otherwise RGB."""
    return 'RGBA' if source.has_alpha else 'RGB'


def tile_pixel_size(tile_size: PhysicalSize) -> Tuple[int, int]:
    """Print-pixel buffer size of a tile."""
    return size_to_px(tile_size)


class TileRasterizer:
    """Renders exactly one output tile from the source photo."""

    def __init__(self, config: AppConfig = None):
        self.config = config or get_config()
        self.resample = RESAMPLING_FILTERS[self.config.RESAMPLING]

    def render_tile(self,
                    source: SourceImage,
                    rect: SampleRect,
                    tile_px: Tuple[int, int]) -> Image.Image:
        """
        Resample the rect region of the source into a tile_px sized buffer.

        Args:
            source: Decoded source photo
            rect: Sampling rectangle in source pixels
            tile_px: Output (width, height) in print pixels

        Returns:
            New RGB/RGBA image of exactly tile_px
        """
        if rect.is_empty:
            raise EmptySampleRectError(rect, source.size)

        tile_w, tile_h = tile_px
        if tile_w < 1 or tile_h < 1:
            raise InvalidDimensionError('tile_px', tile_px, "must be at least 1x1 pixels")

        original = source.image
        mode = working_mode(source)
        if original.mode != mode:
            original = original.convert(mode)

        # box= samples the fractional rect directly, no intermediate crop rounding
        tile = original.resize((tile_w, tile_h), self.resample, box=rect.box)

        logger.debug(f"Rendered tile {source.size} -> {rect} -> {tile.size} ({mode})")
        return tile


def create_tile_rasterizer(config: AppConfig = None) -> TileRasterizer:
    """Factory function to create a TileRasterizer instance."""
    return TileRasterizer(config)
