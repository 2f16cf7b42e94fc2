"""
Sheet compositor for the print sheet composition engine.

This module handles:
- Creating the paper-sized canvas at print resolution
- Placing the single rendered tile at every layout position
- Clipping tiles that rounding pushes past the paper edge
- Stroking thin crop-mark borders for cutting guidance
"""

from typing import Tuple
from PIL import Image, ImageDraw
from loguru import logger

from photosheet.config import AppConfig, get_config
from photosheet.models import LayoutPlan, PhysicalSize, PrintSheet
from photosheet.units import mm_to_px_round, size_to_px


class CompositeSettings:
    """Settings for composite operations."""

    def __init__(self,
                 background_color: Tuple[int, int, int] = (255, 255, 255),
                 draw_crop_marks: bool = True,
                 crop_mark_color: Tuple[int, int, int] = (221, 221, 221),
                 crop_mark_width: int = 1):
        self.background_color = tuple(background_color)
        self.draw_crop_marks = draw_crop_marks
        self.crop_mark_color = tuple(crop_mark_color)
        self.crop_mark_width = crop_mark_width

    @classmethod
    def from_config(cls, config: AppConfig) -> "CompositeSettings":
        return cls(
            background_color=config.BACKGROUND_COLOR,
            draw_crop_marks=config.DRAW_CROP_MARKS,
            crop_mark_color=config.CROP_MARK_COLOR,
            crop_mark_width=config.CROP_MARK_WIDTH_PX,
        )


def _fill_for_mode(color: Tuple[int, ...], mode: str) -> Tuple[int, ...]:
    if mode == 'RGBA':
        return tuple(color[:3]) + (255,)
    return tuple(color[:3])


class SheetCompositor:
    """Main compositor class."""

    def __init__(self, settings: CompositeSettings = None, config: AppConfig = None):
        self.config = config or get_config()
        self.settings = settings or CompositeSettings.from_config(self.config)

    def create_canvas(self, paper: PhysicalSize, mode: str = 'RGB') -> Image.Image:
        """Create a background-filled canvas of the paper's print-pixel size."""
        canvas_size = size_to_px(paper)
        canvas = Image.new(mode, canvas_size, _fill_for_mode(self.settings.background_color, mode))
        logger.debug(f"Created canvas: {canvas_size} {mode} with background {self.settings.background_color}")
        return canvas

    def paste_tile(self, canvas: Image.Image, tile: Image.Image, position: Tuple[int, int]) -> bool:
        """
        Paste the tile at a pixel position, clipped to the canvas.

        Returns:
            True if any part of the tile landed on the canvas
        """
        x, y = position
        left = max(0, -x)
        top = max(0, -y)
        right = min(tile.width, canvas.width - x)
        bottom = min(tile.height, canvas.height - y)

        if right <= left or bottom <= top:
            logger.warning(f"Tile at {position} falls outside the canvas {canvas.size}")
            return False

        if (left, top, right, bottom) != (0, 0, tile.width, tile.height):
            logger.debug(f"Clipping tile at {position} to {(left, top, right, bottom)}")
            tile = tile.crop((left, top, right, bottom))

        canvas.paste(tile, (x + left, y + top))
        return True

    def draw_crop_mark(self, canvas: Image.Image, position: Tuple[int, int], tile_size: Tuple[int, int]):
        """Stroke a thin border around one tile."""
        x, y = position
        tile_w, tile_h = tile_size
        draw = ImageDraw.Draw(canvas)
        draw.rectangle(
            [x, y, x + tile_w - 1, y + tile_h - 1],
            outline=_fill_for_mode(self.settings.crop_mark_color, canvas.mode),
            width=self.settings.crop_mark_width
        )

    def compose(self, tile: Image.Image, plan: LayoutPlan) -> PrintSheet:
        """
        Place the rendered tile at every plan position on a fresh canvas.

        The same tile buffer is reused for every copy.
        """
        canvas = self.create_canvas(plan.paper, tile.mode)

        placed = 0
        for x_mm, y_mm in plan.positions:
            position = (mm_to_px_round(x_mm), mm_to_px_round(y_mm))
            if not self.paste_tile(canvas, tile, position):
                continue
            placed += 1
            if self.settings.draw_crop_marks:
                self.draw_crop_mark(canvas, position, tile.size)

        logger.debug(f"Composited {placed}/{len(plan.positions)} tiles on {canvas.size} sheet")
        return PrintSheet(image=canvas, plan=plan)


def create_sheet_compositor(settings: CompositeSettings = None, config: AppConfig = None) -> SheetCompositor:
    """Factory function to create a SheetCompositor instance."""
    return SheetCompositor(settings, config)
