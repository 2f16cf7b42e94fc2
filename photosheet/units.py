"""
Unit conversion between millimeters and print pixels.

Every size and position in the engine is planned in millimeters and only
turned into pixels here, at the single print resolution below.
"""

import math
from typing import Tuple

from photosheet.errors import InvalidDimensionError


PRINT_DPI = 300.0
MM_PER_INCH = 25.4

# Float noise tolerance when turning mm into whole pixels
PIXEL_EPSILON = 1e-6


def _require_finite(value: float, field: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidDimensionError(field, value, "must be a number")
    if not math.isfinite(value):
        raise InvalidDimensionError(field, value, "must be finite")
    return value


def _require_dpi(dpi: float) -> float:
    dpi = _require_finite(dpi, 'dpi')
    if dpi <= 0:
        raise InvalidDimensionError('dpi', dpi, "must be greater than zero")
    return dpi


def mm_to_px(mm: float, dpi: float = PRINT_DPI) -> float:
    """Convert millimeters to (fractional) pixels at the given DPI."""
    mm = _require_finite(mm, 'mm')
    return mm * _require_dpi(dpi) / MM_PER_INCH


def px_to_mm(px: float, dpi: float = PRINT_DPI) -> float:
    """Convert pixels to millimeters at the given DPI."""
    px = _require_finite(px, 'px')
    return px * MM_PER_INCH / _require_dpi(dpi)


def mm_to_px_ceil(mm: float, dpi: float = PRINT_DPI) -> int:
    """
    Whole-pixel buffer dimension for a length in millimeters.

    Rounds up so a buffer always holds the full physical length; values
    within PIXEL_EPSILON of a whole pixel are not bumped to the next one.
    """
    return int(math.ceil(mm_to_px(mm, dpi) - PIXEL_EPSILON))


def mm_to_px_round(mm: float, dpi: float = PRINT_DPI) -> int:
    """Nearest whole pixel for an offset in millimeters (half rounds up)."""
    return int(math.floor(mm_to_px(mm, dpi) + 0.5))


def size_to_px(size, dpi: float = PRINT_DPI) -> Tuple[int, int]:
    """Buffer size in pixels for a PhysicalSize."""
    return (mm_to_px_ceil(size.width_mm, dpi), mm_to_px_ceil(size.height_mm, dpi))
