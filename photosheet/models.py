"""
Data model for the print sheet composition engine.

All types are immutable; a render request builds them from caller input
and throws them away once the sheet is exported.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union

from PIL import Image

from photosheet.errors import EncodingError, IncompleteSourceError, InvalidDimensionError


# Passport standard photo aspect (35 x 45 mm)
PASSPORT_ASPECT = 35.0 / 45.0

MIN_ZOOM = 1.0
MAX_ZOOM = 3.0


def _finite(value, field_name: str) -> float:
    if isinstance(value, bool):
        raise InvalidDimensionError(field_name, value, "must be a number")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidDimensionError(field_name, value, "must be a number")
    if not math.isfinite(value):
        raise InvalidDimensionError(field_name, value, "must be finite")
    return value


def _positive(value, field_name: str) -> float:
    value = _finite(value, field_name)
    if value <= 0:
        raise InvalidDimensionError(field_name, value, "must be greater than zero")
    return value


def _copy_count(value, field_name: str = 'copies') -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidDimensionError(field_name, value, "must be a whole number")
    if value < 1:
        raise InvalidDimensionError(field_name, value, "must be at least 1")
    return value


@dataclass(frozen=True)
class SourceImage:
    """A fully decoded source photograph."""
    image: Image.Image

    def __post_init__(self):
        # Force pixel data in now; lazily opened files would otherwise decode mid-render
        try:
            self.image.load()
        except (OSError, ValueError) as e:
            raise IncompleteSourceError(str(e), self.image.mode, self.image.size)

    @property
    def width_px(self) -> int:
        return self.image.width

    @property
    def height_px(self) -> int:
        return self.image.height

    @property
    def size(self) -> Tuple[int, int]:
        return (self.image.width, self.image.height)

    @property
    def has_alpha(self) -> bool:
        return 'A' in self.image.getbands() or 'transparency' in self.image.info


@dataclass(frozen=True)
class PhysicalSize:
    """Width and height in millimeters; used for photos and paper."""
    width_mm: float
    height_mm: float

    def __post_init__(self):
        object.__setattr__(self, 'width_mm', _positive(self.width_mm, 'width_mm'))
        object.__setattr__(self, 'height_mm', _positive(self.height_mm, 'height_mm'))

    @property
    def aspect(self) -> float:
        """Width / height."""
        return self.width_mm / self.height_mm

    def __str__(self) -> str:
        return f"{self.width_mm:g}x{self.height_mm:g}mm"


@dataclass(frozen=True)
class CropViewport:
    """
    Interactive crop state at the moment of render.

    Pan is measured in preview-box pixels from the box center; zoom is a
    multiplier applied on top of the cover fit.
    """
    zoom: float = 1.0
    pan_x_px: float = 0.0
    pan_y_px: float = 0.0
    preview_box_px: Tuple[float, float] = (320.0, 320.0 / PASSPORT_ASPECT)

    def __post_init__(self):
        zoom = _finite(self.zoom, 'zoom')
        if zoom < MIN_ZOOM or zoom > MAX_ZOOM:
            raise InvalidDimensionError('zoom', zoom, f"must be between {MIN_ZOOM:g} and {MAX_ZOOM:g}")
        object.__setattr__(self, 'zoom', zoom)
        object.__setattr__(self, 'pan_x_px', _finite(self.pan_x_px, 'pan_x_px'))
        object.__setattr__(self, 'pan_y_px', _finite(self.pan_y_px, 'pan_y_px'))

        try:
            box_w, box_h = self.preview_box_px
        except (TypeError, ValueError):
            raise InvalidDimensionError('preview_box_px', self.preview_box_px, "must be a (width, height) pair")
        object.__setattr__(self, 'preview_box_px', (
            _positive(box_w, 'preview_box_px.width'),
            _positive(box_h, 'preview_box_px.height'),
        ))

    @classmethod
    def for_aspect(cls, aspect: float, box_width_px: float = 320.0, **kwargs) -> "CropViewport":
        """Viewport whose preview box has the given width/height aspect."""
        aspect = _positive(aspect, 'aspect')
        return cls(preview_box_px=(box_width_px, box_width_px / aspect), **kwargs)


@dataclass(frozen=True)
class FixedTile:
    """Sizing mode with a known photo size; copies=None fills every cell."""
    tile: PhysicalSize
    copies: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.tile, PhysicalSize):
            raise InvalidDimensionError('tile', self.tile, "must be a PhysicalSize")
        if self.copies is not None:
            _copy_count(self.copies)


@dataclass(frozen=True)
class FitToPaper:
    """Sizing mode that grows the photo as large as the copy count allows."""
    copies: int
    aspect: float = PASSPORT_ASPECT

    def __post_init__(self):
        _copy_count(self.copies)
        object.__setattr__(self, 'aspect', _positive(self.aspect, 'aspect'))


SizingMode = Union[FixedTile, FitToPaper]


@dataclass(frozen=True)
class SampleRect:
    """Region of the source image to sample, in source pixels."""
    x: float
    y: float
    w: float
    h: float

    @property
    def box(self) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) as Pillow expects."""
        return (self.x, self.y, self.x + self.w, self.y + self.h)

    @property
    def is_empty(self) -> bool:
        return self.w <= 0 or self.h <= 0

    @property
    def aspect(self) -> float:
        return self.w / self.h

    def __str__(self) -> str:
        return f"SampleRect(x={self.x:.2f}, y={self.y:.2f}, w={self.w:.2f}, h={self.h:.2f})"


@dataclass(frozen=True)
class LayoutPlan:
    """Computed grid: tile size, grid shape and top-left positions in mm."""
    tile_size: PhysicalSize
    columns: int
    rows: int
    positions: Tuple[Tuple[float, float], ...]
    gap_mm: float
    paper: PhysicalSize

    @property
    def capacity(self) -> int:
        return self.columns * self.rows

    @property
    def count(self) -> int:
        return len(self.positions)

    @property
    def block_size_mm(self) -> Tuple[float, float]:
        """Size of the full columns x rows block including inner gaps."""
        block_w = self.columns * self.tile_size.width_mm + (self.columns - 1) * self.gap_mm
        block_h = self.rows * self.tile_size.height_mm + (self.rows - 1) * self.gap_mm
        return (block_w, block_h)


@dataclass(frozen=True)
class PrintSheet:
    """Final paper-sized pixel buffer and the plan it was composed from."""
    image: Image.Image
    plan: LayoutPlan = field(compare=False)

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


class ExportFormat(Enum):
    """Output encodings supported by the exporter."""
    JPEG = 'JPEG'
    PNG = 'PNG'
    TIFF = 'TIFF'
    WEBP = 'WEBP'

    @property
    def extension(self) -> str:
        return {
            ExportFormat.JPEG: 'jpg',
            ExportFormat.PNG: 'png',
            ExportFormat.TIFF: 'tif',
            ExportFormat.WEBP: 'webp',
        }[self]

    @property
    def mime_type(self) -> str:
        return {
            ExportFormat.JPEG: 'image/jpeg',
            ExportFormat.PNG: 'image/png',
            ExportFormat.TIFF: 'image/tiff',
            ExportFormat.WEBP: 'image/webp',
        }[self]

    @property
    def supports_alpha(self) -> bool:
        return self is not ExportFormat.JPEG

    @classmethod
    def parse(cls, value: Union[str, "ExportFormat"]) -> "ExportFormat":
        """Accept an ExportFormat, a format name or a file extension."""
        if isinstance(value, cls):
            return value
        name = str(value).strip().lstrip('.').upper()
        aliases = {'JPG': 'JPEG', 'TIF': 'TIFF'}
        name = aliases.get(name, name)
        try:
            return cls(name)
        except ValueError:
            raise EncodingError(value, "unsupported export format")
