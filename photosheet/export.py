"""
Exporter for finished print sheets.

Serializes the sheet buffer into the requested encoding with print DPI
metadata. Output is a pure function of the buffer and the format settings,
so identical sheets always encode to identical bytes.
"""

import io
from typing import Any, Dict, Tuple, Union
from PIL import Image
from loguru import logger

from photosheet.config import AppConfig, get_config
from photosheet.errors import EncodingError
from photosheet.models import ExportFormat, PrintSheet
from photosheet.units import PRINT_DPI


# Pixel modes each encoder takes as-is
SUPPORTED_MODES = {
    ExportFormat.JPEG: ('RGB', 'L'),
    ExportFormat.PNG: ('RGB', 'RGBA', 'L', 'LA'),
    ExportFormat.TIFF: ('RGB', 'RGBA', 'L'),
    ExportFormat.WEBP: ('RGB', 'RGBA'),
}


def flatten_alpha(image: Image.Image, background: Tuple[int, int, int] = (255, 255, 255)) -> Image.Image:
    """Composite an image with alpha onto an opaque background, returning RGB."""
    if image.mode not in ('RGBA', 'LA', 'PA'):
        return image
    rgba = image.convert('RGBA')
    base = Image.new('RGBA', rgba.size, tuple(background[:3]) + (255,))
    return Image.alpha_composite(base, rgba).convert('RGB')


def _save_options(output_format: ExportFormat, config: AppConfig) -> Dict[str, Any]:
    dpi = (int(PRINT_DPI), int(PRINT_DPI))
    if output_format is ExportFormat.JPEG:
        return {'quality': config.JPEG_QUALITY, 'dpi': dpi}
    if output_format is ExportFormat.PNG:
        return {'compress_level': config.PNG_COMPRESS_LEVEL, 'dpi': dpi}
    if output_format is ExportFormat.TIFF:
        return {'compression': 'tiff_lzw', 'dpi': dpi}
    return {'quality': config.WEBP_QUALITY}


def prepare_for_format(image: Image.Image, output_format: ExportFormat) -> Image.Image:
    """
    Bring the sheet into a pixel mode the encoder accepts.

    Alpha is flattened against white for formats without alpha; any other
    unsupported mode is an EncodingError rather than a silent conversion.
    """
    if not output_format.supports_alpha and image.mode in ('RGBA', 'LA', 'PA'):
        logger.debug(f"Flattening {image.mode} sheet against white for {output_format.value}")
        image = flatten_alpha(image)

    if image.mode not in SUPPORTED_MODES[output_format]:
        raise EncodingError(output_format.value, f"pixel mode {image.mode} is not supported")
    return image


def export_image(image: Image.Image, output_format: Union[str, ExportFormat], config: AppConfig = None) -> bytes:
    """Encode a Pillow image to bytes in the requested format."""
    config = config or get_config()
    output_format = ExportFormat.parse(output_format)
    image = prepare_for_format(image, output_format)

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=output_format.value, **_save_options(output_format, config))
    except (OSError, ValueError, KeyError) as e:
        raise EncodingError(output_format.value, str(e))

    data = buffer.getvalue()
    logger.debug(f"Encoded {image.size} {image.mode} sheet as {output_format.value}: {len(data)} bytes")
    return data


def export_sheet(sheet: PrintSheet, output_format: Union[str, ExportFormat], config: AppConfig = None) -> bytes:
    """Serialize a finished PrintSheet."""
    return export_image(sheet.image, output_format, config)


def suggest_filename(standard: str, paper: str, output_format: Union[str, ExportFormat] = ExportFormat.JPEG) -> str:
    """Download filename for a sheet, e.g. Passport-Photos-IN-4x6.jpg"""
    output_format = ExportFormat.parse(output_format)
    return f"Passport-Photos-{standard}-{paper}.{output_format.extension}"
