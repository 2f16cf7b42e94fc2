"""
Crop transform resolver.

Maps the interactive viewport (zoom, pan, preview box) onto the rectangle
of the source image that the preview box shows, using cover semantics:
the image always fills the box and overflow is cropped, never letterboxed.
"""

from typing import Optional, Tuple
from loguru import logger

from photosheet.errors import EmptySampleRectError
from photosheet.models import CropViewport, SampleRect


def crop_frame(preview_box: Tuple[float, float], aspect: Optional[float] = None) -> Tuple[float, float]:
    """
    Size of the crop frame inside the preview box.

    With no aspect the frame is the whole box; otherwise it is the largest
    rectangle of that width/height aspect centered in the box. A box whose
    own aspect differs from the tile's is narrowed to the tile aspect, so the
    sample rect then matches the tile rather than the box.
    """
    box_w, box_h = preview_box
    if aspect is None:
        return box_w, box_h
    if box_w / box_h > aspect:
        return box_h * aspect, box_h
    return box_w, box_w / aspect


def _clamp_span(start: float, length: float, limit: float) -> Tuple[float, float]:
    # Shrinking only happens when float noise makes the span a hair too long
    length = min(length, limit)
    start = min(max(start, 0.0), limit - length)
    return start, length


def resolve_sample_rect(image_size: Tuple[int, int],
                        viewport: CropViewport,
                        aspect: Optional[float] = None) -> SampleRect:
    """
    Resolve the viewport into a sampling rectangle in source pixels.

    Args:
        image_size: Natural (width, height) of the source image
        viewport: Zoom, pan and preview box at the moment of render
        aspect: Target tile width/height; the crop frame takes this aspect

    Returns:
        SampleRect fully inside [0, width] x [0, height]
    """
    img_w, img_h = image_size
    if img_w <= 0 or img_h <= 0:
        raise EmptySampleRectError(SampleRect(0.0, 0.0, float(img_w), float(img_h)), image_size)

    frame_w, frame_h = crop_frame(viewport.preview_box_px, aspect)

    scale_cover = max(frame_w / img_w, frame_h / img_h)
    effective_scale = scale_cover * viewport.zoom

    w = frame_w / effective_scale
    h = frame_h / effective_scale

    # Pan is in preview pixels; divide out the scale to move in source pixels
    center_x = img_w / 2 - viewport.pan_x_px / effective_scale
    center_y = img_h / 2 - viewport.pan_y_px / effective_scale

    x, w = _clamp_span(center_x - w / 2, w, float(img_w))
    y, h = _clamp_span(center_y - h / 2, h, float(img_h))

    rect = SampleRect(x, y, w, h)
    if rect.is_empty:
        raise EmptySampleRectError(rect, image_size)

    logger.debug(f"Resolved crop {rect} from zoom={viewport.zoom:g} "
                 f"pan=({viewport.pan_x_px:g}, {viewport.pan_y_px:g}) on {img_w}x{img_h}")
    return rect
