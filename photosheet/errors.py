"""
Error handling for the print sheet composition engine.

Provides specific exception types for each failure mode of a render
request, with enough context for the caller to build user feedback.
"""

from typing import Dict, List, Any


class CompositionError(Exception):
    """Base exception for all composition errors."""

    def __init__(self, message: str, details: Dict[str, Any] = None, suggestions: List[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'details': self.details,
            'suggestions': self.suggestions
        }


class InvalidDimensionError(CompositionError):
    """Raised when a size, offset or count is non-finite or out of range."""

    def __init__(self, field: str, value: Any, reason: str = "must be a finite positive number"):
        super().__init__(
            f"Invalid dimension for {field}: {value!r} ({reason})",
            details={
                'field': field,
                'value': value,
                'reason': reason
            },
            suggestions=[
                f"Check the value supplied for {field}",
                "Sizes are given in millimeters and must be greater than zero"
            ]
        )


class LayoutInfeasibleError(CompositionError):
    """Raised when no grid arrangement fits at least one tile on the paper."""

    def __init__(self, paper: Any, tile: Any = None, gap_mm: float = None, reason: str = None):
        message = f"No layout fits a tile on paper {paper}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            details={
                'paper': str(paper),
                'tile': str(tile) if tile is not None else None,
                'gap_mm': gap_mm
            },
            suggestions=[
                "Choose a larger paper size",
                "Choose a smaller photo size",
                "Reduce the gap between photos or the number of copies"
            ]
        )


class EmptySampleRectError(CompositionError):
    """Raised when the crop resolves to a zero-area region of the source."""

    def __init__(self, rect: Any, image_size: Any = None):
        super().__init__(
            f"Crop region is empty: {rect}",
            details={
                'rect': str(rect),
                'image_size': image_size
            },
            suggestions=[
                "Reset zoom and pan, then adjust the crop again",
                "Check that the uploaded image is not empty"
            ]
        )


class IncompleteSourceError(CompositionError):
    """Raised when the source photo cannot be fully decoded before rendering."""

    def __init__(self, reason: str, mode: str = None, image_size: Any = None):
        super().__init__(
            f"Source image is not fully decoded: {reason}",
            details={
                'reason': reason,
                'mode': mode,
                'image_size': image_size
            },
            suggestions=[
                "Wait for the upload to finish decoding before rendering",
                "Upload the photo again; the file may be truncated or corrupt"
            ]
        )


class EncodingError(CompositionError):
    """Raised when the sheet cannot be serialized to the requested format."""

    def __init__(self, output_format: Any, reason: str):
        super().__init__(
            f"Failed to encode sheet as {output_format}: {reason}",
            details={
                'format': str(output_format),
                'reason': reason
            },
            suggestions=[
                "Try exporting as PNG or JPEG",
                "Check that the photo uses a standard RGB color mode"
            ]
        )


def create_error_recovery_suggestions(error: Exception, context: Dict[str, Any] = None) -> List[str]:
    """Generate contextual recovery suggestions for any error."""
    suggestions = []

    if isinstance(error, CompositionError):
        suggestions.extend(error.suggestions)

    if context:
        if context.get('zoom', 1.0) > 2.5:
            suggestions.append("Lower the zoom level so the crop keeps more of the photo")

        if context.get('copies', 0) > 50:
            suggestions.append("Request fewer copies per sheet")

        if context.get('gap_mm', 0) > 10:
            suggestions.append("Use a smaller gap between photos")

    # Generic fallback
    if not suggestions:
        suggestions = [
            "Try again with the default photo and paper sizes",
            "Upload a different photo",
            "Contact support if the problem persists"
        ]

    return suggestions
