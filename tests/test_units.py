"""
Unit tests for millimeter / pixel conversion.
"""

import math
import pytest

from photosheet.errors import InvalidDimensionError
from photosheet.models import PhysicalSize
from photosheet.units import (
    PRINT_DPI, mm_to_px, px_to_mm, mm_to_px_ceil, mm_to_px_round, size_to_px,
)


class TestConversion:
    """Test the basic mm <-> px formulas."""

    def test_one_inch_is_dpi_pixels(self):
        assert mm_to_px(25.4) == pytest.approx(300.0)
        assert px_to_mm(300) == pytest.approx(25.4)

    def test_print_dpi_is_300(self):
        assert PRINT_DPI == 300

    def test_custom_dpi(self):
        assert mm_to_px(25.4, 72) == pytest.approx(72.0)
        assert px_to_mm(72, 72) == pytest.approx(25.4)

    @pytest.mark.parametrize("value", [0.001, 1.0, 35.0, 101.6, 297.0, 12345.678])
    @pytest.mark.parametrize("dpi", [72.0, 300.0, 600.0, 1200.0])
    def test_round_trip(self, value, dpi):
        """mm_to_px(px_to_mm(x)) returns x within float tolerance."""
        assert mm_to_px(px_to_mm(value, dpi), dpi) == pytest.approx(value, rel=1e-12)
        assert px_to_mm(mm_to_px(value, dpi), dpi) == pytest.approx(value, rel=1e-12)


class TestWholePixels:
    """Test rounding into buffer sizes and offsets."""

    def test_ceil_rounds_up_fractional_pixels(self):
        # 35mm = 413.39px, 45mm = 531.50px
        assert mm_to_px_ceil(35) == 414
        assert mm_to_px_ceil(45) == 532

    def test_ceil_keeps_exact_pixels(self):
        assert mm_to_px_ceil(25.4) == 300
        assert mm_to_px_ceil(101.6) == 1200
        assert mm_to_px_ceil(152.4) == 1800

    def test_round_offsets(self):
        assert mm_to_px_round(1.0) == 12  # 11.81px
        assert mm_to_px_round(0.0) == 0
        assert mm_to_px_round(2.54) == 30

    def test_size_to_px(self):
        assert size_to_px(PhysicalSize(101.6, 152.4)) == (1200, 1800)
        assert size_to_px(PhysicalSize(210, 297)) == (2481, 3508)


class TestInvalidInput:
    """Test rejection of non-finite values."""

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_mm(self, bad):
        with pytest.raises(InvalidDimensionError):
            mm_to_px(bad)

    @pytest.mark.parametrize("bad", [math.nan, math.inf])
    def test_non_finite_px(self, bad):
        with pytest.raises(InvalidDimensionError):
            px_to_mm(bad)

    @pytest.mark.parametrize("dpi", [0, -300, math.nan])
    def test_bad_dpi(self, dpi):
        with pytest.raises(InvalidDimensionError):
            mm_to_px(10, dpi)

    def test_non_numeric(self):
        with pytest.raises(InvalidDimensionError) as exc_info:
            mm_to_px("ten")
        assert exc_info.value.details['field'] == 'mm'
