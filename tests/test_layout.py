"""
Unit tests for the grid layout optimizer.

Covers the fixed-tile grid, the fit-to-paper search with its tie-break,
block centering and the bounds invariant on every position.
"""

import math
import pytest

from photosheet.errors import InvalidDimensionError, LayoutInfeasibleError
from photosheet.layout import (
    centered_positions, evaluate_candidate, fit_candidates, grid_capacity,
    plan_fit_to_paper, plan_fixed_tile, plan_layout,
)
from photosheet.models import FitToPaper, FixedTile, PhysicalSize, PASSPORT_ASPECT


TOLERANCE = 1e-9


def assert_within_paper(plan):
    """Every tile must lie fully on the paper."""
    for x, y in plan.positions:
        assert x >= -TOLERANCE
        assert y >= -TOLERANCE
        assert x + plan.tile_size.width_mm <= plan.paper.width_mm + TOLERANCE
        assert y + plan.tile_size.height_mm <= plan.paper.height_mm + TOLERANCE


class TestFixedTile:
    """Test the fixed photo size layout."""

    def test_a4_passport_eight_copies(self, paper_a4, passport_tile):
        """A4, 35x45mm, 3mm gap, 8 copies -> 5 columns x 6 rows, 8 placed."""
        plan = plan_fixed_tile(paper_a4, passport_tile, 3.0, copies=8)

        assert plan.columns == 5
        assert plan.rows == 6
        assert plan.count == 8
        assert plan.tile_size == passport_tile
        assert_within_paper(plan)

    def test_a4_block_is_centered(self, paper_a4, passport_tile):
        plan = plan_fixed_tile(paper_a4, passport_tile, 3.0, copies=8)

        # block 5*35 + 4*3 = 187 wide, 6*45 + 5*3 = 285 tall
        assert plan.block_size_mm == pytest.approx((187.0, 285.0))
        assert plan.positions[0] == pytest.approx((11.5, 6.0))

    def test_row_major_order(self, paper_a4, passport_tile):
        plan = plan_fixed_tile(paper_a4, passport_tile, 3.0, copies=8)

        assert plan.positions[4] == pytest.approx((11.5 + 4 * 38.0, 6.0))
        assert plan.positions[5] == pytest.approx((11.5, 6.0 + 48.0))
        assert plan.positions[7] == pytest.approx((11.5 + 2 * 38.0, 54.0))

    def test_no_copy_count_fills_grid(self, paper_a4, passport_tile):
        plan = plan_fixed_tile(paper_a4, passport_tile, 3.0)

        assert plan.count == plan.capacity == 30
        assert_within_paper(plan)

    def test_copies_capped_at_capacity(self, paper_4x6, passport_tile):
        plan = plan_fixed_tile(paper_4x6, passport_tile, 2.0, copies=50)

        assert (plan.columns, plan.rows) == (2, 3)
        assert plan.count == 6

    def test_clamps_to_one_cell(self, passport_tile):
        """Paper just bigger than the tile still fits one copy, centered."""
        paper = PhysicalSize(36, 46)
        plan = plan_fixed_tile(paper, passport_tile, 2.0)

        assert (plan.columns, plan.rows) == (1, 1)
        assert plan.count == 1
        assert plan.positions[0] == pytest.approx((0.5, 0.5))

    def test_tile_larger_than_paper(self, passport_tile):
        with pytest.raises(LayoutInfeasibleError) as exc_info:
            plan_fixed_tile(PhysicalSize(30, 100), passport_tile, 2.0)

        assert "larger than the paper" in str(exc_info.value)
        assert exc_info.value.details['gap_mm'] == 2.0

    def test_exact_fit_without_float_loss(self):
        """(paper - gap) / (tile + gap) that is a whole number is not floored down."""
        columns, rows = grid_capacity(PhysicalSize(76, 96), PhysicalSize(35, 45), 2.0)
        assert (columns, rows) == (2, 2)

    def test_zero_gap(self, passport_tile):
        plan = plan_fixed_tile(PhysicalSize(70, 90), passport_tile, 0.0)

        assert (plan.columns, plan.rows) == (2, 2)
        assert plan.positions == ((0.0, 0.0), (35.0, 0.0), (0.0, 45.0), (35.0, 45.0))

    @pytest.mark.parametrize("paper", [(101.6, 152.4), (210, 297), (89, 127), (152.4, 101.6)])
    @pytest.mark.parametrize("tile", [(35, 45), (51, 51), (25, 35)])
    @pytest.mark.parametrize("gap", [0.0, 1.5, 3.0])
    @pytest.mark.parametrize("copies", [1, 4, 9, None])
    def test_positions_within_paper(self, paper, tile, gap, copies):
        plan = plan_fixed_tile(PhysicalSize(*paper), PhysicalSize(*tile), gap, copies)

        expected = plan.capacity if copies is None else min(copies, plan.capacity)
        assert plan.count == expected
        assert plan.capacity >= plan.count
        assert_within_paper(plan)


class TestFitToPaper:
    """Test the fit-to-paper column search."""

    def test_4x6_four_copies(self, paper_4x6):
        candidates = fit_candidates(paper_4x6, 4, 2.0, PASSPORT_ASPECT)
        plan = plan_fit_to_paper(paper_4x6, 4, 2.0, PASSPORT_ASPECT)

        assert [c.columns for c in candidates] == [1, 2, 3, 4]
        assert (plan.columns, plan.rows) == (2, 2)
        assert plan.tile_size.width_mm == pytest.approx(47.8)
        assert plan.tile_size.height_mm == pytest.approx(47.8 * 45 / 35)
        assert plan.count == 4
        assert_within_paper(plan)

    def test_candidate_height_limited(self, paper_4x6):
        """One column of four is limited by the height envelope."""
        candidate = evaluate_candidate(paper_4x6, 1, 4, 2.0, PASSPORT_ASPECT)

        assert candidate.rows == 4
        assert candidate.avail_h == pytest.approx((152.4 - 10) / 4)
        assert candidate.photo_h == pytest.approx(candidate.avail_h)
        assert candidate.photo_w == pytest.approx(candidate.avail_h * PASSPORT_ASPECT)

    def test_tie_prefers_fewer_columns(self):
        """Two and three columns give the same photo width; two wins."""
        paper = PhysicalSize(120, 100)
        candidates = fit_candidates(paper, 4, 0.0, PASSPORT_ASPECT)
        assert candidates[1].photo_w == candidates[2].photo_w

        plan = plan_fit_to_paper(paper, 4, 0.0, PASSPORT_ASPECT)
        assert plan.columns == 2
        assert plan.rows == 2

    @pytest.mark.parametrize("paper", [(101.6, 152.4), (210, 297), (297, 210), (120, 100)])
    @pytest.mark.parametrize("copies", [1, 2, 3, 5, 8, 12])
    @pytest.mark.parametrize("gap", [0.0, 2.0, 5.0])
    def test_chosen_width_is_maximal(self, paper, copies, gap):
        paper = PhysicalSize(*paper)
        plan = plan_fit_to_paper(paper, copies, gap, PASSPORT_ASPECT)

        for candidate in fit_candidates(paper, copies, gap, PASSPORT_ASPECT):
            assert plan.tile_size.width_mm >= candidate.photo_w
        assert plan.count == copies
        assert plan.tile_size.aspect == pytest.approx(PASSPORT_ASPECT)
        assert_within_paper(plan)

    def test_custom_aspect(self, paper_4x6):
        plan = plan_fit_to_paper(paper_4x6, 2, 2.0, 1.0)
        assert plan.tile_size.width_mm == pytest.approx(plan.tile_size.height_mm)

    def test_infeasible_when_gaps_eat_the_paper(self):
        with pytest.raises(LayoutInfeasibleError):
            plan_fit_to_paper(PhysicalSize(10, 10), 1, 6.0, PASSPORT_ASPECT)

    def test_skips_infeasible_candidates(self):
        """Large column counts have negative envelopes but smaller ones still win."""
        paper = PhysicalSize(30, 300)
        candidates = fit_candidates(paper, 10, 3.0, PASSPORT_ASPECT)
        assert not candidates[-1].feasible

        plan = plan_fit_to_paper(paper, 10, 3.0, PASSPORT_ASPECT)
        assert plan.tile_size.width_mm > 0
        assert_within_paper(plan)


class TestCentering:
    """Test block centering helper."""

    def test_partial_last_row_uses_full_block(self):
        paper = PhysicalSize(100, 100)
        tile = PhysicalSize(20, 20)
        positions = centered_positions(paper, tile, 3, 3, 5.0, 4)

        # block 3*20 + 2*5 = 70 -> offset 15 on both axes
        assert positions == [(15.0, 15.0), (40.0, 15.0), (65.0, 15.0), (15.0, 40.0)]

    def test_count_zero(self):
        assert centered_positions(PhysicalSize(10, 10), PhysicalSize(5, 5), 1, 1, 0.0, 0) == []

    def test_block_filling_paper_starts_at_zero(self):
        """A gapless block as wide as the paper never gets a negative offset."""
        paper = PhysicalSize(101.6, 152.4)
        tile = PhysicalSize(101.6 / 3, 152.4 / 7)
        positions = centered_positions(paper, tile, 3, 7, 0.0, 21)

        assert positions[0] == pytest.approx((0.0, 0.0))
        assert all(x >= 0.0 and y >= 0.0 for x, y in positions)

    @pytest.mark.parametrize("paper", [(101.6, 152.4), (210, 297), (89, 127), (120, 100)])
    @pytest.mark.parametrize("copies", range(1, 16))
    def test_gapless_fit_positions_not_negative(self, paper, copies):
        plan = plan_fit_to_paper(PhysicalSize(*paper), copies, 0.0, PASSPORT_ASPECT)
        assert all(x >= 0.0 and y >= 0.0 for x, y in plan.positions)

    @pytest.mark.parametrize("tile", [(101.6 / 3, 152.4 / 4), (35, 45), (70, 99)])
    def test_gapless_fixed_positions_not_negative(self, tile):
        plan = plan_fixed_tile(PhysicalSize(210, 297), PhysicalSize(*tile), 0.0)
        assert all(x >= 0.0 and y >= 0.0 for x, y in plan.positions)


class TestPlanLayout:
    """Test sizing mode dispatch and validation."""

    def test_dispatch_fixed(self, paper_a4, passport_tile):
        plan = plan_layout(FixedTile(passport_tile, copies=8), paper_a4, 3.0)
        assert (plan.columns, plan.rows, plan.count) == (5, 6, 8)

    def test_dispatch_fit(self, paper_4x6):
        plan = plan_layout(FitToPaper(4), paper_4x6, 2.0)
        assert (plan.columns, plan.rows) == (2, 2)
        assert plan.gap_mm == 2.0
        assert plan.paper == paper_4x6

    def test_unknown_mode(self, paper_4x6):
        with pytest.raises(InvalidDimensionError):
            plan_layout("auto", paper_4x6, 2.0)

    @pytest.mark.parametrize("gap", [-1.0, math.nan, math.inf, "wide"])
    def test_bad_gap(self, paper_4x6, gap):
        with pytest.raises(InvalidDimensionError):
            plan_layout(FitToPaper(4), paper_4x6, gap)

    @pytest.mark.parametrize("copies", [0, -3, 2.5, True])
    def test_bad_copies(self, copies):
        with pytest.raises(InvalidDimensionError):
            FitToPaper(copies)

    def test_bad_fixed_copies(self, passport_tile):
        with pytest.raises(InvalidDimensionError):
            FixedTile(passport_tile, copies=0)
