"""
Grid layout optimizer for print sheets.

This module handles:
- Counting how many fixed-size photos fit a paper with a given gap
- Searching column counts for the largest photo that fits N copies
- Placing tiles row-major and centering the whole block on the paper

All arithmetic is in millimeters; pixel rounding happens later in units.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple
from loguru import logger

from photosheet.errors import InvalidDimensionError, LayoutInfeasibleError
from photosheet.models import (
    FitToPaper, FixedTile, LayoutPlan, PhysicalSize, SizingMode,
)


# Tolerance for floor() on ratios that should be whole numbers
GRID_EPSILON = 1e-9


@dataclass(frozen=True)
class FitCandidate:
    """One column count evaluated by the fit-to-paper search."""
    columns: int
    rows: int
    avail_w: float
    avail_h: float
    photo_w: float
    photo_h: float

    @property
    def feasible(self) -> bool:
        return self.photo_w > 0 and self.photo_h > 0


def validate_gap(gap_mm: float) -> float:
    """Gap must be a finite, non-negative number of millimeters."""
    if isinstance(gap_mm, bool):
        raise InvalidDimensionError('gap_mm', gap_mm, "must be a number")
    try:
        gap_mm = float(gap_mm)
    except (TypeError, ValueError):
        raise InvalidDimensionError('gap_mm', gap_mm, "must be a number")
    if not math.isfinite(gap_mm) or gap_mm < 0:
        raise InvalidDimensionError('gap_mm', gap_mm, "must be finite and not negative")
    return gap_mm


def grid_capacity(paper: PhysicalSize, tile: PhysicalSize, gap_mm: float) -> Tuple[int, int]:
    """
    Columns and rows of fixed-size tiles that fit the paper.

    Each count is floor((paper - gap) / (tile + gap)) clamped to at least 1.
    Raises LayoutInfeasibleError when the tile is bigger than the paper.
    """
    gap_mm = validate_gap(gap_mm)
    if tile.width_mm > paper.width_mm or tile.height_mm > paper.height_mm:
        raise LayoutInfeasibleError(paper, tile, gap_mm, "photo is larger than the paper")

    columns = math.floor((paper.width_mm - gap_mm) / (tile.width_mm + gap_mm) + GRID_EPSILON)
    rows = math.floor((paper.height_mm - gap_mm) / (tile.height_mm + gap_mm) + GRID_EPSILON)
    return max(1, columns), max(1, rows)


def centered_positions(paper: PhysicalSize,
                       tile: PhysicalSize,
                       columns: int,
                       rows: int,
                       gap_mm: float,
                       count: int) -> List[Tuple[float, float]]:
    """
    Top-left tile positions, row-major, with the columns x rows block centered.

    The block offset is computed from the full grid even when fewer than
    columns * rows tiles are placed.
    """
    block_w = columns * tile.width_mm + (columns - 1) * gap_mm
    block_h = rows * tile.height_mm + (rows - 1) * gap_mm
    # Block never exceeds the paper; clamp float noise that would go below zero
    offset_x = max(0.0, (paper.width_mm - block_w) / 2)
    offset_y = max(0.0, (paper.height_mm - block_h) / 2)

    positions = []
    for r in range(rows):
        for c in range(columns):
            if len(positions) >= count:
                return positions
            x = offset_x + c * (tile.width_mm + gap_mm)
            y = offset_y + r * (tile.height_mm + gap_mm)
            positions.append((x, y))
    return positions


def plan_fixed_tile(paper: PhysicalSize, tile: PhysicalSize, gap_mm: float,
                    copies: Optional[int] = None) -> LayoutPlan:
    """Layout for a known photo size; copies=None fills every cell."""
    gap_mm = validate_gap(gap_mm)
    columns, rows = grid_capacity(paper, tile, gap_mm)
    capacity = columns * rows
    count = capacity if copies is None else min(copies, capacity)

    if copies is not None and copies > capacity:
        logger.warning(f"Requested {copies} copies but only {capacity} fit on {paper}")

    positions = centered_positions(paper, tile, columns, rows, gap_mm, count)
    logger.debug(f"Fixed tile layout: {tile} on {paper}, {columns}x{rows} grid, {count} placed")

    return LayoutPlan(
        tile_size=tile,
        columns=columns,
        rows=rows,
        positions=tuple(positions),
        gap_mm=gap_mm,
        paper=paper,
    )


def evaluate_candidate(paper: PhysicalSize, columns: int, copies: int,
                       gap_mm: float, aspect: float) -> FitCandidate:
    """Largest photo of the given aspect for one column count."""
    rows = math.ceil(copies / columns)
    avail_w = (paper.width_mm - gap_mm * (columns + 1)) / columns
    avail_h = (paper.height_mm - gap_mm * (rows + 1)) / rows

    photo_w = avail_w
    photo_h = photo_w / aspect
    if photo_h > avail_h:
        photo_h = avail_h
        photo_w = photo_h * aspect

    return FitCandidate(columns, rows, avail_w, avail_h, photo_w, photo_h)


def fit_candidates(paper: PhysicalSize, copies: int, gap_mm: float,
                   aspect: float) -> List[FitCandidate]:
    """Every candidate the fit-to-paper search looks at, c = 1..copies."""
    gap_mm = validate_gap(gap_mm)
    return [
        evaluate_candidate(paper, columns, copies, gap_mm, aspect)
        for columns in range(1, copies + 1)
    ]


def plan_fit_to_paper(paper: PhysicalSize, copies: int, gap_mm: float,
                      aspect: float) -> LayoutPlan:
    """
    Layout that makes `copies` photos as large as the paper allows.

    Linear scan over column counts keeping the strictly widest photo, so on
    a tie the smaller column count wins.
    """
    gap_mm = validate_gap(gap_mm)
    best = None
    for candidate in fit_candidates(paper, copies, gap_mm, aspect):
        if not candidate.feasible:
            continue
        if best is None or candidate.photo_w > best.photo_w:
            best = candidate

    if best is None:
        raise LayoutInfeasibleError(paper, None, gap_mm, f"no grid fits {copies} copies")

    tile = PhysicalSize(best.photo_w, best.photo_h)
    positions = centered_positions(paper, tile, best.columns, best.rows, gap_mm, copies)
    logger.debug(f"Fit-to-paper layout: {copies} copies on {paper}, "
                 f"{best.columns}x{best.rows} grid, tile {tile}")

    return LayoutPlan(
        tile_size=tile,
        columns=best.columns,
        rows=best.rows,
        positions=tuple(positions),
        gap_mm=gap_mm,
        paper=paper,
    )


def plan_layout(mode: SizingMode, paper: PhysicalSize, gap_mm: float) -> LayoutPlan:
    """Run the optimizer branch selected by the sizing mode."""
    if isinstance(mode, FixedTile):
        return plan_fixed_tile(paper, mode.tile, gap_mm, mode.copies)
    if isinstance(mode, FitToPaper):
        return plan_fit_to_paper(paper, mode.copies, gap_mm, mode.aspect)
    raise InvalidDimensionError('mode', mode, "must be FixedTile or FitToPaper")
