"""
Illustrative scan-code pattern for card previews.

This is NOT a QR encoder. It draws the familiar finder blocks and timing
lines around pseudo-random cells so a preview looks like a real pass
before the wallet service issues one. It encodes no data and has no error
correction. The pattern depends only on the grid, so repeated renders of
the same size are identical.
"""

import base64
import io
import math
from dataclasses import dataclass
from typing import List

from PIL import Image, ImageDraw

DEFAULT_MODULES = 21
FINDER_SIZE = 7
# Timing lines run along this row and column
TIMING_INDEX = 6


@dataclass(frozen=True)
class PlaceholderPattern:
    """Boolean grid: True marks a dark module."""
    size: int
    modules: int
    cells: List[List[bool]]

    @property
    def module_size(self) -> float:
        return self.size / self.modules

    def dark_cells(self) -> List[tuple[int, int]]:
        return [
            (row, col)
            for row, line in enumerate(self.cells)
            for col, dark in enumerate(line)
            if dark
        ]


def seeded_random(seed: int) -> float:
    """Deterministic value in [0, 1) from a sinusoidal hash."""
    x = math.sin(seed * 9999) * 10000
    return x - math.floor(x)


def _finder_origin(row: int, col: int, modules: int) -> tuple[int, int] | None:
    far = modules - FINDER_SIZE
    if row < FINDER_SIZE and col < FINDER_SIZE:
        return 0, 0
    if row < FINDER_SIZE and col >= far:
        return 0, far
    if row >= far and col < FINDER_SIZE:
        return far, 0
    return None


def _finder_cell(row: int, col: int, origin: tuple[int, int]) -> bool:
    # Dark border, light ring, dark 3x3 core
    rel_r = row - origin[0]
    rel_c = col - origin[1]
    if 1 <= rel_r <= 5 and 1 <= rel_c <= 5:
        return 2 <= rel_r <= 4 and 2 <= rel_c <= 4
    return True


def _is_separator(row: int, col: int, modules: int) -> bool:
    edge = modules - FINDER_SIZE - 1
    return (
        (row == FINDER_SIZE and col <= FINDER_SIZE)
        or (col == FINDER_SIZE and row <= FINDER_SIZE)
        or (row == FINDER_SIZE and col >= edge)
        or (col == edge and row <= FINDER_SIZE)
        or (row == edge and col <= FINDER_SIZE)
        or (col == FINDER_SIZE and row >= edge)
    )


def module_is_dark(row: int, col: int, modules: int = DEFAULT_MODULES) -> bool:
    timing_end = modules - 9
    if row == TIMING_INDEX and 8 <= col <= timing_end:
        return col % 2 == 0
    if col == TIMING_INDEX and 8 <= row <= timing_end:
        return row % 2 == 0

    origin = _finder_origin(row, col, modules)
    if origin is not None:
        return _finder_cell(row, col, origin)

    if _is_separator(row, col, modules):
        return False

    return seeded_random(row * modules + col) > 0.5


def generate(size: int, grid_modules: int = DEFAULT_MODULES) -> PlaceholderPattern:
    """Build the placeholder grid for a preview of ``size`` pixels."""
    modules = max(grid_modules, DEFAULT_MODULES)
    cells = [
        [module_is_dark(row, col, modules) for col in range(modules)]
        for row in range(modules)
    ]
    return PlaceholderPattern(size=max(1, size), modules=modules, cells=cells)


def render_png(pattern: PlaceholderPattern, quiet_zone: int = 2) -> bytes:
    """Rasterize the pattern to PNG, black on white, with a light margin in modules."""
    scale = max(1, round(pattern.module_size))
    side = (pattern.modules + 2 * quiet_zone) * scale
    img = Image.new("RGB", (side, side), (255, 255, 255))
    draw = ImageDraw.Draw(img)

    for row, col in pattern.dark_cells():
        x = (col + quiet_zone) * scale
        y = (row + quiet_zone) * scale
        draw.rectangle([x, y, x + scale - 1, y + scale - 1], fill=(0, 0, 0))

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def render_data_url(pattern: PlaceholderPattern) -> str:
    """Pattern as a base64 PNG data URL."""
    return f"data:image/png;base64,{base64.b64encode(render_png(pattern)).decode()}"
