from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from gemforge.constants import BOARD_MARGIN, BOARD_PIXELS


@dataclass(frozen=True)
class BoardGeometry:
    """Pixel placement of the board; arcade's y axis grows upward, row 0 is the top row."""
    rows: int
    cols: int
    cell_size: float
    left: float
    bottom: float

    @property
    def top(self) -> float:
        return self.bottom + self.rows * self.cell_size

    def cell_at(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        col = int((x - self.left) // self.cell_size)
        row = int((self.top - y) // self.cell_size)
        if 0 <= row < self.rows and 0 <= col < self.cols:
            return row, col
        return None

    def cell_center(self, row: float, col: float) -> Tuple[float, float]:
        """Centre of a (possibly fractional) row, e.g. a falling piece's visual y."""
        x = self.left + (col + 0.5) * self.cell_size
        y = self.top - (row + 0.5) * self.cell_size
        return x, y


def compute_board_geometry(window_width: int, window_height: int, rows: int, cols: int) -> BoardGeometry:
    """Fit the board into a square of at most BOARD_PIXELS, centred horizontally."""
    available = min(BOARD_PIXELS, window_width - 2 * BOARD_MARGIN, window_height - 2 * BOARD_MARGIN)
    cell_size = max(8.0, available / max(rows, cols))
    left = (window_width - cols * cell_size) / 2
    return BoardGeometry(rows=rows, cols=cols, cell_size=cell_size, left=left, bottom=BOARD_MARGIN)
