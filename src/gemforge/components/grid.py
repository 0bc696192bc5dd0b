from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from gemforge.constants import BOMB, DEFAULT_COLOR_COUNT
from gemforge.components.cell_state import CellState
from gemforge.components.enhancement import Enhancement

Position = Tuple[int, int]
# None = empty cell, int = gem type, BOMB = bomb marker
CellContent = Union[int, str, None]


class GridIndexError(IndexError):
    """Raised when a coordinate outside the board is read or written directly."""


@dataclass(slots=True)
class Grid:
    """Board contents plus the parallel per-cell simulation state.

    ``content``, ``state`` and ``enhancement`` are row-major tables of the
    same shape. Row 0 is the top of the board; gravity pulls toward
    ``rows - 1``. An empty cell is always IDLE with no enhancement.
    """
    rows: int
    cols: int
    color_count: int = DEFAULT_COLOR_COUNT
    content: List[List[CellContent]] = field(default_factory=list)
    state: List[List[CellState]] = field(default_factory=list)
    enhancement: List[List[Optional[Enhancement]]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.content:
            self.content = [[None] * self.cols for _ in range(self.rows)]
        if not self.state:
            self.state = [[CellState.IDLE] * self.cols for _ in range(self.rows)]
        if not self.enhancement:
            self.enhancement = [[None] * self.cols for _ in range(self.rows)]

    @classmethod
    def from_layout(cls, layout: List[List[CellContent]], color_count: int = DEFAULT_COLOR_COUNT) -> "Grid":
        """Build an all-IDLE grid from a nested list (used by tools and tests)."""
        rows = len(layout)
        cols = len(layout[0]) if rows else 0
        grid = cls(rows=rows, cols=cols, color_count=color_count)
        for r, row in enumerate(layout):
            for c, value in enumerate(row):
                grid.content[r][c] = value
                if value is not None and value != BOMB:
                    grid.enhancement[r][c] = Enhancement.NONE
        return grid

    def reset(self, rows: int, cols: int, color_count: int) -> None:
        """Reallocate every table empty at the new size (explicit resize only)."""
        self.rows = rows
        self.cols = cols
        self.color_count = color_count
        self.content = [[None] * cols for _ in range(rows)]
        self.state = [[CellState.IDLE] * cols for _ in range(rows)]
        self.enhancement = [[None] * cols for _ in range(rows)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def _check(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise GridIndexError(f"cell ({row}, {col}) outside {self.rows}x{self.cols} board")

    def get(self, row: int, col: int) -> CellContent:
        """Content at (row, col), or None for empty and out-of-range cells alike."""
        if not self.in_bounds(row, col):
            return None
        return self.content[row][col]

    def content_at(self, row: int, col: int) -> CellContent:
        self._check(row, col)
        return self.content[row][col]

    def state_at(self, row: int, col: int) -> CellState:
        self._check(row, col)
        return self.state[row][col]

    def enhancement_at(self, row: int, col: int) -> Optional[Enhancement]:
        self._check(row, col)
        return self.enhancement[row][col]

    def set_state(self, row: int, col: int, state: CellState) -> None:
        self._check(row, col)
        self.state[row][col] = state

    def place_gem(
        self,
        row: int,
        col: int,
        gem_type: int,
        enhancement: Enhancement = Enhancement.NONE,
        state: CellState = CellState.IDLE,
    ) -> None:
        self._check(row, col)
        self.content[row][col] = gem_type
        self.enhancement[row][col] = enhancement
        self.state[row][col] = state

    def place_bomb(self, row: int, col: int) -> None:
        self._check(row, col)
        self.content[row][col] = BOMB
        self.enhancement[row][col] = None
        self.state[row][col] = CellState.IDLE

    def clear(self, row: int, col: int) -> None:
        self._check(row, col)
        self.content[row][col] = None
        self.enhancement[row][col] = None
        self.state[row][col] = CellState.IDLE

    def move(self, src: Position, dst: Position) -> None:
        """Move a piece (content + enhancement) into an empty cell, keeping its state."""
        self._check(*src)
        self._check(*dst)
        sr, sc = src
        dr, dc = dst
        self.content[dr][dc] = self.content[sr][sc]
        self.enhancement[dr][dc] = self.enhancement[sr][sc]
        self.state[dr][dc] = self.state[sr][sc]
        self.clear(sr, sc)

    def swap(self, a: Position, b: Position) -> None:
        """Exchange content and enhancement of two cells; states stay with the cell."""
        self._check(*a)
        self._check(*b)
        ar, ac = a
        br, bc = b
        self.content[ar][ac], self.content[br][bc] = self.content[br][bc], self.content[ar][ac]
        self.enhancement[ar][ac], self.enhancement[br][bc] = (
            self.enhancement[br][bc],
            self.enhancement[ar][ac],
        )

    def is_empty(self, row: int, col: int) -> bool:
        return self.content_at(row, col) is None

    def is_bomb(self, row: int, col: int) -> bool:
        return self.content_at(row, col) == BOMB

    def is_gem(self, row: int, col: int) -> bool:
        value = self.content_at(row, col)
        return value is not None and value != BOMB

    def is_idle(self, row: int, col: int) -> bool:
        return self.state_at(row, col) is CellState.IDLE

    def positions(self):
        for r in range(self.rows):
            for c in range(self.cols):
                yield r, c

    def is_settled(self) -> bool:
        """True when every cell holds a piece and nothing is in motion."""
        for r, c in self.positions():
            if self.content[r][c] is None or self.state[r][c] is not CellState.IDLE:
                return False
        return True

    def copy_content(self) -> List[List[CellContent]]:
        return [list(row) for row in self.content]

    def copy_states(self) -> List[List[CellState]]:
        return [list(row) for row in self.state]
