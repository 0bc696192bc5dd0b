"""Turns pointer presses and releases on board cells into swap/detonate intents.

Pixel coordinates use a y axis that grows downward, the same direction as
row indices; callers with an upward y axis flip it before passing it in.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from gemforge.components.grid import Grid
from gemforge.constants import MIN_SWIPE_DISTANCE
from gemforge.systems.board_ops import are_adjacent

Position = Tuple[int, int]


@dataclass(frozen=True)
class SwapIntent:
    src: Position
    dst: Position


@dataclass(frozen=True)
class DetonateIntent:
    row: int
    col: int


Intent = Union[SwapIntent, DetonateIntent]


class GestureDecoder:
    """Click-select-click, swipe and bomb-tap decoding against a live grid."""

    def __init__(self, grid: Grid, *, min_swipe_distance: float = MIN_SWIPE_DISTANCE):
        self.grid = grid
        self.min_swipe_distance = min_swipe_distance
        self.selected: Optional[Position] = None
        self._drag_cell: Optional[Position] = None
        self._drag_origin: Tuple[float, float] = (0.0, 0.0)

    def clear_selection(self) -> None:
        self.selected = None

    def _selectable(self, cell: Position) -> bool:
        row, col = cell
        return self.grid.in_bounds(row, col) and self.grid.is_gem(row, col) and self.grid.is_idle(row, col)

    def press(self, cell: Optional[Position], x: float, y: float) -> Optional[Intent]:
        """Pointer down. A bomb detonates immediately; an idle gem starts a drag."""
        self._drag_cell = None
        if cell is None or not self.grid.in_bounds(*cell):
            return None
        row, col = cell
        if self.grid.is_bomb(row, col):
            return DetonateIntent(row, col)
        if not self._selectable(cell):
            return None
        self._drag_cell = (row, col)
        self._drag_origin = (x, y)
        return None

    def release(self, x: float, y: float) -> Optional[Intent]:
        """Pointer up. Long enough drags swipe toward the dominant axis; anything else is a click."""
        cell = self._drag_cell
        if cell is None:
            return None
        self._drag_cell = None
        dx = x - self._drag_origin[0]
        dy = y - self._drag_origin[1]
        if math.hypot(dx, dy) >= self.min_swipe_distance:
            row, col = cell
            if abs(dx) > abs(dy):
                target = (row, col + (1 if dx > 0 else -1))
            else:
                target = (row + (1 if dy > 0 else -1), col)
            if self.grid.in_bounds(*target):
                self.clear_selection()
                return SwapIntent(cell, target)
        return self.click(cell)

    def click(self, cell: Position) -> Optional[SwapIntent]:
        if not self._selectable(cell):
            return None
        if self.selected is None:
            self.selected = cell
            return None
        previous = self.selected
        if not self._selectable(previous):
            self.clear_selection()
            return None
        if are_adjacent(previous, cell):
            self.clear_selection()
            return SwapIntent(previous, cell)
        # Non-adjacent click moves the selection.
        self.selected = cell
        return None
