"""Pure board queries: match detection, move enumeration and layout helpers.

Nothing here touches the esper world; every function works on a ``Grid`` (or
a plain content table) so the same code serves the live board, autoplay and
tests.
"""
from __future__ import annotations

import random
from typing import List, NamedTuple, Sequence, Set

from gemforge.constants import BOMB, MIN_MATCH_LENGTH
from gemforge.components.cell_state import CellState
from gemforge.components.grid import CellContent, Grid, Position


class Move(NamedTuple):
    src: Position
    dst: Position


def is_gem_value(value: CellContent) -> bool:
    return value is not None and value != BOMB


def are_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def has_match_at(grid: Grid, row: int, col: int) -> bool:
    """Return True if a horizontal or vertical run of >= 3 passes through (row, col).

    The two directions are counted independently, so an L shape of 2 + 2 is
    not a match. Empty, bomb and out-of-board cells never extend a run.
    """
    value = grid.get(row, col)
    if not is_gem_value(value):
        return False
    count = 1
    c = col - 1
    while grid.get(row, c) == value:
        count += 1
        c -= 1
    c = col + 1
    while grid.get(row, c) == value:
        count += 1
        c += 1
    if count >= MIN_MATCH_LENGTH:
        return True
    count = 1
    r = row - 1
    while grid.get(r, col) == value:
        count += 1
        r -= 1
    r = row + 1
    while grid.get(r, col) == value:
        count += 1
        r += 1
    return count >= MIN_MATCH_LENGTH


def would_match(grid: Grid, a: Position, b: Position) -> bool:
    """Hypothetically swap a and b, test both ends, then swap back."""
    grid.swap(a, b)
    try:
        return has_match_at(grid, *a) or has_match_at(grid, *b)
    finally:
        grid.swap(a, b)


def _matchable(grid: Grid, row: int, col: int, idle_only: bool):
    value = grid.content[row][col]
    if not is_gem_value(value):
        return None
    if idle_only and grid.state[row][col] is not CellState.IDLE:
        return None
    return value


def find_match_runs(grid: Grid, *, idle_only: bool = True) -> List[List[Position]]:
    """Every maximal run of >= 3 equal gems; rows first (row-major), then columns."""
    runs: List[List[Position]] = []
    for r in range(grid.rows):
        run: List[Position] = []
        last = None
        for c in range(grid.cols):
            value = _matchable(grid, r, c, idle_only)
            if value is not None and value == last:
                run.append((r, c))
            else:
                if len(run) >= MIN_MATCH_LENGTH:
                    runs.append(run)
                run = [(r, c)] if value is not None else []
                last = value
        if len(run) >= MIN_MATCH_LENGTH:
            runs.append(run)
    for c in range(grid.cols):
        run = []
        last = None
        for r in range(grid.rows):
            value = _matchable(grid, r, c, idle_only)
            if value is not None and value == last:
                run.append((r, c))
            else:
                if len(run) >= MIN_MATCH_LENGTH:
                    runs.append(run)
                run = [(r, c)] if value is not None else []
                last = value
        if len(run) >= MIN_MATCH_LENGTH:
            runs.append(run)
    return runs


def find_all_matches(grid: Grid, *, idle_only: bool = True) -> List[Position]:
    """Union of all qualifying runs, in first-seen order without duplicates.

    Only IDLE cells are eligible by default: a piece that is still falling or
    mid-swap is never matched even if its logical content would be.
    """
    seen: Set[Position] = set()
    ordered: List[Position] = []
    for run in find_match_runs(grid, idle_only=idle_only):
        for pos in run:
            if pos not in seen:
                seen.add(pos)
                ordered.append(pos)
    return ordered


def find_match_groups(grid: Grid, *, idle_only: bool = True) -> List[List[Position]]:
    """Runs merged into connected groups (an L or T counts as one group)."""
    groups = [set(run) for run in find_match_runs(grid, idle_only=idle_only)]
    merged: List[Set[Position]] = []
    while groups:
        first = groups.pop()
        changed = True
        while changed:
            changed = False
            for g in groups[:]:
                if first & g:
                    first |= g
                    groups.remove(g)
                    changed = True
        merged.append(first)
    return [sorted(group) for group in merged]


def find_valid_moves(grid: Grid) -> List[Move]:
    """Enumerate adjacent swaps that would produce a match.

    Order is row-major with the right neighbour checked before the down
    neighbour. Pairs touching an empty cell or a bomb are never listed since
    the swap engine would reject them.
    """
    moves: List[Move] = []
    for row in range(grid.rows):
        for col in range(grid.cols):
            if not is_gem_value(grid.content[row][col]):
                continue
            pos = (row, col)
            right = (row, col + 1)
            if col + 1 < grid.cols and is_gem_value(grid.content[row][col + 1]):
                if would_match(grid, pos, right):
                    moves.append(Move(pos, right))
            down = (row + 1, col)
            if row + 1 < grid.rows and is_gem_value(grid.content[row + 1][col]):
                if would_match(grid, pos, down):
                    moves.append(Move(pos, down))
    return moves


def idle_moves(grid: Grid, moves: Sequence[Move]) -> List[Move]:
    """Filter moves down to those whose endpoints are both IDLE right now."""
    return [
        move
        for move in moves
        if grid.is_idle(*move.src) and grid.is_idle(*move.dst)
    ]


def valid_colors(content: List[List[CellContent]], row: int, col: int, color_count: int) -> List[int]:
    """Colours for (row, col) that do not complete a triple with the two cells left or above."""
    forbidden: Set[CellContent] = set()
    if col >= 2 and content[row][col - 1] == content[row][col - 2]:
        forbidden.add(content[row][col - 1])
    if row >= 2 and content[row - 1][col] == content[row - 2][col]:
        forbidden.add(content[row - 1][col])
    return [color for color in range(color_count) if color not in forbidden]


def remove_initial_matches(grid: Grid, color_count: int, rng: random.Random) -> None:
    """Recolour every gem (row-major) so no triple remains; bombs are left alone.

    Needs at least three colours: with two, a cell closing both a horizontal
    and a vertical pair has no safe colour.
    """
    if color_count < MIN_MATCH_LENGTH:
        raise ValueError(f"color_count must be at least {MIN_MATCH_LENGTH}")
    for row in range(grid.rows):
        for col in range(grid.cols):
            value = grid.content[row][col]
            if not is_gem_value(value):
                continue
            grid.content[row][col] = rng.choice(valid_colors(grid.content, row, col, color_count))

