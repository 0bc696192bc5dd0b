from __future__ import annotations

import random
from typing import Dict, List, Sequence, Tuple

from gemforge.components.enhancement import Enhancement
from gemforge.components.grid import CellContent, Grid
from gemforge.components.ledger import EconomyLedger
from gemforge.config import GameConfig
from gemforge.constants import BOMB
from gemforge.events.bus import EventBus
from gemforge.session import GameSession, create_session


def base_layout(size: int) -> List[List[CellContent]]:
    """Six-colour board with no matches and no valid moves.

    Rows repeat 0,1,2 (even rows) or 3,4,5 (odd rows), so no run of three
    exists and no single swap can create one.
    """
    return [[(col % 3) + 3 * (row % 2) for col in range(size)] for row in range(size)]


def load_layout(grid: Grid, layout: Sequence[Sequence[CellContent]]) -> Grid:
    """Overwrite ``grid`` in place with an all-IDLE copy of ``layout``."""
    rows = len(layout)
    cols = len(layout[0])
    if (rows, cols) != (grid.rows, grid.cols):
        grid.reset(rows, cols, grid.color_count)
    for row in range(rows):
        for col in range(cols):
            value = layout[row][col]
            if value is None:
                grid.clear(row, col)
            elif value == BOMB:
                grid.place_bomb(row, col)
            else:
                grid.place_gem(row, col, value, Enhancement.NONE)
    return grid


def layout_session(
    layout: Sequence[Sequence[CellContent]],
    *,
    ledger: EconomyLedger | None = None,
    seed: int = 0,
    store=None,
    **config_overrides,
) -> GameSession:
    """Session on a fixed square layout; autoplay is off unless asked for."""
    config_overrides.setdefault("autoplay_enabled", False)
    config = GameConfig(board_size=len(layout), color_count=6, **config_overrides)
    session = create_session(config=config, ledger=ledger, rng=random.Random(seed), store=store)
    load_layout(session.grid, layout)
    return session


def record_events(bus: EventBus, *names: str) -> List[Tuple[str, Dict]]:
    seen: List[Tuple[str, Dict]] = []
    for name in names:
        bus.subscribe(name, lambda sender, _name=name, **payload: seen.append((_name, payload)))
    return seen


def settle(session: GameSession, *, seconds: float = 10.0, step: float = 1 / 60) -> bool:
    """Tick until the board is full and idle. Returns False if it never settles."""
    for _ in range(int(seconds / step)):
        session.tick(step)
        if session.grid.is_settled():
            return True
    return False


def swap_layout(size: int = 8) -> List[List[CellContent]]:
    """Dead board plus one set-up swap: (0, 2) <-> (1, 2) completes 4-4-4 in row 0."""
    layout = base_layout(size)
    layout[0][0] = 4
    layout[0][1] = 4
    layout[1][2] = 4
    return layout
