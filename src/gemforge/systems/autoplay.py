from __future__ import annotations

import logging
from typing import Optional

from esper import World

from gemforge.config import GameConfig
from gemforge.events.bus import EventBus
from gemforge.systems.board import BoardSystem, ReshuffleError
from gemforge.systems.board_ops import Move, find_valid_moves, idle_moves
from gemforge.systems.state_utils import get_grid, get_ledger, get_or_create_settle_state, world_rng
from gemforge.systems.swap import SwapSystem

logger = logging.getLogger(__name__)


class AutoPlaySystem:
    """Plays a random valid move every ``auto_move_delay`` ms; reshuffles dead boards."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        swaps: SwapSystem,
        board: BoardSystem,
        config: GameConfig | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.swaps = swaps
        self.board = board
        self.config = config or GameConfig()
        self.elapsed = 0.0

    def delay(self) -> float:
        return get_ledger(self.world).auto_move_delay / 1000

    def update(self, dt: float) -> None:
        if not self.config.autoplay_enabled:
            return
        self.elapsed += dt
        self.check_auto_move()

    def check_auto_move(self) -> Optional[Move]:
        state = get_or_create_settle_state(self.world)
        if state.auto_moving:
            return None
        if self.elapsed < self.delay():
            return None
        grid = get_grid(self.world)
        moves = find_valid_moves(grid)
        candidates = idle_moves(grid, moves)
        if candidates:
            move = world_rng(self.world).choice(candidates)
            state.auto_moving = True
            if not self.swaps.request_swap(move.src, move.dst, manual=False):
                state.auto_moving = False
                return None
            self.elapsed = 0.0
            return move
        if not moves and not self.board.is_busy():
            try:
                self.board.reshuffle()
            except ReshuffleError:
                logger.error("Reshuffle gave up; autoplay will retry after the next delay", exc_info=True)
            self.elapsed = 0.0
        return None
