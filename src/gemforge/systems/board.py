from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from esper import World

from gemforge.components.animation_fall import FallMotion
from gemforge.components.animation_swap import SwapMotion
from gemforge.components.chain_detonation import ChainDetonation
from gemforge.components.enhancement import roll_enhancement
from gemforge.config import GameConfig
from gemforge.constants import MAX_BOARD_SIZE, MIN_MATCH_LENGTH, RESHUFFLE_MESSAGE
from gemforge.events.bus import (
    EventBus,
    EVENT_BOARD_CREATED,
    EVENT_BOARD_RESHUFFLED,
    EVENT_GAME_RESTARTED,
    EVENT_PRESTIGE_PERFORMED,
)
from gemforge.systems.board_ops import (
    find_valid_moves,
    is_gem_value,
    remove_initial_matches,
)
from gemforge.systems.state_utils import get_grid, get_ledger, get_or_create_settle_state, world_rng

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


class ReshuffleError(RuntimeError):
    """The board could not be shuffled into a layout with a valid move."""


class BoardSystem:
    """Creates, restarts, resizes and reshuffles the board grid."""

    def __init__(self, world: World, event_bus: EventBus, config: GameConfig | None = None,
                 *, populate: bool = True):
        self.world = world
        self.event_bus = event_bus
        self.config = config or GameConfig()
        if populate:
            self.new_board()
        self.event_bus.subscribe(EVENT_PRESTIGE_PERFORMED, self.on_prestige)

    def on_prestige(self, sender, **kwargs):
        """A prestige reset deals a new board sized by the upgraded arena and colour levels."""
        ledger = get_ledger(self.world)
        size = self.config.board_size or ledger.board_size()
        self.resize(size, self.config.color_count or ledger.color_count())

    def new_board(self) -> None:
        """Fill every cell with a random gem, then recolour away any starting triples."""
        grid = get_grid(self.world)
        ledger = get_ledger(self.world)
        rng = world_rng(self.world)
        for row in range(grid.rows):
            for col in range(grid.cols):
                gem_type = rng.randint(0, grid.color_count - 1)
                grid.place_gem(row, col, gem_type, roll_enhancement(ledger, rng))
        remove_initial_matches(grid, grid.color_count, rng)
        logger.debug("Created %dx%d board with %d colours", grid.rows, grid.cols, grid.color_count)
        self.event_bus.emit(EVENT_BOARD_CREATED, rows=grid.rows, cols=grid.cols, color_count=grid.color_count)

    def restart(self) -> None:
        """Drop every in-flight motion and pending state and deal a fresh board."""
        for component in (FallMotion, SwapMotion, ChainDetonation):
            for ent, _ in list(self.world.get_component(component)):
                self.world.delete_entity(ent, immediate=True)
        state = get_or_create_settle_state(self.world)
        state.pending_checks.clear()
        state.pending_bomb = None
        state.last_match_from_swap = False
        state.auto_moving = False
        grid = get_grid(self.world)
        grid.reset(grid.rows, grid.cols, grid.color_count)
        self.new_board()
        logger.info("Game restarted on a %dx%d board", grid.rows, grid.cols)
        self.event_bus.emit(EVENT_GAME_RESTARTED, rows=grid.rows, cols=grid.cols)

    def resize(self, size: int, color_count: Optional[int] = None) -> None:
        if not MIN_MATCH_LENGTH <= size <= MAX_BOARD_SIZE:
            raise ValueError(f"board size must be within {MIN_MATCH_LENGTH}..{MAX_BOARD_SIZE}")
        if color_count is not None and color_count < MIN_MATCH_LENGTH:
            raise ValueError(f"color_count must be at least {MIN_MATCH_LENGTH}")
        grid = get_grid(self.world)
        grid.reset(size, size, color_count or grid.color_count)
        self.restart()

    def is_busy(self) -> bool:
        return not get_grid(self.world).is_settled()

    def reshuffle(self) -> int:
        """Shuffle gem colours in place until the board has a valid move.

        Bombs and enhancement tags stay where they are. Each attempt also
        recolours away any triples the shuffle created. Returns the number of
        attempts used; raises ReshuffleError once the attempt cap is spent.
        """
        grid = get_grid(self.world)
        rng = world_rng(self.world)
        positions: List[Position] = [
            (row, col)
            for row, col in grid.positions()
            if is_gem_value(grid.content[row][col])
        ]
        if not positions:
            raise ReshuffleError("Board holds no gems to shuffle")
        for attempt in range(1, self.config.reshuffle_max_attempts + 1):
            types = [grid.content[row][col] for row, col in positions]
            rng.shuffle(types)
            for (row, col), gem_type in zip(positions, types):
                grid.content[row][col] = gem_type
            remove_initial_matches(grid, grid.color_count, rng)
            if find_valid_moves(grid):
                logger.debug("Board reshuffled after %d attempt(s)", attempt)
                self.event_bus.emit(EVENT_BOARD_RESHUFFLED, attempts=attempt, message=RESHUFFLE_MESSAGE)
                return attempt
        raise ReshuffleError(
            f"No valid move after {self.config.reshuffle_max_attempts} reshuffle attempts"
        )
