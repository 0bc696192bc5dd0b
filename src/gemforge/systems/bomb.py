from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from esper import World

from gemforge.components.cell_state import CellState
from gemforge.components.chain_detonation import ChainDetonation
from gemforge.components.grid import Grid, Position
from gemforge.config import GameConfig
from gemforge.constants import BOMB_RADIUS_SLACK, MIN_MATCH_LENGTH
from gemforge.events.bus import (
    EventBus,
    EVENT_BOMB_CHAIN_QUEUED,
    EVENT_BOMB_DETONATE_REQUEST,
    EVENT_BOMB_DETONATED,
    EVENT_BOMB_SPAWNED,
    EVENT_GEM_DESTROYED,
)
from gemforge.systems.reward import RewardSystem
from gemforge.systems.state_utils import (
    get_grid,
    get_ledger,
    get_or_create_settle_state,
    world_rng,
)

logger = logging.getLogger(__name__)


def cells_in_radius(grid: Grid, center: Position, radius: int) -> List[Position]:
    """In-board cells within Euclidean distance radius + 0.5 of center, excluding center.

    Cells past the board edge are clipped silently.
    """
    row, col = center
    limit = radius + BOMB_RADIUS_SLACK
    cells: List[Position] = []
    for r in range(row - radius, row + radius + 1):
        for c in range(col - radius, col + radius + 1):
            if not grid.in_bounds(r, c):
                continue
            if r == row and c == col:
                continue
            if math.hypot(r - row, c - col) > limit:
                continue
            cells.append((r, c))
    return cells


class BombSystem:
    """Bomb spawning on swap matches, area detonation and delayed chain reactions."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        reward: RewardSystem,
        config: GameConfig | None = None,
    ):
        self.world = world
        self.event_bus = event_bus
        self.reward = reward
        self.config = config or GameConfig()
        self.event_bus.subscribe(EVENT_BOMB_DETONATE_REQUEST, self.on_detonate_request)

    # Spawning ------------------------------------------------------------

    def try_spawn(self, matches: Sequence[Position]) -> Optional[Position]:
        """Roll for a bomb at the middle entry of the match list and reserve the cell."""
        if len(matches) < MIN_MATCH_LENGTH:
            return None
        ledger = get_ledger(self.world)
        if world_rng(self.world).randint(1, 100) > ledger.bomb_chance:
            return None
        row, col = matches[len(matches) // 2]
        grid = get_grid(self.world)
        if grid.is_bomb(row, col):
            return None
        state = get_or_create_settle_state(self.world)
        state.pending_bomb = (row, col)
        logger.debug("Bomb reserved at %s", state.pending_bomb)
        return state.pending_bomb

    def is_pending_at(self, pos: Position) -> bool:
        return get_or_create_settle_state(self.world).pending_bomb == tuple(pos)

    def spawn_pending(self) -> Optional[Position]:
        state = get_or_create_settle_state(self.world)
        pending = state.pending_bomb
        if pending is None:
            return None
        state.pending_bomb = None
        get_grid(self.world).place_bomb(*pending)
        self.event_bus.emit(EVENT_BOMB_SPAWNED, row=pending[0], col=pending[1])
        return pending

    # Detonation ----------------------------------------------------------

    def on_detonate_request(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        self.detonate((row, col))

    def detonate(self, pos: Position) -> bool:
        """Operator-triggered detonation; a no-op unless pos holds an IDLE bomb."""
        grid = get_grid(self.world)
        row, col = pos
        if not grid.in_bounds(row, col) or not grid.is_bomb(row, col):
            return False
        if not grid.is_idle(row, col):
            return False
        self._explode((row, col))
        return True

    def _explode(self, pos: Position) -> Tuple[List[Position], List[Position]]:
        grid = get_grid(self.world)
        ledger = get_ledger(self.world)
        radius = ledger.bomb_radius
        grid.clear(*pos)
        victims: List[Position] = []
        chained: List[Position] = []
        for r, c in cells_in_radius(grid, pos, radius):
            if not grid.is_idle(r, c) or grid.is_empty(r, c):
                continue
            if grid.is_bomb(r, c):
                chained.append((r, c))
                continue
            victims.append((r, c))
        # Bomb kills are not a match: no combo factor here.
        self.reward.award(victims, combo_multiplier=1.0, source="bomb")
        for r, c in victims:
            gem_type = grid.content_at(r, c)
            enhancement = grid.enhancement_at(r, c)
            grid.clear(r, c)
            self.event_bus.emit(
                EVENT_GEM_DESTROYED,
                row=r,
                col=c,
                gem_type=gem_type,
                enhancement=enhancement,
                reason="bomb",
            )
        self.reward.persist(reason="bomb")
        for r, c in chained:
            # Primed bombs leave IDLE so gravity cannot move them before they fire.
            grid.set_state(r, c, CellState.MATCHED)
            self.world.create_entity(ChainDetonation(pos=(r, c), remaining=self.config.chain_delay))
            self.event_bus.emit(EVENT_BOMB_CHAIN_QUEUED, row=r, col=c, delay=self.config.chain_delay)
        logger.debug("Bomb at %s destroyed %d gems, chained %d", pos, len(victims), len(chained))
        self.event_bus.emit(
            EVENT_BOMB_DETONATED,
            row=pos[0],
            col=pos[1],
            radius=radius,
            destroyed=victims,
            chained=chained,
        )
        return victims, chained

    def pending_chain(self) -> List[Position]:
        return [chain.pos for _, chain in self.world.get_component(ChainDetonation)]

    def update(self, dt: float) -> None:
        chains = list(self.world.get_component(ChainDetonation))
        if not chains:
            return
        due: List[Tuple[int, ChainDetonation]] = []
        for ent, chain in chains:
            chain.remaining -= dt
            if chain.remaining <= 0.0:
                due.append((ent, chain))
        for ent, chain in due:
            self.world.delete_entity(ent, immediate=True)
            self._fire_chain(chain.pos)

    def _fire_chain(self, pos: Position) -> None:
        grid = get_grid(self.world)
        # Skip targets that are no longer an armed bomb (already detonated or replaced).
        if not grid.is_bomb(*pos) or grid.state_at(*pos) is not CellState.MATCHED:
            return
        self._explode(pos)
