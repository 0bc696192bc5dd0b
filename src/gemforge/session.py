"""Wiring for a complete simulation: world, bus and systems in tick order."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from esper import World

from gemforge.components.cell_state import CellState
from gemforge.components.enhancement import Enhancement
from gemforge.components.grid import CellContent, Grid
from gemforge.components.ledger import EconomyLedger
from gemforge.config import GameConfig
from gemforge.events.bus import EventBus, EVENT_TICK
from gemforge.systems.autoplay import AutoPlaySystem
from gemforge.systems.board import BoardSystem
from gemforge.systems.board_ops import Move, find_valid_moves
from gemforge.systems.bomb import BombSystem
from gemforge.systems.combo import ComboSystem
from gemforge.systems.fall import FallSystem
from gemforge.systems.ledger_store import LedgerStore
from gemforge.systems.match_resolution import MatchResolutionSystem
from gemforge.systems.reward import RewardSystem
from gemforge.systems.state_utils import get_grid, get_ledger
from gemforge.systems.swap import SwapSystem
from gemforge.systems.upgrade_system import UpgradeSystem
from gemforge.world import create_world

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


@dataclass(frozen=True)
class SwapView:
    src: Position
    dst: Position
    progress: float
    phase: str


@dataclass(frozen=True)
class BoardSnapshot:
    """Read-only copy of everything the presentation layer draws in one frame."""
    rows: int
    cols: int
    content: Tuple[Tuple[CellContent, ...], ...]
    states: Tuple[Tuple[CellState, ...], ...]
    enhancements: Tuple[Tuple[Optional[Enhancement], ...], ...]
    falling: Mapping[Position, float]
    swaps: Tuple[SwapView, ...]
    pending_chain: Tuple[Position, ...]
    combo: int
    combo_multiplier: float
    currency: int


class GameSession:
    def __init__(self, world: World, event_bus: EventBus, config: GameConfig, *,
                 board: BoardSystem, fall: FallSystem, swaps: SwapSystem, combo: ComboSystem,
                 reward: RewardSystem, bombs: BombSystem, matches: MatchResolutionSystem,
                 autoplay: AutoPlaySystem, upgrades: UpgradeSystem):
        self.world = world
        self.event_bus = event_bus
        self.config = config
        self.board = board
        self.fall = fall
        self.swaps = swaps
        self.combo = combo
        self.reward = reward
        self.bombs = bombs
        self.matches = matches
        self.autoplay = autoplay
        self.upgrades = upgrades
        # blinker gives no ordering guarantee between receivers, so systems are
        # stepped here in a fixed order and EVENT_TICK only notifies observers.
        self.tick_order = (fall, swaps, combo, bombs, matches, autoplay, upgrades)

    @property
    def grid(self) -> Grid:
        return get_grid(self.world)

    @property
    def ledger(self) -> EconomyLedger:
        return get_ledger(self.world)

    def tick(self, dt: float) -> None:
        """Advance the simulation by ``dt`` seconds."""
        if dt < 0:
            raise ValueError("dt must not be negative")
        for system in self.tick_order:
            system.update(dt)
        self.event_bus.emit(EVENT_TICK, dt=dt)

    def run(self, seconds: float, step: float = 1 / 60) -> None:
        elapsed = 0.0
        while elapsed < seconds:
            dt = min(step, seconds - elapsed)
            self.tick(dt)
            elapsed += dt

    def request_swap(self, src: Position, dst: Position) -> bool:
        return self.swaps.request_swap(tuple(src), tuple(dst), manual=True)

    def request_detonate(self, row: int, col: int) -> bool:
        return self.bombs.detonate((row, col))

    def valid_moves(self) -> List[Move]:
        return find_valid_moves(self.grid)

    def restart(self) -> None:
        self.board.restart()

    def purchase(self, key: str) -> bool:
        return self.upgrades.purchase(key)

    def prestige(self) -> int:
        return self.upgrades.prestige()

    def snapshot(self) -> BoardSnapshot:
        grid = self.grid
        return BoardSnapshot(
            rows=grid.rows,
            cols=grid.cols,
            content=tuple(tuple(row) for row in grid.content),
            states=tuple(tuple(row) for row in grid.state),
            enhancements=tuple(tuple(row) for row in grid.enhancement),
            falling=MappingProxyType(self.fall.falling_positions()),
            swaps=tuple(
                SwapView(swap.src, swap.dst, swap.progress, swap.phase)
                for swap in self.swaps.active_swaps()
            ),
            pending_chain=tuple(self.bombs.pending_chain()),
            combo=self.combo.combo(),
            combo_multiplier=self.combo.multiplier(),
            currency=self.ledger.currency,
        )


def create_session(
    *,
    config: GameConfig | None = None,
    ledger: EconomyLedger | None = None,
    rng: random.Random | None = None,
    store: LedgerStore | None = None,
    event_bus: EventBus | None = None,
) -> GameSession:
    """Build a ready-to-tick session.

    Board size and colour count come from ``config`` when set, otherwise from
    the ledger's prestige levels. When ``store`` is given and no ledger is
    passed the ledger is loaded from it, and every award batch is saved back.
    """
    config = config or GameConfig()
    if ledger is None:
        ledger = store.load() if store is not None else EconomyLedger()
    size = config.board_size or ledger.board_size()
    colors = config.color_count or ledger.color_count()
    world = create_world(rows=size, cols=size, color_count=colors, ledger=ledger, rng=rng)
    bus = event_bus or EventBus()

    board = BoardSystem(world, bus, config)
    fall = FallSystem(world, bus, config)
    swaps = SwapSystem(world, bus, config)
    combo = ComboSystem(world, bus, config)
    reward = RewardSystem(world, bus, persist_hook=store)
    bombs = BombSystem(world, bus, reward, config)
    matches = MatchResolutionSystem(world, bus, combo, reward, bombs)
    autoplay = AutoPlaySystem(world, bus, swaps, board, config)
    upgrades = UpgradeSystem(world, bus, reward, config)
    logger.debug("Session created: %dx%d board, %d colours", size, size, colors)
    return GameSession(
        world,
        bus,
        config,
        board=board,
        fall=fall,
        swaps=swaps,
        combo=combo,
        reward=reward,
        bombs=bombs,
        matches=matches,
        autoplay=autoplay,
        upgrades=upgrades,
    )
