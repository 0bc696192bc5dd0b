from __future__ import annotations

from typing import Dict, List, Tuple

from esper import World

from gemforge.components.animation_fall import FallMotion
from gemforge.components.cell_state import CellState
from gemforge.components.enhancement import roll_enhancement
from gemforge.config import GameConfig
from gemforge.constants import SPAWN_START_Y
from gemforge.events.bus import (
    EventBus,
    EVENT_GAME_RESTARTED,
    EVENT_PIECE_FALLING,
    EVENT_PIECE_LANDED,
)
from gemforge.systems.state_utils import get_grid, get_ledger, get_or_create_settle_state, world_rng

Position = Tuple[int, int]


class FallSystem:
    """Tick-driven gravity: animates falling pieces, pulls pieces into gaps, spawns at the top.

    Each tick runs three passes in order: advance falling pieces (landing
    ones become IDLE and are queued for a match check), resolve logical
    gravity, then refill row 0 per column subject to the spawn cooldown.
    Columns are always processed left to right.
    """

    def __init__(self, world: World, event_bus: EventBus, config: GameConfig | None = None):
        self.world = world
        self.event_bus = event_bus
        self.config = config or GameConfig()
        self.clock = 0.0
        self.last_spawn_time: Dict[int, float] = {}
        self.event_bus.subscribe(EVENT_GAME_RESTARTED, self.on_restart)
        self.reset_timers()

    def reset_timers(self) -> None:
        grid = get_grid(self.world)
        self.clock = 0.0
        self.last_spawn_time = {col: 0.0 for col in range(grid.cols)}

    def clear_motions(self) -> None:
        for ent, _ in list(self.world.get_component(FallMotion)):
            self.world.delete_entity(ent, immediate=True)

    def on_restart(self, sender, **kwargs):
        self.clear_motions()
        self.reset_timers()

    def update(self, dt: float) -> None:
        self.clock += dt
        self.advance(dt)
        self.apply_gravity()
        self.spawn_new_pieces()

    def falling_positions(self) -> Dict[Position, float]:
        """Current visual y of every falling piece, keyed by its logical cell."""
        return {motion.pos: motion.y for _, motion in self.world.get_component(FallMotion)}

    def advance(self, dt: float) -> List[Position]:
        grid = get_grid(self.world)
        state = get_or_create_settle_state(self.world)
        step = self.config.fall_speed * dt
        landed: List[Position] = []
        motions = sorted(self.world.get_component(FallMotion), key=lambda item: item[1].pos)
        for ent, motion in motions:
            target = motion.target_y
            if motion.y < target:
                motion.y = min(motion.y + step, target)
            if motion.y < target:
                continue
            row, col = motion.pos
            self.world.delete_entity(ent, immediate=True)
            if grid.state_at(row, col) is CellState.FALLING:
                grid.set_state(row, col, CellState.IDLE)
            state.pending_checks.append((row, col))
            landed.append((row, col))
            self.event_bus.emit(EVENT_PIECE_LANDED, row=row, col=col)
        return landed

    def apply_gravity(self) -> List[Tuple[Position, Position]]:
        """Pull the nearest piece above each empty cell down, if that piece is at rest."""
        grid = get_grid(self.world)
        moves: List[Tuple[Position, Position]] = []
        for col in range(grid.cols):
            for row in range(grid.rows - 1, -1, -1):
                if grid.content[row][col] is not None:
                    continue
                for above in range(row - 1, -1, -1):
                    if grid.content[above][col] is None:
                        continue
                    if grid.state[above][col] is CellState.IDLE:
                        grid.move((above, col), (row, col))
                        grid.set_state(row, col, CellState.FALLING)
                        self.world.create_entity(FallMotion(pos=(row, col), y=float(above)))
                        moves.append(((above, col), (row, col)))
                        self.event_bus.emit(EVENT_PIECE_FALLING, src=(above, col), dst=(row, col), spawned=False)
                    break
        return moves

    def spawn_new_pieces(self) -> List[Position]:
        grid = get_grid(self.world)
        ledger = get_ledger(self.world)
        rng = world_rng(self.world)
        falling_to_top = {
            motion.pos[1]
            for _, motion in self.world.get_component(FallMotion)
            if motion.pos[0] <= 0
        }
        spawned: List[Position] = []
        for col in range(grid.cols):
            if grid.content[0][col] is not None:
                continue
            if self.clock - self.last_spawn_time.get(col, 0.0) < self.config.spawn_delay:
                continue
            if col in falling_to_top:
                continue
            gem_type = rng.randint(0, grid.color_count - 1)
            enhancement = roll_enhancement(ledger, rng)
            grid.place_gem(0, col, gem_type, enhancement, CellState.FALLING)
            self.world.create_entity(FallMotion(pos=(0, col), y=SPAWN_START_Y))
            self.last_spawn_time[col] = self.clock
            spawned.append((0, col))
            self.event_bus.emit(EVENT_PIECE_FALLING, src=None, dst=(0, col), spawned=True)
        return spawned
