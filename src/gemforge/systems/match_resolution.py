from typing import List, Tuple

from esper import World

from gemforge.components.cell_state import CellState
from gemforge.events.bus import (EventBus, EVENT_MATCH_FOUND, EVENT_MATCH_CLEARED,
                                 EVENT_GEM_DESTROYED)
from gemforge.systems.board_ops import find_all_matches, find_match_groups
from gemforge.systems.bomb import BombSystem
from gemforge.systems.combo import ComboSystem
from gemforge.systems.reward import RewardSystem
from gemforge.systems.state_utils import get_grid, get_or_create_settle_state


class MatchResolutionSystem:
    """Runs the settle cycle for cells that just came to rest.

    Order within one cycle: combo gain, currency award (with the combo
    multiplier), bomb roll for swap-originated batches, destruction (the
    reserved bomb cell keeps its content), bomb spawn, one ledger persist.
    """
    def __init__(self, world: World, event_bus: EventBus, combo: ComboSystem,
                 reward: RewardSystem, bombs: BombSystem):
        self.world = world
        self.event_bus = event_bus
        self.combo = combo
        self.reward = reward
        self.bombs = bombs

    def update(self, dt: float) -> None:
        self.check_landed()

    def check_landed(self) -> List[Tuple[int, int]]:
        state = get_or_create_settle_state(self.world)
        if not state.pending_checks:
            return []
        state.pending_checks.clear()
        grid = get_grid(self.world)
        matches = find_all_matches(grid)
        if not matches:
            return []
        from_swap = state.last_match_from_swap
        self.event_bus.emit(EVENT_MATCH_FOUND, positions=list(matches), size=len(matches),
                            groups=find_match_groups(grid), from_swap=from_swap)
        self.combo.add_combo(len(matches))
        self.reward.award(matches, combo_multiplier=self.combo.multiplier(), source="match")
        if from_swap and len(matches) >= 3:
            self.bombs.try_spawn(matches)
        self._destroy(matches)
        self.bombs.spawn_pending()
        self.reward.persist(reason="match")
        state.last_match_from_swap = False
        self.event_bus.emit(EVENT_MATCH_CLEARED, positions=sorted(matches))
        return matches

    def _destroy(self, matches: List[Tuple[int, int]]) -> None:
        grid = get_grid(self.world)
        for row, col in matches:
            if grid.state_at(row, col) is CellState.MATCHED:
                continue
            gem_type = grid.content_at(row, col)
            enhancement = grid.enhancement_at(row, col)
            self.event_bus.emit(EVENT_GEM_DESTROYED, row=row, col=col, gem_type=gem_type,
                                enhancement=enhancement, reason="match")
            if self.bombs.is_pending_at((row, col)):
                # Keep the logical content; the bomb replaces it right after.
                grid.set_state(row, col, CellState.MATCHED)
                continue
            grid.clear(row, col)
