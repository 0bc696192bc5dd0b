from __future__ import annotations

from typing import List, Tuple

from esper import World

from gemforge.components.animation_swap import SwapMotion
from gemforge.components.cell_state import CellState
from gemforge.config import GameConfig
from gemforge.constants import NO_MATCH_MESSAGE
from gemforge.events.bus import (
    EventBus,
    EVENT_NO_MATCH,
    EVENT_SWAP_COMMITTED,
    EVENT_SWAP_REQUEST,
    EVENT_SWAP_REVERTED,
    EVENT_SWAP_STARTED,
)
from gemforge.systems.board_ops import are_adjacent, has_match_at
from gemforge.systems.state_utils import get_grid, get_or_create_settle_state

Position = Tuple[int, int]


class SwapSystem:
    """Validates, performs and resolves two-cell swaps.

    The match decision is taken right after the logical exchange, before any
    animation time passes, so it reflects a consistent board snapshot. A swap
    that does not match is undone when its forward leg finishes and animates
    back.
    """

    def __init__(self, world: World, event_bus: EventBus, config: GameConfig | None = None):
        self.world = world
        self.event_bus = event_bus
        self.config = config or GameConfig()
        self.event_bus.subscribe(EVENT_SWAP_REQUEST, self.on_swap_request)

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        self.request_swap(tuple(src), tuple(dst), manual=kwargs.get('manual', True))

    def can_swap(self, src: Position, dst: Position) -> bool:
        grid = get_grid(self.world)
        if not grid.in_bounds(*src) or not grid.in_bounds(*dst):
            return False
        if not are_adjacent(src, dst):
            return False
        for pos in (src, dst):
            if not grid.is_gem(*pos):
                return False
            if not grid.is_idle(*pos):
                return False
        return True

    def request_swap(self, src: Position, dst: Position, *, manual: bool = True) -> bool:
        """Start a swap; illegal requests are ignored and return False."""
        if not self.can_swap(src, dst):
            return False
        grid = get_grid(self.world)
        grid.set_state(*src, CellState.SWAPPING)
        grid.set_state(*dst, CellState.SWAPPING)
        grid.swap(src, dst)
        will_match = has_match_at(grid, *src) or has_match_at(grid, *dst)
        self.world.create_entity(
            SwapMotion(
                src=src,
                dst=dst,
                will_match=will_match,
                manual=manual,
                duration=self.config.swap_duration,
            )
        )
        self.event_bus.emit(EVENT_SWAP_STARTED, src=src, dst=dst, manual=manual, will_match=will_match)
        return True

    def active_swaps(self) -> List[SwapMotion]:
        return [swap for _, swap in self.world.get_component(SwapMotion)]

    def update(self, dt: float) -> None:
        for ent, swap in list(self.world.get_component(SwapMotion)):
            step = dt / swap.duration if swap.duration > 0 else 1.0
            if swap.phase == 'forward':
                swap.progress = min(1.0, swap.progress + step)
                if swap.progress >= 1.0:
                    if swap.will_match:
                        self._commit(ent, swap)
                    else:
                        self._begin_reverse(swap)
            elif swap.phase == 'reverse':
                swap.progress = max(0.0, swap.progress - step)
                if swap.progress <= 0.0:
                    self._finish_reverse(ent, swap)

    def _release(self, *positions: Position) -> None:
        grid = get_grid(self.world)
        for pos in positions:
            if grid.state_at(*pos) is CellState.SWAPPING:
                grid.set_state(*pos, CellState.IDLE)

    def _commit(self, ent: int, swap: SwapMotion) -> None:
        self.world.delete_entity(ent, immediate=True)
        self._release(swap.src, swap.dst)
        state = get_or_create_settle_state(self.world)
        state.pending_checks.append(swap.dst)
        state.pending_checks.append(swap.src)
        state.last_match_from_swap = swap.manual or self.config.bombs_from_autoplay
        if not swap.manual:
            state.auto_moving = False
        self.event_bus.emit(EVENT_SWAP_COMMITTED, src=swap.src, dst=swap.dst, manual=swap.manual)

    def _begin_reverse(self, swap: SwapMotion) -> None:
        grid = get_grid(self.world)
        grid.swap(swap.src, swap.dst)
        swap.phase = 'reverse'
        if not swap.manual:
            get_or_create_settle_state(self.world).auto_moving = False
        self.event_bus.emit(EVENT_SWAP_REVERTED, src=swap.src, dst=swap.dst, manual=swap.manual)
        if swap.manual:
            self.event_bus.emit(EVENT_NO_MATCH, src=swap.src, dst=swap.dst, message=NO_MATCH_MESSAGE)

    def _finish_reverse(self, ent: int, swap: SwapMotion) -> None:
        self.world.delete_entity(ent, immediate=True)
        self._release(swap.src, swap.dst)
