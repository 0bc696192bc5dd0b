from __future__ import annotations

import logging
import math
from typing import Callable, Iterable, Optional

from esper import World

from gemforge.components.enhancement import Enhancement
from gemforge.components.grid import Position
from gemforge.components.ledger import EconomyLedger
from gemforge.events.bus import EventBus, EVENT_CURRENCY_AWARDED, EVENT_LEDGER_CHANGED
from gemforge.systems.state_utils import get_grid, get_ledger

logger = logging.getLogger(__name__)

PersistHook = Callable[[EconomyLedger], None]


def gem_award(enhancement: Optional[Enhancement], money_multiplier: float, combo_multiplier: float = 1.0) -> int:
    """Currency for one destroyed gem: floor(enhancement x money x combo)."""
    tier = enhancement or Enhancement.NONE
    return math.floor(tier.multiplier * money_multiplier * combo_multiplier)


class RewardSystem:
    """Turns destroyed gems into currency and writes it to the ledger.

    Awards are batched: callers award a whole match (or explosion) and then
    call ``persist`` once.
    """

    def __init__(self, world: World, event_bus: EventBus, persist_hook: PersistHook | None = None):
        self.world = world
        self.event_bus = event_bus
        self.persist_hook = persist_hook

    def award(self, positions: Iterable[Position], *, combo_multiplier: float = 1.0, source: str = "match") -> int:
        grid = get_grid(self.world)
        ledger = get_ledger(self.world)
        money = ledger.money_multiplier()
        total = 0
        for row, col in positions:
            if not grid.is_gem(row, col):
                continue
            enhancement = grid.enhancement_at(row, col) or Enhancement.NONE
            amount = gem_award(enhancement, money, combo_multiplier)
            ledger.earn(amount)
            total += amount
            self.event_bus.emit(
                EVENT_CURRENCY_AWARDED,
                row=row,
                col=col,
                amount=amount,
                enhancement=enhancement,
                source=source,
            )
        return total

    def persist(self, reason: str = "award") -> bool:
        """Hand the ledger to the persistence hook; failures never reach gameplay."""
        ledger = get_ledger(self.world)
        self.event_bus.emit(EVENT_LEDGER_CHANGED, reason=reason)
        if self.persist_hook is None:
            return True
        try:
            self.persist_hook(ledger)
        except Exception:
            logger.warning("Persisting economy ledger failed (reason=%s)", reason, exc_info=True)
            return False
        return True
