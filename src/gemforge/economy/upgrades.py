"""Regular (currency-priced) upgrades and the auto-buy pass.

Every upgrade reads its level back from the ledger value it raises, so a
ledger loaded from disk prices correctly without a separate level counter.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List

from gemforge.components.ledger import EconomyLedger, MIN_AUTO_MOVE_DELAY

MAX_CHANCE = 100
MAX_BOMB_CHANCE = 50
MAX_BOMB_RADIUS = 3


@dataclass(frozen=True)
class Upgrade:
    key: str
    field: str
    base_cost: int
    growth: float
    level_of: Callable[[int], int]
    step_of: Callable[[int], int]
    maxed: Callable[[int], bool]
    clamp: int | None = None

    def level(self, ledger: EconomyLedger) -> int:
        return self.level_of(getattr(ledger, self.field))

    def cost(self, ledger: EconomyLedger, price_multiplier: float = 1.0) -> int:
        return math.floor(self.base_cost * math.pow(self.growth, self.level(ledger)) * price_multiplier)

    def is_maxed(self, ledger: EconomyLedger) -> bool:
        return self.maxed(getattr(ledger, self.field))

    def apply(self, ledger: EconomyLedger) -> None:
        value = getattr(ledger, self.field) + self.step_of(getattr(ledger, self.field))
        if self.clamp is not None:
            value = min(self.clamp, value)
        setattr(ledger, self.field, value)


def _auto_move_level(delay: int) -> int:
    if delay >= 500:
        return round((5000 - delay) / 500)
    # Below half a second the delay drops in 100 ms steps.
    return 9 + round((500 - delay) / 100)


def _chance_upgrade(key: str, base_cost: int, growth: float, step: int, level_of, clamp=None) -> Upgrade:
    return Upgrade(
        key=key,
        field=f"{key}_chance",
        base_cost=base_cost,
        growth=growth,
        level_of=level_of,
        step_of=lambda _value: step,
        maxed=lambda value: value >= MAX_CHANCE,
        clamp=clamp,
    )


UPGRADES: Dict[str, Upgrade] = {
    upgrade.key: upgrade
    for upgrade in (
        _chance_upgrade("bronze", 100, 1.15, 5, lambda v: (v - 5) // 5),
        _chance_upgrade("silver", 150, 1.18, 4, lambda v: (v - 1) // 4, clamp=MAX_CHANCE),
        _chance_upgrade("gold", 250, 1.20, 3, lambda v: v // 3, clamp=MAX_CHANCE),
        _chance_upgrade("crystal", 500, 1.22, 2, lambda v: v // 2, clamp=MAX_CHANCE),
        _chance_upgrade("rainbow", 1000, 1.25, 1, lambda v: v, clamp=MAX_CHANCE),
        _chance_upgrade("prismatic", 2500, 1.28, 1, lambda v: v, clamp=MAX_CHANCE),
        _chance_upgrade("celestial", 5000, 1.30, 1, lambda v: v, clamp=MAX_CHANCE),
        Upgrade(
            key="auto_move",
            field="auto_move_delay",
            base_cost=500,
            growth=2.0,
            level_of=_auto_move_level,
            # Negative step: the delay shrinks.
            step_of=lambda delay: -500 if delay > 500 else -100,
            maxed=lambda delay: delay <= MIN_AUTO_MOVE_DELAY,
        ),
        Upgrade(
            key="bomb_chance",
            field="bomb_chance",
            base_cost=600,
            growth=1.8,
            level_of=lambda v: (v - 10) // 5,
            step_of=lambda _value: 5,
            maxed=lambda v: v >= MAX_BOMB_CHANCE,
        ),
        Upgrade(
            key="bomb_radius",
            field="bomb_radius",
            base_cost=1500,
            growth=3.0,
            level_of=lambda v: v - 1,
            step_of=lambda _value: 1,
            maxed=lambda v: v >= MAX_BOMB_RADIUS,
        ),
    )
}

# Display and auto-buy order.
UPGRADE_ORDER: List[str] = [
    "auto_move",
    "bomb_chance",
    "bomb_radius",
    "bronze",
    "silver",
    "gold",
    "crystal",
    "rainbow",
    "prismatic",
    "celestial",
]


class UnknownUpgradeError(KeyError):
    pass


def get_upgrade(key: str) -> Upgrade:
    try:
        return UPGRADES[key]
    except KeyError:
        raise UnknownUpgradeError(key) from None


def upgrade_cost(ledger: EconomyLedger, key: str, price_multiplier: float = 1.0) -> int:
    return get_upgrade(key).cost(ledger, price_multiplier)


def can_purchase(ledger: EconomyLedger, key: str, price_multiplier: float = 1.0) -> bool:
    upgrade = get_upgrade(key)
    return not upgrade.is_maxed(ledger) and ledger.currency >= upgrade.cost(ledger, price_multiplier)


def purchase_upgrade(ledger: EconomyLedger, key: str, price_multiplier: float = 1.0) -> int | None:
    """Buy one level of ``key``. Returns the price paid, or None when not possible."""
    upgrade = get_upgrade(key)
    if upgrade.is_maxed(ledger):
        return None
    cost = upgrade.cost(ledger, price_multiplier)
    if ledger.currency < cost:
        return None
    ledger.currency -= cost
    upgrade.apply(ledger)
    return cost


def process_auto_buys(ledger: EconomyLedger, price_multiplier: float = 1.0) -> List[tuple]:
    """One pass over the unlocked auto-buys; each buys at most one level."""
    bought = []
    for key in UPGRADE_ORDER:
        if key not in ledger.auto_buy:
            continue
        cost = purchase_upgrade(ledger, key, price_multiplier)
        if cost is not None:
            bought.append((key, cost))
    return bought
