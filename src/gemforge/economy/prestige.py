"""Prestige coins and the upgrades bought with them.

Coins are priced on a triangular curve: the n-th coin needs n * 10000 more
currency than the previous one, so n coins need 10000 * n * (n + 1) / 2.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from gemforge.components.ledger import EconomyLedger
from gemforge.economy.upgrades import UPGRADE_ORDER

COIN_BASE = 10000
AUTO_BUY_COST = 5


def coins_from_currency(currency: int) -> int:
    if currency < COIN_BASE:
        return 0
    # Largest n with 10000 * n * (n + 1) / 2 <= currency.
    n = math.floor((-1 + math.sqrt(1 + currency / 1250)) / 2)
    return max(0, n)


def currency_for_coins(coins: int) -> int:
    return COIN_BASE * coins * (coins + 1) // 2


def currency_for_next_coin(currency: int) -> int:
    return currency_for_coins(coins_from_currency(currency) + 1)


def progress_to_next_coin(currency: int) -> float:
    """Fraction 0..1 of the way from the current coin threshold to the next."""
    coins = coins_from_currency(currency)
    low = currency_for_coins(coins)
    high = currency_for_coins(coins + 1)
    return min(1.0, (currency - low) / (high - low))


def perform_prestige(ledger: EconomyLedger) -> int:
    """Convert currency to coins and reset regular progress. Returns coins gained (0 = refused)."""
    coins = coins_from_currency(ledger.currency)
    if coins <= 0:
        return 0
    ledger.prestige_currency += coins
    ledger.reset_progress()
    return coins


@dataclass(frozen=True)
class PrestigeUpgrade:
    key: str
    field: str
    cost_of: Callable[[int], int]
    max_level: Optional[int] = None
    step: int = 1

    def level(self, ledger: EconomyLedger) -> int:
        return getattr(ledger, self.field) // self.step

    def cost(self, ledger: EconomyLedger) -> int:
        return self.cost_of(self.level(ledger))

    def is_maxed(self, ledger: EconomyLedger) -> bool:
        return self.max_level is not None and self.level(ledger) >= self.max_level


PRESTIGE_UPGRADES: Dict[str, PrestigeUpgrade] = {
    upgrade.key: upgrade
    for upgrade in (
        PrestigeUpgrade("money_mult", "prestige_money_mult", lambda level: level + 1),
        PrestigeUpgrade("tiers", "prestige_tiers", lambda level: (level + 1) * 2, max_level=4),
        PrestigeUpgrade("colors", "prestige_colors", lambda level: (level + 1) * 3, max_level=3),
        PrestigeUpgrade("arena", "prestige_arena", lambda level: (level + 1) * 2, max_level=4),
        PrestigeUpgrade("combo_gain", "prestige_combo_gain", lambda level: (level + 1) * 4, max_level=3),
        PrestigeUpgrade("combo_effect", "prestige_combo_effect", lambda level: (level + 1) * 3, max_level=5),
        PrestigeUpgrade(
            "combo_decay", "combo_decay_reduction", lambda level: (level + 1) * 2, max_level=10, step=10
        ),
    )
}


def prestige_upgrade_cost(ledger: EconomyLedger, key: str) -> int:
    return PRESTIGE_UPGRADES[key].cost(ledger)


def purchase_prestige_upgrade(ledger: EconomyLedger, key: str) -> int | None:
    upgrade = PRESTIGE_UPGRADES.get(key)
    if upgrade is None:
        return None
    if upgrade.is_maxed(ledger):
        return None
    cost = upgrade.cost(ledger)
    if ledger.prestige_currency < cost:
        return None
    ledger.prestige_currency -= cost
    setattr(ledger, upgrade.field, getattr(ledger, upgrade.field) + upgrade.step)
    return cost


def unlock_auto_buy(ledger: EconomyLedger, key: str) -> bool:
    """One-time purchase letting ``key`` be bought automatically each tick."""
    if key not in UPGRADE_ORDER or key in ledger.auto_buy:
        return False
    if ledger.prestige_currency < AUTO_BUY_COST:
        return False
    ledger.prestige_currency -= AUTO_BUY_COST
    ledger.auto_buy.add(key)
    return True
