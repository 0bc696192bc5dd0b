from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Set

from gemforge.components.enhancement import Enhancement

DEFAULT_AUTO_MOVE_DELAY = 5000  # milliseconds
MIN_AUTO_MOVE_DELAY = 100


@dataclass(slots=True)
class EconomyLedger:
    """Persistent economy state: currency counters, upgrade and prestige levels.

    The simulation only reads configuration from here and increments the
    currency counters; the upgrade and prestige helpers in ``gemforge.economy``
    own every other write.
    """
    currency: int = 0
    total_earned: int = 0
    auto_move_delay: int = DEFAULT_AUTO_MOVE_DELAY
    bomb_chance: int = 10
    bomb_radius: int = 1
    bronze_chance: int = 5
    silver_chance: int = 1
    gold_chance: int = 0
    crystal_chance: int = 0
    rainbow_chance: int = 0
    prismatic_chance: int = 0
    celestial_chance: int = 0
    combo_decay_reduction: int = 0
    prestige_currency: int = 0
    prestige_money_mult: int = 0
    prestige_tiers: int = 0
    prestige_colors: int = 0
    prestige_arena: int = 0
    prestige_combo_gain: int = 0
    prestige_combo_effect: int = 0
    auto_buy: Set[str] = field(default_factory=set)

    def money_multiplier(self) -> int:
        return 2 ** self.prestige_money_mult

    def board_size(self) -> int:
        return min(9, 5 + self.prestige_arena)

    def color_count(self) -> int:
        return max(3, 6 - self.prestige_colors)

    def unlocked_tiers(self) -> int:
        return min(7, 3 + self.prestige_tiers)

    def enhancement_chance(self, tier: Enhancement) -> int:
        if tier is Enhancement.NONE:
            return 100
        return getattr(self, f"{tier.value}_chance")

    def earn(self, amount: int) -> None:
        if amount <= 0:
            return
        self.currency += amount
        self.total_earned += amount

    def reset_progress(self) -> None:
        """Reset the regular (non-prestige) progress, keeping prestige levels."""
        defaults = EconomyLedger()
        for name in PROGRESS_FIELDS:
            setattr(self, name, getattr(defaults, name))

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            payload[f.name] = sorted(value) if isinstance(value, set) else value
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "EconomyLedger":
        """Build a ledger from saved data, falling back to defaults for bad values."""
        ledger = cls()
        for f in fields(cls):
            if f.name not in payload:
                continue
            raw = payload[f.name]
            if f.name == "auto_buy":
                if isinstance(raw, (list, tuple, set)):
                    ledger.auto_buy = {str(item) for item in raw}
                continue
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                continue
            setattr(ledger, f.name, int(raw))
        ledger._sanitize()
        return ledger

    def _sanitize(self) -> None:
        if self.auto_move_delay < MIN_AUTO_MOVE_DELAY:
            self.auto_move_delay = DEFAULT_AUTO_MOVE_DELAY
        if self.bomb_chance <= 0:
            self.bomb_chance = 10
        if self.bomb_radius <= 0:
            self.bomb_radius = 1
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, int) and value < 0:
                setattr(self, f.name, getattr(EconomyLedger(), f.name))


PROGRESS_FIELDS = (
    "currency",
    "total_earned",
    "auto_move_delay",
    "bomb_chance",
    "bomb_radius",
    "bronze_chance",
    "silver_chance",
    "gold_chance",
    "crystal_chance",
    "rainbow_chance",
    "prismatic_chance",
    "celestial_chance",
)
