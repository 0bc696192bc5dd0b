from __future__ import annotations

import random
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gemforge.components.ledger import EconomyLedger


class Enhancement(Enum):
    """Rarity tier attached to a gem when it spawns."""
    NONE = "none"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    CRYSTAL = "crystal"
    RAINBOW = "rainbow"
    PRISMATIC = "prismatic"
    CELESTIAL = "celestial"

    @property
    def multiplier(self) -> int:
        return ENHANCEMENT_MULTIPLIERS[self]

    @property
    def tier(self) -> int | None:
        """0-based unlock index, None for plain gems."""
        if self is Enhancement.NONE:
            return None
        return ENHANCEMENT_TIERS.index(self)


ENHANCEMENT_MULTIPLIERS = {
    Enhancement.NONE: 1,
    Enhancement.BRONZE: 2,
    Enhancement.SILVER: 5,
    Enhancement.GOLD: 15,
    Enhancement.CRYSTAL: 50,
    Enhancement.RAINBOW: 200,
    Enhancement.PRISMATIC: 1000,
    Enhancement.CELESTIAL: 5000,
}

# Upgrade order; each tier can only be reached from the previous one.
ENHANCEMENT_TIERS = [
    Enhancement.BRONZE,
    Enhancement.SILVER,
    Enhancement.GOLD,
    Enhancement.CRYSTAL,
    Enhancement.RAINBOW,
    Enhancement.PRISMATIC,
    Enhancement.CELESTIAL,
]


def roll_enhancement(ledger: "EconomyLedger", rng: random.Random) -> Enhancement:
    """Cascading roll: a gem must win bronze before it may roll for silver, etc.

    With bronze=50 and silver=50 the effective silver chance is 25%.
    """
    unlocked = ledger.unlocked_tiers()
    result = Enhancement.NONE
    for index, tier in enumerate(ENHANCEMENT_TIERS):
        if unlocked <= index:
            break
        chance = ledger.enhancement_chance(tier)
        if chance <= 0 or rng.randint(1, 100) > chance:
            break
        result = tier
    return result
