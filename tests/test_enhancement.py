import random

from gemforge.components.enhancement import ENHANCEMENT_TIERS, Enhancement, roll_enhancement
from gemforge.components.ledger import EconomyLedger


def test_tier_order_and_multipliers():
    assert Enhancement.NONE.tier is None
    assert [tier.tier for tier in ENHANCEMENT_TIERS] == list(range(7))
    multipliers = [tier.multiplier for tier in ENHANCEMENT_TIERS]
    assert multipliers == sorted(multipliers)
    assert Enhancement.NONE.multiplier == 1


def test_zero_bronze_chance_never_enhances():
    ledger = EconomyLedger(bronze_chance=0, silver_chance=100)
    rng = random.Random(1)
    assert {roll_enhancement(ledger, rng) for _ in range(200)} == {Enhancement.NONE}


def test_cascade_stops_at_unlocked_tier_count():
    ledger = EconomyLedger(
        bronze_chance=100,
        silver_chance=100,
        gold_chance=100,
        crystal_chance=100,
        rainbow_chance=100,
    )
    rng = random.Random(2)
    assert roll_enhancement(ledger, rng) is Enhancement.GOLD
    ledger.prestige_tiers = 2
    assert roll_enhancement(ledger, rng) is Enhancement.RAINBOW


def test_cascade_needs_every_lower_tier():
    ledger = EconomyLedger(bronze_chance=100, silver_chance=0, gold_chance=100)
    rng = random.Random(3)
    assert {roll_enhancement(ledger, rng) for _ in range(50)} == {Enhancement.BRONZE}


def test_effective_silver_rate_is_the_product_of_chances():
    ledger = EconomyLedger(bronze_chance=50, silver_chance=50)
    rng = random.Random(4)
    rolls = [roll_enhancement(ledger, rng) for _ in range(4000)]
    silver = rolls.count(Enhancement.SILVER) / len(rolls)
    assert 0.21 < silver < 0.29
