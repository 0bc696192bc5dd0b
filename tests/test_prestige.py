import pytest

from gemforge.components.ledger import EconomyLedger
from gemforge.economy.prestige import (
    AUTO_BUY_COST,
    PRESTIGE_UPGRADES,
    coins_from_currency,
    currency_for_coins,
    currency_for_next_coin,
    perform_prestige,
    prestige_upgrade_cost,
    progress_to_next_coin,
    purchase_prestige_upgrade,
    unlock_auto_buy,
)
from gemforge.events.bus import (
    EVENT_GAME_RESTARTED,
    EVENT_PRESTIGE_PERFORMED,
    EVENT_PRESTIGE_REQUEST,
    EVENT_PRESTIGE_UPGRADE_PURCHASED,
    EVENT_PRESTIGE_UPGRADE_REQUEST,
)
from gemforge.session import create_session
from tests.helpers import base_layout, layout_session, record_events


@pytest.mark.parametrize(
    "currency, coins",
    [(0, 0), (9999, 0), (10000, 1), (29999, 1), (30000, 2), (60000, 3)],
)
def test_coin_thresholds(currency, coins):
    assert coins_from_currency(currency) == coins


def test_coin_curve_helpers():
    assert currency_for_coins(0) == 0
    assert currency_for_coins(3) == 60000
    assert currency_for_next_coin(0) == 10000
    assert currency_for_next_coin(10000) == 30000
    assert progress_to_next_coin(20000) == 0.5
    assert progress_to_next_coin(0) == 0.0


def test_prestige_refused_below_one_coin():
    ledger = EconomyLedger(currency=9999, bomb_radius=2)
    assert perform_prestige(ledger) == 0
    assert ledger.currency == 9999
    assert ledger.bomb_radius == 2


def test_prestige_resets_progress_and_keeps_prestige_levels():
    ledger = EconomyLedger(
        currency=35000,
        total_earned=50000,
        auto_move_delay=1000,
        bronze_chance=40,
        prestige_currency=2,
        prestige_arena=1,
        auto_buy={"bronze"},
    )
    assert perform_prestige(ledger) == 2
    assert ledger.prestige_currency == 4
    assert ledger.currency == 0
    assert ledger.total_earned == 0
    assert ledger.auto_move_delay == 5000
    assert ledger.bronze_chance == 5
    assert ledger.prestige_arena == 1
    assert ledger.auto_buy == {"bronze"}


def test_prestige_upgrade_costs_and_caps():
    ledger = EconomyLedger(prestige_currency=100)
    assert prestige_upgrade_cost(ledger, "money_mult") == 1
    assert purchase_prestige_upgrade(ledger, "money_mult") == 1
    assert ledger.money_multiplier() == 2
    assert prestige_upgrade_cost(ledger, "money_mult") == 2

    for _ in range(10):
        purchase_prestige_upgrade(ledger, "colors")
    assert ledger.prestige_colors == PRESTIGE_UPGRADES["colors"].max_level == 3
    assert ledger.color_count() == 3


def test_combo_decay_upgrade_steps_by_ten():
    ledger = EconomyLedger(prestige_currency=10)
    assert purchase_prestige_upgrade(ledger, "combo_decay") == 2
    assert ledger.combo_decay_reduction == 10
    assert prestige_upgrade_cost(ledger, "combo_decay") == 4


def test_prestige_upgrade_refusals():
    ledger = EconomyLedger(prestige_currency=1)
    assert purchase_prestige_upgrade(ledger, "arena") is None
    assert purchase_prestige_upgrade(ledger, "no_such") is None
    assert ledger.prestige_currency == 1


def test_auto_buy_unlock_is_one_time():
    ledger = EconomyLedger(prestige_currency=AUTO_BUY_COST * 2)
    assert unlock_auto_buy(ledger, "bronze") is True
    assert unlock_auto_buy(ledger, "bronze") is False
    assert unlock_auto_buy(ledger, "money_mult") is False
    assert ledger.prestige_currency == AUTO_BUY_COST
    assert ledger.auto_buy == {"bronze"}


def test_session_prestige_grows_the_arena():
    ledger = EconomyLedger(currency=10000, prestige_arena=2)
    session = create_session(ledger=ledger)
    session.config.autoplay_enabled = False
    assert session.grid.rows == 7
    events = record_events(session.event_bus, EVENT_PRESTIGE_PERFORMED, EVENT_GAME_RESTARTED)

    ledger.prestige_arena = 3
    assert session.prestige() == 1

    assert sorted(name for name, _ in events) == sorted([EVENT_PRESTIGE_PERFORMED, EVENT_GAME_RESTARTED])
    assert dict(events)[EVENT_PRESTIGE_PERFORMED] == {"coins": 1}
    assert (session.grid.rows, session.grid.cols) == (8, 8)
    assert session.grid.is_settled()
    assert session.ledger.currency == 0


def test_prestige_request_event_with_nothing_to_gain_is_ignored():
    session = layout_session(base_layout(5), ledger=EconomyLedger(currency=100))
    events = record_events(session.event_bus, EVENT_PRESTIGE_PERFORMED)
    session.event_bus.emit(EVENT_PRESTIGE_REQUEST)
    assert events == []
    assert session.ledger.currency == 100


def test_prestige_upgrade_request_events():
    session = layout_session(base_layout(5), ledger=EconomyLedger(prestige_currency=7))
    events = record_events(session.event_bus, EVENT_PRESTIGE_UPGRADE_PURCHASED)

    session.event_bus.emit(EVENT_PRESTIGE_UPGRADE_REQUEST, key="arena")
    session.event_bus.emit(EVENT_PRESTIGE_UPGRADE_REQUEST, key="gold", auto_buy=True)

    assert events == [
        (EVENT_PRESTIGE_UPGRADE_PURCHASED, {"key": "arena", "cost": 2}),
        (EVENT_PRESTIGE_UPGRADE_PURCHASED, {"key": "auto_buy:gold", "cost": AUTO_BUY_COST}),
    ]
    assert session.ledger.prestige_currency == 0
    assert session.ledger.prestige_arena == 1
    assert "gold" in session.ledger.auto_buy
