from gemforge.components.cell_state import CellState
from gemforge.components.ledger import EconomyLedger
from gemforge.constants import NO_MATCH_MESSAGE
from gemforge.events.bus import (
    EVENT_CURRENCY_AWARDED,
    EVENT_NO_MATCH,
    EVENT_SWAP_COMMITTED,
    EVENT_SWAP_REQUEST,
    EVENT_SWAP_REVERTED,
    EVENT_SWAP_STARTED,
)
from gemforge.systems.state_utils import get_or_create_settle_state
from tests.helpers import base_layout, layout_session, record_events, swap_layout


def test_matching_swap_commits_and_pays_with_combo():
    ledger = EconomyLedger(prestige_money_mult=3, bomb_chance=0)
    session = layout_session(swap_layout(), ledger=ledger)
    events = record_events(session.event_bus, EVENT_SWAP_COMMITTED, EVENT_CURRENCY_AWARDED, EVENT_NO_MATCH)

    assert session.request_swap((0, 2), (1, 2)) is True
    assert session.grid.state_at(0, 2) is CellState.SWAPPING
    assert session.swaps.active_swaps()[0].will_match is True

    session.tick(0.2)

    names = [name for name, _ in events]
    assert names.count(EVENT_SWAP_COMMITTED) == 1
    assert EVENT_NO_MATCH not in names
    awards = [payload for name, payload in events if name == EVENT_CURRENCY_AWARDED]
    # 8x money, combo 1 -> x1.2, floor(9.6) per gem
    assert [a["amount"] for a in awards] == [9, 9, 9]
    assert ledger.currency == 27
    assert ledger.total_earned == 27
    assert session.combo.combo() == 1
    assert session.grid.content[0][:3] == [None, None, None]
    assert session.swaps.active_swaps() == []


def test_non_matching_manual_swap_reverts_with_message():
    session = layout_session(base_layout(8))
    before = session.grid.copy_content()
    events = record_events(session.event_bus, EVENT_SWAP_REVERTED, EVENT_NO_MATCH, EVENT_CURRENCY_AWARDED)

    assert session.request_swap((0, 0), (0, 1))
    session.tick(0.2)
    # The logical swap is undone as soon as the forward leg ends.
    assert session.grid.copy_content() == before
    assert session.grid.state_at(0, 0) is CellState.SWAPPING
    session.tick(0.2)

    assert session.grid.state_at(0, 0) is CellState.IDLE
    assert session.grid.state_at(0, 1) is CellState.IDLE
    assert session.swaps.active_swaps() == []
    no_match = [payload for name, payload in events if name == EVENT_NO_MATCH]
    assert len(no_match) == 1
    assert no_match[0]["message"] == NO_MATCH_MESSAGE
    assert not any(name == EVENT_CURRENCY_AWARDED for name, _ in events)
    assert session.ledger.currency == 0


def test_non_matching_autoplay_swap_reverts_silently():
    session = layout_session(base_layout(8))
    events = record_events(session.event_bus, EVENT_SWAP_REVERTED, EVENT_NO_MATCH)
    state = get_or_create_settle_state(session.world)
    state.auto_moving = True

    assert session.swaps.request_swap((0, 0), (0, 1), manual=False)
    session.tick(0.2)
    session.tick(0.2)

    names = [name for name, _ in events]
    assert names == [EVENT_SWAP_REVERTED]
    assert state.auto_moving is False


def _assert_rejected(session, src, dst):
    before = session.grid.copy_content()
    states = session.grid.copy_states()
    assert session.request_swap(src, dst) is False
    assert session.grid.copy_content() == before
    assert session.grid.copy_states() == states


def test_illegal_swaps_are_silently_ignored():
    layout = base_layout(8)
    layout[3][3] = "bomb"
    layout[5][5] = None
    session = layout_session(layout)
    session.grid.set_state(2, 2, CellState.FALLING)
    events = record_events(session.event_bus, EVENT_SWAP_STARTED)

    _assert_rejected(session, (0, 0), (0, 2))   # not adjacent
    _assert_rejected(session, (1, 1), (2, 2))   # diagonal
    _assert_rejected(session, (0, 7), (0, 8))   # off the board
    _assert_rejected(session, (3, 3), (3, 4))   # bomb
    _assert_rejected(session, (5, 5), (5, 6))   # empty
    _assert_rejected(session, (2, 2), (2, 3))   # not idle

    assert events == []
    assert session.swaps.active_swaps() == []


def test_cells_in_flight_cannot_be_swapped_again():
    session = layout_session(swap_layout())
    assert session.request_swap((0, 2), (1, 2))
    assert session.request_swap((0, 2), (0, 3)) is False
    assert len(session.swaps.active_swaps()) == 1


def test_swap_request_event_routes_to_swap_engine():
    session = layout_session(swap_layout())
    session.event_bus.emit(EVENT_SWAP_REQUEST, src=(0, 2), dst=(1, 2), manual=True)
    assert len(session.swaps.active_swaps()) == 1
