import random

import pytest

from gemforge.components.animation_swap import SwapMotion
from gemforge.components.ledger import EconomyLedger
from gemforge.config import GameConfig
from gemforge.constants import BOMB, RESHUFFLE_MESSAGE
from gemforge.events.bus import EVENT_BOARD_RESHUFFLED, EVENT_GAME_RESTARTED
from gemforge.session import create_session
from gemforge.systems.board import ReshuffleError
from gemforge.systems.board_ops import find_all_matches, find_valid_moves
from gemforge.systems.state_utils import get_combo, get_or_create_settle_state
from tests.helpers import base_layout, layout_session, record_events, swap_layout


def test_new_session_board_is_full_idle_and_match_free():
    for seed in range(5):
        session = create_session(config=GameConfig(autoplay_enabled=False), rng=random.Random(seed))
        grid = session.grid
        assert (grid.rows, grid.cols, grid.color_count) == (5, 5, 6)
        assert grid.is_settled()
        assert find_all_matches(grid) == []
        assert all(0 <= grid.content[r][c] < 6 for r, c in grid.positions())


def test_board_size_and_colours_follow_prestige_levels():
    ledger = EconomyLedger(prestige_arena=3, prestige_colors=2)
    session = create_session(config=GameConfig(autoplay_enabled=False), ledger=ledger, rng=random.Random(0))
    assert (session.grid.rows, session.grid.cols, session.grid.color_count) == (8, 8, 4)


def test_reshuffle_restores_a_valid_move_and_keeps_bombs():
    layout = base_layout(8)
    layout[3][3] = BOMB
    session = layout_session(layout)
    events = record_events(session.event_bus, EVENT_BOARD_RESHUFFLED)
    assert find_valid_moves(session.grid) == []

    attempts = session.board.reshuffle()

    assert attempts >= 1
    assert find_valid_moves(session.grid)
    assert find_all_matches(session.grid) == []
    assert session.grid.is_bomb(3, 3)
    assert events[0][1]["attempts"] == attempts
    assert events[0][1]["message"] == RESHUFFLE_MESSAGE


def test_reshuffle_gives_up_after_attempt_cap():
    layout = [[BOMB] * 3 for _ in range(3)]
    layout[0][0] = 0
    session = layout_session(layout, reshuffle_max_attempts=5)
    with pytest.raises(ReshuffleError):
        session.board.reshuffle()


def test_restart_drops_motion_and_pending_state():
    session = layout_session(swap_layout())
    events = record_events(session.event_bus, EVENT_GAME_RESTARTED)
    session.request_swap((0, 2), (1, 2))
    get_combo(session.world).value = 4.0
    state = get_or_create_settle_state(session.world)
    state.pending_checks.append((3, 3))
    state.pending_bomb = (0, 0)
    state.auto_moving = True

    session.restart()

    assert list(session.world.get_component(SwapMotion)) == []
    assert session.grid.is_settled()
    assert find_all_matches(session.grid) == []
    assert session.combo.combo() == 0
    assert state.pending_checks == []
    assert state.pending_bomb is None
    assert state.auto_moving is False
    assert session.fall.clock == 0.0
    assert len(events) == 1


def test_resize_changes_board_dimensions():
    session = layout_session(base_layout(5))
    session.board.resize(7, 4)
    grid = session.grid
    assert (grid.rows, grid.cols, grid.color_count) == (7, 7, 4)
    assert grid.is_settled()
    assert set(session.fall.last_spawn_time) == set(range(7))
    with pytest.raises(ValueError):
        session.board.resize(2)
    with pytest.raises(ValueError):
        session.board.resize(6, 2)
    assert (session.grid.rows, session.grid.color_count) == (7, 4)


def test_is_busy_until_full_and_idle():
    session = layout_session(base_layout(5))
    assert not session.board.is_busy()
    session.grid.clear(4, 4)
    assert session.board.is_busy()
