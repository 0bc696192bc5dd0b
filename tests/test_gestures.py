from gemforge.components.cell_state import CellState
from gemforge.components.grid import Grid
from gemforge.constants import BOMB
from gemforge.input.gestures import DetonateIntent, GestureDecoder, SwapIntent
from tests.helpers import base_layout


def _decoder():
    layout = base_layout(5)
    layout[4][4] = BOMB
    grid = Grid.from_layout(layout)
    return grid, GestureDecoder(grid, min_swipe_distance=30)


def test_click_then_adjacent_click_swaps():
    _, decoder = _decoder()
    assert decoder.click((1, 1)) is None
    assert decoder.selected == (1, 1)
    assert decoder.click((1, 2)) == SwapIntent((1, 1), (1, 2))
    assert decoder.selected is None


def test_non_adjacent_click_moves_selection():
    _, decoder = _decoder()
    decoder.click((0, 0))
    assert decoder.click((2, 2)) is None
    assert decoder.selected == (2, 2)
    assert decoder.click((1, 1)) is None
    assert decoder.selected == (1, 1)


def test_selection_dropped_when_selected_piece_starts_moving():
    grid, decoder = _decoder()
    decoder.click((1, 1))
    grid.set_state(1, 1, CellState.FALLING)
    assert decoder.click((1, 2)) is None
    assert decoder.selected is None


def test_busy_or_bomb_cells_are_not_selectable():
    grid, decoder = _decoder()
    grid.set_state(2, 2, CellState.SWAPPING)
    assert decoder.click((2, 2)) is None
    assert decoder.click((4, 4)) is None
    assert decoder.selected is None


def test_press_on_bomb_detonates():
    _, decoder = _decoder()
    assert decoder.press((4, 4), 0, 0) == DetonateIntent(4, 4)
    assert decoder.release(0, 0) is None


def test_swipe_uses_dominant_axis():
    _, decoder = _decoder()
    decoder.press((2, 2), 100, 100)
    assert decoder.release(140, 110) == SwapIntent((2, 2), (2, 3))

    decoder.press((2, 2), 100, 100)
    assert decoder.release(90, 60) == SwapIntent((2, 2), (1, 2))

    decoder.press((2, 2), 100, 100)
    assert decoder.release(100, 135) == SwapIntent((2, 2), (3, 2))


def test_swipe_off_the_board_falls_back_to_click():
    _, decoder = _decoder()
    decoder.press((0, 0), 100, 100)
    assert decoder.release(60, 100) is None
    assert decoder.selected == (0, 0)


def test_short_drag_is_a_click():
    _, decoder = _decoder()
    decoder.press((1, 1), 100, 100)
    assert decoder.release(110, 105) is None
    assert decoder.selected == (1, 1)
    decoder.press((1, 2), 0, 0)
    assert decoder.release(0, 0) == SwapIntent((1, 1), (1, 2))


def test_press_outside_board_is_ignored():
    _, decoder = _decoder()
    assert decoder.press(None, 0, 0) is None
    assert decoder.press((9, 9), 0, 0) is None
    assert decoder.release(50, 50) is None
