"""Arcade front end for gemforge.

Builds a session from the saved ledger, steps it every frame and draws the
board snapshot. Keys: R restarts, P prestiges, 1-9 and 0 buy upgrades.
"""
import logging

import arcade
from arcade import Window, run, set_background_color, color
from rich.logging import RichHandler

from gemforge.components.enhancement import Enhancement
from gemforge.constants import BOMB, CELL_GAP, NEW_GAME_MESSAGE, WINDOW_HEIGHT, WINDOW_WIDTH
from gemforge.economy.upgrades import UPGRADE_ORDER
from gemforge.events.bus import (
    EVENT_BOARD_RESHUFFLED,
    EVENT_GAME_RESTARTED,
    EVENT_NO_MATCH,
)
from gemforge.input.gestures import DetonateIntent, GestureDecoder, SwapIntent
from gemforge.session import create_session
from gemforge.systems.ledger_store import LedgerStore
from gemforge.ui.layout import compute_board_geometry

GEM_COLORS = [
    color.RED,
    color.GREEN,
    color.BLUE,
    color.YELLOW,
    color.PURPLE,
    color.ORANGE,
    color.CYAN,
    color.PINK,
]

RING_COLORS = {
    Enhancement.BRONZE: color.BRONZE,
    Enhancement.SILVER: color.SILVER,
    Enhancement.GOLD: color.GOLD,
    Enhancement.CRYSTAL: color.LIGHT_BLUE,
    Enhancement.RAINBOW: color.MAGENTA,
    Enhancement.PRISMATIC: color.WHITE,
    Enhancement.CELESTIAL: color.ANTIQUE_WHITE,
}

MESSAGE_SECONDS = 1.5

UPGRADE_KEYS = {
    getattr(arcade.key, f"KEY_{(index + 1) % 10}"): key
    for index, key in enumerate(UPGRADE_ORDER)
}


class GemforgeWindow(Window):
    def __init__(self):
        super().__init__(WINDOW_WIDTH, WINDOW_HEIGHT, "Gemforge")
        self.set_update_rate(1/60)
        self.session = create_session(store=LedgerStore())
        self.event_bus = self.session.event_bus
        self.gestures = GestureDecoder(self.session.grid)
        self.message = ""
        self.message_left = 0.0
        self.event_bus.subscribe(EVENT_NO_MATCH, self._on_message)
        self.event_bus.subscribe(EVENT_BOARD_RESHUFFLED, self._on_message)
        self.event_bus.subscribe(EVENT_GAME_RESTARTED, self._on_restarted)
        set_background_color(color.BLACK)

    def _geometry(self):
        grid = self.session.grid
        return compute_board_geometry(self.width, self.height, grid.rows, grid.cols)

    def _on_message(self, sender, **kwargs):
        self.message = kwargs.get('message', '')
        self.message_left = MESSAGE_SECONDS

    def _on_restarted(self, sender, **kwargs):
        self.gestures.clear_selection()
        self.message = NEW_GAME_MESSAGE
        self.message_left = MESSAGE_SECONDS

    def on_update(self, delta_time: float):
        self.session.tick(delta_time)
        if self.message_left > 0:
            self.message_left -= delta_time

    def on_draw(self):
        self.clear()
        snapshot = self.session.snapshot()
        geometry = self._geometry()
        swap_offsets = {}
        for swap in snapshot.swaps:
            # The grid already holds this phase's layout; slide each piece in from the other cell.
            t = swap.progress
            (sr, sc), (dr, dc) = swap.src, swap.dst
            moving_out, moving_in = (swap.src, swap.dst) if swap.phase == 'reverse' else (swap.dst, swap.src)
            swap_offsets[moving_out] = (sr + (dr - sr) * t, sc + (dc - sc) * t)
            swap_offsets[moving_in] = (dr + (sr - dr) * t, dc + (sc - dc) * t)
        radius = geometry.cell_size / 2 - CELL_GAP
        for row in range(snapshot.rows):
            for col in range(snapshot.cols):
                value = snapshot.content[row][col]
                if value is None:
                    continue
                draw_row, draw_col = swap_offsets.get((row, col), (row, col))
                draw_row = snapshot.falling.get((row, col), draw_row)
                x, y = geometry.cell_center(draw_row, draw_col)
                if value == BOMB:
                    arcade.draw_circle_filled(x, y, radius, color.DARK_GRAY)
                    arcade.draw_circle_outline(x, y, radius, color.RED, 2)
                    continue
                arcade.draw_circle_filled(x, y, radius, GEM_COLORS[value % len(GEM_COLORS)])
                ring = RING_COLORS.get(snapshot.enhancements[row][col])
                if ring is not None:
                    arcade.draw_circle_outline(x, y, radius, ring, 3)
        if self.gestures.selected is not None:
            x, y = geometry.cell_center(*self.gestures.selected)
            half = geometry.cell_size / 2
            arcade.draw_lrbt_rectangle_outline(x - half, x + half, y - half, y + half, color.WHITE, 2)
        ledger = self.session.ledger
        arcade.draw_text(f"Currency: {snapshot.currency}", 20, self.height - 30, color.WHITE, 16)
        arcade.draw_text(
            f"Combo: {snapshot.combo}  x{snapshot.combo_multiplier:.1f}",
            20,
            self.height - 55,
            color.ANTIQUE_WHITE,
            14,
        )
        arcade.draw_text(f"Prestige coins: {ledger.prestige_currency}", 20, self.height - 80, color.SILVER, 12)
        if self.message_left > 0 and self.message:
            arcade.draw_text(self.message, self.width / 2, 20, color.WHITE, 16, anchor_x="center")

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int):
        if button != arcade.MOUSE_BUTTON_LEFT:
            return
        cell = self._geometry().cell_at(x, y)
        # Gestures expect y growing downward.
        self._dispatch(self.gestures.press(cell, x, self.height - y))

    def on_mouse_release(self, x: float, y: float, button: int, modifiers: int):
        if button != arcade.MOUSE_BUTTON_LEFT:
            return
        self._dispatch(self.gestures.release(x, self.height - y))

    def on_key_press(self, symbol: int, modifiers: int):
        if symbol == arcade.key.R:
            self.session.restart()
        elif symbol == arcade.key.P:
            self.session.prestige()
        elif symbol in UPGRADE_KEYS:
            self.session.purchase(UPGRADE_KEYS[symbol])

    def _dispatch(self, intent):
        if isinstance(intent, SwapIntent):
            self.session.request_swap(intent.src, intent.dst)
        elif isinstance(intent, DetonateIntent):
            self.session.request_detonate(intent.row, intent.col)


def main():
    logging.basicConfig(
        level="INFO", format="%(message)s", datefmt="[%X]", handlers=[RichHandler()]
    )
    GemforgeWindow()
    run()


if __name__ == "__main__":
    main()
