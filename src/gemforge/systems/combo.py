import math

from esper import World

from gemforge.components.combo import Combo
from gemforge.config import GameConfig
from gemforge.constants import COMBO_EFFECT_PER_PRESTIGE
from gemforge.events.bus import EventBus, EVENT_COMBO_CHANGED, EVENT_GAME_RESTARTED
from gemforge.systems.state_utils import get_combo, get_ledger


def combo_gain(match_size: int, bonus: int = 0) -> int:
    """Combo points for a matched batch: 1 for 3 gems, 2 for 4, 3 for 5 or more."""
    gain = 1
    if match_size == 4:
        gain = 2
    elif match_size >= 5:
        gain = 3
    return gain + bonus


def decay_rate(base_rate: float, growth: float, level: float) -> float:
    """Per-second decay fraction; growth < 1 makes higher levels decay slower."""
    return base_rate * math.pow(growth, level)


def combo_multiplier(points: int, effect_multiplier: float, effect_per_point: float) -> float:
    if points <= 0:
        return 1.0
    return 1 + points * effect_multiplier * effect_per_point


class ComboSystem:
    """Owns the decaying combo accumulator and its income multiplier."""

    def __init__(self, world: World, event_bus: EventBus, config: GameConfig | None = None):
        self.world = world
        self.event_bus = event_bus
        self.config = config or GameConfig()
        self.event_bus.subscribe(EVENT_GAME_RESTARTED, self.on_restart)

    def _combo(self) -> Combo:
        return get_combo(self.world)

    def combo(self) -> int:
        return self._combo().points

    def add_combo(self, match_size: int) -> float:
        ledger = get_ledger(self.world)
        combo = self._combo()
        before = combo.points
        combo.value += combo_gain(match_size, ledger.prestige_combo_gain)
        if combo.points != before:
            self._emit_changed(combo)
        return combo.value

    def decay(self, dt: float) -> None:
        combo = self._combo()
        if combo.value <= 0 or dt <= 0:
            return
        ledger = get_ledger(self.world)
        level = ledger.combo_decay_reduction / 10
        rate = decay_rate(self.config.combo_base_decay, self.config.combo_decay_growth, level)
        before = combo.points
        combo.value = max(0.0, combo.value - combo.value * rate * dt)
        if combo.points != before:
            self._emit_changed(combo)

    def effect_multiplier(self) -> float:
        ledger = get_ledger(self.world)
        return 1 + ledger.prestige_combo_effect * COMBO_EFFECT_PER_PRESTIGE

    def multiplier(self) -> float:
        return combo_multiplier(
            self._combo().points,
            self.effect_multiplier(),
            self.config.combo_effect_per_point,
        )

    def reset(self) -> None:
        combo = self._combo()
        combo.value = 0.0
        self._emit_changed(combo)

    def on_restart(self, sender, **kwargs):
        self.reset()

    def update(self, dt: float) -> None:
        self.decay(dt)

    def _emit_changed(self, combo: Combo) -> None:
        self.event_bus.emit(EVENT_COMBO_CHANGED, combo=combo.points, multiplier=self.multiplier())
