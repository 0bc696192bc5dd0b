import random

from esper import World

from gemforge.components.combo import Combo
from gemforge.components.grid import Grid
from gemforge.components.ledger import EconomyLedger
from gemforge.components.settle_state import SettleState
from gemforge.constants import DEFAULT_COLOR_COUNT


def create_world(
    *,
    rows: int,
    cols: int,
    color_count: int = DEFAULT_COLOR_COUNT,
    ledger: EconomyLedger | None = None,
    rng: random.Random | None = None,
) -> World:
    """Create the esper world holding the simulation's singleton components.

    The board grid starts empty; ``BoardSystem`` fills it.
    """
    world = World()
    setattr(world, "random", rng or random.Random())
    world.create_entity(Grid(rows=rows, cols=cols, color_count=color_count))
    world.create_entity(Combo())
    world.create_entity(SettleState())
    world.create_entity(ledger if ledger is not None else EconomyLedger())
    return world
