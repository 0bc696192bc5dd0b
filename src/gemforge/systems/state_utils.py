import random

from esper import World

from gemforge.components.combo import Combo
from gemforge.components.grid import Grid
from gemforge.components.ledger import EconomyLedger
from gemforge.components.settle_state import SettleState


def get_grid(world: World) -> Grid:
    for _, grid in world.get_component(Grid):
        return grid
    raise RuntimeError("Grid component not found")


def get_ledger(world: World) -> EconomyLedger:
    for _, ledger in world.get_component(EconomyLedger):
        return ledger
    raise RuntimeError("EconomyLedger component not found")


def get_combo(world: World) -> Combo:
    for _, combo in world.get_component(Combo):
        return combo
    raise RuntimeError("Combo component not found")


def get_or_create_settle_state(world: World) -> SettleState:
    """Return the shared SettleState component, creating it if absent."""
    existing = list(world.get_component(SettleState))
    if existing:
        return existing[0][1]
    world.create_entity(SettleState())
    return list(world.get_component(SettleState))[0][1]


def world_rng(world: World) -> random.Random:
    candidate = getattr(world, "random", None)
    if isinstance(candidate, random.Random):
        return candidate
    rng = random.Random()
    setattr(world, "random", rng)
    return rng
