from enum import Enum


class CellState(Enum):
    """Simulation state of a single grid cell.

    Only IDLE cells take part in match detection, swaps, gravity pulls and
    bomb damage. MATCHED marks a cell that is scheduled for destruction,
    including bombs primed by a chain reaction.
    """
    IDLE = "idle"
    FALLING = "falling"
    SWAPPING = "swapping"
    MATCHED = "matched"
