from dataclasses import dataclass
from typing import Tuple


@dataclass(slots=True)
class ChainDetonation:
    """A primed bomb waiting for its delayed detonation."""
    pos: Tuple[int, int]
    remaining: float
