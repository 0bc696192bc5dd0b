from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(slots=True)
class SettleState:
    """Per-cycle bookkeeping shared by the swap, match and bomb systems."""

    # Cells that just came to rest (landed or swapped) and need a match check.
    pending_checks: List[Tuple[int, int]] = field(default_factory=list)
    # The next matched batch came from a swap rather than a cascade.
    last_match_from_swap: bool = False
    # At most one cell reserved for a bomb in the current cycle.
    pending_bomb: Optional[Tuple[int, int]] = None
    # An autoplay swap is in flight.
    auto_moving: bool = False
