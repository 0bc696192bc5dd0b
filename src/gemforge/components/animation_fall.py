from dataclasses import dataclass
from typing import Tuple

@dataclass(slots=True)
class FallMotion:
    """Visual descent of the piece that now logically occupies ``pos``.

    ``y`` is measured in cells from the top of the board.
    """
    pos: Tuple[int,int]
    y: float

    @property
    def target_y(self) -> float:
        return float(self.pos[0])
