from dataclasses import dataclass
import math


@dataclass(slots=True)
class Combo:
    """Runtime-only combo accumulator; the float decays, reward math reads the floor."""
    value: float = 0.0

    @property
    def points(self) -> int:
        return math.floor(self.value)
