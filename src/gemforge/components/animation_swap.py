from dataclasses import dataclass
from typing import Tuple

@dataclass(slots=True)
class SwapMotion:
    src: Tuple[int,int]
    dst: Tuple[int,int]
    will_match: bool
    manual: bool = True
    progress: float = 0.0  # 0..1 forward or reverse
    phase: str = 'forward'  # 'forward', 'reverse'
    duration: float = 0.15
