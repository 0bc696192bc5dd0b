from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gemforge import constants


@dataclass(slots=True)
class GameConfig:
    """Simulation tuning that is not part of the persisted economy.

    ``board_size`` and ``color_count`` default to the ledger-derived values
    (prestige arena / colour levels) when left as None.
    """
    board_size: Optional[int] = None
    color_count: Optional[int] = None
    fall_speed: float = constants.FALL_SPEED
    spawn_delay: float = constants.SPAWN_DELAY
    swap_duration: float = constants.SWAP_DURATION
    chain_delay: float = constants.BOMB_CHAIN_DELAY
    combo_base_decay: float = constants.COMBO_BASE_DECAY
    combo_decay_growth: float = constants.COMBO_DECAY_GROWTH
    combo_effect_per_point: float = constants.COMBO_EFFECT_PER_POINT
    reshuffle_max_attempts: int = constants.RESHUFFLE_MAX_ATTEMPTS
    bombs_from_autoplay: bool = True
    autoplay_enabled: bool = True
    price_multiplier: float = 1.0

    def __post_init__(self) -> None:
        if self.board_size is not None and not (
            constants.MIN_MATCH_LENGTH <= self.board_size <= constants.MAX_BOARD_SIZE
        ):
            raise ValueError(f"board_size must be within 3..{constants.MAX_BOARD_SIZE}")
        if self.color_count is not None and self.color_count < constants.MIN_MATCH_LENGTH:
            # Fewer colours than the run length leave some cells with no triple-free colour.
            raise ValueError(f"color_count must be at least {constants.MIN_MATCH_LENGTH}")
        if self.fall_speed <= 0:
            raise ValueError("fall_speed must be positive")
        if self.reshuffle_max_attempts < 1:
            raise ValueError("reshuffle_max_attempts must be at least 1")
