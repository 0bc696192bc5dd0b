from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# SYSTEM & TIMING
# ============================================================================
EVENT_TICK = "tick"                                # payload: dt=float (seconds)


# ============================================================================
# INPUT INTENTS
# ============================================================================
EVENT_SWAP_REQUEST = "swap_request"                # payload: src=(r,c), dst=(r,c), manual=bool
EVENT_BOMB_DETONATE_REQUEST = "bomb_detonate_request"  # payload: row, col


# ============================================================================
# SWAP
# ============================================================================
EVENT_SWAP_STARTED = "swap_started"                # payload: src, dst, manual, will_match
EVENT_SWAP_COMMITTED = "swap_committed"            # payload: src, dst, manual
EVENT_SWAP_REVERTED = "swap_reverted"              # payload: src, dst, manual
EVENT_NO_MATCH = "no_match"                        # payload: src, dst, message=str


# ============================================================================
# BOARD & GRAVITY
# ============================================================================
EVENT_PIECE_LANDED = "piece_landed"                # payload: row, col
EVENT_PIECE_FALLING = "piece_falling"              # payload: src=(r,c)|None, dst=(r,c), spawned=bool
EVENT_MATCH_FOUND = "match_found"                  # payload: positions=[(r,c),...], size=int, groups=[[(r,c),...]], from_swap=bool
EVENT_MATCH_CLEARED = "match_cleared"              # payload: positions=[(r,c),...]
EVENT_GEM_DESTROYED = "gem_destroyed"              # payload: row, col, gem_type, enhancement, reason=str
EVENT_BOARD_RESHUFFLED = "board_reshuffled"        # payload: attempts=int, message=str
EVENT_BOARD_CREATED = "board_created"              # payload: rows, cols, color_count
EVENT_GAME_RESTARTED = "game_restarted"            # payload: rows, cols


# ============================================================================
# BOMBS
# ============================================================================
EVENT_BOMB_SPAWNED = "bomb_spawned"                # payload: row, col
EVENT_BOMB_DETONATED = "bomb_detonated"            # payload: row, col, radius, destroyed=[(r,c)], chained=[(r,c)]
EVENT_BOMB_CHAIN_QUEUED = "bomb_chain_queued"      # payload: row, col, delay=float


# ============================================================================
# ECONOMY
# ============================================================================
EVENT_CURRENCY_AWARDED = "currency_awarded"        # payload: row, col, amount, enhancement, source=str
EVENT_COMBO_CHANGED = "combo_changed"              # payload: combo=int, multiplier=float
EVENT_LEDGER_CHANGED = "ledger_changed"            # payload: reason=str
EVENT_UPGRADE_PURCHASE_REQUEST = "upgrade_purchase_request"      # payload: key=str
EVENT_UPGRADE_PURCHASED = "upgrade_purchased"                    # payload: key=str, cost=int, auto=bool
EVENT_PRESTIGE_REQUEST = "prestige_request"                      # payload: None
EVENT_PRESTIGE_PERFORMED = "prestige_performed"                  # payload: coins=int
EVENT_PRESTIGE_UPGRADE_REQUEST = "prestige_upgrade_request"      # payload: key=str, auto_buy=bool
EVENT_PRESTIGE_UPGRADE_PURCHASED = "prestige_upgrade_purchased"  # payload: key=str, cost=int
