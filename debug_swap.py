import sys, os
ROOT = os.path.dirname(__file__)
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)
import random

from gemforge.config import GameConfig
from gemforge.constants import BOMB
from gemforge.events.bus import (EVENT_SWAP_STARTED, EVENT_SWAP_COMMITTED, EVENT_SWAP_REVERTED,
                                 EVENT_MATCH_FOUND, EVENT_BOMB_SPAWNED, EVENT_PIECE_LANDED)
from gemforge.session import create_session


def dump(session):
    snap = session.snapshot()
    for r in range(snap.rows):
        cells = []
        for c in range(snap.cols):
            value = snap.content[r][c]
            cells.append('.' if value is None else ('B' if value == BOMB else str(value)))
        print(' '.join(cells))
    print('currency', snap.currency, 'combo', snap.combo, 'swaps', snap.swaps)


def drive(session, ticks):
    for _ in range(ticks):
        session.tick(0.02)


session = create_session(config=GameConfig(board_size=5, autoplay_enabled=False), rng=random.Random(7))
received = []
for ev in [EVENT_SWAP_STARTED, EVENT_SWAP_COMMITTED, EVENT_SWAP_REVERTED, EVENT_MATCH_FOUND,
           EVENT_BOMB_SPAWNED, EVENT_PIECE_LANDED]:
    session.event_bus.subscribe(ev, lambda s, _ev=ev, **k: received.append(_ev))

dump(session)
moves = session.valid_moves()
print('valid moves', moves)
if moves:
    session.request_swap(moves[0].src, moves[0].dst)
    print('after request', session.snapshot().swaps)
    drive(session, 5)
    print('after 5 ticks events', received)
    dump(session)
    drive(session, 60)
    print('after 65 ticks events', received)
    dump(session)
