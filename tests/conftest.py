import sys, os

# Ensure src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from tests.helpers import base_layout, layout_session, load_layout, record_events, settle, swap_layout

__all__ = [
    "base_layout",
    "layout_session",
    "load_layout",
    "record_events",
    "settle",
    "swap_layout",
]
