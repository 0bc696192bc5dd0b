# Board limits; size and colour count normally come from the ledger's prestige levels.
DEFAULT_COLOR_COUNT = 6
MAX_BOARD_SIZE = 12
MIN_MATCH_LENGTH = 3

# Gravity / spawning. Positions are measured in cells, time in seconds.
FALL_SPEED = 8.0            # cells per second
SPAWN_DELAY = 0.08          # per-column cooldown between spawns
SPAWN_START_Y = -1.0        # spawned pieces enter one cell above row 0

# Swap animation length for each leg (forward, reverse).
SWAP_DURATION = 0.15

# Bombs
BOMB = "bomb"
BOMB_CHAIN_DELAY = 0.1
BOMB_RADIUS_SLACK = 0.5

# Combo
COMBO_BASE_DECAY = 0.25          # fraction of the value lost per second at level 0
COMBO_DECAY_GROWTH = 0.9         # per decay-reduction level
COMBO_EFFECT_PER_POINT = 0.2     # +20% income per combo point
COMBO_EFFECT_PER_PRESTIGE = 0.5  # effect multiplier gained per prestige level

# Reshuffle
RESHUFFLE_MAX_ATTEMPTS = 100

# Input
MIN_SWIPE_DISTANCE = 30.0   # pixels

# Messages surfaced to the presentation layer
NO_MATCH_MESSAGE = "No match!"
RESHUFFLE_MESSAGE = "No moves! Shuffling..."
NEW_GAME_MESSAGE = "New game!"

# Window
WINDOW_WIDTH = 600
WINDOW_HEIGHT = 720
BOARD_PIXELS = 500
BOARD_MARGIN = 50
CELL_GAP = 4
