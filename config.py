"""
Game configuration and constants.
"""

# Board geometry
GRID_SIZE = 4
CELL_COUNT = GRID_SIZE * GRID_SIZE

# Board layout (row-major):
#   [ 0,  1,  2,  3,
#     4,  5,  6,  7,
#     8,  9, 10, 11,
#    12, 13, 14, 15]
DIRECTIONS = ["up", "down", "left", "right"]

# Card bag: four each of 1, 2, 3
DECK_CARDS = [1, 1, 1, 1, 2, 2, 2, 2, 3, 3, 3, 3]

# Giant bonus tiles
GIANT_SLOTS = 21  # one giant check fires per 21 draws on average
GIANT_BASE = 6
GIANT_NO_BONUS = {0, 1, 2, 3, 6, 12, 24}
GIANT_FIXED = {
    48: [6],
    96: [6, 12],
}
GIANT_SCALE = 192  # above this the bonus grows with log2(max / 192)

# Cards dealt onto an empty board at the start of a game
INITIAL_CARDS = 8

# Starting large tile (the original player opens with 192 in the bottom-left)
DEFAULT_BOOST_VALUE = 192
DEFAULT_BOOST_POSITION = 12

# Monte Carlo evaluation
MONTE_CARLO_TRIALS = 10000
MONTE_CARLO_TRIALS_UI = 300  # per direction, keeps the app responsive
WORST_WEIGHT = 10
BEST_WEIGHT = 1
MAX_WORKERS = 4
AUTOPLAY_MAX_MOVES = 5000

# Colors for plotting
COLOR_MAP = {
    0: "#222222",   # empty
    1: "#3b7dd8",   # blue
    2: "#d8433b",   # red
    3: "#eeeeee",   # white and up
}
