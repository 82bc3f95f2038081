"""Project-wide constants for the paperfold engine."""

VERSION = "1"

# Seed reduction / sequence
SEED_MODULUS = 0x7FFFFFFF
LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345
LCG_MASK = 0x7FFFFFFF

# Channel offsets added to the reduced seed before seeding a sequence
CH_REDUCTION = 1111
CH_MAX_FOLDS = 2222
CH_FREQUENCY = 3333
CH_LEVEL_COLORS = 3333
CH_MULTI_COLOR = 4444
CH_RENDER_MODE = 5555
CH_PAPER = 5555
CH_FOLD_STRATEGY = 6666
CH_ABSORBENCY = 6666
CH_WEIGHT_RANGE = 7777
CH_CREASE_WEIGHT = 8888
CH_HIT_COUNTS = 8888
CH_CREASE_LINES = 9191
CH_CREASE_LINE_COLOR = 9292
CH_ANALYTICS = 9393
CH_CELL_SIZE = 9999
CH_DEFAULT_FOLDS = 9999
CH_DRAW_DIRECTION = 33333
CH_RANDOM_MID_ROW = 55555

# Reference canvas
REFERENCE_WIDTH = 1200
REFERENCE_HEIGHT = 1500
DRAWING_MARGIN = 50
CELL_MIN = 4
CELL_MAX = 600
CELL_ASPECT_MAX = 3
FALLBACK_CELL = (8, 12)

# Glyphs
SHADE_CHARS = (" ", "░", "▒", "▓")
CHAR_WIDTH_RATIO = 0.6
GLYPH_OVERLAP = 0.95
EXTREME_WEIGHT = 1.5

RARE_TRAIT_PROBABILITY = 0.008
DEFAULT_OUTPUT_WIDTH = 1200
DEFAULT_OUTPUT_HEIGHT = 1500
ENCODING = "utf-8"
