# constants.py
"""
Application-level constants.

These values are static and do not change between runs. They cover the
frame timing contract, default window properties and the color palettes
shared by the particle systems. Anything a user may want to tune per run
lives in config.json instead.
"""

# --- Frame timing ---
# Delta time reported for the very first frame (no previous timestamp).
NOMINAL_DELTA_TIME = 1.0 / 60.0
# Upper clamp for a single frame's delta time, in seconds. Absorbs pauses,
# window drags and backgrounded frames.
MAX_DELTA_TIME = 0.1

# Visualization settings
FULLSCREEN = False
DEFAULT_WINDOW_WIDTH = 420
DEFAULT_WINDOW_HEIGHT = 820
FPS = 60
BACKGROUND_COLOR = (8, 10, 24)  # Night blue
HUD_TEXT_COLOR = (220, 220, 220)
HUD_BACKGROUND_ALPHA = 110
# Pre-rendered gradient sprites kept per surface, least recently used dropped first.
GRADIENT_CACHE_SIZE = 256
# Stop alphas are stored relative to the brightest stop, in this many steps.
GRADIENT_ALPHA_LEVELS = 32

# Number of segments used when flattening curves and ellipses into paths.
CURVE_SEGMENTS = 8
ELLIPSE_SEGMENTS = 32

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)

# --- Palettes ---
# Each system picks from its palette by index; particles store the index.

ORNAMENT_COLORS = [
    ((229, 57, 53), (255, 111, 96)),    # Red
    ((198, 40, 40), (255, 82, 82)),     # Dark Red
    ((255, 215, 0), (255, 229, 127)),   # Gold
    ((46, 125, 50), (96, 173, 94)),     # Green
    ((21, 101, 192), (94, 146, 243)),   # Blue
    ((106, 27, 154), (156, 77, 204)),   # Purple
]

FIREWORK_COLORS = [
    (255, 215, 0),    # Gold
    (255, 107, 107),  # Coral Red
    (78, 205, 196),   # Teal
    (255, 105, 180),  # Hot Pink
    (135, 206, 235),  # Sky Blue
    (255, 255, 255),  # White
    (255, 165, 0),    # Orange
    (147, 112, 219),  # Purple
    (0, 255, 127),    # Spring Green
]

FIREWORK_2026_COLORS = [
    (255, 126, 121),
    (255, 212, 121),
    (212, 251, 121),
    (73, 250, 121),
    (73, 252, 214),
    (74, 214, 255),
    (122, 129, 255),
    (216, 131, 255),
    (255, 255, 255),
]

CONFETTI_COLORS = [
    (255, 215, 0),    # Gold
    (192, 192, 192),  # Silver
    (255, 105, 180),  # Pink
    (0, 206, 209),    # Cyan
    (255, 69, 0),     # Orange Red
    (148, 0, 211),    # Violet
    (0, 255, 0),      # Lime
    (255, 255, 255),  # White
]

BUBBLE_GLOW_COLOR = (255, 215, 0)

PETAL_COLORS = [
    (255, 183, 197),
    (255, 192, 203),
    (255, 218, 222),
    (255, 228, 232),
]
PETAL_VEIN_COLOR = (232, 145, 160)

FIREFLY_COLORS = [
    (255, 224, 102),
    (187, 255, 87),
    (170, 255, 119),
    (255, 221, 68),
]
GRASS_COLOR = (26, 61, 26)
MOON_COLORS = ((255, 250, 230), (232, 224, 192))

LEAF_COLORS = [
    (34, 139, 34),
    (50, 205, 50),
    (144, 238, 144),
    (0, 100, 0),
]

SUN_COLORS = [(255, 229, 92), (255, 170, 0), (255, 102, 0)]
PLANET_RING_COLOR = (212, 165, 116)

ATOM_COLORS = [
    (0, 255, 255),    # Cyan
    (0, 212, 255),    # Light blue
    (123, 104, 238),  # Purple
    (255, 107, 157),  # Pink
    (0, 255, 136),    # Green
]
HEX_GRID_COLOR = (0, 212, 255)

GOLDEN_LIGHT = (255, 215, 0)
WARM_GOLD = (255, 200, 87)
DIVINE_WHITE = (255, 250, 240)
CORNSILK = (255, 248, 220)

FISH_COLORS = [
    (255, 107, 107),
    (255, 230, 109),
    (78, 205, 196),
    (255, 140, 66),
]

ORB_COLORS = [
    (99, 102, 241),
    (139, 92, 246),
    (236, 72, 153),
    (6, 182, 212),
]

TRUNK_COLORS = [(93, 64, 55), (139, 69, 19)]
BRANCH_COLOR = (109, 76, 65)
FOLIAGE_COLORS = [(50, 205, 50), (34, 139, 34), (0, 100, 0)]
GROUND_COLORS = [(93, 64, 55), (62, 39, 35)]
SEED_COLOR = (139, 69, 19)

# Summer: sky, sun and ocean.
SUMMER_SKY_COLORS = [(135, 206, 235), (74, 144, 164), (44, 83, 100)]
SUMMER_SUN_CORE = [(255, 255, 224), (255, 215, 0), (255, 165, 0)]
SUMMER_ORANGE = (255, 165, 0)
SUMMER_MOTE_COLOR = (255, 228, 181)
OCEAN_COLORS = ((0, 119, 182), (2, 62, 138))

# Day and night: three-color vertical skies for each phase of the cycle.
SKY_SUNRISE = [(255, 140, 66), (255, 215, 0), (255, 244, 224)]
SKY_DAY = [(74, 144, 217), (135, 206, 235), (184, 224, 240)]
SKY_SUNSET = [(255, 107, 53), (255, 171, 94), (255, 216, 158)]
SKY_DUSK = [(44, 62, 80), (52, 73, 94), (93, 109, 126)]
SKY_NIGHT = [(13, 27, 42), (27, 38, 59), (44, 62, 80)]
DAY_SUN_COLORS = [(255, 255, 224), (255, 215, 0), (255, 165, 0)]
DAY_SUN_GLOW = (255, 255, 204)
MOON_FACE_COLORS = [(255, 255, 240), (245, 245, 220), (232, 232, 208)]
MOON_CRATER_COLOR = (212, 212, 170)
NIGHT_CLOUD_COLOR = (85, 85, 85)
DAY_GROUND_COLORS = [(34, 139, 34), (46, 125, 50)]
NIGHT_GROUND_COLORS = [(27, 67, 50), (13, 40, 24)]
