# config.py
import os

# ======= Default board (cells) =======
DEFAULT_WIDTH  = int(os.getenv("DT_DEFAULT_WIDTH", "8"))
DEFAULT_HEIGHT = int(os.getenv("DT_DEFAULT_HEIGHT", "8"))

# Largest side the web host will accept in a single request.
MAX_DIMENSION  = int(os.getenv("DT_MAX_DIMENSION", "64"))

# ======= Search behaviour =======
FORCED_MOVES      = int(os.getenv("DT_FORCED_MOVES", "1")) != 0
REQUIRE_EVEN_AREA = int(os.getenv("DT_REQUIRE_EVEN_AREA", "1")) != 0

# 0 (or negative) disables the cap used by run_to_completion.
MAX_STEPS = int(os.getenv("DT_MAX_STEPS", "0"))

# ======= Rendering =======
TAG_COUNT     = int(os.getenv("DT_TAG_COUNT", "32"))
STEP_DELAY_MS = int(os.getenv("DT_STEP_DELAY_MS", "10"))
CELL_PX       = int(os.getenv("DT_CELL_PX", "40"))

# ======= Output names =======
COORDS_OUT  = os.getenv("DT_COORDS_OUT", "tiling_coords.txt")
LAYOUT_HTML = os.getenv("DT_LAYOUT_HTML", "tiling_view.html")


class CFG:
    DEFAULT_WIDTH  = DEFAULT_WIDTH
    DEFAULT_HEIGHT = DEFAULT_HEIGHT
    MAX_DIMENSION  = MAX_DIMENSION

    FORCED_MOVES      = FORCED_MOVES
    REQUIRE_EVEN_AREA = REQUIRE_EVEN_AREA
    MAX_STEPS         = MAX_STEPS

    TAG_COUNT     = TAG_COUNT
    STEP_DELAY_MS = STEP_DELAY_MS
    CELL_PX       = CELL_PX

    COORDS_OUT  = COORDS_OUT
    LAYOUT_HTML = LAYOUT_HTML


__all__ = ["CFG"]
