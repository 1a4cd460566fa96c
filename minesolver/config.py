"""Default parameters and encoding constants shared across the package."""

from typing import Dict, Tuple

# Cell encodings used by the text format and state dumps.
MINE = 9
CLOSED = -1
FLAGGED = 10

# Difficulty presets: name -> (rows, cols, mine probability).
# Densities follow the classic 10/81, 40/256 and 99/480 boards.
PRESETS: Dict[str, Tuple[int, int, float]] = {
    "beginner": (9, 9, 0.123),
    "intermediate": (16, 16, 0.156),
    "expert": (16, 30, 0.206),
}

DEFAULT_PRESET = "beginner"

# How many fresh boards play_game() may draw when the opening move hits a mine.
DEFAULT_MAX_REROLLS = 100

# Mine densities used by run_density_sweep().
DEFAULT_SWEEP_PROBABILITIES: Tuple[float, ...] = (0.05, 0.10, 0.15, 0.20, 0.25, 0.30)
