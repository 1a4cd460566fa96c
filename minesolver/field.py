"""Ground-truth minefield: generation, adjacency counts and text persistence."""

import logging
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from .config import CLOSED, MINE
from .errors import CorruptSaveData, InvalidConfiguration

logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]

_OFFSETS: Tuple[Tuple[int, int], ...] = tuple(
    (dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0)
)


def _adjacent_counts(mines: np.ndarray) -> np.ndarray:
    """
    Count mine neighbors for every cell of a boolean mine mask.

    The mask is padded with a one-cell border of non-mines so edge and corner
    cells need no special handling; the border is dropped from the result.
    """
    rows, cols = mines.shape
    padded = np.pad(mines.astype(np.int8), 1)
    counts = np.zeros((rows, cols), dtype=np.int8)
    for dr, dc in _OFFSETS:
        counts += padded[1 + dr : 1 + dr + rows, 1 + dc : 1 + dc + cols]
    return counts


def _neighbor_table(rows: int, cols: int) -> Dict[Coordinate, Tuple[Coordinate, ...]]:
    """Map every cell to its in-bounds neighbors, using the same offsets as the counts."""
    return {
        (r, c): tuple(
            (r + dr, c + dc)
            for dr, dc in _OFFSETS
            if 0 <= r + dr < rows and 0 <= c + dc < cols
        )
        for r in range(rows)
        for c in range(cols)
    }


class MineField:
    """Immutable R x C grid of true cell values: MINE (9) or an adjacency count 0..8."""

    def __init__(self, mines: np.ndarray) -> None:
        """
        Build a minefield from a boolean mine mask.

        Prefer the named constructors (from_mines, from_values,
        generate_minefield); this one trusts its input shape.

        Args:
            mines: 2-D boolean array, True where a mine is placed.
        """
        mask = np.asarray(mines, dtype=bool)
        if mask.ndim != 2 or mask.shape[0] < 1 or mask.shape[1] < 1:
            raise InvalidConfiguration("A minefield needs at least one row and one column.")

        values = np.where(mask, MINE, _adjacent_counts(mask)).astype(np.int8)
        values.flags.writeable = False
        mask = mask.copy()
        mask.flags.writeable = False

        self._mines: np.ndarray = mask
        self._values: np.ndarray = values
        self.rows: int = int(mask.shape[0])
        self.cols: int = int(mask.shape[1])
        self._neighborhoods = _neighbor_table(self.rows, self.cols)

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_mines(cls, rows: int, cols: int, mines: Iterable[Coordinate]) -> "MineField":
        """Build a field of the given size with mines at the listed coordinates."""
        _check_dimensions(rows, cols)
        mask = np.zeros((rows, cols), dtype=bool)
        for r, c in mines:
            if not (0 <= r < rows and 0 <= c < cols):
                raise InvalidConfiguration(f"Mine coordinate {(r, c)} is outside the board.")
            mask[r, c] = True
        return cls(mask)

    @classmethod
    def from_values(cls, grid: Sequence[Sequence[int]]) -> "MineField":
        """
        Build a field from explicit per-cell values, as stored on disk.

        Raises:
            CorruptSaveData: If the grid is ragged, holds a value outside
                0..9, or a count disagrees with its mine neighbors.
        """
        try:
            values = np.array(grid, dtype=np.int64)
        except (TypeError, ValueError) as exc:
            raise CorruptSaveData(f"Grid is not a rectangular array of integers: {exc}") from exc

        if values.ndim != 2 or values.shape[0] < 1 or values.shape[1] < 1:
            raise CorruptSaveData("Grid must be a non-empty rectangle.")

        if np.any(values == CLOSED):
            raise CorruptSaveData(f"Value {CLOSED} is not valid inside a minefield.")
        if np.any((values < 0) | (values > MINE)):
            bad = int(values[(values < 0) | (values > MINE)][0])
            raise CorruptSaveData(f"Cell value {bad} is out of range 0..{MINE}.")

        field = cls(values == MINE)
        mismatch = np.argwhere(field._values != values)
        if mismatch.size:
            r, c = (int(v) for v in mismatch[0])
            raise CorruptSaveData(
                f"Cell {(r, c)} stores {int(values[r, c])} but has "
                f"{int(field._values[r, c])} mine neighbors."
            )
        return field

    # -------------------------------------------------------------------------
    # Read-only lookups
    # -------------------------------------------------------------------------

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    @property
    def values(self) -> np.ndarray:
        """Read-only array of cell values."""
        return self._values

    @property
    def mines_count(self) -> int:
        return int(self._mines.sum())

    def in_bounds(self, cell: Coordinate) -> bool:
        r, c = cell
        return 0 <= r < self.rows and 0 <= c < self.cols

    def value(self, cell: Coordinate) -> int:
        """Return the true value of a cell: MINE or its adjacency count."""
        r, c = cell
        return int(self._values[r, c])

    def is_mine(self, cell: Coordinate) -> bool:
        r, c = cell
        return bool(self._mines[r, c])

    def neighbors(self, cell: Coordinate) -> Tuple[Coordinate, ...]:
        """Return precomputed in-bounds neighbor coordinates for a cell."""
        return self._neighborhoods[cell]

    def mine_coordinates(self) -> FrozenSet[Coordinate]:
        """Return every true mine coordinate (the MineLedger source)."""
        return frozenset((int(r), int(c)) for r, c in np.argwhere(self._mines))

    def to_list(self) -> List[List[int]]:
        return self._values.tolist()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MineField):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._values, other._values))

    def __hash__(self) -> int:
        return hash((self.shape, self._values.tobytes()))

    def __repr__(self) -> str:
        return f"MineField(rows={self.rows}, cols={self.cols}, mines={self.mines_count})"

    def format_field(self) -> str:
        """Render the true layout, '*' for mines and counts elsewhere."""
        lines = []
        for row in self._values:
            lines.append(" ".join("*" if v == MINE else str(int(v)) for v in row))
        return "\n".join(lines)


# -----------------------------------------------------------------------------
# Generation
# -----------------------------------------------------------------------------


def _check_dimensions(rows: int, cols: int) -> None:
    if not isinstance(rows, (int, np.integer)) or not isinstance(cols, (int, np.integer)):
        raise InvalidConfiguration("rows and cols must be integers.")
    if rows < 1 or cols < 1:
        raise InvalidConfiguration(f"Board must be at least 1x1, got {rows}x{cols}.")


def generate_minefield(
    rows: int,
    cols: int,
    probability: float,
    *,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
) -> MineField:
    """
    Generate a random minefield.

    Each cell independently becomes a mine with the given probability.

    Args:
        rows: Number of rows, must be >= 1.
        cols: Number of columns, must be >= 1.
        probability: Per-cell mine probability in [0, 1].
        rng: Optional numpy Generator; takes precedence over seed.
        seed: Optional seed used to build a Generator when rng is not given.

    Returns:
        A new MineField.

    Raises:
        InvalidConfiguration: If the dimensions or probability are invalid.
    """
    _check_dimensions(rows, cols)
    try:
        p = float(probability)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"Probability must be a number, got {probability!r}.") from exc
    if not 0.0 <= p <= 1.0:
        raise InvalidConfiguration(f"Probability must be in [0, 1], got {probability!r}.")

    if rng is None:
        rng = np.random.default_rng(seed)

    mines = rng.random((rows, cols)) < p
    field = MineField(mines)
    logger.debug("Generated %s with p=%.3f", field, p)
    return field


# -----------------------------------------------------------------------------
# Text persistence
# -----------------------------------------------------------------------------


def dumps_minefield(field: MineField) -> str:
    """Serialize a field: a "rows cols" line, then one tab-separated line per row."""
    lines = [f"{field.rows} {field.cols}"]
    for row in field.to_list():
        lines.append("\t".join(str(v) for v in row))
    return "\n".join(lines) + "\n"


def loads_minefield(text: str) -> MineField:
    """
    Parse a field produced by dumps_minefield().

    Raises:
        CorruptSaveData: If the header or any row is malformed or the values
            are inconsistent.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise CorruptSaveData("Save data is empty.")

    header = lines[0].split()
    if len(header) != 2:
        raise CorruptSaveData(f"Dimension line must hold two integers, got {lines[0]!r}.")
    try:
        rows, cols = int(header[0]), int(header[1])
    except ValueError as exc:
        raise CorruptSaveData(f"Dimension line is not numeric: {lines[0]!r}.") from exc
    if rows < 1 or cols < 1:
        raise CorruptSaveData(f"Dimensions must be positive, got {rows}x{cols}.")

    body = lines[1:]
    if len(body) != rows:
        raise CorruptSaveData(f"Expected {rows} rows, found {len(body)}.")

    grid: List[List[int]] = []
    for i, line in enumerate(body):
        words = line.split()
        if len(words) != cols:
            raise CorruptSaveData(f"Row {i} has {len(words)} values, expected {cols}.")
        try:
            grid.append([int(w) for w in words])
        except ValueError as exc:
            raise CorruptSaveData(f"Row {i} contains a non-integer value: {line!r}.") from exc

    return MineField.from_values(grid)


def save_minefield(field: MineField, path: Union[str, Path]) -> None:
    Path(path).write_text(dumps_minefield(field), encoding="utf-8")
    logger.info("Saved %s to %s", field, path)


def load_minefield(path: Union[str, Path]) -> MineField:
    """Load a field from disk; I/O errors propagate unchanged."""
    field = loads_minefield(Path(path).read_text(encoding="utf-8"))
    logger.info("Loaded %s from %s", field, path)
    return field
