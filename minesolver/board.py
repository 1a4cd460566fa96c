"""Player-visible game board with flood-fill reveal and the hidden-cell frontier."""

import logging
from collections import deque
from enum import Enum
from typing import Deque, FrozenSet, List, NamedTuple, Optional, Set, Tuple

from .config import CLOSED, FLAGGED, MINE
from .errors import LogicInvariantViolation
from .field import Coordinate, MineField

logger = logging.getLogger(__name__)


class CellState(Enum):
    HIDDEN = "hidden"
    REVEALED = "revealed"
    FLAGGED = "flagged"
    EXPLODED = "exploded"


class RevealKind(Enum):
    ALREADY_OPEN = "already_open"
    SAFE = "safe"
    DETONATED = "detonated"


class RevealOutcome(NamedTuple):
    """
    Result of GameBoard.reveal().

    value is the adjacency count for SAFE, None otherwise. revealed_cells
    lists every cell opened by the call, flood fill included.
    """

    kind: RevealKind
    value: Optional[int] = None
    revealed_cells: Tuple[Coordinate, ...] = ()


_ALREADY_OPEN = RevealOutcome(RevealKind.ALREADY_OPEN)


class GameBoard:
    """Mutable R x C view of a MineField as a player sees it."""

    def __init__(self, field: MineField) -> None:
        """
        Create a board with every cell hidden.

        Use from_minefield() to also open all zero regions, which is how a
        game normally starts.

        Args:
            field: The ground truth this board reveals from.
        """
        self.field: MineField = field
        self.rows: int = field.rows
        self.cols: int = field.cols

        self._states: List[List[CellState]] = [
            [CellState.HIDDEN for _ in range(self.cols)] for _ in range(self.rows)
        ]
        # Adjacency count of revealed cells, None elsewhere.
        self._numbers: List[List[Optional[int]]] = [
            [None for _ in range(self.cols)] for _ in range(self.rows)
        ]
        self._frontier: Set[Coordinate] = {
            (r, c) for r in range(self.rows) for c in range(self.cols)
        }

    @classmethod
    def from_minefield(cls, field: MineField) -> "GameBoard":
        """Create a board and flood-fill every zero-valued cell."""
        board = cls(field)
        board.open_blanks()
        return board

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def neighbors(self, cell: Coordinate) -> Tuple[Coordinate, ...]:
        return self.field.neighbors(cell)

    def state(self, cell: Coordinate) -> CellState:
        r, c = cell
        return self._states[r][c]

    def number(self, cell: Coordinate) -> Optional[int]:
        """Return the revealed adjacency count of a cell, or None if not revealed."""
        r, c = cell
        return self._numbers[r][c]

    def is_hidden(self, cell: Coordinate) -> bool:
        r, c = cell
        return self._states[r][c] is CellState.HIDDEN

    @property
    def frontier(self) -> FrozenSet[Coordinate]:
        """Snapshot of the coordinates still hidden."""
        return frozenset(self._frontier)

    @property
    def frontier_size(self) -> int:
        return len(self._frontier)

    def hidden_cells(self) -> List[Coordinate]:
        """Hidden coordinates in row-major order."""
        return sorted(self._frontier)

    def cells_in_state(self, state: CellState) -> List[Coordinate]:
        return [
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if self._states[r][c] is state
        ]

    def revealed_neighbors(self, cell: Coordinate) -> List[Coordinate]:
        return [n for n in self.neighbors(cell) if self.state(n) is CellState.REVEALED]

    def neighbor_counts(self, cell: Coordinate) -> Tuple[int, int]:
        """Return (flagged, hidden) counts over the neighbors of a cell."""
        flagged = hidden = 0
        for n in self.neighbors(cell):
            s = self.state(n)
            if s is CellState.FLAGGED:
                flagged += 1
            elif s is CellState.HIDDEN:
                hidden += 1
        return flagged, hidden

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _check_bounds(self, cell: Coordinate) -> None:
        if not self.field.in_bounds(cell):
            raise ValueError(f"Cell {cell} is outside the {self.rows}x{self.cols} board.")

    def _open(self, cell: Coordinate, value: int) -> None:
        r, c = cell
        self._states[r][c] = CellState.REVEALED
        self._numbers[r][c] = value
        self._frontier.discard(cell)

    def reveal(self, cell: Coordinate) -> RevealOutcome:
        """
        Open a cell.

        A cell that is not hidden is left alone and ALREADY_OPEN is returned,
        so it is safe to reveal eagerly. A zero-valued cell opens its whole
        connected zero region plus the numbered ring around it.

        Raises:
            ValueError: If the coordinate is outside the board.
        """
        self._check_bounds(cell)
        if not self.is_hidden(cell):
            return _ALREADY_OPEN

        value = self.field.value(cell)
        if value == MINE:
            r, c = cell
            self._states[r][c] = CellState.EXPLODED
            self._frontier.discard(cell)
            logger.debug("Cell %s detonated", cell)
            return RevealOutcome(RevealKind.DETONATED, None, (cell,))

        if value != 0:
            self._open(cell, value)
            return RevealOutcome(RevealKind.SAFE, value, (cell,))

        return RevealOutcome(RevealKind.SAFE, 0, tuple(self._flood_fill(cell)))

    def _flood_fill(self, start: Coordinate) -> List[Coordinate]:
        """Open a zero region breadth-first and return the cells opened."""
        work: Deque[Coordinate] = deque([start])
        queued: Set[Coordinate] = {start}
        opened: List[Coordinate] = []

        while work:
            cell = work.popleft()
            if not self.is_hidden(cell):
                continue

            value = self.field.value(cell)
            self._open(cell, value)
            opened.append(cell)

            if value != 0:
                continue
            for n in self.neighbors(cell):
                if n in queued or not self.is_hidden(n):
                    continue
                queued.add(n)
                work.append(n)

        return opened

    def flag(self, cell: Coordinate) -> bool:
        """
        Mark a hidden cell as a mine.

        Returns:
            True if the cell was hidden and is now flagged, False otherwise.
        """
        self._check_bounds(cell)
        if not self.is_hidden(cell):
            return False
        r, c = cell
        self._states[r][c] = CellState.FLAGGED
        self._frontier.discard(cell)
        return True

    def open_blanks(self) -> int:
        """Flood-fill every zero-valued cell. Returns the number of cells opened."""
        opened = 0
        for r in range(self.rows):
            for c in range(self.cols):
                if self.field.value((r, c)) == 0:
                    opened += len(self.reveal((r, c)).revealed_cells)
        if opened:
            logger.debug("Opened %d cells from blank regions", opened)
        return opened

    # -------------------------------------------------------------------------
    # Consistency and export
    # -------------------------------------------------------------------------

    def check_invariants(self) -> None:
        """
        Check that the frontier mirrors the hidden cells exactly.

        Raises:
            LogicInvariantViolation: If the frontier and cell states disagree.
        """
        hidden = set(self.cells_in_state(CellState.HIDDEN))
        if hidden != self._frontier:
            raise LogicInvariantViolation(
                f"Frontier holds {len(self._frontier)} cells but {len(hidden)} are hidden: "
                f"extra {sorted(self._frontier - hidden)}, missing {sorted(hidden - self._frontier)}."
            )

    def to_state_grid(self) -> List[List[int]]:
        """
        Export cell states as integers.

        Hidden cells are -1, revealed cells their count, exploded mines 9 and
        flags 10.
        """
        grid: List[List[int]] = []
        for r in range(self.rows):
            row: List[int] = []
            for c in range(self.cols):
                s = self._states[r][c]
                if s is CellState.HIDDEN:
                    row.append(CLOSED)
                elif s is CellState.FLAGGED:
                    row.append(FLAGGED)
                elif s is CellState.EXPLODED:
                    row.append(MINE)
                else:
                    row.append(int(self._numbers[r][c]))  # type: ignore[arg-type]
            grid.append(row)
        return grid

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def format_board(self, reveal_all: bool = False, color: bool = False) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Hidden cells are '.', flags 'F', a detonated mine '!'. With reveal_all
        the true value of hidden cells is shown, mines as 'M'.

        Args:
            reveal_all: If True, show what lies under hidden cells.
            color: If True, wrap labels and mines in ANSI colors.

        Returns:
            A formatted multi-line string with coordinate labels and the grid.
        """

        def coord(s: str) -> str:
            return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}" if color else s

        def mine(s: str) -> str:
            return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}" if color else s

        def cell_str(r: int, c: int) -> str:
            s = self._states[r][c]
            if s is CellState.REVEALED:
                return str(self._numbers[r][c])
            if s is CellState.FLAGGED:
                return "F"
            if s is CellState.EXPLODED:
                return mine("!")
            if reveal_all:
                v = self.field.value((r, c))
                return mine("M") if v == MINE else str(v)
            return "."

        # Header: column indices
        header_cells = " ".join(f"{c:2d}" for c in range(self.cols))
        out = [coord("   ") + coord(header_cells)]
        out.append(coord("   " + "-" * (3 * self.cols - 1)))

        # Rows with row index at left
        for r in range(self.rows):
            row_cells = " ".join(f" {cell_str(r, c)}" for c in range(self.cols))
            out.append(coord(f"{r:2d} ") + coord("|") + row_cells)

        return "\n".join(out)
