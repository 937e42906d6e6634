"""The letter grid players drain letters from."""

import random
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from .errors import InvalidAction
from .letters import generate_letter, normalise_letter


Cell = Optional[str]
Row = Tuple[Cell, ...]


class Grid(BaseModel):
    """
    A fixed-size matrix of optional letters.

    Row 0 is the top of the grid and the last row is the bottom row, the
    only row letters can be dropped from. Every operation returns a new
    Grid; instances are never modified in place.

    Attributes:
        cells: Rows of cells, each an uppercase letter or None when empty
    """

    model_config = ConfigDict(frozen=True)

    cells: Tuple[Row, ...]

    @field_validator("cells")
    @classmethod
    def _check_shape(cls, cells: Tuple[Row, ...]) -> Tuple[Row, ...]:
        if not cells or not cells[0]:
            raise ValueError("Grid must have at least one row and one column")
        width = len(cells[0])
        if any(len(row) != width for row in cells):
            raise ValueError("All grid rows must have the same length")
        return tuple(tuple(normalise_letter(cell) for cell in row) for row in cells)

    @classmethod
    def create(cls, rows: int, cols: int, rng: Optional[random.Random] = None) -> "Grid":
        """
        Factory method to create a grid with every cell filled.

        Args:
            rows: Number of rows
            cols: Number of columns
            rng: Optional random source for the letter draws

        Returns:
            A new, completely full Grid
        """
        return cls(cells=tuple(
            tuple(generate_letter(rng) for _ in range(cols))
            for _ in range(rows)
        ))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Cell]]) -> "Grid":
        """Build a grid from nested sequences, e.g. ``[["C", "A", None]]``."""
        return cls(cells=tuple(tuple(row) for row in rows))

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0])

    @property
    def bottom_row(self) -> Row:
        return self.cells[-1]

    def row_letters(self, row: int) -> List[str]:
        """Letters in a row, left to right, skipping empty cells."""
        self._check_row(row)
        return [cell for cell in self.cells[row] if cell is not None]

    def letters(self) -> List[str]:
        """All non-empty cells in row-major order."""
        return [cell for row in self.cells for cell in row if cell is not None]

    def letter_counts(self) -> Dict[str, int]:
        """Lowercase multiset of every letter still on the grid."""
        return dict(Counter(letter.lower() for letter in self.letters()))

    def is_empty(self) -> bool:
        return not self.letters()

    def drop_from_bottom_row(self, col: int) -> Tuple["Grid", str]:
        """
        Take the bottom letter of a column and let the column fall by one.

        Every cell above the bottom moves down one row and the top cell is
        left empty. No new letter enters the grid.

        Args:
            col: Column to drop from

        Returns:
            Tuple of (new grid, letter that was at the bottom)

        Raises:
            InvalidAction: If the column is out of range or its bottom cell is empty
        """
        self._check_col(col)
        letter = self.bottom_row[col]
        if letter is None:
            raise InvalidAction(f"Bottom cell of column {col} is empty")

        column = [row[col] for row in self.cells]
        shifted = [None] + column[:-1]
        cells = [list(row) for row in self.cells]
        for r, value in enumerate(shifted):
            cells[r][col] = value
        return Grid.from_rows(cells), letter

    def replace_bottom(self, col: int, replacement: str) -> Tuple["Grid", str]:
        """
        Take the bottom letter of a column and put a fresh letter in its place.

        Used by the keep-full drop policy, where the grid never empties.

        Raises:
            InvalidAction: If the column is out of range or its bottom cell is empty
        """
        self._check_col(col)
        letter = self.bottom_row[col]
        if letter is None:
            raise InvalidAction(f"Bottom cell of column {col} is empty")

        cells = [list(row) for row in self.cells]
        cells[-1][col] = replacement
        return Grid.from_rows(cells), letter

    def delete_row(self, row: int) -> "Grid":
        """
        Remove a row and insert an empty row at the top.

        The row count is unchanged; rows above the deleted one move down.

        Raises:
            InvalidAction: If the row is out of range
        """
        self._check_row(row)
        empty: Row = (None,) * self.cols
        remaining = self.cells[:row] + self.cells[row + 1:]
        return Grid(cells=(empty,) + remaining)

    def rotate_row_right(self, row: int) -> "Grid":
        """
        Rotate the letters of a row one step to the right.

        Only letters move; empty positions stay where they are. A row with
        fewer than two letters is returned unchanged.

        Raises:
            InvalidAction: If the row is out of range
        """
        self._check_row(row)
        positions = [i for i, cell in enumerate(self.cells[row]) if cell is not None]
        if len(positions) < 2:
            return self

        letters = [self.cells[row][i] for i in positions]
        rotated = letters[-1:] + letters[:-1]

        new_row = list(self.cells[row])
        for i, letter in zip(positions, rotated):
            new_row[i] = letter

        cells = list(self.cells)
        cells[row] = tuple(new_row)
        return Grid(cells=tuple(cells))

    def _check_row(self, row: int) -> None:
        if not 0 <= row < self.rows:
            raise InvalidAction(f"Row {row} out of range (0-{self.rows - 1})")

    def _check_col(self, col: int) -> None:
        if not 0 <= col < self.cols:
            raise InvalidAction(f"Column {col} out of range (0-{self.cols - 1})")
