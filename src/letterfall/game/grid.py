from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np


Coordinate = Tuple[int, int]

EMPTY = ""


class GameGrid:
    """Discrete 2D letter grid.

    Cells hold a single uppercase letter or the empty string. Coordinates are
    (x, y) with y=0 at the top; the backing array is indexed [y, x].
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.grid = np.full((self.height, self.width), EMPTY, dtype="<U1")

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        for x, y in cells:
            if not self.is_inside(x, y):
                return False
            if self.grid[y, x] != EMPTY:
                return False
        return True

    def get(self, x: int, y: int) -> Optional[str]:
        value = str(self.grid[y, x])
        return value or None

    def set(self, x: int, y: int, letter: Optional[str]) -> None:
        self.grid[y, x] = letter.upper() if letter else EMPTY

    def write(self, cells: Sequence[Coordinate], letters: Sequence[str]) -> None:
        for (x, y), letter in zip(cells, letters):
            self.grid[y, x] = letter.upper()

    def clear_cells(self, cells: Iterable[Coordinate]) -> None:
        for x, y in cells:
            self.grid[y, x] = EMPTY

    def row_string(self, y: int, empty: str = ".") -> str:
        return "".join(c or empty for c in self.grid[y, :].tolist())

    def rows(self, empty: str = ".") -> List[str]:
        return [self.row_string(y, empty) for y in range(self.height)]

    def collapse(self) -> None:
        """Compact every column downward, keeping letter order."""
        for x in range(self.width):
            column = self.grid[:, x]
            letters = column[column != EMPTY]
            packed = np.full(self.height, EMPTY, dtype="<U1")
            if letters.size:
                packed[self.height - letters.size :] = letters
            self.grid[:, x] = packed

    def shift_up(self) -> None:
        """Move every row up by one, discarding the top row."""
        self.grid[:-1, :] = self.grid[1:, :]
        self.grid[-1, :] = EMPTY

    def filled_count(self) -> int:
        return int(np.count_nonzero(self.grid != EMPTY))

    def to_codes(self) -> np.ndarray:
        """Integer view: 0 for empty, 1..26 for A..Z."""
        codes = np.zeros((self.height, self.width), dtype=np.int8)
        for y in range(self.height):
            for x in range(self.width):
                letter = self.grid[y, x]
                if letter != EMPTY:
                    codes[y, x] = ord(letter) - ord("A") + 1
        return codes

    @classmethod
    def from_rows(cls, rows: Sequence[str], empty: str = ".") -> "GameGrid":
        height = len(rows)
        width = len(rows[0]) if rows else 0
        grid = cls(width, height)
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                grid.grid[y, x] = EMPTY if ch == empty else ch
        return grid
