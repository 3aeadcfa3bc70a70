from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from letterfall.errors import IllegalPieceError
from letterfall.services.random_source import RandomSource

from .grid import Coordinate, GameGrid


Offsets = Tuple[Coordinate, ...]

# First offset of each shape is the rotation pivot.
SHAPES: Tuple[Offsets, ...] = (
    ((0, 0), (1, 0), (2, 0), (3, 0)),  # I
    ((0, 0), (1, 0), (0, 1), (1, 1)),  # O
    ((0, 0), (1, 0), (2, 0), (2, 1)),  # L
    ((0, 1), (1, 1), (2, 1), (2, 0)),  # J
    ((0, 0), (1, 0), (1, 1), (2, 1)),  # Z
    ((0, 1), (1, 1), (1, 0), (2, 0)),  # S
)

ROTATION_KICKS: Tuple[Coordinate, ...] = ((0, 0), (1, 0), (-1, 0), (0, -1))

VOWELS = "AEIOU"

LETTER_WEIGHTS = {
    "A": 8, "E": 8, "I": 8, "O": 8, "U": 8,
    "B": 2, "C": 2, "D": 3, "F": 1, "G": 2, "H": 2, "J": 1, "K": 1,
    "L": 3, "M": 2, "N": 4, "P": 2, "Q": 1, "R": 4, "S": 4, "T": 4,
    "V": 1, "W": 2, "X": 1, "Y": 2, "Z": 1,
}


def _translate(cells: Sequence[Coordinate], dx: int, dy: int) -> List[Coordinate]:
    return [(x + dx, y + dy) for x, y in cells]


@dataclass
class Piece:
    """A lettered shape with absolute cell positions.

    `cells[i]` carries `letters[i]`; the two lists always have the same
    length as `offsets`.
    """

    offsets: Offsets
    letters: List[str]
    spawn_x: int = 5
    cells: List[Coordinate] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.offsets = tuple((int(x), int(y)) for x, y in self.offsets)
        self.letters = [str(letter).upper() for letter in self.letters]
        if len(self.offsets) != len(self.letters) or not self.offsets:
            raise ValueError("piece needs one letter per offset")
        if not self.cells:
            self.reset_to_spawn()

    def reset_to_spawn(self) -> None:
        self.cells = _translate(self.offsets, self.spawn_x, 0)

    def min_corner(self) -> Coordinate:
        return min(x for x, _ in self.cells), min(y for _, y in self.cells)

    def can_move(self, grid: GameGrid, dx: int = 0, dy: int = 0) -> bool:
        return grid.can_place(_translate(self.cells, dx, dy))

    def move(self, grid: GameGrid, dx: int = 0, dy: int = 0) -> bool:
        if not self.can_move(grid, dx, dy):
            return False
        self.cells = _translate(self.cells, dx, dy)
        return True

    def rotated_cells(self) -> List[Coordinate]:
        px, py = self.cells[0]
        return [(px - (y - py), py + (x - px)) for x, y in self.cells]

    def try_rotate(self, grid: GameGrid) -> bool:
        self._require_legal(grid)
        rotated = self.rotated_cells()
        for kx, ky in ROTATION_KICKS:
            candidate = _translate(rotated, kx, ky)
            if grid.can_place(candidate):
                self.cells = candidate
                return True
        return False

    def hard_drop(self, grid: GameGrid) -> int:
        dropped = 0
        while self.move(grid, 0, 1):
            dropped += 1
        return dropped

    def lock(self, grid: GameGrid) -> None:
        self._require_legal(grid)
        grid.write(self.cells, self.letters)

    def _require_legal(self, grid: GameGrid) -> None:
        legal = grid.can_place(self.cells)
        assert legal, f"piece at {self.cells} overlaps the board"
        if not legal:
            raise IllegalPieceError(f"piece at {self.cells} overlaps the board")


class PieceFactory:
    """Builds random pieces: a uniform shape and weighted letters."""

    def __init__(self, rng: RandomSource, spawn_x: int) -> None:
        self.rng = rng
        self.spawn_x = spawn_x
        self._letters = list(LETTER_WEIGHTS.keys())
        self._weights = list(LETTER_WEIGHTS.values())
        self._consonants = [c for c in self._letters if c not in VOWELS]

    def random_letter(self) -> str:
        return self.rng.weighted_choice(self._letters, self._weights)

    def create(self) -> Piece:
        shape = self.rng.choice(SHAPES)
        letters = [self.random_letter() for _ in shape]
        if all(letter in VOWELS for letter in letters):
            letters[self.rng.range_int(0, len(letters))] = self.rng.choice(self._consonants)
        return Piece(shape, letters, self.spawn_x)

    def random_row(self, width: int) -> List[str]:
        piece = self.create()
        return [piece.letters[self.rng.range_int(0, len(piece.letters))] for _ in range(width)]
