"""
Data models and state representations: board, card deck, giant slot track.
"""

import random
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from config import CELL_COUNT, DECK_CARDS, GIANT_SLOTS, GRID_SIZE


def _reverse_lines(lines: List[List[int]]) -> List[List[int]]:
    return [line[::-1] for line in lines]


# Each line lists its cells starting from the edge the tiles move toward.
LEFTS = [[row * GRID_SIZE + col for col in range(GRID_SIZE)] for row in range(GRID_SIZE)]
RIGHTS = _reverse_lines(LEFTS)
UPS = [[row * GRID_SIZE + col for row in range(GRID_SIZE)] for col in range(GRID_SIZE)]
DOWNS = _reverse_lines(UPS)

LINES = {
    "up": UPS,
    "down": DOWNS,
    "left": LEFTS,
    "right": RIGHTS,
}


def combines(a: int, b: int) -> bool:
    """1 and 2 make 3; anything else merges only with its own value."""
    return (a == 1 and b == 2) or (a == 2 and b == 1) or (a == b and a not in (1, 2))


@dataclass(frozen=True)
class BoardSnapshot:
    """Read-only copy of a board handed to callers."""
    cells: Tuple[int, ...]
    max_value: int

    def rows(self) -> List[List[int]]:
        return [
            list(self.cells[row * GRID_SIZE:(row + 1) * GRID_SIZE])
            for row in range(GRID_SIZE)
        ]


@dataclass
class Board:
    """4x4 grid of tile values (0 = empty) plus the highest value ever seen."""
    cells: List[int] = field(default_factory=lambda: [0] * CELL_COUNT)
    max_value: int = 0

    def __post_init__(self) -> None:
        if len(self.cells) != CELL_COUNT:
            raise ValueError(f"Board needs {CELL_COUNT} cells, got {len(self.cells)}")
        if any(v < 0 for v in self.cells):
            raise ValueError("Board cells must be non-negative")

    def clone(self) -> "Board":
        return Board(cells=self.cells[:], max_value=self.max_value)

    def snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(cells=tuple(self.cells), max_value=self.max_value)

    def set(self, index: int, value: int) -> bool:
        """Place `value` at an empty cell. Returns False if the cell is taken."""
        if self.cells[index] != 0:
            return False
        self.cells[index] = value
        if value > self.max_value:
            self.max_value = value
        return True

    def empty_cells(self) -> List[int]:
        return [i for i, v in enumerate(self.cells) if v == 0]

    def _squish(self, line: List[int]) -> bool:
        """
        Push one line toward line[0]. Returns True if anything slid or merged,
        in which case the trailing cell line[-1] has been emptied.
        """
        cells = self.cells
        shift = False
        for i in range(len(line) - 1):
            here, there = line[i], line[i + 1]
            if shift or (cells[here] == 0 and cells[there] != 0):
                # once a slide starts, everything behind it follows
                cells[here] = cells[there]
                shift = True
            elif cells[here] != 0 and combines(cells[here], cells[there]):
                cells[here] += cells[there]
                if cells[here] > self.max_value:
                    self.max_value = cells[here]
                shift = True
        if shift:
            cells[line[-1]] = 0
        return shift

    def shift(self, direction: str) -> List[int]:
        """
        Apply a directional shift-merge. Returns the indices freed by the move;
        an empty list means nothing changed and the move is illegal.
        """
        try:
            lines = LINES[direction]
        except KeyError:
            raise ValueError(f"Unknown direction: {direction!r}") from None
        return [line[-1] for line in lines if self._squish(line)]

    def up(self) -> List[int]:
        return self.shift("up")

    def down(self) -> List[int]:
        return self.shift("down")

    def left(self) -> List[int]:
        return self.shift("left")

    def right(self) -> List[int]:
        return self.shift("right")

    def can_move(self) -> bool:
        """True if any cell is empty or any adjacent pair would merge."""
        cells = self.cells
        if 0 in cells:
            return True
        for row in range(GRID_SIZE):
            for col in range(GRID_SIZE):
                v = cells[row * GRID_SIZE + col]
                # Check right
                if col < GRID_SIZE - 1 and combines(v, cells[row * GRID_SIZE + col + 1]):
                    return True
                # Check down
                if row < GRID_SIZE - 1 and combines(v, cells[(row + 1) * GRID_SIZE + col]):
                    return True
        return False

    def to_dict(self) -> Dict:
        return {"cells": self.cells[:], "max_value": self.max_value}

    @classmethod
    def from_dict(cls, data: Dict) -> "Board":
        return cls(cells=[int(v) for v in data["cells"]], max_value=int(data["max_value"]))


@dataclass
class Deck:
    """Shuffled bag of twelve 1/2/3 cards, refilled when empty."""
    contents: List[int] = field(default_factory=list)

    @staticmethod
    def fresh_bag(rng: random.Random) -> List[int]:
        bag = DECK_CARDS[:]
        rng.shuffle(bag)
        return bag

    @classmethod
    def new(cls, rng: random.Random) -> "Deck":
        return cls(contents=cls.fresh_bag(rng))

    def next(self, rng: random.Random) -> int:
        """Draw from the tail, refilling first if the bag ran out."""
        if not self.contents:
            self.contents = self.fresh_bag(rng)
        return self.contents.pop()

    def shuffle(self, rng: random.Random) -> None:
        rng.shuffle(self.contents)

    def counts(self) -> Dict[int, int]:
        """Number of 1s, 2s and 3s left in the bag."""
        return {v: self.contents.count(v) for v in (1, 2, 3)}

    def clone(self) -> "Deck":
        return Deck(contents=self.contents[:])

    def to_dict(self) -> Dict:
        return {"contents": self.contents[:]}

    @classmethod
    def from_dict(cls, data: Dict) -> "Deck":
        return cls(contents=[int(v) for v in data["contents"]])


@dataclass
class GiantSlotTrack:
    """
    21 slots with a single True; one slot is consumed per preview draw, so a
    giant check fires once per 21 draws at a uniformly random point.
    """
    slots: List[bool] = field(default_factory=list)

    @staticmethod
    def fresh_slots(rng: random.Random) -> List[bool]:
        slots = [False] * GIANT_SLOTS
        slots[rng.randrange(GIANT_SLOTS)] = True
        return slots

    @classmethod
    def new(cls, rng: random.Random) -> "GiantSlotTrack":
        return cls(slots=cls.fresh_slots(rng))

    @classmethod
    def blank(cls) -> "GiantSlotTrack":
        """A full cycle with no giant in it."""
        return cls(slots=[False] * GIANT_SLOTS)

    def next(self, rng: random.Random) -> bool:
        if not self.slots:
            self.slots = self.fresh_slots(rng)
        return self.slots.pop()

    def shuffle(self, rng: random.Random) -> None:
        rng.shuffle(self.slots)

    def clone(self) -> "GiantSlotTrack":
        return GiantSlotTrack(slots=self.slots[:])

    def to_dict(self) -> Dict:
        return {"slots": self.slots[:]}

    @classmethod
    def from_dict(cls, data: Dict) -> "GiantSlotTrack":
        return cls(slots=[bool(v) for v in data["slots"]])
