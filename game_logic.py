"""
Core game logic: a game owns its board, deck, giant slot track, PRNG and
the preview of the next tile.
"""

import json
import logging
import random
from typing import Dict, List, Optional, Tuple

from config import (
    CELL_COUNT,
    DIRECTIONS,
    GIANT_BASE,
    GIANT_FIXED,
    GIANT_NO_BONUS,
    GIANT_SCALE,
    INITIAL_CARDS,
)
from models import Board, BoardSnapshot, Deck, GiantSlotTrack

logger = logging.getLogger(__name__)

Preview = Tuple[int, ...]


class GameError(Exception):
    """Base class for the expected outcomes of a move that are not success."""


class IllegalMove(GameError):
    """Nothing slid or merged; the game is exactly as it was."""

    def __init__(self, direction: str):
        super().__init__(f"Illegal move: {direction}")
        self.direction = direction


class GameOver(GameError):
    """The move was committed, but no further move is possible."""

    def __init__(self, preview: Preview):
        super().__init__("Game over")
        self.preview = preview


def giant_candidates(max_value: int, rng: random.Random) -> Optional[List[int]]:
    """
    Possible giant tiles for a board whose highest tile is `max_value`, or
    None if the board has not grown enough for a bonus.

    Above 192 the smallest candidate is 6 * 2**f, with f uniform over
    [0, floor(log2(max_value / 192))].
    """
    if max_value in GIANT_NO_BONUS:
        return None
    if max_value in GIANT_FIXED:
        return GIANT_FIXED[max_value][:]

    # Off-table values (only reachable through an odd boost tile) fall into
    # the band below them.
    if max_value < min(GIANT_FIXED):
        return None
    if max_value < GIANT_SCALE:
        return GIANT_FIXED[max(k for k in GIANT_FIXED if k <= max_value)][:]

    # floor(log2(m / 192)) on integers: bit_length of m // 192, less one
    f_max = (max_value // GIANT_SCALE).bit_length() - 1
    f = rng.randint(0, f_max)
    low = GIANT_BASE * 2 ** f
    return [low, low * 2, low * 4]


def _rng_state_to_list(state: tuple) -> list:
    version, internal, gauss_next = state
    return [version, list(internal), gauss_next]


def _rng_state_from_list(data: list) -> tuple:
    version, internal, gauss_next = data
    return (version, tuple(internal), gauss_next)


class Game:
    """
    One play session (or one simulation branch).

    Moves return the new preview, or raise IllegalMove (nothing changed) or
    GameOver (the move was committed and the board is now stuck).
    """

    def __init__(self, boost_value: int = 0, boost_position: int = 0, seed: Optional[int] = None):
        if boost_value < 0:
            raise ValueError(f"boost_value must be non-negative, got {boost_value}")
        if not 0 <= boost_position < CELL_COUNT:
            raise ValueError(f"boost_position must be in 0..{CELL_COUNT - 1}, got {boost_position}")

        self._rng = random.Random(seed)
        self._board = Board()
        self._deck = Deck.new(self._rng)

        if boost_value:
            # Starting mid-game: the first giant cycle is empty.
            self._board.set(boost_position, boost_value)
            self._giants = GiantSlotTrack.blank()
        else:
            self._giants = GiantSlotTrack.new(self._rng)

        # Deal the opening cards; these do not advance the giant track.
        for _ in range(INITIAL_CARDS):
            card = self._deck.next(self._rng)
            while not self._board.set(self._rng.randrange(CELL_COUNT), card):
                pass

        self._preview: Preview = (self._deck.next(self._rng),)
        self.last_placement: Optional[Tuple[int, int]] = None
        logger.debug("New game: boost=%s@%s preview=%s", boost_value, boost_position, self._preview)

    @classmethod
    def _assemble(
        cls,
        board: Board,
        deck: Deck,
        giants: GiantSlotTrack,
        preview: Preview,
        rng: random.Random,
        last_placement: Optional[Tuple[int, int]] = None,
    ) -> "Game":
        game = cls.__new__(cls)
        game._board = board
        game._deck = deck
        game._giants = giants
        game._preview = tuple(preview)
        game._rng = rng
        game.last_placement = last_placement
        return game

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    def board(self) -> BoardSnapshot:
        return self._board.snapshot()

    def next(self) -> Preview:
        return self._preview

    def can_move(self) -> bool:
        return self._board.can_move()

    def is_giant_preview(self) -> bool:
        return len(self._preview) > 1 or self._preview[0] > 3

    def deck_counts(self) -> Dict[int, int]:
        """1s, 2s and 3s still in the bag, as a player counting cards would know."""
        return self._deck.counts()

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    def _check_giant(self) -> Optional[List[int]]:
        if not self._giants.next(self._rng):
            return None
        return giant_candidates(self._board.max_value, self._rng)

    def move(self, direction: str) -> Preview:
        freed = self._board.shift(direction)
        if not freed:
            raise IllegalMove(direction)

        tile = self._preview[self._rng.randrange(len(self._preview))]
        index = freed[self._rng.randrange(len(freed))]
        self._board.set(index, tile)
        self.last_placement = (index, tile)

        giant = self._check_giant()
        if giant is not None:
            self._preview = tuple(giant)
            logger.debug("Giant preview %s (max=%s)", self._preview, self._board.max_value)
        else:
            self._preview = (self._deck.next(self._rng),)

        if not self._board.can_move():
            raise GameOver(self._preview)
        return self._preview

    def up(self) -> Preview:
        return self.move("up")

    def down(self) -> Preview:
        return self.move("down")

    def left(self) -> Preview:
        return self.move("left")

    def right(self) -> Preview:
        return self.move("right")

    def legal_moves(self) -> List[str]:
        """Directions that would change the board; the game is left untouched."""
        legal = []
        for direction in DIRECTIONS:
            if self._board.clone().shift(direction):
                legal.append(direction)
        return legal

    # ------------------------------------------------------------------
    # Branching for simulation
    # ------------------------------------------------------------------

    def clone(self) -> "Game":
        rng = random.Random()
        rng.setstate(self._rng.getstate())
        return Game._assemble(
            board=self._board.clone(),
            deck=self._deck.clone(),
            giants=self._giants.clone(),
            preview=self._preview,
            rng=rng,
            last_placement=self.last_placement,
        )

    def rerand(self, seed: Optional[int] = None) -> None:
        """
        Reseed the PRNG and reshuffle the unseen deck and giant slots. The
        board and preview are untouched. Only for simulation branches.
        """
        self._rng.seed(seed)
        self._deck.shuffle(self._rng)
        self._giants.shuffle(self._rng)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict:
        return {
            "board": self._board.to_dict(),
            "deck": self._deck.to_dict(),
            "giants": self._giants.to_dict(),
            "preview": list(self._preview),
            "rng": _rng_state_to_list(self._rng.getstate()),
            "last_placement": list(self.last_placement) if self.last_placement else None,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Game":
        try:
            rng = random.Random()
            rng.setstate(_rng_state_from_list(data["rng"]))
            preview = tuple(int(v) for v in data["preview"])
            if not preview:
                raise ValueError("preview must not be empty")
            last = data.get("last_placement")
            return cls._assemble(
                board=Board.from_dict(data["board"]),
                deck=Deck.from_dict(data["deck"]),
                giants=GiantSlotTrack.from_dict(data["giants"]),
                preview=preview,
                rng=rng,
                last_placement=(int(last[0]), int(last[1])) if last else None,
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed game data: {e}") from e

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> "Game":
        return cls.from_dict(json.loads(text))
