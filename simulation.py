"""
Monte Carlo move evaluation: random playouts from re-randomized clones.
"""

import logging
import random
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from config import (
    AUTOPLAY_MAX_MOVES,
    BEST_WEIGHT,
    DIRECTIONS,
    MAX_WORKERS,
    MONTE_CARLO_TRIALS,
    WORST_WEIGHT,
)
from game_logic import Game, GameOver, IllegalMove

logger = logging.getLogger(__name__)


@dataclass
class DirectionEvaluation:
    """Outcome of all playouts for one candidate direction."""
    direction: str
    score: int
    legal: bool
    trials: int = 0
    total: int = 0
    worst: int = 0
    best: int = 0

    @property
    def mean(self) -> float:
        return self.total / self.trials if self.trials else 0.0


def random_playout(game: Game, rng: random.Random) -> int:
    """
    Play uniformly random directions until the game ends.
    Returns the number of committed moves, including the last one.
    """
    if not game.can_move():
        return 0
    moves = 0
    while True:
        try:
            game.move(rng.choice(DIRECTIONS))
        except IllegalMove:
            continue
        except GameOver:
            return moves + 1
        moves += 1


def run_trial(base: Game, direction: str, seed: int) -> int:
    """
    One playout: clone, reshuffle the hidden future, play `direction`, then
    random moves. Returns the number of moves survived, candidate included.
    """
    rng = random.Random(seed)
    game = base.clone()
    game.rerand(rng.getrandbits(64))
    try:
        game.move(direction)
    except GameOver:
        return 1
    return 1 + random_playout(game, rng)


def _run_trials(
    base: Game,
    direction: str,
    seeds: Sequence[int],
    cancel: Optional[threading.Event],
) -> Optional[Tuple[int, int, int, int]]:
    """Run a batch of trials; returns (count, total, worst, best) or None if cancelled."""
    count = 0
    total = 0
    worst = None
    best = 0
    for seed in seeds:
        if cancel is not None and cancel.is_set():
            return None
        c = run_trial(base, direction, seed)
        count += 1
        total += c
        if worst is None or c < worst:
            worst = c
        if c > best:
            best = c
    return count, total, worst or 0, best


def score_outcomes(trials: int, total: int, worst: int, best: int) -> int:
    """Mean survival plus heavy weight on the worst case and a nudge for the best."""
    if trials <= 0:
        return 0
    return total // trials + WORST_WEIGHT * worst + BEST_WEIGHT * best


def evaluate_direction(
    game: Game,
    direction: str,
    trials: int = MONTE_CARLO_TRIALS,
    workers: int = MAX_WORKERS,
    seed: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
) -> Optional[DirectionEvaluation]:
    """
    Estimate how good `direction` is from the current position.

    An illegal direction scores 0 without any playouts. Returns None if
    `cancel` was set before all trials finished.
    """
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown direction: {direction!r}")
    if trials < 1:
        raise ValueError(f"trials must be at least 1, got {trials}")
    if direction not in game.legal_moves():
        return DirectionEvaluation(direction=direction, score=0, legal=False)

    seed_rng = random.Random(seed)
    seeds = [seed_rng.getrandbits(64) for _ in range(trials)]
    base = game.clone()

    n_workers = max(1, min(workers, trials))
    if n_workers == 1:
        results = [_run_trials(base, direction, seeds, cancel)]
    else:
        with ThreadPoolExecutor(max_workers=n_workers) as pool:
            futures = [
                pool.submit(_run_trials, base, direction, seeds[w::n_workers], cancel)
                for w in range(n_workers)
            ]
            results = [f.result() for f in futures]

    if any(r is None for r in results):
        logger.warning("Evaluation of %s cancelled", direction)
        return None

    count = sum(r[0] for r in results)
    total = sum(r[1] for r in results)
    counted = [r for r in results if r[0]]
    worst = min(r[2] for r in counted) if counted else 0
    best = max(r[3] for r in counted) if counted else 0

    evaluation = DirectionEvaluation(
        direction=direction,
        score=score_outcomes(count, total, worst, best),
        legal=True,
        trials=count,
        total=total,
        worst=worst,
        best=best,
    )
    logger.debug(
        "%s: score=%d mean=%.2f worst=%d best=%d over %d trials",
        direction, evaluation.score, evaluation.mean, worst, best, count,
    )
    return evaluation


def evaluate_moves(
    game: Game,
    trials: int = MONTE_CARLO_TRIALS,
    workers: int = MAX_WORKERS,
    seed: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
) -> Dict[str, Optional[DirectionEvaluation]]:
    """Evaluate all four directions, in the order up, down, left, right."""
    seed_rng = random.Random(seed)
    evaluations = {}
    for direction in DIRECTIONS:
        dir_seed = seed_rng.getrandbits(64) if seed is not None else None
        evaluations[direction] = evaluate_direction(
            game, direction, trials=trials, workers=workers, seed=dir_seed, cancel=cancel
        )
    return evaluations


def choose_direction(evaluations: Dict[str, Optional[DirectionEvaluation]]) -> Optional[str]:
    """Highest scoring direction; earlier directions win ties. None if nothing scored."""
    best_dir = None
    best_score = 0
    for direction in DIRECTIONS:
        ev = evaluations.get(direction)
        if ev is not None and ev.score > best_score:
            best_score = ev.score
            best_dir = direction
    return best_dir


def recommend_move(
    game: Game,
    trials: int = MONTE_CARLO_TRIALS,
    workers: int = MAX_WORKERS,
    seed: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
) -> Tuple[Optional[str], Dict[str, Optional[DirectionEvaluation]]]:
    """Evaluate every direction and pick the best. Returns (direction, evaluations)."""
    evaluations = evaluate_moves(game, trials=trials, workers=workers, seed=seed, cancel=cancel)
    return choose_direction(evaluations), evaluations


def move_record(game: Game, move_no: int, direction: str, score: int, game_over: bool) -> Dict:
    """History row describing the move just played on `game`."""
    snap = game.board()
    placed_index, placed_value = game.last_placement or (None, None)
    return {
        "move": move_no,
        "direction": direction,
        "score": score,
        "placed_index": placed_index,
        "placed_value": placed_value,
        "max_value": snap.max_value,
        "preview": list(game.next()),
        "giant_preview": game.is_giant_preview(),
        "game_over": game_over,
    }


def autoplay(
    game: Game,
    trials: int = MONTE_CARLO_TRIALS,
    max_moves: int = AUTOPLAY_MAX_MOVES,
    workers: int = MAX_WORKERS,
    seed: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
) -> List[Dict]:
    """
    Let the evaluator play `game` (in place) until it ends, is cancelled, or
    `max_moves` have been played. Returns one history row per move.
    """
    seed_rng = random.Random(seed)
    history: List[Dict] = []
    while len(history) < max_moves:
        move_seed = seed_rng.getrandbits(64) if seed is not None else None
        direction, evaluations = recommend_move(
            game, trials=trials, workers=workers, seed=move_seed, cancel=cancel
        )
        if direction is None:
            break
        score = evaluations[direction].score
        try:
            game.move(direction)
        except GameOver:
            history.append(move_record(game, len(history) + 1, direction, score, True))
            logger.info("Autoplay finished after %d moves, max tile %d",
                        len(history), game.board().max_value)
            break
        history.append(move_record(game, len(history) + 1, direction, score, False))
    return history
