"""
Tests for the Monte Carlo evaluator.
"""

import random
import threading

import pytest

from conftest import TERMINAL_CELLS
from simulation import (
    DirectionEvaluation,
    autoplay,
    choose_direction,
    evaluate_direction,
    evaluate_moves,
    random_playout,
    recommend_move,
    run_trial,
    score_outcomes,
)

COLUMNS_ONLY = [3, 6, 12, 24] * 4
ONE_FROM_TERMINAL = [0, 3, 1, 3] + TERMINAL_CELLS[4:]


class TestPlayout:
    def test_stuck_game_scores_zero(self, make_game):
        assert random_playout(make_game(TERMINAL_CELLS), random.Random(0)) == 0

    def test_playout_runs_to_the_end(self, seeded_game):
        game = seeded_game.clone()
        moves = random_playout(game, random.Random(1))
        assert moves >= 1
        assert not game.can_move()

    def test_trial_does_not_touch_base(self, seeded_game):
        before = seeded_game.to_dict()
        direction = seeded_game.legal_moves()[0]
        assert run_trial(seeded_game, direction, 3) >= 1
        assert seeded_game.to_dict() == before

    def test_candidate_ending_the_game_counts_one(self, make_game):
        game = make_game(ONE_FROM_TERMINAL, preview=(1,))
        assert run_trial(game, "left", 4) == 1


class TestEvaluateDirection:
    @pytest.mark.parametrize("trials", [1, 10, 50])
    def test_illegal_direction_scores_zero(self, make_game, trials):
        game = make_game(COLUMNS_ONLY)
        ev = evaluate_direction(game, "left", trials=trials)
        assert ev.score == 0
        assert not ev.legal
        assert ev.trials == 0

    def test_legal_direction(self, make_game):
        game = make_game(COLUMNS_ONLY)
        ev = evaluate_direction(game, "up", trials=20, workers=2, seed=1)
        assert ev.legal
        assert ev.trials == 20
        assert 1 <= ev.worst <= ev.mean <= ev.best
        assert ev.score == score_outcomes(ev.trials, ev.total, ev.worst, ev.best)
        assert ev.score > 0

    def test_seed_makes_results_independent_of_workers(self, seeded_game):
        direction = seeded_game.legal_moves()[0]
        one = evaluate_direction(seeded_game, direction, trials=24, workers=1, seed=9)
        four = evaluate_direction(seeded_game, direction, trials=24, workers=4, seed=9)
        assert one == four

    def test_evaluation_leaves_game_alone(self, seeded_game):
        before = seeded_game.to_dict()
        evaluate_moves(seeded_game, trials=5, workers=2, seed=2)
        assert seeded_game.to_dict() == before

    def test_cancelled_evaluation_is_discarded(self, seeded_game):
        cancel = threading.Event()
        cancel.set()
        direction = seeded_game.legal_moves()[0]
        assert evaluate_direction(seeded_game, direction, trials=50, cancel=cancel) is None

    def test_unknown_direction(self, seeded_game):
        with pytest.raises(ValueError):
            evaluate_direction(seeded_game, "sideways", trials=1)

    def test_trials_must_be_positive(self, seeded_game):
        direction = seeded_game.legal_moves()[0]
        with pytest.raises(ValueError):
            evaluate_direction(seeded_game, direction, trials=0)
        with pytest.raises(ValueError):
            evaluate_direction(seeded_game, direction, trials=-5)


class TestScoring:
    def test_formula(self):
        # mean 10, worst 4, best 20
        assert score_outcomes(3, 30, 4, 20) == 10 + 10 * 4 + 20

    def test_no_trials(self):
        assert score_outcomes(0, 0, 0, 0) == 0


class TestRecommend:
    def test_only_legal_directions_recommended(self, make_game):
        game = make_game(COLUMNS_ONLY)
        direction, evaluations = recommend_move(game, trials=10, workers=1, seed=3)
        assert direction in ("up", "down")
        assert evaluations["left"].score == 0
        assert evaluations["right"].score == 0

    def test_ties_go_to_the_first_direction(self):
        evaluations = {
            "up": DirectionEvaluation("up", 5, True),
            "down": DirectionEvaluation("down", 7, True),
            "left": DirectionEvaluation("left", 7, True),
            "right": None,
        }
        assert choose_direction(evaluations) == "down"

    def test_nothing_scored(self):
        evaluations = {
            "up": DirectionEvaluation("up", 0, False),
            "down": None,
            "left": DirectionEvaluation("left", 0, False),
            "right": DirectionEvaluation("right", 0, False),
        }
        assert choose_direction(evaluations) is None

    def test_stuck_game_has_no_recommendation(self, make_game):
        direction, _ = recommend_move(make_game(TERMINAL_CELLS), trials=5)
        assert direction is None


class TestAutoplay:
    def test_move_cap(self, seeded_game):
        history = autoplay(seeded_game, trials=3, max_moves=3, workers=1, seed=4)
        assert 1 <= len(history) <= 3
        assert [row["move"] for row in history] == list(range(1, len(history) + 1))

    def test_plays_until_game_over(self, make_game):
        game = make_game(ONE_FROM_TERMINAL, preview=(1,))
        history = autoplay(game, trials=2, workers=1, seed=5)
        assert history
        assert history[-1]["game_over"]
        assert not any(row["game_over"] for row in history[:-1])
        assert not game.can_move()

    def test_cancelled_autoplay_stops(self, seeded_game):
        cancel = threading.Event()
        cancel.set()
        assert autoplay(seeded_game, trials=5, cancel=cancel) == []
