"""
Shared fixtures for the test suite.
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from game_logic import Game  # noqa: E402

# No empty cells and no adjacent pair that merges
TERMINAL_CELLS = [3, 1, 3, 1, 2, 3, 2, 3, 3, 1, 3, 1, 2, 3, 2, 3]


def build_game(cells, preview=(1,), seed=0, giants=None, deck=None, max_value=None):
    """A seeded game whose board, preview and hidden state are replaced."""
    data = Game(seed=seed).to_dict()
    data["board"] = {"cells": list(cells), "max_value": max(cells) if max_value is None else max_value}
    data["preview"] = list(preview)
    if giants is not None:
        data["giants"] = {"slots": list(giants)}
    if deck is not None:
        data["deck"] = {"contents": list(deck)}
    return Game.from_dict(data)


@pytest.fixture
def make_game():
    return build_game


@pytest.fixture
def seeded_game():
    return Game(seed=1234)
