"""
Game analytics: evaluation tables, play histories and board statistics.
"""

from collections import Counter
from typing import Dict, List, Optional

import pandas as pd

from config import DIRECTIONS
from models import BoardSnapshot
from simulation import DirectionEvaluation, choose_direction


EVALUATION_COLUMNS = ["Direction", "Legal", "Score", "Mean", "Worst", "Best", "Trials", "Recommended"]
HISTORY_COLUMNS = [
    "move",
    "direction",
    "score",
    "placed_index",
    "placed_value",
    "max_value",
    "preview",
    "giant_preview",
    "game_over",
]


def evaluations_frame(evaluations: Dict[str, Optional[DirectionEvaluation]]) -> pd.DataFrame:
    """
    One row per direction, in the order up, down, left, right.
    Cancelled directions are kept with empty numbers so the table stays 4 rows.
    """
    recommended = choose_direction(evaluations)
    rows = []
    for direction in DIRECTIONS:
        ev = evaluations.get(direction)
        if ev is None:
            rows.append(
                {
                    "Direction": direction,
                    "Legal": None,
                    "Score": None,
                    "Mean": None,
                    "Worst": None,
                    "Best": None,
                    "Trials": 0,
                    "Recommended": False,
                }
            )
            continue
        rows.append(
            {
                "Direction": direction,
                "Legal": ev.legal,
                "Score": ev.score,
                "Mean": ev.mean,
                "Worst": ev.worst,
                "Best": ev.best,
                "Trials": ev.trials,
                "Recommended": direction == recommended,
            }
        )
    return pd.DataFrame(rows, columns=EVALUATION_COLUMNS)


def history_frame(history: List[Dict]) -> pd.DataFrame:
    """Move-by-move table of a played or autoplayed game."""
    return pd.DataFrame(history, columns=HISTORY_COLUMNS)


def tile_counts(snapshot: BoardSnapshot) -> Dict[int, int]:
    """How many of each non-empty tile value are on the board, smallest first."""
    counts = Counter(v for v in snapshot.cells if v)
    return dict(sorted(counts.items()))


def summarize_history(history: List[Dict]) -> Dict[str, int]:
    """Headline numbers for a history: moves, final max tile, giant previews seen."""
    if not history:
        return {"moves": 0, "max_value": 0, "giant_previews": 0, "game_over": False}
    df = history_frame(history)
    return {
        "moves": int(len(df)),
        "max_value": int(df["max_value"].max()),
        "giant_previews": int(df["giant_preview"].sum()),
        "game_over": bool(df["game_over"].iloc[-1]),
    }


def max_value_progression(history: List[Dict]) -> pd.DataFrame:
    """Highest tile after each move, for plotting."""
    df = history_frame(history)
    return df[["move", "max_value"]].reset_index(drop=True)
