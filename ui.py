"""
UI components and visualization helpers.
"""

import math
from typing import Dict, List, Optional

import pandas as pd
import plotly.express as px
import streamlit as st

from analytics import evaluations_frame, max_value_progression, summarize_history, tile_counts
from config import COLOR_MAP
from models import BoardSnapshot
from simulation import DirectionEvaluation


def print_rules() -> None:
    """Display the rules of the puzzle."""
    st.markdown("### How it works")
    st.write("- Every move pushes all tiles one step toward an edge.")
    st.write("- 1 and 2 merge into 3; from 3 up, only equal tiles merge (3+3=6, 6+6=12, ...).")
    st.write("- After each legal move the previewed tile drops into one of the freed edge cells.")
    st.write("- Tiles come from a bag of twelve cards: four each of 1, 2 and 3.")
    st.info(
        "Once your highest tile reaches 48, about one preview in 21 is a giant bonus tile.\n"
        "Giant candidates grow with the highest tile on the board."
    )


def _tile_color_level(value: int) -> float:
    # 0 empty, 1 and 2 their own colours, 3 and up on a log scale
    if value <= 2:
        return float(value)
    return 3.0 + math.log2(value / 3)


def render_board(snapshot: BoardSnapshot, highlight: Optional[int] = None) -> None:
    """Plot the board as an annotated heatmap."""
    rows = snapshot.rows()
    levels = [[_tile_color_level(v) for v in row] for row in rows]
    text = [[str(v) if v else "" for v in row] for row in rows]

    fig = px.imshow(
        levels,
        color_continuous_scale=[
            (0.0, COLOR_MAP[0]),
            (0.1, COLOR_MAP[1]),
            (0.2, COLOR_MAP[2]),
            (0.3, COLOR_MAP[3]),
            (1.0, "#f0b429"),
        ],
        zmin=0,
        zmax=max(12.0, max(max(r) for r in levels)),
        aspect="equal",
    )
    fig.update_traces(text=text, texttemplate="%{text}", textfont=dict(size=26), hoverinfo="skip")
    if highlight is not None:
        row, col = divmod(highlight, len(rows))
        fig.add_shape(
            type="rect",
            x0=col - 0.5, x1=col + 0.5, y0=row - 0.5, y1=row + 0.5,
            line=dict(color="#f0b429", width=4),
        )
    fig.update_layout(
        coloraxis_showscale=False,
        xaxis=dict(visible=False),
        yaxis=dict(visible=False),
        height=420,
        margin=dict(l=10, r=10, t=10, b=10),
    )
    st.plotly_chart(fig, use_container_width=True)


def render_preview(preview: tuple) -> None:
    """Show the upcoming tile(s)."""
    if len(preview) == 1 and preview[0] <= 3:
        st.metric("Next tile", str(preview[0]))
    else:
        st.metric("Next tile (giant)", " / ".join(str(v) for v in preview))


def render_bag_counts(counts: Dict[int, int]) -> None:
    """Show what is left in the card bag before it refills."""
    col_1, col_2, col_3 = st.columns(3)
    col_1.metric("1s left", counts.get(1, 0))
    col_2.metric("2s left", counts.get(2, 0))
    col_3.metric("3s left", counts.get(3, 0))


def render_evaluation_table(evaluations: Dict[str, Optional[DirectionEvaluation]]) -> None:
    """Render per-direction Monte Carlo scores."""
    st.markdown("#### Move evaluation")
    df = evaluations_frame(evaluations)
    st.dataframe(df, use_container_width=True, hide_index=True)

    fig = px.bar(
        df,
        x="Direction",
        y="Score",
        color="Recommended",
        color_discrete_map={True: "#4daf4a", False: "#999999"},
    )
    fig.update_layout(height=300, margin=dict(l=10, r=10, t=30, b=10), showlegend=False)
    st.plotly_chart(fig, use_container_width=True)


def render_tile_counts(snapshot: BoardSnapshot) -> None:
    """Render how many of each tile are on the board."""
    st.markdown("#### Tiles on board")
    counts = tile_counts(snapshot)
    if not counts:
        st.write("*Board is empty*")
        return
    df = pd.DataFrame(
        [{"Tile": v, "Count": n} for v, n in counts.items()]
    )
    st.dataframe(df, use_container_width=True, hide_index=True)


def render_history(history: List[Dict]) -> None:
    """Render the move history and the max-tile curve."""
    st.markdown("#### History")
    if not history:
        st.write("*No moves yet*")
        return

    summary = summarize_history(history)
    col_moves, col_max, col_giants = st.columns(3)
    col_moves.metric("Moves", summary["moves"])
    col_max.metric("Highest tile", summary["max_value"])
    col_giants.metric("Giant previews", summary["giant_previews"])

    progression = max_value_progression(history)
    fig = px.line(progression, x="move", y="max_value", log_y=True)
    fig.update_layout(height=280, margin=dict(l=10, r=10, t=30, b=10))
    st.plotly_chart(fig, use_container_width=True)

    with st.expander("Move log", expanded=False):
        st.dataframe(pd.DataFrame(history), use_container_width=True, hide_index=True)
