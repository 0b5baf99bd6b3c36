"""
Main Streamlit application.
"""

import logging
from typing import List, MutableMapping, Optional

import streamlit as st

from config import (
    CELL_COUNT,
    DEFAULT_BOOST_POSITION,
    DEFAULT_BOOST_VALUE,
    DIRECTIONS,
    MAX_WORKERS,
    MONTE_CARLO_TRIALS,
    MONTE_CARLO_TRIALS_UI,
)
from game_logic import Game, GameOver, IllegalMove
from simulation import autoplay, move_record, recommend_move

from ui import (
    print_rules,
    render_bag_counts,
    render_board,
    render_evaluation_table,
    render_history,
    render_preview,
    render_tile_counts,
)

logger = logging.getLogger(__name__)

ARROWS = {"up": "⬆️", "down": "⬇️", "left": "⬅️", "right": "➡️"}
UNDO_LIMIT = 50


def new_session(boost_value: int, boost_position: int) -> None:
    """Start a fresh game and clear everything derived from the old one."""
    st.session_state["game"] = Game(boost_value, boost_position)
    st.session_state["undo_stack"] = []
    st.session_state["history"] = []
    st.session_state["last_eval"] = None
    st.session_state["status"] = None
    st.session_state["game_over"] = False
    logger.info("New game (boost %d at %d)", boost_value, boost_position)


def play(direction: str, score: int = 0) -> None:
    """Play one move on the session game, saving an undo point first."""
    game: Game = st.session_state["game"]
    saved = game.to_json()
    history = st.session_state["history"]
    try:
        game.move(direction)
    except IllegalMove:
        st.session_state["status"] = f"Can't move {direction}."
        return
    except GameOver:
        st.session_state["game_over"] = True
        st.session_state["status"] = "Game over. Undo to try a different line."
        history.append(move_record(game, len(history) + 1, direction, score, True))
    else:
        st.session_state["status"] = None
        history.append(move_record(game, len(history) + 1, direction, score, False))

    push_undo(saved, len(history) - 1)
    st.session_state["last_eval"] = None


def push_undo(saved: str, history_len: int, state: Optional[MutableMapping] = None) -> None:
    """Remember a serialized game and how long the history was at that point."""
    state = st.session_state if state is None else state
    undo_stack = state["undo_stack"]
    undo_stack.append((saved, history_len))
    del undo_stack[:-UNDO_LIMIT]


def autoplay_session(state: MutableMapping, **kwargs) -> List[dict]:
    """
    Let the evaluator play the session game. An undo point is kept only if
    at least one move was played.
    """
    game: Game = state["game"]
    saved = game.to_json()
    played = autoplay(game, **kwargs)
    if played:
        push_undo(saved, len(state["history"]), state=state)
    offset = len(state["history"])
    for row in played:
        row["move"] += offset
    state["history"].extend(played)
    if played and played[-1]["game_over"]:
        state["game_over"] = True
        state["status"] = "Game over."
    state["last_eval"] = None
    return played


def undo() -> None:
    undo_stack = st.session_state["undo_stack"]
    if not undo_stack:
        st.session_state["status"] = "Nothing to undo."
        return
    saved, history_len = undo_stack.pop()
    st.session_state["game"] = Game.from_json(saved)
    del st.session_state["history"][history_len:]
    st.session_state["game_over"] = False
    st.session_state["last_eval"] = None
    st.session_state["status"] = None


def run_app() -> None:
    """Run the main Streamlit application."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    st.set_page_config(page_title="Threes Monte Carlo Advisor", layout="wide")
    st.title("Threes Monte Carlo Advisor")

    # Sidebar settings
    with st.sidebar:
        st.header("Settings")
        boost_value = st.number_input("Starting boost tile", min_value=0, value=DEFAULT_BOOST_VALUE, step=3)
        boost_position = st.number_input(
            "Boost cell (0-15)", min_value=0, max_value=CELL_COUNT - 1, value=DEFAULT_BOOST_POSITION
        )
        trials = st.slider("Playouts per direction", 10, MONTE_CARLO_TRIALS, MONTE_CARLO_TRIALS_UI, step=10)
        workers = st.slider("Worker threads", 1, 16, MAX_WORKERS)
        autoplay_moves = st.number_input("Autoplay move limit", min_value=1, value=50)

        st.markdown("---")
        uploaded = st.file_uploader("Load saved game", type="json")
        if uploaded is not None and st.button("Load"):
            try:
                loaded = Game.from_json(uploaded.getvalue().decode("utf-8"))
            except ValueError as e:
                st.error(f"Could not load game: {e}")
            else:
                new_session(int(boost_value), int(boost_position))
                st.session_state["game"] = loaded
                st.session_state["game_over"] = not loaded.can_move()

    # Initialize session state
    if "game" not in st.session_state:
        new_session(int(boost_value), int(boost_position))

    with st.expander("Rules", expanded=False):
        print_rules()

    game: Game = st.session_state["game"]
    game_over = st.session_state["game_over"]

    # Controls
    move_cols = st.columns(4)
    for col, direction in zip(move_cols, DIRECTIONS):
        with col:
            if st.button(f"{ARROWS[direction]} {direction.title()}", disabled=game_over, key=f"move_{direction}"):
                play(direction)

    col_suggest, col_ai, col_auto, col_undo, col_reset = st.columns(5)

    with col_suggest:
        if st.button("💡 Suggest move", disabled=game_over):
            with st.spinner(f"Running {trials} playouts per direction..."):
                _, evaluations = recommend_move(game, trials=trials, workers=workers)
            st.session_state["last_eval"] = evaluations

    with col_ai:
        if st.button("🤖 Evaluator moves", disabled=game_over):
            with st.spinner("Thinking..."):
                direction, evaluations = recommend_move(game, trials=trials, workers=workers)
            if direction is None:
                st.session_state["status"] = "No move scored above zero."
            else:
                play(direction, evaluations[direction].score)

    with col_auto:
        if st.button("⏩ Autoplay", disabled=game_over):
            with st.spinner(f"Autoplaying up to {autoplay_moves} moves..."):
                autoplay_session(st.session_state, trials=trials, max_moves=int(autoplay_moves), workers=workers)

    with col_undo:
        if st.button("↩️ Undo"):
            undo()

    with col_reset:
        if st.button("🔁 New game"):
            new_session(int(boost_value), int(boost_position))

    # Re-read after any button handler replaced the game
    game = st.session_state["game"]

    if st.session_state["status"]:
        st.warning(st.session_state["status"])

    # Layout: board + dashboards
    board_col, metrics_col = st.columns([1.2, 1.8])

    with board_col:
        st.subheader("Board")
        render_preview(game.next())
        render_bag_counts(game.deck_counts())
        highlight = game.last_placement[0] if game.last_placement else None
        render_board(game.board(), highlight=highlight)
        render_tile_counts(game.board())
        st.download_button(
            "💾 Save game",
            data=game.to_json(),
            file_name="threes_game.json",
            mime="application/json",
        )

    with metrics_col:
        st.subheader("Dashboards")
        if st.session_state["last_eval"] is not None:
            render_evaluation_table(st.session_state["last_eval"])
            st.caption(f"Scores estimated via Monte Carlo with {trials} playouts per direction.")
        render_history(st.session_state["history"])


if __name__ == "__main__":
    run_app()
