"""
Minefield Logic Solver - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import List, Optional, Tuple

from minesolver import play_game
from minesolver.config import CLOSED, FLAGGED, MINE, PRESETS


NUMBER_COLORS = {
    "1": "#0000ff",
    "2": "#008000",
    "3": "#ff0000",
    "4": "#000080",
    "5": "#800000",
    "6": "#008080",
    "7": "#000000",
    "8": "#808080",
}


def render_state_grid(
    grid: List[List[int]],
    truth: Optional[List[List[int]]] = None,
    highlight_cell: Optional[Tuple[int, int]] = None,
) -> str:
    """Render a state grid (-1 hidden, 0..8 revealed, 9 exploded, 10 flagged) as HTML."""
    cols = len(grid[0])
    # Scale cell size based on board width
    if cols >= 30:
        cell_size, font_size = 14, "10px"
    elif cols >= 16:
        cell_size, font_size = 20, "13px"
    else:
        cell_size, font_size = 26, "15px"

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for r, row in enumerate(grid):
        html += "<tr>"
        for c, value in enumerate(row):
            if value == FLAGGED:
                cell, bg, text_color = "F", "#ffa500", "#ffffff"
            elif value == MINE:
                cell, bg, text_color = "M", "#ff0000", "#ffffff"  # Hit mine
            elif value == CLOSED and truth is not None and truth[r][c] == MINE:
                cell, bg, text_color = "M", "#ffcccc", "#ff0000"
            elif value == CLOSED:
                cell, bg, text_color = ".", "#c0c0c0", "#666666"
            else:
                cell = str(value)
                bg = "#f0f0f0" if value == 0 else "#ffffff"
                text_color = NUMBER_COLORS.get(cell, "#000000")

            border = "3px solid #ff0000" if (r, c) == highlight_cell else "1px solid #999"
            display = cell if cell != "0" else " "

            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: {border};
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def main():
    st.set_page_config(
        page_title="Minefield Logic Solver",
        page_icon="💣",
        layout="wide",
    )

    st.title("Minefield Logic Solver")
    st.markdown("""
    Solves a random minefield by flood fill and constraint propagation,
    guessing only when no deduction is left.
    """)

    # Sidebar configuration
    st.sidebar.header("Board Configuration")

    preset = st.sidebar.selectbox("Difficulty Preset", list(PRESETS) + ["custom"])
    if preset == "custom":
        rows = st.sidebar.slider("Rows", 1, 30, 16)
        cols = st.sidebar.slider("Columns", 1, 30, 16)
        probability = st.sidebar.slider("Mine probability", 0.0, 0.5, 0.15, step=0.01)
    else:
        rows, cols, probability = PRESETS[preset]

    seed = st.sidebar.number_input("Seed", min_value=0, value=0, step=1)

    if "result" not in st.session_state:
        st.session_state.result = None
        st.session_state.truth = None
        st.session_state.current_step = 0

    if st.button("Generate and Solve", type="primary"):
        field, _, result = play_game(
            rows, cols, probability, seed=int(seed), record_steps=True
        )
        st.session_state.result = result
        st.session_state.truth = field.to_list()
        st.session_state.current_step = max(len(result.steps_history) - 1, 0)
        st.rerun()

    result = st.session_state.result
    if result is None:
        st.info("Click 'Generate and Solve' to play a board.")
        return

    col1, col2 = st.columns([3, 1])

    with col1:
        st.subheader("Game Board")
        steps = result.steps_history
        replay = bool(steps) and st.checkbox("Step-by-Step Replay Mode")

        if replay:
            step_display = st.slider("Step", 1, len(steps), st.session_state.current_step + 1)
            st.session_state.current_step = step_display - 1
            step = steps[st.session_state.current_step]
            action = "Reveal" if step["action"] == "reveal" else "Flag"
            cell = step["cell"]
            st.info(
                f"**Step {step_display}/{len(steps)}**: {action} cell "
                f"({cell[0]}, {cell[1]}) by *{step['method']}*"
            )
            html = render_state_grid(step["state_snapshot"], highlight_cell=tuple(cell))
        else:
            html = render_state_grid(result.state_grid, truth=st.session_state.truth)

        st.markdown(html, unsafe_allow_html=True)

        if not replay:
            if result.won:
                st.success("Solved! Every mine flagged and every safe cell open.")
            else:
                st.error(f"Lost: {result.reason.value.replace('_', ' ')}.")

    with col2:
        st.subheader("Solver Statistics")
        st.metric("Result", "Win" if result.won else "Loss")
        st.metric("Moves", result.moves)
        st.metric("Deduction Rounds", result.rounds)
        st.metric("Guesses", result.guesses)
        st.metric("Mines Flagged", result.flags)


if __name__ == "__main__":
    main()
