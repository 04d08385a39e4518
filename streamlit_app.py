from typing import Dict, List, Tuple
import random
import streamlit as st
from duel import DuelEngine, DuelConfig, PlanningMode, Phase, Side, Cell, EventType

st.set_page_config(page_title="Bendshot Duel", layout="wide")

CELL_COLORS = {
    "wall": "#4a4a52",
    "floor": "#d9d4c7",
    "player": "#2f7de1",
    "ai": "#d9443a",
    "powerup": "#f2c230",
    "plan": "#9ad08f",
    "shot": "#ff9f1c",
}

# --- Initialize session state ---
if "engine" not in st.session_state:
    st.session_state.engine = DuelEngine(DuelConfig(), rng=random.Random())
if "last_shot" not in st.session_state:
    st.session_state.last_shot = []
if "notice" not in st.session_state:
    st.session_state.notice = None

engine: DuelEngine = st.session_state.engine


def board_html(highlight: List[Tuple[int, int]], shot: List[Tuple[int, int]]) -> str:
    marks: Dict[Tuple[int, int], str] = {}
    for p in shot:
        marks[tuple(p)] = CELL_COLORS["shot"]
    for p in highlight:
        marks[tuple(p)] = CELL_COLORS["plan"]
    for p in engine.powerup_positions:
        marks[p] = CELL_COLORS["powerup"]
    marks[engine.player.position] = CELL_COLORS["player"]
    marks[engine.ai_unit.position] = CELL_COLORS["ai"]
    rows = []
    for y in range(engine.grid.size):
        cells = []
        for x in range(engine.grid.size):
            base = CELL_COLORS["wall"] if engine.grid.cells[y][x] == Cell.WALL else CELL_COLORS["floor"]
            color = marks.get((x, y), base)
            label = ""
            if (x, y) == engine.player.position:
                label = str(engine.player.weapon_level)
            elif (x, y) == engine.ai_unit.position:
                label = str(engine.ai_unit.weapon_level)
            cells.append(
                f'<td title="{x},{y}" style="width:22px;height:22px;background:{color};'
                f'text-align:center;font-size:11px;color:white">{label}</td>'
            )
        rows.append("<tr>" + "".join(cells) + "</tr>")
    return '<table style="border-collapse:collapse">' + "".join(rows) + "</table>"


def remember_shots() -> None:
    for event in engine.drain_events():
        if event.type == EventType.SHOT_RESOLVED and event.data.get("valid"):
            st.session_state.last_shot = event.data["path"]


st.title("Bendshot Duel")
st.markdown(
    "Move one step or fire a laser that bends at the waypoints you pick. "
    "Each powerup raises your weapon level, and each level allows one more bend."
)

# Sidebar controls
with st.sidebar.expander("Session", expanded=True):
    if st.button("Reset game"):
        engine.reset()
        st.session_state.last_shot = []
        st.session_state.notice = None
        st.rerun()
    strategy = st.selectbox("AI strategy", options=["balanced", "aggressive", "defensive", "random"],
                            index=["balanced", "aggressive", "defensive", "random"].index(engine.ai.strategy))
    if strategy != engine.ai.strategy:
        engine.config.ai_strategy = strategy
        st.session_state.engine = DuelEngine(engine.config, rng=random.Random())
        st.session_state.last_shot = []
        st.rerun()

st.sidebar.markdown("---")
st.sidebar.metric("Your weapon level", engine.player.weapon_level)
st.sidebar.metric("AI weapon level", engine.ai_unit.weapon_level)
st.sidebar.write(f"Powerups on board: {len(engine.powerup_positions)}")

col1, col2 = st.columns([3, 2])

with col2:
    if engine.outcome:
        if engine.outcome.winner is None:
            st.error(engine.outcome.reason)
        elif engine.outcome.winner is Side.PLAYER:
            st.success(engine.outcome.reason)
        else:
            st.warning(engine.outcome.reason)
    else:
        st.info(f"Turn {engine.turn + 1}: {engine.active_side.label} / {engine.phase.value}")

    if st.session_state.notice:
        st.error(st.session_state.notice)

    mode = st.radio("Plan", ("Move", "Shoot"),
                    index=0 if engine.planning_mode is PlanningMode.MOVE else 1,
                    horizontal=True, disabled=not engine.accepts_player_input)
    wanted = PlanningMode.MOVE if mode == "Move" else PlanningMode.SHOOT
    if wanted is not engine.planning_mode and engine.accepts_player_input:
        engine.set_planning_mode(wanted)

    cx, cy = st.columns(2)
    with cx:
        tx = st.number_input("x", min_value=0, max_value=engine.grid.size - 1, value=engine.player.position[0])
    with cy:
        ty = st.number_input("y", min_value=0, max_value=engine.grid.size - 1, value=engine.player.position[1])
    target = (int(tx), int(ty))

    preview = []
    if engine.planning_mode is PlanningMode.MOVE:
        if st.button("Move here", disabled=not engine.accepts_player_input):
            res = engine.request_move(target)
            st.session_state.notice = None if res.accepted else res.message
            remember_shots()
            st.rerun()
        if st.button("Stay", disabled=not engine.accepts_player_input):
            engine.request_stay()
            st.session_state.notice = None
            remember_shots()
            st.rerun()
    else:
        hint = engine.preview_waypoint(target)
        if hint is not None:
            preview = hint.path if hint.valid else []
            if not hint.valid:
                st.caption("That waypoint is blocked or not in a straight line.")
            elif hint.hits_opponent:
                st.caption("This path crosses the AI!")
        st.write(f"Waypoints so far: {engine.shoot_plan} "
                 f"(max bends {engine.player.bend_budget})")
        if st.button("Add waypoint", disabled=not engine.accepts_player_input):
            res = engine.request_shoot_waypoint(target)
            st.session_state.notice = None if res.success or res.accepted else res.message
            remember_shots()
            st.rerun()
        if st.button("Cancel plan", disabled=not engine.accepts_player_input):
            engine.cancel_plan()
            st.rerun()

    st.markdown("---")
    st.subheader("Log")
    st.text("\n".join(engine.combat_log[-12:]))

with col1:
    st.markdown(board_html(preview, st.session_state.last_shot), unsafe_allow_html=True)
    if engine.phase is Phase.GAME_OVER:
        st.caption("Press 'Reset game' in the sidebar to play again.")

st.sidebar.markdown("---")
st.sidebar.write("Bendshot · Streamlit UI")
