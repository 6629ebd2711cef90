"""Streamlit UI for SeatHall: allocate, deallocate, search, hall view and log."""
from __future__ import annotations

# Add src to sys.path so seat_hall can be found
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))

import html

import streamlit as st

from seat_hall.config import get_settings
from seat_hall.csv_loader import hall_frame, load_students, roster_frame
from seat_hall.engine import Request, SeatingEngine
from seat_hall.logging_config import setup_logging
from seat_hall.models import HallSnapshot

SEAT_CSS = """
<style>
.seat{width:70px;height:50px;border:1px solid #7b7b7b;margin:4px;border-radius:6px;
display:flex;flex-direction:column;justify-content:center;align-items:center;font-size:14px;}
.occupied{background:#06b6d430;border-color:#06b6d4;}
.hall-row{display:flex;}
</style>
"""

# -----------------------------
# Helpers
# -----------------------------

def open_engine() -> SeatingEngine:
    """Load a fresh engine; every button press is one full invocation."""
    engine = SeatingEngine.from_settings(settings)
    engine.load_state()
    return engine


def show_resets(engine: SeatingEngine, start: int = 0) -> None:
    """Report resets recorded since index ``start``."""
    for error in engine.guard.resets[start:]:
        st.error(f"System Reset: {error.message}")


def hall_html(snapshot: HallSnapshot) -> str:
    """Seat grid markup: name and roll on occupied seats."""
    rows = []
    for r in range(snapshot.rows):
        cells = []
        for c in range(snapshot.cols):
            student = snapshot.occupant(r, c)
            if student:
                cells.append(
                    f"<div class='seat occupied'>{html.escape(student.name)}<br>{student.roll}</div>"
                )
            else:
                cells.append("<div class='seat'></div>")
        rows.append(f"<div class='hall-row'>{''.join(cells)}</div>")
    return SEAT_CSS + "".join(rows)


# -----------------------------
# Sidebar options
# -----------------------------

settings = get_settings()
setup_logging(settings.log_level)

st.sidebar.header("Files")
st.sidebar.text(f"State: {settings.data_file}")
st.sidebar.text(f"Log: {settings.log_file}")

action = st.sidebar.radio(
    "Choose an action",
    ["Allocate Seat", "Deallocate Seat", "Search Student", "Display Hall", "View Log", "Import CSV"],
)

# -----------------------------
# Main UI
# -----------------------------

st.title("Seat Allocation System")

engine = open_engine()
show_resets(engine)
loaded_resets = len(engine.guard.resets)
state = engine.current_state()

if action == "Allocate Seat":
    with st.form("allocate"):
        col1, col2 = st.columns(2)
        rows = col1.number_input("Rows", min_value=0, value=state.rows, step=1)
        cols = col2.number_input("Cols", min_value=0, value=state.cols, step=1)
        roll = st.number_input("Roll", min_value=0, value=0, step=1)
        name = st.text_input("Name")
        submitted = st.form_submit_button("Submit")
    st.caption("Note: You can edit Rows/Cols to resize the hall.")
    if submitted:
        msg = engine.handle(Request(action="allocate", rows=int(rows), cols=int(cols), roll=int(roll), name=name))
        show_resets(engine, loaded_resets)
        if msg:
            st.info(msg)

elif action == "Deallocate Seat":
    with st.form("deallocate"):
        roll = st.number_input("Roll", min_value=0, value=0, step=1)
        submitted = st.form_submit_button("Submit")
    if submitted:
        msg = engine.handle(Request(action="deallocate", roll=int(roll)))
        if msg:
            st.info(msg)

elif action == "Search Student":
    with st.form("search"):
        roll = st.number_input("Roll", min_value=0, value=0, step=1)
        submitted = st.form_submit_button("Submit")
    if submitted:
        s = engine.find(int(roll))
        if s:
            st.success(f"Found: {s.name} (Roll {s.roll}) at Row {s.row}, Col {s.col}")
        else:
            st.error("Student not found")

elif action == "Display Hall":
    if state.rows <= 0 or state.cols <= 0:
        st.write("Hall not initialized. Allocate a student to start.")
    else:
        st.subheader(f"Hall ({state.rows} x {state.cols})")
        st.markdown(hall_html(state), unsafe_allow_html=True)
        with st.expander("Table view"):
            st.dataframe(hall_frame(state), use_container_width=True)
        st.subheader("Roster")
        roster_df = roster_frame(state.roster, state.rows, state.cols)
        st.dataframe(roster_df, use_container_width=True)
        st.download_button(
            "Download roster as CSV",
            roster_df.to_csv(index=False).encode("utf-8"),
            file_name="roster.csv",
        )

elif action == "View Log":
    st.subheader("Log")
    text = engine.event_log.read_text()
    st.code(text if text else "Log empty!", language=None)

elif action == "Import CSV":
    uploaded = st.file_uploader("Students CSV (roll,name)", type="csv")
    if uploaded is not None and st.button("Allocate all", key="import_button"):
        try:
            pairs = load_students(uploaded)
        except ValueError as e:
            st.error(f"Input validation error: {e}")
            st.stop()
        for roll, name in pairs:
            st.write(engine.handle(Request(action="allocate", roll=roll, name=name)))
