import pandas as pd
import streamlit as st

from app_types import SelectionStatus
from database import get_store
from exceptions import DatabaseError, TennisClubError
from match_service import create_confirmation_service

st.set_page_config(layout="wide", page_title="Tennis Club Matches")

# --- Page Entry Logic ---
if "user_id" not in st.session_state:
    st.error("You are not signed in. Please sign in first.")
    st.switch_page("1_Profile.py")

user_id = st.session_state.user_id
store = get_store()

st.title("🎾 My Matches")

try:
    matches = store.list_matches_for_player(user_id)
except DatabaseError as e:
    st.error(f"Failed to load matches: {e}")
    st.stop()

open_matches = [m for m in matches if not m.is_finalized]
finished_matches = [m for m in matches if m.is_finalized]


def player_label(player_id: str) -> str:
    return "You" if player_id == user_id else f"Opponent ({player_id[:8]})"


st.header("Confirm Results")
if not open_matches:
    st.info("No matches waiting for a result.")

for match in open_matches:
    with st.container(border=True):
        cols = st.columns([1, 3], vertical_alignment="center")
        with cols[0]:
            st.markdown(f"#### Match {match.id[:8]}")
        with cols[1]:
            labels = {player_label(p): p for p in match.participants}
            choice = st.segmented_control(
                "Select Winner",
                list(labels),
                key=f"winner_{match.id}",
                label_visibility="collapsed",
            )
            if st.button("✅ Confirm Winner", key=f"confirm_{match.id}"):
                if choice is None:
                    st.warning("Please select a winner before confirming.")
                else:
                    service = create_confirmation_service(store)
                    try:
                        result = service.submit_selection(match.id, user_id, labels[choice])
                    except TennisClubError as e:
                        st.error(str(e))
                    else:
                        if result.status == SelectionStatus.COMPLETED:
                            st.success("Result confirmed by both players!")
                        elif result.status == SelectionStatus.DISPUTED:
                            st.warning(
                                "You and your opponent selected different winners. "
                                "Please discuss and update your selections."
                            )
                        else:
                            st.info("Waiting for your opponent's selection.")

st.header("History")
if finished_matches:
    df_history = pd.DataFrame(
        {
            "Match": [m.id[:8] for m in finished_matches],
            "Opponent": [
                next(p for p in m.participants if p != user_id)[:8]
                for m in finished_matches
            ],
            "Result": ["Won" if m.winner_id == user_id else "Lost" for m in finished_matches],
        }
    )
    st.dataframe(df_history, use_container_width=True, hide_index=True)
else:
    st.caption("No confirmed matches yet.")
