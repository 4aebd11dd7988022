import logging

import pandas as pd
import streamlit as st

from achievement_service import AchievementService
from database import get_store
from exceptions import AuthenticationError, DatabaseError
from logger import level_from_env, setup_logging
from streak_service import update_streak
from xp_service import XpService

setup_logging(level_from_env())
logger = logging.getLogger("app.profile")

st.set_page_config(layout="wide", page_title="Tennis Club")

st.title("🎾 Tennis Club")


def on_signed_in(user_id: str) -> None:
    """Daily streak and first-login bonus; failures only warn."""
    store = get_store()
    xp_service = XpService(store, store)
    try:
        update_streak(store, store, user_id)
        AchievementService(store, store, xp_service).award_first_login(user_id)
    except DatabaseError as e:
        logger.error(f"Post sign-in bookkeeping failed for {user_id}: {e}")
        st.warning("Could not update your streak right now.")


# --- Sign In ---
if "user_id" not in st.session_state:
    st.info("Sign in to see your progress and confirm match results.")
    with st.form(key="sign_in_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In")
        if submitted:
            try:
                st.session_state.user_id = get_store().sign_in(email, password)
            except AuthenticationError as e:
                st.error(str(e))
            except DatabaseError as e:
                st.error(f"Database unavailable: {e}")
            else:
                on_signed_in(st.session_state.user_id)
                st.rerun()
    st.stop()

# --- Profile ---
user_id = st.session_state.user_id
store = get_store()
xp_service = XpService(store, store)

try:
    progress = xp_service.get_level_progress(user_id)
    stats = store.get_player_stats(user_id)
    achievements = store.list_achievements(user_id)
    recent_notifications = store.list_notifications(user_id)
except DatabaseError as e:
    st.error(f"Failed to load your profile: {e}")
    st.stop()

col1, col2 = st.columns([2, 1])

with col1:
    st.header(f"Level {progress.current_level}")
    if progress.xp_needed_for_next_level:
        caption = (
            f"{progress.level_progress} / {progress.xp_needed_for_next_level} XP "
            f"to level {progress.current_level + 1}"
        )
    else:
        caption = f"Max level reached ({progress.current_xp} XP)"
    st.progress(progress.progress_percentage / 100, text=caption)

    metric_cols = st.columns(4)
    metric_cols[0].metric("Total XP", progress.current_xp)
    metric_cols[1].metric("Matches", stats.total_matches)
    metric_cols[2].metric("Wins", stats.won_matches)
    metric_cols[3].metric("Win Rate", f"{stats.win_rate}%")

    st.subheader("Trophy Room")
    if achievements:
        df_achievements = pd.DataFrame(achievements)[["name", "description", "tier"]]
        df_achievements.columns = ["Achievement", "Description", "Tier"]
        st.dataframe(df_achievements, use_container_width=True, hide_index=True)
    else:
        st.caption("No achievements yet. Play a match to get started!")

with col2:
    st.header("Notifications")
    if not recent_notifications:
        st.caption("Nothing new.")
    for notification in recent_notifications:
        with st.container(border=True):
            st.markdown(f"**{notification['title']}**")
            st.write(notification["message"])

with st.sidebar:
    st.header("Account")
    st.caption(f"Signed in as `{user_id}`")
    if st.button("🏆 Re-check Achievements"):
        awarded = AchievementService(store, store, xp_service).retroactive_check(user_id)
        st.success(f"Awarded {len(awarded)} new achievement(s).")
    if st.button("Sign Out"):
        del st.session_state["user_id"]
        st.rerun()
