# database.py
"""
Database operations for the Tennis Club App.

This module handles all Supabase database interactions for matches, winner
selections, player XP, achievements and notifications. SupabaseStore is the
single persistence collaborator handed to the services; it also acts as the
notification sink. All methods translate Supabase exceptions to DatabaseError
for consistent error handling.
"""

import logging
from typing import Any

import streamlit as st
from supabase import Client, create_client

from app_types import (
    Achievement,
    Match,
    MatchId,
    NotificationKind,
    NotificationPayload,
    PlayerId,
    PlayerStats,
    StreakUpdate,
    WinnerSelection,
)
from constants import (
    ACHIEVEMENTS_TABLE,
    MATCHES_TABLE,
    NOTIFICATIONS_TABLE,
    PLAYER_STATS_TABLE,
    PLAYER_XP_TABLE,
    SELECTIONS_TABLE,
)
from exceptions import (
    AlreadyFinalizedConflictError,
    AuthenticationError,
    DatabaseError,
    MatchNotFoundError,
)
from progression import level_for_xp
from utils import get_secret

logger = logging.getLogger("app.database")


# Initialize Supabase client
@st.cache_resource
def get_supabase_client() -> Client:
    url = get_secret("SUPABASE_URL")
    key = get_secret("SUPABASE_KEY")
    if not url or not key:
        raise DatabaseError("SUPABASE_URL and SUPABASE_KEY must be configured")
    return create_client(url, key)


def get_store() -> "SupabaseStore":
    """Returns a store bound to the shared Supabase client."""
    return SupabaseStore(get_supabase_client())


def _match_from_row(row: dict[str, Any]) -> Match:
    return Match(
        id=row["id"],
        player1_id=row["player1_id"],
        player2_id=row["player2_id"],
        winner_id=row.get("winner_id"),
    )


class SupabaseStore:
    """Handles match, XP, achievement and notification persistence in Supabase."""

    def __init__(self, client: Client):
        self.client = client

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def authenticate(self, access_token: str) -> PlayerId | None:
        """Resolves a Supabase access token to the signed-in user's id.

        Returns:
            The user id, or None if the token is invalid or expired.
        """
        try:
            response = self.client.auth.get_user(access_token)
        except Exception:
            logger.warning("Supabase token verification failed", exc_info=True)
            return None

        if response is None or response.user is None:
            return None
        return response.user.id

    def sign_in(self, email: str, password: str) -> PlayerId:
        """Signs in with email and password.

        Returns:
            The signed-in user's id.

        Raises:
            AuthenticationError: If the credentials are rejected.
        """
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            logger.warning(f"Sign-in failed for {email}: {e}")
            raise AuthenticationError("Invalid email or password") from e

        if response.user is None:
            raise AuthenticationError("Invalid email or password")
        return response.user.id

    # -------------------------------------------------------------------------
    # Matches and winner selections
    # -------------------------------------------------------------------------

    def get_match(self, match_id: MatchId) -> Match | None:
        """Fetches a match by id.

        Returns:
            The Match, or None if not found.

        Raises:
            DatabaseError: If the query fails.
        """
        try:
            response = (
                self.client.table(MATCHES_TABLE)
                .select("id, player1_id, player2_id, winner_id")
                .eq("id", match_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.exception(f"Supabase API call failed: get_match '{match_id}'")
            raise DatabaseError(f"Failed to fetch match '{match_id}'") from e

        if response.data:
            return _match_from_row(response.data[0])
        return None

    def list_matches_for_player(self, player_id: PlayerId) -> list[Match]:
        """Fetches every match the player took part in, newest first.

        Raises:
            DatabaseError: If the query fails.
        """
        try:
            response = (
                self.client.table(MATCHES_TABLE)
                .select("id, player1_id, player2_id, winner_id")
                .or_(f"player1_id.eq.{player_id},player2_id.eq.{player_id}")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.exception("Supabase API call failed: list_matches_for_player")
            raise DatabaseError("Failed to fetch matches from database") from e

        return [_match_from_row(row) for row in response.data or []]

    def get_selections(self, match_id: MatchId) -> list[WinnerSelection]:
        """Fetches all winner selections recorded for a match.

        Raises:
            DatabaseError: If the query fails.
        """
        try:
            response = (
                self.client.table(SELECTIONS_TABLE)
                .select("match_id, selector_id, selected_winner_id")
                .eq("match_id", match_id)
                .execute()
            )
        except Exception as e:
            logger.exception(f"Supabase API call failed: get_selections '{match_id}'")
            raise DatabaseError("Failed to get selections") from e

        return [
            WinnerSelection(
                match_id=row["match_id"],
                selector_id=row["selector_id"],
                selected_winner_id=row["selected_winner_id"],
            )
            for row in response.data or []
        ]

    def upsert_selection(
        self, match_id: MatchId, selector_id: PlayerId, winner_id: PlayerId
    ) -> None:
        """Records (or replaces) a player's winner selection for a match.

        Raises:
            DatabaseError: If the upsert fails.
        """
        data = {
            "match_id": match_id,
            "selector_id": selector_id,
            "selected_winner_id": winner_id,
        }
        try:
            self.client.table(SELECTIONS_TABLE).upsert(
                data, on_conflict="match_id,selector_id"
            ).execute()
        except Exception as e:
            logger.exception(f"Supabase API call failed: upsert_selection {data}")
            raise DatabaseError("Failed to record selection") from e

    def set_match_winner(self, match_id: MatchId, winner_id: PlayerId) -> bool:
        """Sets the match winner unless one is already stored.

        The update only matches rows whose winner is still NULL, so of two
        concurrent finalizations exactly one writes.

        Returns:
            True if this call wrote the winner, False if the same winner was
            already stored.

        Raises:
            AlreadyFinalizedConflictError: If a different winner is stored.
            MatchNotFoundError: If the match disappeared.
            DatabaseError: If the update fails.
        """
        try:
            response = (
                self.client.table(MATCHES_TABLE)
                .update({"winner_id": winner_id})
                .eq("id", match_id)
                .is_("winner_id", "null")
                .execute()
            )
        except Exception as e:
            logger.exception(f"Supabase API call failed: set_match_winner '{match_id}'")
            raise DatabaseError("Failed to update match winner") from e

        if response.data:
            return True

        current = self.get_match(match_id)
        if current is None:
            raise MatchNotFoundError(f"Match '{match_id}' not found")
        if current.winner_id == winner_id:
            return False
        raise AlreadyFinalizedConflictError(
            f"Match '{match_id}' already finalized with winner {current.winner_id}"
        )

    # -------------------------------------------------------------------------
    # Experience and stats
    # -------------------------------------------------------------------------

    def get_player_xp(self, player_id: PlayerId) -> int:
        """Fetches a player's cumulative XP (0 if they have no record yet).

        Raises:
            DatabaseError: If the query fails.
        """
        try:
            response = (
                self.client.table(PLAYER_XP_TABLE)
                .select("current_xp, current_level")
                .eq("user_id", player_id)
                .execute()
            )
        except Exception as e:
            logger.exception(f"Supabase API call failed: get_player_xp '{player_id}'")
            raise DatabaseError("Failed to fetch player XP") from e

        if not response.data:
            return 0

        row = response.data[0]
        current_xp = int(row.get("current_xp") or 0)
        stored_level = row.get("current_level")
        if stored_level is not None and stored_level != level_for_xp(current_xp):
            logger.warning(
                f"Stored level {stored_level} for {player_id} does not match "
                f"{current_xp} XP; using derived level"
            )
        return current_xp

    def add_xp(self, player_id: PlayerId, amount: int, reason: str) -> int:
        """Atomically adds XP through the add_player_xp procedure.

        Returns:
            The player's new cumulative XP.

        Raises:
            DatabaseError: If the call fails or returns nothing.
        """
        try:
            response = self.client.rpc(
                "add_player_xp",
                {"p_user_id": player_id, "p_amount": amount, "p_reason": reason},
            ).execute()
        except Exception as e:
            logger.exception(f"Supabase API call failed: add_xp '{player_id}'")
            raise DatabaseError(f"Failed to award XP to '{player_id}'") from e

        data = response.data
        if isinstance(data, list):
            data = data[0]["current_xp"] if data else None
        if data is None:
            logger.error(f"add_player_xp returned no data for '{player_id}'")
            raise DatabaseError(f"Failed to award XP to '{player_id}' - No total returned")
        return int(data)

    def get_player_stats(self, player_id: PlayerId) -> PlayerStats:
        """Fetches aggregated activity counters (zeros if none recorded).

        Raises:
            DatabaseError: If the query fails.
        """
        try:
            response = (
                self.client.table(PLAYER_STATS_TABLE)
                .select(
                    "total_matches, won_matches, total_bookings, "
                    "total_trainings, current_streak"
                )
                .eq("user_id", player_id)
                .execute()
            )
        except Exception as e:
            logger.exception(f"Supabase API call failed: get_player_stats '{player_id}'")
            raise DatabaseError("Failed to fetch player stats") from e

        if not response.data:
            return PlayerStats()

        row = response.data[0]
        return PlayerStats(
            total_matches=row.get("total_matches") or 0,
            won_matches=row.get("won_matches") or 0,
            total_bookings=row.get("total_bookings") or 0,
            total_trainings=row.get("total_trainings") or 0,
            current_streak=row.get("current_streak") or 0,
        )

    def update_daily_streak(self, player_id: PlayerId) -> StreakUpdate | None:
        """Runs the update_daily_streak procedure for today's login.

        Returns:
            The streak update, or None if the procedure returned no rows.

        Raises:
            DatabaseError: If the call fails.
        """
        try:
            response = self.client.rpc(
                "update_daily_streak", {"user_id": player_id}
            ).execute()
        except Exception as e:
            logger.exception(f"Supabase API call failed: update_daily_streak '{player_id}'")
            raise DatabaseError("Failed to update streak") from e

        if not response.data:
            return None

        row = response.data[0]
        return StreakUpdate(
            current_streak=row.get("current_streak") or 0,
            streak_broken=bool(row.get("streak_broken")),
        )

    # -------------------------------------------------------------------------
    # Achievements
    # -------------------------------------------------------------------------

    def has_achievement(self, player_id: PlayerId, achievement_type: str) -> bool:
        """Checks whether a player already holds an achievement.

        Raises:
            DatabaseError: If the query fails.
        """
        try:
            response = (
                self.client.table(ACHIEVEMENTS_TABLE)
                .select("type")
                .eq("user_id", player_id)
                .eq("type", achievement_type)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.exception(f"Supabase API call failed: has_achievement '{achievement_type}'")
            raise DatabaseError(f"Failed to check achievement '{achievement_type}'") from e

        return bool(response.data)

    def award_achievement(self, player_id: PlayerId, achievement: Achievement) -> bool:
        """Stores an achievement for a player if they do not have it yet.

        Returns:
            True if the achievement was newly awarded.

        Raises:
            DatabaseError: If the insert fails.
        """
        data = {
            "user_id": player_id,
            "type": achievement.type,
            "name": achievement.name,
            "description": achievement.description,
            "tier": achievement.tier.value,
            "icon_path": achievement.icon_path,
        }
        try:
            response = (
                self.client.table(ACHIEVEMENTS_TABLE)
                .upsert(data, on_conflict="user_id,type", ignore_duplicates=True)
                .execute()
            )
        except Exception as e:
            logger.exception(
                f"Supabase API call failed: award_achievement '{achievement.type}'"
            )
            raise DatabaseError(f"Failed to award achievement '{achievement.type}'") from e

        return bool(response.data)

    def list_achievements(self, player_id: PlayerId) -> list[dict]:
        """Fetches a player's achievements, newest first.

        Raises:
            DatabaseError: If the query fails.
        """
        try:
            response = (
                self.client.table(ACHIEVEMENTS_TABLE)
                .select("type, name, description, tier, icon_path, created_at")
                .eq("user_id", player_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.exception("Supabase API call failed: list_achievements")
            raise DatabaseError("Failed to fetch achievements from database") from e

        return response.data if response.data else []

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def notify(
        self,
        player_id: PlayerId,
        kind: NotificationKind,
        title: str,
        message: str,
        data: NotificationPayload,
    ) -> None:
        """Inserts a notification for a player.

        Raises:
            DatabaseError: If the insert fails.
        """
        row = {
            "user_id": player_id,
            "type": kind.value,
            "title": title,
            "message": message,
            "data": data.to_dict(),
        }
        try:
            self.client.table(NOTIFICATIONS_TABLE).insert(row).execute()
        except Exception as e:
            logger.exception(f"Supabase API call failed: notify '{kind.value}'")
            raise DatabaseError(f"Failed to create '{kind.value}' notification") from e

    def list_notifications(self, player_id: PlayerId, limit: int = 20) -> list[dict]:
        """Fetches a player's most recent notifications.

        Raises:
            DatabaseError: If the query fails.
        """
        try:
            response = (
                self.client.table(NOTIFICATIONS_TABLE)
                .select("type, title, message, data, created_at")
                .eq("user_id", player_id)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.exception("Supabase API call failed: list_notifications")
            raise DatabaseError("Failed to fetch notifications from database") from e

        return response.data if response.data else []
