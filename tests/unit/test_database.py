# tests/unit/test_database.py
"""
Unit tests for SupabaseStore.

The Supabase client is replaced by a MagicMock whose query builder returns
itself for every chained call, so each test only scripts what execute()
returns (or raises).
"""

from unittest.mock import MagicMock

import pytest

from app_types import AchievementTier, Achievement, LevelUpData, NotificationKind
from database import SupabaseStore
from exceptions import (
    AlreadyFinalizedConflictError,
    AuthenticationError,
    DatabaseError,
    MatchNotFoundError,
)
from tests.helpers import ALICE, BOB, MATCH_ID

QUERY_METHODS = ("select", "eq", "is_", "or_", "order", "limit", "update", "upsert", "insert")


def make_client(*responses, error: Exception | None = None) -> tuple[MagicMock, MagicMock]:
    """Returns (client, query) where query.execute yields `responses` in order."""
    query = MagicMock()
    for name in QUERY_METHODS:
        getattr(query, name).return_value = query
    if error is not None:
        query.execute.side_effect = error
    else:
        query.execute.side_effect = [MagicMock(data=data) for data in responses]

    client = MagicMock()
    client.table.return_value = query
    client.rpc.return_value = query
    return client, query


def match_row(winner_id=None):
    return {"id": MATCH_ID, "player1_id": ALICE, "player2_id": BOB, "winner_id": winner_id}


class TestMatches:
    def test_get_match(self):
        client, query = make_client([match_row()])

        match = SupabaseStore(client).get_match(MATCH_ID)

        assert match.participants == (ALICE, BOB)
        assert match.winner_id is None
        client.table.assert_called_with("matches")
        query.eq.assert_called_with("id", MATCH_ID)

    def test_get_missing_match_returns_none(self):
        client, _ = make_client([])

        assert SupabaseStore(client).get_match(MATCH_ID) is None

    def test_api_failure_becomes_database_error(self):
        client, _ = make_client(error=RuntimeError("connection reset"))

        with pytest.raises(DatabaseError):
            SupabaseStore(client).get_match(MATCH_ID)

    def test_get_selections(self):
        client, _ = make_client(
            [{"match_id": MATCH_ID, "selector_id": ALICE, "selected_winner_id": BOB}]
        )

        selections = SupabaseStore(client).get_selections(MATCH_ID)

        assert len(selections) == 1
        assert selections[0].selector_id == ALICE
        assert selections[0].selected_winner_id == BOB

    def test_upsert_selection_uses_unique_pair(self):
        client, query = make_client([{}])

        SupabaseStore(client).upsert_selection(MATCH_ID, ALICE, BOB)

        query.upsert.assert_called_once_with(
            {"match_id": MATCH_ID, "selector_id": ALICE, "selected_winner_id": BOB},
            on_conflict="match_id,selector_id",
        )

    def test_upsert_failure_becomes_database_error(self):
        client, _ = make_client(error=RuntimeError("permission denied"))

        with pytest.raises(DatabaseError):
            SupabaseStore(client).upsert_selection(MATCH_ID, ALICE, BOB)


class TestSetMatchWinner:
    def test_first_write_wins(self):
        client, query = make_client([match_row(winner_id=ALICE)])

        assert SupabaseStore(client).set_match_winner(MATCH_ID, ALICE) is True
        query.is_.assert_called_once_with("winner_id", "null")

    def test_same_winner_already_set_is_noop(self):
        client, _ = make_client([], [match_row(winner_id=ALICE)])

        assert SupabaseStore(client).set_match_winner(MATCH_ID, ALICE) is False

    def test_different_winner_already_set_conflicts(self):
        client, _ = make_client([], [match_row(winner_id=BOB)])

        with pytest.raises(AlreadyFinalizedConflictError):
            SupabaseStore(client).set_match_winner(MATCH_ID, ALICE)

    def test_missing_match(self):
        client, _ = make_client([], [])

        with pytest.raises(MatchNotFoundError):
            SupabaseStore(client).set_match_winner(MATCH_ID, ALICE)


class TestExperience:
    def test_get_player_xp(self):
        client, _ = make_client([{"current_xp": 1500, "current_level": 2}])

        assert SupabaseStore(client).get_player_xp(ALICE) == 1500

    def test_player_without_record_has_zero_xp(self):
        client, _ = make_client([])

        assert SupabaseStore(client).get_player_xp(ALICE) == 0

    def test_add_xp_returns_new_total(self):
        client, _ = make_client(1250)

        total = SupabaseStore(client).add_xp(ALICE, 250, "match_won")

        assert total == 1250
        client.rpc.assert_called_once_with(
            "add_player_xp", {"p_user_id": ALICE, "p_amount": 250, "p_reason": "match_won"}
        )

    def test_add_xp_without_result_raises(self):
        client, _ = make_client(None)

        with pytest.raises(DatabaseError):
            SupabaseStore(client).add_xp(ALICE, 250, "match_won")

    def test_missing_stats_are_zero(self):
        client, _ = make_client([])

        stats = SupabaseStore(client).get_player_stats(ALICE)

        assert stats.total_matches == 0
        assert stats.win_rate == 0

    def test_update_daily_streak(self):
        client, _ = make_client([{"current_streak": 3, "streak_broken": False}])

        update = SupabaseStore(client).update_daily_streak(ALICE)

        assert update.current_streak == 3
        assert update.streak_broken is False


class TestAchievementsAndNotifications:
    achievement = Achievement(
        "first_match_win", "First Victory", "Won your first match!",
        AchievementTier.GOLD, "/trophies/major/first-match.svg",
    )

    def test_new_achievement(self):
        client, query = make_client([{"type": "first_match_win"}])

        assert SupabaseStore(client).award_achievement(ALICE, self.achievement) is True
        _, kwargs = query.upsert.call_args
        assert kwargs == {"on_conflict": "user_id,type", "ignore_duplicates": True}

    def test_has_achievement(self):
        client, query = make_client([{"type": "first_login"}], [])
        store = SupabaseStore(client)

        assert store.has_achievement(ALICE, "first_login") is True
        assert store.has_achievement(BOB, "first_login") is False
        query.eq.assert_any_call("type", "first_login")

    def test_owned_achievement(self):
        client, _ = make_client([])

        assert SupabaseStore(client).award_achievement(ALICE, self.achievement) is False

    def test_notify_serializes_payload(self):
        client, query = make_client([{}])
        data = LevelUpData(old_level=1, new_level=2, current_xp=1100)

        SupabaseStore(client).notify(
            ALICE, NotificationKind.LEVEL_UP, "Level Up!", "Reached level 2", data
        )

        query.insert.assert_called_once_with(
            {
                "user_id": ALICE,
                "type": "level_up",
                "title": "Level Up!",
                "message": "Reached level 2",
                "data": {"old_level": 1, "new_level": 2, "current_xp": 1100},
            }
        )

    def test_notify_failure_becomes_database_error(self):
        client, _ = make_client(error=RuntimeError("insert failed"))

        with pytest.raises(DatabaseError):
            SupabaseStore(client).notify(
                ALICE, NotificationKind.LEVEL_UP, "t", "m",
                LevelUpData(old_level=1, new_level=2, current_xp=1100),
            )


class TestAuthentication:
    def test_valid_token(self):
        client = MagicMock()
        client.auth.get_user.return_value = MagicMock(user=MagicMock(id=ALICE))

        assert SupabaseStore(client).authenticate("token") == ALICE

    def test_rejected_token(self):
        client = MagicMock()
        client.auth.get_user.side_effect = RuntimeError("invalid JWT")

        assert SupabaseStore(client).authenticate("token") is None

    def test_sign_in_failure(self):
        client = MagicMock()
        client.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login")

        with pytest.raises(AuthenticationError):
            SupabaseStore(client).sign_in("alice@example.com", "wrong")
