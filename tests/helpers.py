import threading

from app_types import (
    Achievement,
    AchievementEvent,
    Match,
    NotificationKind,
    NotificationPayload,
    PlayerStats,
    StreakUpdate,
    WinnerSelection,
)
from exceptions import AlreadyFinalizedConflictError, MatchNotFoundError

ALICE = "11111111-1111-4111-8111-111111111111"
BOB = "22222222-2222-4222-8222-222222222222"
CAROL = "33333333-3333-4333-8333-333333333333"
MATCH_ID = "aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa"


class InMemoryStore:
    """
    Dict-backed stand-in for SupabaseStore.

    Implements the same persistence operations (including notify) so the
    services can be exercised without a database. set_match_winner is guarded
    by a lock to mirror the conditional update used against Supabase.
    """

    def __init__(self, matches: list[Match] | None = None):
        self._lock = threading.Lock()
        self.matches: dict[str, Match] = {m.id: m for m in matches or []}
        self.selections: dict[tuple[str, str], WinnerSelection] = {}
        self.xp: dict[str, int] = {}
        self.xp_log: list[tuple[str, int, str]] = []
        self.stats: dict[str, PlayerStats] = {}
        self.achievements: dict[str, list[Achievement]] = {}
        self.streaks: dict[str, StreakUpdate | None] = {}
        self.tokens: dict[str, str] = {}
        self.notifications: list[dict] = []

    # --- Authentication ---

    def authenticate(self, access_token):
        return self.tokens.get(access_token)

    # --- Matches and selections ---

    def get_match(self, match_id):
        return self.matches.get(match_id)

    def list_matches_for_player(self, player_id):
        return [m for m in self.matches.values() if m.has_participant(player_id)]

    def get_selections(self, match_id):
        return [s for (m_id, _), s in self.selections.items() if m_id == match_id]

    def upsert_selection(self, match_id, selector_id, winner_id):
        self.selections[(match_id, selector_id)] = WinnerSelection(
            match_id=match_id, selector_id=selector_id, selected_winner_id=winner_id
        )

    def set_match_winner(self, match_id, winner_id):
        with self._lock:
            match = self.matches.get(match_id)
            if match is None:
                raise MatchNotFoundError(match_id)
            if match.winner_id is None:
                self.matches[match_id] = Match(
                    id=match.id,
                    player1_id=match.player1_id,
                    player2_id=match.player2_id,
                    winner_id=winner_id,
                )
                return True
            if match.winner_id == winner_id:
                return False
            raise AlreadyFinalizedConflictError(match_id)

    # --- Experience, stats, streaks ---

    def get_player_xp(self, player_id):
        return self.xp.get(player_id, 0)

    def add_xp(self, player_id, amount, reason):
        with self._lock:
            self.xp[player_id] = self.xp.get(player_id, 0) + amount
            self.xp_log.append((player_id, amount, reason))
            return self.xp[player_id]

    def get_player_stats(self, player_id):
        return self.stats.get(player_id, PlayerStats())

    def update_daily_streak(self, player_id):
        return self.streaks.get(player_id)

    # --- Achievements ---

    def award_achievement(self, player_id, achievement):
        owned = self.achievements.setdefault(player_id, [])
        if any(a.type == achievement.type for a in owned):
            return False
        owned.append(achievement)
        return True

    def has_achievement(self, player_id, achievement_type):
        return any(a.type == achievement_type for a in self.achievements.get(player_id, []))

    def list_achievements(self, player_id):
        return [
            {"type": a.type, "name": a.name, "description": a.description, "tier": a.tier.value}
            for a in self.achievements.get(player_id, [])
        ]

    # --- Notifications ---

    def notify(self, player_id, kind: NotificationKind, title, message, data: NotificationPayload):
        self.notifications.append(
            {
                "player_id": player_id,
                "kind": kind,
                "title": title,
                "message": message,
                "data": data,
            }
        )

    def list_notifications(self, player_id, limit=20):
        return [n for n in self.notifications if n["player_id"] == player_id][:limit]

    def notifications_of(self, kind: NotificationKind) -> list[dict]:
        return [n for n in self.notifications if n["kind"] == kind]


class RecordingEvaluator:
    """Achievement evaluator that just remembers the events it received."""

    def __init__(self):
        self.events: list[AchievementEvent] = []

    def evaluate(self, event: AchievementEvent) -> None:
        self.events.append(event)
