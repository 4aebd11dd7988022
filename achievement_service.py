# achievement_service.py
"""
Achievement evaluation.

Rule groups map a player's aggregated stats to the achievements they have
earned. `AchievementService.evaluate` is the collaborator the match
confirmation flow calls after a result is confirmed: it grants the activity
XP, then awards any newly earned achievements and notifies the player.
"""

import logging
from typing import Callable

import notifications
from app_types import (
    Achievement,
    AchievementEvent,
    AchievementEventType,
    AchievementTier,
    MatchStore,
    NotificationSink,
    PlayerId,
    PlayerStats,
)
from xp_service import XpService

logger = logging.getLogger("app.achievement_service")

FIRST_LOGIN = Achievement(
    type="first_login",
    name="Welcome Champion",
    description="Started your tennis journey!",
    tier=AchievementTier.GOLD,
    icon_path="/trophies/major/first-login.svg",
)

# (minimum value, achievement) pairs per rule group
MATCH_WIN_RULES = [
    (1, Achievement("first_match_win", "First Victory", "Won your first match!",
                    AchievementTier.GOLD, "/trophies/major/first-match.svg")),
    (50, Achievement("matches_won_50", "Match Master", "Won 50 matches!",
                     AchievementTier.GOLD, "/trophies/major/match-master.svg")),
    (100, Achievement("matches_won_100", "Match Legend", "Won 100 matches!",
                      AchievementTier.GOLD, "/trophies/major/match-legend.svg")),
]

STREAK_RULES = [
    (10, Achievement("streak_master_10", "Streak Master",
                     "Achieved a 10-match winning streak!",
                     AchievementTier.GOLD, "/trophies/major/streak-master.svg")),
]

BOOKING_RULES = [
    (50, Achievement("court_veteran_50", "Court Veteran", "Booked 50 court sessions",
                     AchievementTier.SILVER, "/trophies/major/court-veteran.svg")),
    (100, Achievement("court_master_100", "Court Master", "Booked 100 court sessions",
                      AchievementTier.GOLD, "/trophies/major/court-master.svg")),
]

TRAINING_RULES = [
    (25, Achievement("training_expert_25", "Training Expert",
                     "Completed 25 training sessions",
                     AchievementTier.SILVER, "/trophies/major/training-expert.svg")),
    (50, Achievement("training_master_50", "Training Master",
                     "Completed 50 training sessions",
                     AchievementTier.GOLD, "/trophies/major/training-master.svg")),
    (100, Achievement("training_legend_100", "Training Legend",
                      "Completed 100 training sessions",
                      AchievementTier.GOLD, "/trophies/major/training-legend.svg")),
]


def _earned(rules: list[tuple[int, Achievement]], value: int) -> list[Achievement]:
    return [achievement for minimum, achievement in rules if value >= minimum]


def check_match_achievements(stats: PlayerStats) -> list[Achievement]:
    return _earned(MATCH_WIN_RULES, stats.won_matches)


def check_streak_achievements(stats: PlayerStats) -> list[Achievement]:
    return _earned(STREAK_RULES, stats.current_streak)


def check_booking_achievements(stats: PlayerStats) -> list[Achievement]:
    return _earned(BOOKING_RULES, stats.total_bookings)


def check_training_achievements(stats: PlayerStats) -> list[Achievement]:
    return _earned(TRAINING_RULES, stats.total_trainings)


# Rule groups checked for each event; level_up has none
RULES_BY_EVENT: dict[AchievementEventType, Callable[[PlayerStats], list[Achievement]]] = {
    AchievementEventType.MATCH_WON: check_match_achievements,
    AchievementEventType.STREAK_REACHED: check_streak_achievements,
    AchievementEventType.MATCH_PLAYED: check_booking_achievements,
    AchievementEventType.TRAINING_COMPLETED: check_training_achievements,
}


class AchievementService:
    """Awards XP and achievements in response to player events."""

    def __init__(self, store: MatchStore, notifier: NotificationSink, xp_service: XpService):
        self.store = store
        self.notifier = notifier
        self.xp_service = xp_service

    def evaluate(self, event: AchievementEvent) -> list[Achievement]:
        """
        Handles a player event.

        1. Grants the activity XP for the event type (if any)
        2. Checks the rule group for the event against the player's stats
        3. Awards and announces achievements the player did not have yet

        Returns:
            The achievements newly awarded by this event.

        Raises:
            DatabaseError: If XP, stats or the achievement insert fails.
        """
        self.xp_service.award_for_activity(event.player_id, event.type.value)

        check = RULES_BY_EVENT.get(event.type)
        if check is None:
            return []

        stats = self.store.get_player_stats(event.player_id)
        return [
            achievement
            for achievement in check(stats)
            if self._award(event.player_id, achievement)
        ]

    def retroactive_check(self, player_id: PlayerId) -> list[Achievement]:
        """
        Re-checks every rule group against the player's current stats.

        A failure on one achievement is logged and the rest are still tried.

        Returns:
            The achievements newly awarded.
        """
        stats = self.store.get_player_stats(player_id)
        logger.info(f"Retroactive achievement check for {player_id}: {stats}")

        candidates = (
            check_match_achievements(stats)
            + check_streak_achievements(stats)
            + check_booking_achievements(stats)
            + check_training_achievements(stats)
        )

        awarded = []
        for achievement in candidates:
            try:
                if self._award(player_id, achievement):
                    awarded.append(achievement)
            except Exception:
                logger.exception(
                    f"Error awarding achievement '{achievement.type}' to {player_id}"
                )
        return awarded

    def award_first_login(self, player_id: PlayerId) -> bool:
        """Welcome achievement plus the login XP and first-login bonus.

        Returns:
            True if this was the player's first login.
        """
        if self.store.has_achievement(player_id, FIRST_LOGIN.type):
            return False
        # XP before the achievement row: a failed award leaves the welcome unclaimed
        self.xp_service.award_for_activity(player_id, "login")
        self.xp_service.award_for_activity(player_id, "first_login_bonus")
        return self._award(player_id, FIRST_LOGIN)

    def _award(self, player_id: PlayerId, achievement: Achievement) -> bool:
        """Stores the achievement; notifies only if it is new to the player."""
        if not self.store.award_achievement(player_id, achievement):
            return False

        logger.info(f"Player {player_id} unlocked '{achievement.type}'")
        try:
            notifications.send(
                self.notifier, notifications.achievement_unlocked(player_id, achievement)
            )
        except Exception:
            logger.exception(
                f"Failed to send achievement notification '{achievement.type}' to {player_id}"
            )
        return True
