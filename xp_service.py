"""
Service layer for awarding experience points.

Sits between callers that grant XP (achievement evaluation, first login) and
the store, keeping the level derived from XP and raising the level-up
notification when an award crosses a threshold.
"""

import logging

import notifications
from app_types import LevelProgress, MatchStore, NotificationSink, PlayerId, XpAward
from constants import XP_REWARDS
from exceptions import InvalidInputError
from progression import calculate_level_progress, level_for_xp

logger = logging.getLogger("app.xp_service")


class XpService:
    """Grants XP and reports level changes."""

    def __init__(self, store: MatchStore, notifier: NotificationSink):
        self.store = store
        self.notifier = notifier

    def get_level_progress(self, player_id: PlayerId) -> LevelProgress:
        """Current level and progress bar values for a player.

        Raises:
            DatabaseError: If the XP lookup fails.
        """
        return calculate_level_progress(self.store.get_player_xp(player_id))

    def award_xp(self, player_id: PlayerId, amount: int, reason: str) -> XpAward:
        """
        Adds XP to a player and raises a level-up notification if needed.

        The old level is derived from the new total minus this award, so
        concurrent awards for the same player each see their own crossing.

        Args:
            player_id: Player receiving the XP
            amount: Non-negative number of XP points
            reason: Activity tag stored with the XP entry

        Returns:
            XpAward describing the new total and level change.

        Raises:
            InvalidInputError: If amount is negative or not an integer.
            DatabaseError: If the XP update fails.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidInputError(f"XP amount must be a non-negative integer, got {amount!r}")

        new_xp = self.store.add_xp(player_id, amount, reason)
        award = XpAward(
            player_id=player_id,
            amount=amount,
            reason=reason,
            new_xp=new_xp,
            old_level=level_for_xp(max(new_xp - amount, 0)),
            new_level=level_for_xp(new_xp),
        )
        logger.info(f"Awarded {amount} XP to {player_id} for {reason} (total {new_xp})")

        if award.leveled_up:
            self.on_level_up(player_id, award.old_level, award.new_level, new_xp)

        return award

    def award_for_activity(self, player_id: PlayerId, activity: str) -> XpAward | None:
        """Awards the standard XP for an activity; None if it earns no XP."""
        amount = XP_REWARDS.get(activity)
        if not amount:
            return None
        return self.award_xp(player_id, amount, activity)

    def on_level_up(
        self, player_id: PlayerId, old_level: int, new_level: int, current_xp: int
    ) -> None:
        """Sends a single level-up notification carrying both levels.

        Delivery is best-effort: the XP is already stored.
        """
        logger.info(f"Player {player_id} leveled up: {old_level} -> {new_level}")
        try:
            notifications.send(
                self.notifier,
                notifications.level_up(player_id, old_level, new_level, current_xp),
            )
        except Exception:
            logger.exception(f"Failed to send level-up notification to {player_id}")
