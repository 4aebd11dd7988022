"""
Daily login streak.

The streak counter itself lives in the database (update_daily_streak
procedure); this module calls it and tells the player when the streak reset.
"""

import logging

import notifications
from app_types import MatchStore, NotificationSink, PlayerId, StreakUpdate
from exceptions import DatabaseError

logger = logging.getLogger("app.streak_service")


def update_streak(
    store: MatchStore, notifier: NotificationSink, player_id: PlayerId
) -> StreakUpdate:
    """
    Records today's login for the player's streak.

    Args:
        store: Persistence collaborator
        notifier: Notification sink for the streak-broken message
        player_id: The signed-in player

    Returns:
        The updated streak.

    Raises:
        DatabaseError: If the procedure fails or returns no data.
    """
    logger.info(f"Updating streak for user: {player_id}")
    update = store.update_daily_streak(player_id)
    if update is None:
        logger.error(f"No streak data returned for {player_id}")
        raise DatabaseError("No streak data returned")

    if update.streak_broken:
        try:
            notifications.send(notifier, notifications.streak_broken(player_id))
        except Exception:
            logger.exception(f"Failed to send streak-broken notification to {player_id}")

    return update
