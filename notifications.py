# notifications.py
"""
Builders for player notifications.

Each builder returns a Notification whose payload is the typed variant for
its kind. `send` hands a notification to whatever NotificationSink is wired
in (the Supabase notifications table in production).
"""

from app_types import (
    Achievement,
    AchievementUnlockedData,
    LevelUpData,
    Match,
    MatchCompletedData,
    MatchDisputeData,
    Notification,
    NotificationSink,
    PlayerId,
    StreakBrokenData,
)
from constants import (
    ACHIEVEMENT_UNLOCKED_TITLE,
    LEVEL_UP_TITLE,
    MATCH_COMPLETED_TITLE,
    MATCH_DISPUTE_MESSAGE,
    MATCH_DISPUTE_TITLE,
    MATCH_LOST_MESSAGE,
    MATCH_WON_MESSAGE,
    STREAK_BROKEN_MESSAGE,
    STREAK_BROKEN_TITLE,
)


def match_completed(match: Match, winner_id: PlayerId) -> list[Notification]:
    """One notification per player, worded from that player's side."""
    data = MatchCompletedData(match_id=match.id, winner_id=winner_id)
    return [
        Notification(
            player_id=player_id,
            title=MATCH_COMPLETED_TITLE,
            message=MATCH_WON_MESSAGE if player_id == winner_id else MATCH_LOST_MESSAGE,
            data=data,
        )
        for player_id in match.participants
    ]


def match_dispute(match: Match) -> list[Notification]:
    data = MatchDisputeData(match_id=match.id)
    return [
        Notification(
            player_id=player_id,
            title=MATCH_DISPUTE_TITLE,
            message=MATCH_DISPUTE_MESSAGE,
            data=data,
        )
        for player_id in match.participants
    ]


def level_up(
    player_id: PlayerId, old_level: int, new_level: int, current_xp: int
) -> Notification:
    return Notification(
        player_id=player_id,
        title=LEVEL_UP_TITLE,
        message=f"Congratulations! You have reached level {new_level}!",
        data=LevelUpData(
            old_level=old_level, new_level=new_level, current_xp=current_xp
        ),
    )


def achievement_unlocked(player_id: PlayerId, achievement: Achievement) -> Notification:
    return Notification(
        player_id=player_id,
        title=ACHIEVEMENT_UNLOCKED_TITLE,
        message=f"You earned '{achievement.name}': {achievement.description}",
        data=AchievementUnlockedData(
            achievement_type=achievement.type,
            name=achievement.name,
            tier=achievement.tier,
        ),
    )


def streak_broken(player_id: PlayerId) -> Notification:
    return Notification(
        player_id=player_id,
        title=STREAK_BROKEN_TITLE,
        message=STREAK_BROKEN_MESSAGE,
        data=StreakBrokenData(),
    )


def send(notifier: NotificationSink, notification: Notification) -> None:
    """Delivers a single notification through the sink."""
    notifier.notify(
        notification.player_id,
        notification.kind,
        notification.title,
        notification.message,
        notification.data,
    )
