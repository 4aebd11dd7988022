# app_types.py
"""
Types for the Tennis Club App.

This module defines type aliases, domain dataclasses, notification payloads
and the collaborator protocols that the services depend on.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, ClassVar, Protocol

# =============================================================================
# Basic Type Aliases
# =============================================================================

# A player's id (Supabase auth user UUID)
PlayerId = str

# A match's id (UUID)
MatchId = str


class SelectionStatus(str, Enum):
    """Outcome of evaluating a match's winner selections."""

    PENDING = "pending"
    COMPLETED = "completed"
    DISPUTED = "disputed"


class NotificationKind(str, Enum):
    """Notification types understood by the notifications table."""

    MATCH_COMPLETED = "match_completed"
    MATCH_DISPUTE = "match_dispute"
    LEVEL_UP = "level_up"
    ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
    STREAK_BROKEN = "streak_broken"


class AchievementEventType(str, Enum):
    """Events that can trigger achievement evaluation."""

    MATCH_WON = "match_won"
    MATCH_PLAYED = "match_played"
    TRAINING_COMPLETED = "training_completed"
    LEVEL_UP = "level_up"
    STREAK_REACHED = "streak_reached"


class AchievementTier(str, Enum):
    """Prestige tier of an achievement."""

    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


# =============================================================================
# Match Data Classes
# =============================================================================


@dataclass(frozen=True)
class Match:
    """A singles partner match between two players.

    Attributes:
        id: Match UUID
        player1_id: First player's id
        player2_id: Second player's id
        winner_id: Agreed winner, None until both players confirm
    """

    id: MatchId
    player1_id: PlayerId
    player2_id: PlayerId
    winner_id: PlayerId | None = None

    def __post_init__(self) -> None:
        if self.winner_id is not None and self.winner_id not in self.participants:
            raise ValueError(
                f"Winner {self.winner_id} is not a player in match {self.id}"
            )

    @property
    def participants(self) -> tuple[PlayerId, PlayerId]:
        return (self.player1_id, self.player2_id)

    @property
    def is_finalized(self) -> bool:
        return self.winner_id is not None

    def has_participant(self, player_id: PlayerId) -> bool:
        return player_id in self.participants


@dataclass(frozen=True)
class WinnerSelection:
    """One player's claim about who won a match (one per player per match)."""

    match_id: MatchId
    selector_id: PlayerId
    selected_winner_id: PlayerId


@dataclass
class SelectionResult:
    """Result of a winner submission.

    Attributes:
        status: pending, completed or disputed
        winner_id: The agreed winner (completed only)
    """

    status: SelectionStatus
    winner_id: PlayerId | None = None

    def to_dict(self) -> dict[str, Any]:
        """Response body for the HTTP surface."""
        if self.status == SelectionStatus.COMPLETED:
            return {"status": self.status.value, "winner_id": self.winner_id}
        if self.status == SelectionStatus.DISPUTED:
            return {
                "status": self.status.value,
                "message": "Players selected different winners",
            }
        return {
            "status": self.status.value,
            "message": "Waiting for other player's selection",
        }


# =============================================================================
# Progression Data Classes
# =============================================================================


@dataclass(frozen=True)
class LevelProgress:
    """Level and progress-within-level derived from a cumulative XP total."""

    current_level: int
    current_xp: int
    level_progress: int
    xp_needed_for_next_level: int
    progress_percentage: int


@dataclass
class XpAward:
    """Outcome of granting XP to a player."""

    player_id: PlayerId
    amount: int
    reason: str
    new_xp: int
    old_level: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


@dataclass
class PlayerStats:
    """Aggregated player activity used by achievement rules."""

    total_matches: int = 0
    won_matches: int = 0
    total_bookings: int = 0
    total_trainings: int = 0
    current_streak: int = 0

    @property
    def win_rate(self) -> int:
        if self.total_matches == 0:
            return 0
        return round(self.won_matches / self.total_matches * 100)


@dataclass
class StreakUpdate:
    """Result of the daily streak procedure."""

    current_streak: int
    streak_broken: bool


# =============================================================================
# Achievement Data Classes
# =============================================================================


@dataclass(frozen=True)
class Achievement:
    """An award a player can unlock once."""

    type: str
    name: str
    description: str
    tier: AchievementTier
    icon_path: str


@dataclass
class AchievementEvent:
    """Something a player did that may unlock achievements."""

    type: AchievementEventType
    player_id: PlayerId
    match_id: MatchId | None = None


# =============================================================================
# Notification Payloads
# =============================================================================


@dataclass(frozen=True)
class MatchCompletedData:
    kind: ClassVar[NotificationKind] = NotificationKind.MATCH_COMPLETED

    match_id: MatchId
    winner_id: PlayerId

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MatchDisputeData:
    kind: ClassVar[NotificationKind] = NotificationKind.MATCH_DISPUTE

    match_id: MatchId

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LevelUpData:
    kind: ClassVar[NotificationKind] = NotificationKind.LEVEL_UP

    old_level: int
    new_level: int
    current_xp: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AchievementUnlockedData:
    kind: ClassVar[NotificationKind] = NotificationKind.ACHIEVEMENT_UNLOCKED

    achievement_type: str
    name: str
    tier: AchievementTier

    def to_dict(self) -> dict[str, Any]:
        return {
            "achievement_type": self.achievement_type,
            "name": self.name,
            "tier": self.tier.value,
        }


@dataclass(frozen=True)
class StreakBrokenData:
    kind: ClassVar[NotificationKind] = NotificationKind.STREAK_BROKEN

    def to_dict(self) -> dict[str, Any]:
        return {}


# One variant per notification kind
NotificationPayload = (
    MatchCompletedData
    | MatchDisputeData
    | LevelUpData
    | AchievementUnlockedData
    | StreakBrokenData
)


@dataclass(frozen=True)
class Notification:
    """A message addressed to a single player."""

    player_id: PlayerId
    title: str
    message: str
    data: NotificationPayload

    @property
    def kind(self) -> NotificationKind:
        return self.data.kind


# =============================================================================
# Collaborator Protocols
# =============================================================================


class MatchStore(Protocol):
    """Persistence operations the services depend on."""

    def authenticate(self, access_token: str) -> PlayerId | None: ...

    def get_match(self, match_id: MatchId) -> Match | None: ...

    def get_selections(self, match_id: MatchId) -> list[WinnerSelection]: ...

    def upsert_selection(
        self, match_id: MatchId, selector_id: PlayerId, winner_id: PlayerId
    ) -> None: ...

    def set_match_winner(self, match_id: MatchId, winner_id: PlayerId) -> bool: ...

    def get_player_xp(self, player_id: PlayerId) -> int: ...

    def add_xp(self, player_id: PlayerId, amount: int, reason: str) -> int: ...

    def get_player_stats(self, player_id: PlayerId) -> PlayerStats: ...

    def has_achievement(self, player_id: PlayerId, achievement_type: str) -> bool: ...

    def award_achievement(self, player_id: PlayerId, achievement: Achievement) -> bool: ...

    def update_daily_streak(self, player_id: PlayerId) -> StreakUpdate | None: ...


class NotificationSink(Protocol):
    """Delivers notifications to players."""

    def notify(
        self,
        player_id: PlayerId,
        kind: NotificationKind,
        title: str,
        message: str,
        data: NotificationPayload,
    ) -> None: ...


class AchievementEvaluator(Protocol):
    """Reacts to player events (XP, achievements)."""

    def evaluate(self, event: AchievementEvent) -> None: ...
