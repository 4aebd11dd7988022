# match_service.py
"""
Service layer for confirming match results.

A match result becomes official only when both players independently select
the same winner:

    no selections -> one selection -> both agree    -> finalized
                                   -> both disagree -> disputed

A disputed match is not terminal: either player can change their selection
and the match is evaluated again. Once a winner is stored it never changes.

This module sits between the API/UI and the store, ensuring the rules are
applied consistently regardless of where the submission comes from.
"""

import logging

import notifications
from achievement_service import AchievementService
from app_types import (
    AchievementEvaluator,
    AchievementEvent,
    AchievementEventType,
    Match,
    MatchId,
    MatchStore,
    Notification,
    NotificationSink,
    PlayerId,
    SelectionResult,
    SelectionStatus,
    WinnerSelection,
)
from exceptions import (
    AlreadyFinalizedConflictError,
    InvalidWinnerCandidateError,
    MatchNotFoundError,
    NotAParticipantError,
)
from xp_service import XpService

logger = logging.getLogger("app.match_service")


def _selections_by_player(
    match: Match, selections: list[WinnerSelection]
) -> dict[PlayerId, PlayerId]:
    """Maps each participant to the winner they selected (ignores strangers)."""
    return {
        s.selector_id: s.selected_winner_id
        for s in selections
        if match.has_participant(s.selector_id)
    }


def _finalized_result(match: Match, selected_winner_id: PlayerId) -> SelectionResult:
    """Resubmission against a stored winner: no-op if it agrees, conflict otherwise."""
    if match.winner_id == selected_winner_id:
        return SelectionResult(SelectionStatus.COMPLETED, match.winner_id)
    raise AlreadyFinalizedConflictError(
        f"Match {match.id} is already finalized with winner {match.winner_id}"
    )


class WinnerConfirmationService:
    """Runs the two-player winner confirmation protocol."""

    def __init__(
        self,
        store: MatchStore,
        notifier: NotificationSink,
        achievements: AchievementEvaluator,
    ):
        self.store = store
        self.notifier = notifier
        self.achievements = achievements

    def submit_selection(
        self, match_id: MatchId, selector_id: PlayerId, selected_winner_id: PlayerId
    ) -> SelectionResult:
        """
        Records a player's winner selection and evaluates the match.

        Args:
            match_id: The match being confirmed
            selector_id: The player submitting the selection
            selected_winner_id: Who the selector says won

        Returns:
            SelectionResult with status pending, completed or disputed.

        Raises:
            MatchNotFoundError: If the match does not exist.
            NotAParticipantError: If the selector did not play the match.
            InvalidWinnerCandidateError: If the selected winner did not play the match.
            AlreadyFinalizedConflictError: If the match already has a different winner.
            DatabaseError: If reading or writing selections fails.
        """
        match = self.store.get_match(match_id)
        if match is None:
            raise MatchNotFoundError(f"Match '{match_id}' not found")

        if not match.has_participant(selector_id):
            raise NotAParticipantError(
                f"Player {selector_id} is not a player in match {match_id}"
            )
        if not match.has_participant(selected_winner_id):
            raise InvalidWinnerCandidateError(
                "Selected winner must be a player in this match"
            )

        if match.is_finalized:
            return _finalized_result(match, selected_winner_id)

        previous = _selections_by_player(match, self.store.get_selections(match_id))
        changed = previous.get(selector_id) != selected_winner_id

        self.store.upsert_selection(match_id, selector_id, selected_winner_id)
        logger.info(f"Selection recorded: {selector_id} picked {selected_winner_id} in {match_id}")

        # Re-read after the write; the other player may have submitted meanwhile
        current = _selections_by_player(match, self.store.get_selections(match_id))
        return self._evaluate(match, current, selected_winner_id, changed)

    def _evaluate(
        self,
        match: Match,
        selections: dict[PlayerId, PlayerId],
        selected_winner_id: PlayerId,
        changed: bool,
    ) -> SelectionResult:
        picks = set(selections.values())
        if len(selections) == 2 and len(picks) == 1:
            return self._finalize(match, picks.pop())

        # The other player may have finalized between our first read and the write
        latest = self.store.get_match(match.id)
        if latest is not None and latest.is_finalized:
            return _finalized_result(latest, selected_winner_id)

        if len(selections) < 2:
            logger.info(f"Only one selection recorded so far for {match.id}")
            return SelectionResult(SelectionStatus.PENDING)
        return self._dispute(match, notify=changed)

    def _finalize(self, match: Match, winner_id: PlayerId) -> SelectionResult:
        # Only the call that actually stores the winner runs the side effects
        if self.store.set_match_winner(match.id, winner_id):
            logger.info(f"Match {match.id} finalized, winner {winner_id}")
            self._dispatch_completion(match, winner_id)
        return SelectionResult(SelectionStatus.COMPLETED, winner_id)

    def _dispute(self, match: Match, notify: bool) -> SelectionResult:
        logger.info(f"Match {match.id} disputed: players selected different winners")
        if notify:
            for notification in notifications.match_dispute(match):
                self._send(notification)
        return SelectionResult(SelectionStatus.DISPUTED)

    def _dispatch_completion(self, match: Match, winner_id: PlayerId) -> None:
        """Best-effort follow-ups; the winner is already stored."""
        for notification in notifications.match_completed(match, winner_id):
            self._send(notification)

        events = [
            AchievementEvent(AchievementEventType.MATCH_PLAYED, player_id, match.id)
            for player_id in match.participants
        ]
        events.append(AchievementEvent(AchievementEventType.MATCH_WON, winner_id, match.id))

        for event in events:
            try:
                self.achievements.evaluate(event)
            except Exception:
                logger.exception(
                    f"Achievement evaluation failed: {event.type.value} for {event.player_id}"
                )

    def _send(self, notification: Notification) -> None:
        try:
            notifications.send(self.notifier, notification)
        except Exception:
            logger.exception(
                f"Failed to send {notification.kind.value} notification "
                f"to {notification.player_id}"
            )


def create_confirmation_service(store: MatchStore) -> WinnerConfirmationService:
    """Wires the confirmation service with XP and achievements on one store.

    The store doubles as the notification sink (SupabaseStore implements notify).
    """
    xp_service = XpService(store, store)
    achievements = AchievementService(store, store, xp_service)
    return WinnerConfirmationService(store, store, achievements)
