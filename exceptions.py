# exceptions.py
"""
Custom exceptions for the Tennis Club App.

This module defines domain-specific exceptions for match confirmation,
XP progression and persistence, so callers (API routes, UI pages) can map
each failure to a distinct response.
"""


class TennisClubError(Exception):
    """Base exception for all application errors."""

    pass


class DatabaseError(TennisClubError):
    """Raised when a database operation fails."""

    pass


class ValidationError(TennisClubError):
    """Raised when input validation fails."""

    pass


class InvalidInputError(ValidationError):
    """Raised when a numeric input is outside its contract (e.g. negative XP)."""

    pass


class InvalidWinnerCandidateError(ValidationError):
    """Raised when the selected winner is not one of the match's players."""

    pass


class NotAParticipantError(TennisClubError):
    """Raised when someone who did not play the match tries to select a winner."""

    pass


class MatchNotFoundError(TennisClubError):
    """Raised when a match id does not exist."""

    pass


class AlreadyFinalizedConflictError(TennisClubError):
    """Raised when a finalized match would be given a different winner."""

    pass


class AuthenticationError(TennisClubError):
    """Raised when a request carries no valid Supabase session."""

    pass
