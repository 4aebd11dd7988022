# progression.py
"""
XP / level progression.

Pure, deterministic mapping from a cumulative XP total to a level and the
player's progress within that level. No I/O.

Levels are defined by the cumulative thresholds in LEVEL_THRESHOLDS. Level 5
is the last level: at or beyond its threshold there is no next level, so
xp_needed_for_next_level is 0 and the progress bar is shown full (100%).
"""

from app_types import LevelProgress
from constants import LEVEL_THRESHOLDS, MAX_LEVEL, MIN_LEVEL
from exceptions import InvalidInputError


def _validate_xp(current_xp: int) -> None:
    # bool is an int subclass but never a valid XP total
    if isinstance(current_xp, bool) or not isinstance(current_xp, int):
        raise InvalidInputError(f"XP must be an integer, got {current_xp!r}")
    if current_xp < 0:
        raise InvalidInputError(f"XP must be non-negative, got {current_xp}")


def threshold_for_level(level: int) -> int:
    """Cumulative XP required to reach `level`.

    Raises:
        InvalidInputError: If the level is outside MIN_LEVEL..MAX_LEVEL.
    """
    if level not in LEVEL_THRESHOLDS:
        raise InvalidInputError(
            f"Level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}"
        )
    return LEVEL_THRESHOLDS[level]


def level_for_xp(current_xp: int) -> int:
    """Largest level whose threshold is <= current_xp."""
    _validate_xp(current_xp)
    level = MIN_LEVEL
    for candidate, threshold in sorted(LEVEL_THRESHOLDS.items()):
        if current_xp >= threshold:
            level = candidate
    return level


def calculate_level_progress(current_xp: int) -> LevelProgress:
    """Compute level, progress within the level and the progress percentage.

    Args:
        current_xp: Cumulative XP, a non-negative integer

    Returns:
        LevelProgress for display and level-up detection.

    Raises:
        InvalidInputError: If current_xp is negative or not an integer.
    """
    current_level = level_for_xp(current_xp)
    current_threshold = threshold_for_level(current_level)
    level_progress = current_xp - current_threshold

    if current_level >= MAX_LEVEL:
        xp_needed = 0
        percentage = 100
    else:
        xp_needed = threshold_for_level(current_level + 1) - current_threshold
        percentage = (level_progress * 100) // xp_needed
        percentage = max(0, min(100, percentage))

    return LevelProgress(
        current_level=current_level,
        current_xp=current_xp,
        level_progress=level_progress,
        xp_needed_for_next_level=xp_needed,
        progress_percentage=percentage,
    )
