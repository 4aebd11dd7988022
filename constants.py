# Progression Constants
# Cumulative XP required to reach each level; level 1 is the floor
LEVEL_THRESHOLDS = {1: 0, 2: 1000, 3: 2500, 4: 5000, 5: 10000}
MIN_LEVEL = 1
MAX_LEVEL = 5

# XP Reward Constants (per activity)
XP_REWARDS = {
    "match_played": 100,
    "match_won": 250,
    "training_completed": 150,
    "court_booked": 50,
    "login": 50,
    "first_login_bonus": 450,
}

# Notification Texts
MATCH_COMPLETED_TITLE = "Match Result Confirmed"
MATCH_WON_MESSAGE = "Congratulations! You won the match!"
MATCH_LOST_MESSAGE = "Match completed. Better luck next time!"
MATCH_DISPUTE_TITLE = "Match Result Dispute"
MATCH_DISPUTE_MESSAGE = (
    "There is a disagreement about the match result. Both players selected "
    "different winners. Please discuss and update your selections."
)
LEVEL_UP_TITLE = "Level Up!"
ACHIEVEMENT_UNLOCKED_TITLE = "Achievement Unlocked!"
STREAK_BROKEN_TITLE = "Streak Reset"
STREAK_BROKEN_MESSAGE = (
    "Your daily streak has been reset. Log in daily to maintain your streak!"
)

# Database Table Names
MATCHES_TABLE = "matches"
SELECTIONS_TABLE = "match_winner_selections"
PLAYER_XP_TABLE = "player_xp"
PLAYER_STATS_TABLE = "player_stats"
ACHIEVEMENTS_TABLE = "achievements"
NOTIFICATIONS_TABLE = "notifications"
