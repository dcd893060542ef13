MIN_EASE = 1.3
INITIAL_EASE = 2.5
MIN_INTERVAL = 1  # days
MAX_INTERVAL = 36500  # keeps next_review inside datetime range

HARD_MULTIPLIER = 1.2
EASY_BONUS = 1.3

AGAIN_EASE_PENALTY = 0.20
HARD_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.15

# Mastery thresholds on interval (days) for REVIEWING cards
ALMOST_DONE_INTERVAL = 3
MASTERED_INTERVAL = 21

# Read-modify-write attempts before a conflict is surfaced
REVIEW_MAX_ATTEMPTS = 2

REVIEW_ACTION = "REVIEW"
HEATMAP_DAYS = 365
