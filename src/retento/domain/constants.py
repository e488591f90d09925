"""Centralized constants for the retento scheduler.

All magic numbers of the SM-2 variant live here so every layer
imports from a single source of truth.
"""

# ---------- Time ----------
MS_PER_DAY = 24 * 60 * 60 * 1000

# ---------- Ease factor ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3

# ---------- Quality ----------
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3  # quality >= 3 is a successful recall

# ---------- Intervals (days) ----------
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
FAILURE_INTERVAL = 1

# ---------- Leech detection ----------
LEECH_THRESHOLD = 4  # consecutive failures

# ---------- Categorization ----------
REVIEW_MIN_INTERVAL = 7
MASTERED_MIN_INTERVAL = 21
MASTERED_MIN_EASE = 2.5
