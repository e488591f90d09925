"""
Domain models for SM-2 scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from enum import IntEnum

from retento.domain.constants import DEFAULT_EASE_FACTOR, LEECH_THRESHOLD


class Quality(IntEnum):
    """
    Learner's self-assessed recall for a single review.

    Anything below SERIOUS_DIFFICULTY counts as a failed review.
    """

    BLACKOUT = 0  # Complete blackout
    REMEMBERED_ON_REVEAL = 1  # Incorrect; correct answer remembered
    EASY_ON_REVEAL = 2  # Incorrect; correct answer easy to recall
    SERIOUS_DIFFICULTY = 3  # Correct with serious difficulty
    HESITATION = 4  # Correct after hesitation
    PERFECT = 5  # Perfect response


@dataclass(frozen=True)
class Card:
    """
    Scheduling state of one flashcard.

    Attributes:
        id: Opaque identity, stable across sessions.
        front: Question/term.
        back: Answer/definition.
        ease_factor: Interval multiplier, never below 1.3.
        interval: Days until next review (0 = never scheduled).
        repetitions: Consecutive successful reviews since the last failure.
        next_review_at: Epoch ms when the card becomes due.
        last_reviewed_at: Epoch ms of the most recent review, None if never.
        total_reviews: Lifetime review count.
        correct_count: Reviews with quality >= 3.
        incorrect_count: Reviews with quality < 3.
        consecutive_failures: Failures since the last success.
    """

    id: str
    front: str
    back: str
    next_review_at: int
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = 0
    repetitions: int = 0
    last_reviewed_at: int | None = None
    total_reviews: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    consecutive_failures: int = 0

    @property
    def is_leech(self) -> bool:
        return self.consecutive_failures >= LEECH_THRESHOLD


@dataclass(frozen=True)
class ReviewLogEntry:
    """
    A single review log entry.

    Attributes:
        card_id: The card that was reviewed.
        reviewed_at: Epoch ms of the review.
        quality: Grade given (0-5).
        interval: Interval assigned after this review (days).
        ease_factor: Ease factor after this review.
    """

    card_id: str
    reviewed_at: int
    quality: int
    interval: int
    ease_factor: float


@dataclass(frozen=True)
class CardCategories:
    """Cards grouped by learning stage. Groups need not cover the whole deck."""

    new: list[Card] = field(default_factory=list)
    learning: list[Card] = field(default_factory=list)
    review: list[Card] = field(default_factory=list)
    mastered: list[Card] = field(default_factory=list)


@dataclass(frozen=True)
class DeckStats:
    new_count: int
    learning_count: int
    review_count: int
    mastered_count: int
    due_today_count: int
    accuracy: int  # Percentage 0-100
    leech_count: int = 0
