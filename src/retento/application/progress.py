"""
Study progress: streaks and daily activity derived from the review log.

Pure computation, no I/O. Days are UTC calendar dates.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone

from retento.application.scheduler import accuracy, categorize_cards
from retento.domain.scheduling.models import Card, ReviewLogEntry


@dataclass
class StudyProgress:
    """
    Learner progress across a deck.
    """

    # Streaks
    current_streak: int  # Days studied in a row, ending today or yesterday
    longest_streak: int
    last_study_date: str | None  # YYYY-MM-DD
    study_dates: list[str] = field(default_factory=list)  # Unique, ascending

    # Overall
    total_cards_reviewed: int = 0
    mastered_cards: int = 0
    learning_cards: int = 0
    new_cards: int = 0
    accuracy: int = 0

    # Today
    cards_reviewed_today: int = 0


def review_date(reviewed_at: int) -> date:
    return datetime.fromtimestamp(reviewed_at / 1000, tz=timezone.utc).date()


def _longest_run(days: list[date]) -> int:
    longest = 0
    run = 0
    previous: date | None = None
    for day in days:
        if previous is not None and day - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day
    return longest


def _current_run(days: list[date], today: date) -> int:
    """
    Length of the run ending at the last study day, if that day is today or yesterday.
    """
    if not days or days[-1] < today - timedelta(days=1):
        return 0

    run = 1
    for i in range(len(days) - 1, 0, -1):
        if days[i] - days[i - 1] != timedelta(days=1):
            break
        run += 1
    return run


def compute_progress(
    cards: Sequence[Card],
    reviews: Sequence[ReviewLogEntry],
    *,
    today: date | None = None,
) -> StudyProgress:
    """
    Summarize streaks and activity.

    Args:
        cards: Current deck state (for category counts and accuracy).
        reviews: Review log, any order.
        today: Reference day. Defaults to the current UTC date.
    """
    if today is None:
        today = datetime.now(timezone.utc).date()

    reviewed_on = [review_date(r.reviewed_at) for r in reviews]
    days = sorted({d for d in reviewed_on if d <= today})
    categories = categorize_cards(cards)

    return StudyProgress(
        current_streak=_current_run(days, today),
        longest_streak=_longest_run(days),
        last_study_date=days[-1].isoformat() if days else None,
        study_dates=[d.isoformat() for d in days],
        total_cards_reviewed=sum(c.total_reviews for c in cards),
        mastered_cards=len(categories.mastered),
        learning_cards=len(categories.learning),
        new_cards=len(categories.new),
        accuracy=accuracy(cards),
        cards_reviewed_today=sum(1 for d in reviewed_on if d == today),
    )
