"""
SM-2 scheduler.

Computes the next scheduling state of a card from a quality grade, and
answers deck-wide queries (due list, categories, stats).

This is a pure computation module with no I/O. Every function takes an
optional ``now`` (epoch ms) and only reads the system clock when it is
omitted.
"""

import logging
import math
import time
from collections.abc import Sequence
from dataclasses import replace

from retento.domain.constants import (
    DEFAULT_EASE_FACTOR,
    FAILURE_INTERVAL,
    FIRST_INTERVAL,
    MASTERED_MIN_EASE,
    MASTERED_MIN_INTERVAL,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    MIN_QUALITY,
    MS_PER_DAY,
    PASSING_QUALITY,
    REVIEW_MIN_INTERVAL,
    SECOND_INTERVAL,
)
from retento.domain.scheduling.errors import InvalidQualityError
from retento.domain.scheduling.models import Card, CardCategories, DeckStats

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def validate_quality(quality: object) -> int:
    """
    Check a quality grade and return it as a plain int.

    Raises:
        InvalidQualityError: If quality is not an int in [0, 5]. Booleans are rejected.
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQualityError(quality)
    return int(quality)


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """
    SM-2 ease update, floored at 1.3.

    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
    """
    miss = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def initialize_card(card_id: str, front: str, back: str, *, now: int | None = None) -> Card:
    """
    Create a card with default scheduling state, due immediately.
    """
    if now is None:
        now = now_ms()

    return Card(
        id=card_id,
        front=front,
        back=back,
        ease_factor=DEFAULT_EASE_FACTOR,
        interval=0,
        repetitions=0,
        next_review_at=now,
        last_reviewed_at=None,
    )


def review_card(card: Card, quality: int, *, now: int | None = None) -> Card:
    """
    Apply one review to a card and return its next state.

    Args:
        card: Current card state. Not modified.
        quality: Recall grade 0-5; below 3 is a failure.
        now: Review time in epoch ms. Defaults to the system clock.

    Returns:
        A new Card with ease, interval, repetitions, due date, counters
        and failure streak recomputed.

    Raises:
        InvalidQualityError: If quality is outside [0, 5] or not an int.
    """
    quality = validate_quality(quality)
    if now is None:
        now = now_ms()

    ease_factor = next_ease_factor(card.ease_factor, quality)
    passed = quality >= PASSING_QUALITY

    if not passed:
        repetitions = 0
        interval = FAILURE_INTERVAL
    else:
        repetitions = card.repetitions + 1
        if repetitions == 1:
            interval = FIRST_INTERVAL
        elif repetitions == 2:
            interval = SECOND_INTERVAL
        else:
            # Previous interval times the *updated* ease
            interval = round_half_up(card.interval * ease_factor)

    reviewed = replace(
        card,
        ease_factor=ease_factor,
        interval=interval,
        repetitions=repetitions,
        next_review_at=now + interval * MS_PER_DAY,
        last_reviewed_at=now,
        total_reviews=card.total_reviews + 1,
        correct_count=card.correct_count + (1 if passed else 0),
        incorrect_count=card.incorrect_count + (0 if passed else 1),
        consecutive_failures=0 if passed else card.consecutive_failures + 1,
    )

    logger.debug(
        f"Reviewed {card.id} q={quality}: ease {card.ease_factor:.2f} -> {ease_factor:.2f}, "
        f"interval {card.interval} -> {interval}, reps {repetitions}"
    )
    return reviewed


def due_cards(cards: Sequence[Card], *, now: int | None = None) -> list[Card]:
    """
    Cards whose due time has passed, oldest-due first.

    Ties keep their input order.
    """
    if now is None:
        now = now_ms()
    due = [card for card in cards if card.next_review_at <= now]
    # list.sort is stable
    due.sort(key=lambda c: c.next_review_at)
    return due


def categorize_cards(cards: Sequence[Card]) -> CardCategories:
    """
    Group cards into new / learning / review / mastered.

    Each group uses its own predicate. A card with a long interval but an
    ease factor below 2.5 lands in none of them.
    """
    return CardCategories(
        new=[c for c in cards if c.total_reviews == 0],
        learning=[c for c in cards if c.total_reviews > 0 and c.interval < REVIEW_MIN_INTERVAL],
        review=[c for c in cards if REVIEW_MIN_INTERVAL <= c.interval < MASTERED_MIN_INTERVAL],
        mastered=[
            c
            for c in cards
            if c.interval >= MASTERED_MIN_INTERVAL and c.ease_factor >= MASTERED_MIN_EASE
        ],
    )


def accuracy(cards: Sequence[Card]) -> int:
    """Percentage of correct reviews across the deck, 0 if nothing was reviewed."""
    total_reviews = sum(c.total_reviews for c in cards)
    if total_reviews == 0:
        return 0
    total_correct = sum(c.correct_count for c in cards)
    return round_half_up(total_correct / total_reviews * 100)


def card_stats(cards: Sequence[Card], *, now: int | None = None) -> DeckStats:
    categories = categorize_cards(cards)
    due = due_cards(cards, now=now)

    return DeckStats(
        new_count=len(categories.new),
        learning_count=len(categories.learning),
        review_count=len(categories.review),
        mastered_count=len(categories.mastered),
        due_today_count=len(due),
        accuracy=accuracy(cards),
        leech_count=sum(1 for c in cards if c.is_leech),
    )
