from dataclasses import replace
from datetime import date

from conftest import DAY, NOW
from retento.application.progress import compute_progress, review_date
from retento.application.scheduler import initialize_card
from retento.domain.scheduling.models import ReviewLogEntry

TODAY = date(2024, 3, 1)  # review_date(NOW)


def entry(day_offset: int, card_id: str = "c1", quality: int = 4) -> ReviewLogEntry:
    return ReviewLogEntry(
        card_id=card_id,
        reviewed_at=NOW + day_offset * DAY + 3600 * 1000,
        quality=quality,
        interval=1,
        ease_factor=2.5,
    )


def test_review_date_is_utc():
    assert review_date(NOW) == TODAY
    assert review_date(NOW - 1) == date(2024, 2, 29)


def test_empty_progress():
    progress = compute_progress([], [], today=TODAY)
    assert progress.current_streak == 0
    assert progress.longest_streak == 0
    assert progress.last_study_date is None
    assert progress.study_dates == []
    assert progress.cards_reviewed_today == 0
    assert progress.accuracy == 0


def test_streak_ending_today():
    reviews = [entry(-2), entry(-1), entry(0), entry(0, "c2")]
    progress = compute_progress([], reviews, today=TODAY)

    assert progress.current_streak == 3
    assert progress.longest_streak == 3
    assert progress.cards_reviewed_today == 2
    assert progress.last_study_date == "2024-03-01"
    assert progress.study_dates == ["2024-02-28", "2024-02-29", "2024-03-01"]


def test_streak_still_alive_until_end_of_today():
    reviews = [entry(-3), entry(-2), entry(-1)]
    progress = compute_progress([], reviews, today=TODAY)
    assert progress.current_streak == 3
    assert progress.cards_reviewed_today == 0


def test_streak_broken_after_missed_day():
    reviews = [entry(-5), entry(-4), entry(-3), entry(-2)]
    progress = compute_progress([], reviews, today=TODAY)
    assert progress.current_streak == 0
    assert progress.longest_streak == 4


def test_longest_streak_across_gaps():
    reviews = [entry(-10), entry(-9), entry(-8), entry(-7), entry(-3), entry(0), entry(-1)]
    progress = compute_progress([], reviews, today=TODAY)
    assert progress.longest_streak == 4
    assert progress.current_streak == 2


def test_future_reviews_are_ignored():
    progress = compute_progress([], [entry(2)], today=TODAY)
    assert progress.study_dates == []


def test_deck_counts_come_from_cards():
    fresh = initialize_card("n", "f", "b", now=NOW)
    learning = replace(fresh, id="l", total_reviews=2, correct_count=1, incorrect_count=1, interval=1)
    mastered = replace(fresh, id="m", total_reviews=6, correct_count=6, interval=30, ease_factor=2.7)

    progress = compute_progress([fresh, learning, mastered], [], today=TODAY)

    assert progress.new_cards == 1
    assert progress.learning_cards == 1
    assert progress.mastered_cards == 1
    assert progress.total_cards_reviewed == 8
    # 7 of 8
    assert progress.accuracy == 88
