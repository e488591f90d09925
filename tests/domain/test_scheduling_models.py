from dataclasses import FrozenInstanceError

import pytest

from conftest import NOW
from retento.domain.scheduling import (
    Card,
    CardNotFoundError,
    InvalidQualityError,
    Quality,
    SchedulerError,
)


@pytest.mark.parametrize("failures,expected", [(0, False), (3, False), (4, True), (9, True)])
def test_is_leech_follows_consecutive_failures(failures, expected):
    card = Card(id="c", front="f", back="b", next_review_at=NOW, consecutive_failures=failures)
    assert card.is_leech is expected


def test_is_leech_cannot_be_set():
    card = Card(id="c", front="f", back="b", next_review_at=NOW)
    with pytest.raises((AttributeError, FrozenInstanceError)):
        card.is_leech = True


def test_quality_grades():
    assert [q.value for q in Quality] == [0, 1, 2, 3, 4, 5]
    assert Quality.PERFECT == 5
    assert Quality.EASY_ON_REVEAL < Quality.SERIOUS_DIFFICULTY


def test_error_hierarchy():
    err = InvalidQualityError(8)
    assert isinstance(err, SchedulerError)
    assert isinstance(err, ValueError)
    assert "got 8" in str(err)

    missing = CardNotFoundError("abc")
    assert isinstance(missing, KeyError)
    assert str(missing) == "Card not found: abc"
