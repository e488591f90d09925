"""Exceptions raised by the scheduling domain and its adapters."""

from typing import Any

from retento.domain.constants import MAX_QUALITY, MIN_QUALITY


class SchedulerError(Exception):
    """Base class for every retento error."""


class InvalidQualityError(SchedulerError, ValueError):
    """Quality rating is not an integer in [0, 5]."""

    def __init__(self, quality: Any):
        self.quality = quality
        super().__init__(
            f"Quality must be an integer between {MIN_QUALITY} and {MAX_QUALITY}, got {quality!r}"
        )


class CardNotFoundError(SchedulerError, KeyError):
    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(card_id)

    def __str__(self) -> str:
        return f"Card not found: {self.card_id}"


class DuplicateCardError(SchedulerError):
    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card already exists: {card_id}")


class DeckStorageError(SchedulerError):
    """Deck file could not be read or written."""
