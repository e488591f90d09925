# Domain Scheduling Package
from .errors import (
    CardNotFoundError,
    DeckStorageError,
    DuplicateCardError,
    InvalidQualityError,
    SchedulerError,
)
from .models import Card, CardCategories, DeckStats, Quality, ReviewLogEntry
from .ports import CardRepository

__all__ = [
    "Card",
    "CardCategories",
    "DeckStats",
    "Quality",
    "ReviewLogEntry",
    "CardRepository",
    "SchedulerError",
    "InvalidQualityError",
    "CardNotFoundError",
    "DuplicateCardError",
    "DeckStorageError",
]
