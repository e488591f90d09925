"""
YAML Deck Repository: infrastructure adapter for a deck stored on disk.

Implements CardRepository with a single YAML document per deck:

    cards:
      - id: card_01H...
        front: ...
        ...
    reviews:
      - card_id: card_01H...
        reviewed_at: 1700000000000
        ...
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from retento.domain.constants import MIN_EASE_FACTOR
from retento.domain.scheduling.errors import CardNotFoundError, DeckStorageError, DuplicateCardError
from retento.domain.scheduling.models import Card, ReviewLogEntry
from retento.domain.scheduling.ports import CardRepository

logger = logging.getLogger(__name__)

CARD_FIELDS = (
    "id",
    "front",
    "back",
    "ease_factor",
    "interval",
    "repetitions",
    "next_review_at",
    "last_reviewed_at",
    "total_reviews",
    "correct_count",
    "incorrect_count",
    "consecutive_failures",
)


def card_to_dict(card: Card) -> dict[str, Any]:
    # is_leech is derived and never stored
    return {name: getattr(card, name) for name in CARD_FIELDS}


def _check_invariants(card: Card) -> None:
    problems = []
    if card.ease_factor < MIN_EASE_FACTOR:
        problems.append(f"ease_factor {card.ease_factor} is below {MIN_EASE_FACTOR}")
    for name in ("interval", "repetitions", "consecutive_failures"):
        if getattr(card, name) < 0:
            problems.append(f"{name} is negative")
    if card.correct_count < 0 or card.incorrect_count < 0:
        problems.append("review counts are negative")
    if card.total_reviews != card.correct_count + card.incorrect_count:
        problems.append(
            f"total_reviews {card.total_reviews} != correct_count {card.correct_count}"
            f" + incorrect_count {card.incorrect_count}"
        )
    if card.interval == 0 and card.total_reviews > 0:
        problems.append("a reviewed card has interval 0")
    if problems:
        raise DeckStorageError(f"Inconsistent card {card.id!r}: {'; '.join(problems)}")


def card_from_dict(data: dict[str, Any]) -> Card:
    """Build a Card from a stored entry, rejecting ones that break its invariants."""
    try:
        card = Card(
            id=str(data["id"]),
            front=str(data.get("front", "")),
            back=str(data.get("back", "")),
            ease_factor=float(data["ease_factor"]),
            interval=int(data["interval"]),
            repetitions=int(data["repetitions"]),
            next_review_at=int(data["next_review_at"]),
            last_reviewed_at=(
                int(data["last_reviewed_at"]) if data.get("last_reviewed_at") is not None else None
            ),
            total_reviews=int(data.get("total_reviews", 0)),
            correct_count=int(data.get("correct_count", 0)),
            incorrect_count=int(data.get("incorrect_count", 0)),
            consecutive_failures=int(data.get("consecutive_failures", 0)),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DeckStorageError(f"Malformed card entry {data!r}: {e}") from e
    _check_invariants(card)
    return card


def review_to_dict(entry: ReviewLogEntry) -> dict[str, Any]:
    return {
        "card_id": entry.card_id,
        "reviewed_at": entry.reviewed_at,
        "quality": entry.quality,
        "interval": entry.interval,
        "ease_factor": entry.ease_factor,
    }


def review_from_dict(data: dict[str, Any]) -> ReviewLogEntry:
    try:
        return ReviewLogEntry(
            card_id=str(data["card_id"]),
            reviewed_at=int(data["reviewed_at"]),
            quality=int(data["quality"]),
            interval=int(data["interval"]),
            ease_factor=float(data["ease_factor"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DeckStorageError(f"Malformed review entry {data!r}: {e}") from e


class YamlDeckRepository(CardRepository):
    """
    Stores a deck and its review log in one YAML file.

    A missing file is an empty deck. Writes go to a temp file that
    replaces the deck file, so a crash never leaves a half-written deck.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    # ---------- File access ----------

    def _load(self) -> tuple[list[Card], list[ReviewLogEntry]]:
        if not self.path.exists():
            return [], []

        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise DeckStorageError(f"Invalid YAML in {self.path}: {e}") from e
        except OSError as e:
            raise DeckStorageError(f"Could not read {self.path}: {e}") from e

        if raw is None:
            return [], []
        if not isinstance(raw, dict):
            raise DeckStorageError(f"{self.path} must contain a mapping with 'cards' and 'reviews'")

        cards = [card_from_dict(c) for c in raw.get("cards") or []]
        reviews = [review_from_dict(r) for r in raw.get("reviews") or []]
        logger.debug(f"Loaded {len(cards)} cards and {len(reviews)} reviews from {self.path}")
        return cards, reviews

    def _dump(self, cards: list[Card], reviews: list[ReviewLogEntry]) -> None:
        document = {
            "cards": [card_to_dict(c) for c in cards],
            "reviews": [review_to_dict(r) for r in reviews],
        }
        text = yaml.safe_dump(document, sort_keys=False, allow_unicode=True)

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            Path(tmp_name).replace(self.path)
            tmp_name = None
        except OSError as e:
            raise DeckStorageError(f"Could not write {self.path}: {e}") from e
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        logger.debug(f"Saved {len(cards)} cards to {self.path}")

    # ---------- CardRepository ----------

    async def list_cards(self) -> list[Card]:
        cards, _ = self._load()
        return cards

    async def get_card(self, card_id: str) -> Card:
        cards, _ = self._load()
        for card in cards:
            if card.id == card_id:
                return card
        raise CardNotFoundError(card_id)

    async def add_card(self, card: Card) -> None:
        cards, reviews = self._load()
        if any(c.id == card.id for c in cards):
            raise DuplicateCardError(card.id)
        cards.append(card)
        self._dump(cards, reviews)

    async def record_review(self, card: Card, entry: ReviewLogEntry) -> None:
        cards, reviews = self._load()
        for i, existing in enumerate(cards):
            if existing.id == card.id:
                cards[i] = card
                break
        else:
            raise CardNotFoundError(card.id)
        reviews.append(entry)
        self._dump(cards, reviews)

    async def list_reviews(self) -> list[ReviewLogEntry]:
        _, reviews = self._load()
        return sorted(reviews, key=lambda r: r.reviewed_at)
