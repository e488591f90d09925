"""
Review Service: application layer orchestrator.

Coordinates loading cards from the repository, applying the scheduler and
persisting the result.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date

from ulid import ULID

from retento.application import scheduler
from retento.application.progress import StudyProgress, compute_progress
from retento.domain.scheduling.models import Card, CardCategories, DeckStats, ReviewLogEntry
from retento.domain.scheduling.ports import CardRepository

logger = logging.getLogger(__name__)


def generate_card_id() -> str:
    """Generate a stable card ID using ULID."""
    return f"card_{ULID()}"


class ReviewService:
    """
    Application service for creating, reviewing and querying cards.

    Follows Dependency Inversion: depends on the CardRepository abstraction,
    not a concrete storage adapter.

    Reviews of the same card are serialized so that concurrent callers
    cannot lose a counter increment. Reviews of different cards run freely.
    """

    def __init__(self, repo: CardRepository):
        self._repo = repo
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    @asynccontextmanager
    async def _card_lock(self, card_id: str) -> AsyncIterator[None]:
        # A lock lives only while some review holds or waits on it
        lock = self._locks.setdefault(card_id, asyncio.Lock())
        self._lock_users[card_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[card_id] -= 1
            if not self._lock_users[card_id]:
                del self._lock_users[card_id]
                del self._locks[card_id]

    async def create_card(
        self,
        front: str,
        back: str,
        card_id: str | None = None,
        now: int | None = None,
    ) -> Card:
        """
        Initialize a card and store it.

        Raises:
            DuplicateCardError: If card_id is already in the deck.
        """
        card = scheduler.initialize_card(card_id or generate_card_id(), front, back, now=now)
        await self._repo.add_card(card)
        logger.info(f"Created card {card.id}")
        return card

    async def review(self, card_id: str, quality: int, now: int | None = None) -> Card:
        """
        Review a stored card and persist its new state.

        Raises:
            InvalidQualityError: If quality is not an int in [0, 5].
            CardNotFoundError: If card_id is unknown.
        """
        quality = scheduler.validate_quality(quality)
        if now is None:
            now = scheduler.now_ms()

        async with self._card_lock(card_id):
            card = await self._repo.get_card(card_id)
            updated = scheduler.review_card(card, quality, now=now)
            await self._repo.record_review(
                updated,
                ReviewLogEntry(
                    card_id=card_id,
                    reviewed_at=now,
                    quality=quality,
                    interval=updated.interval,
                    ease_factor=updated.ease_factor,
                ),
            )

        if updated.is_leech and not card.is_leech:
            logger.warning(
                f"Card {card_id} became a leech after {updated.consecutive_failures} "
                "consecutive failures; consider rewriting it."
            )
        return updated

    async def cards(self) -> list[Card]:
        return await self._repo.list_cards()

    async def due(self, now: int | None = None) -> list[Card]:
        return scheduler.due_cards(await self._repo.list_cards(), now=now)

    async def categories(self) -> CardCategories:
        return scheduler.categorize_cards(await self._repo.list_cards())

    async def stats(self, now: int | None = None) -> DeckStats:
        return scheduler.card_stats(await self._repo.list_cards(), now=now)

    async def leeches(self) -> list[Card]:
        return [c for c in await self._repo.list_cards() if c.is_leech]

    async def progress(self, today: date | None = None) -> StudyProgress:
        cards = await self._repo.list_cards()
        reviews = await self._repo.list_reviews()
        return compute_progress(cards, reviews, today=today)
