"""
Ports (interfaces) for card persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import Card, ReviewLogEntry


class CardRepository(ABC):
    """
    Port for storing a deck of cards and its review log.

    Implementations:
        - YamlDeckRepository: One YAML file per deck.
    """

    @abstractmethod
    async def list_cards(self) -> list[Card]:
        """
        Return every card in the deck, in insertion order.
        """
        pass

    @abstractmethod
    async def get_card(self, card_id: str) -> Card:
        """
        Fetch a single card.

        Raises:
            CardNotFoundError: If no card has the given id.
        """
        pass

    @abstractmethod
    async def add_card(self, card: Card) -> None:
        """
        Store a new card.

        Raises:
            DuplicateCardError: If a card with the same id already exists.
        """
        pass

    @abstractmethod
    async def record_review(self, card: Card, entry: ReviewLogEntry) -> None:
        """
        Replace the stored state of an existing card and append its log entry.

        Both writes land together or neither does.

        Raises:
            CardNotFoundError: If the card was never added.
        """
        pass

    @abstractmethod
    async def list_reviews(self) -> list[ReviewLogEntry]:
        """
        Return the review log sorted by reviewed_at ascending.
        """
        pass
