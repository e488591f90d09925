"""
Repository Factory
Centralizes the wiring of storage adapters into application services.
"""

from retento.application.config import AppConfig
from retento.application.review_service import ReviewService
from retento.domain.scheduling.ports import CardRepository
from retento.infrastructure.adapters.yaml_store import YamlDeckRepository


def get_card_repository(config: AppConfig) -> CardRepository:
    """
    Returns the CardRepository implementation for the configured deck.
    """
    return YamlDeckRepository(config.deck_path)


def get_review_service(config: AppConfig) -> ReviewService:
    return ReviewService(get_card_repository(config))
