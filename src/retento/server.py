import logging
import time
from contextlib import asynccontextmanager
from dataclasses import asdict
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field, StrictInt

from retento.application.config import AppConfig, resolve_config
from retento.application.factory import get_review_service
from retento.application.review_service import ReviewService
from retento.consts import VERSION
from retento.domain.scheduling.errors import (
    CardNotFoundError,
    DuplicateCardError,
    InvalidQualityError,
    SchedulerError,
)
from retento.domain.scheduling.models import Card

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("retento.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"retento server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("retento server shutting down...")


app = FastAPI(
    title="retento server",
    description="Spaced-repetition scheduling for a flashcard deck.",
    version=VERSION,
    lifespan=lifespan,
)


_config: AppConfig | None = None


def configure(config: AppConfig | None) -> None:
    """
    Serve with an explicit config instead of resolving one from env and TOML.
    """
    global _config
    _config = config
    get_service.cache_clear()


@lru_cache(maxsize=1)
def get_service() -> ReviewService:
    """
    One service per process, so per-card review locks are shared by all requests.
    """
    config = _config if _config is not None else resolve_config()
    logger.info(f"Using deck {config.deck_path}")
    return get_review_service(config)


ServiceDep = Annotated[ReviewService, Depends(get_service)]


def _http_error(e: SchedulerError) -> HTTPException:
    if isinstance(e, InvalidQualityError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, CardNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, DuplicateCardError):
        return HTTPException(status_code=409, detail=str(e))
    logger.error(f"Deck operation failed: {e}", exc_info=True)
    return HTTPException(status_code=500, detail=str(e))


# ---------- Models ----------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class CardResponse(BaseModel):
    id: str
    front: str
    back: str
    ease_factor: float
    interval: int
    repetitions: int
    next_review_at: int
    last_reviewed_at: int | None
    total_reviews: int
    correct_count: int
    incorrect_count: int
    consecutive_failures: int
    is_leech: bool

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(**asdict(card), is_leech=card.is_leech)


class CreateCardRequest(BaseModel):
    front: str
    back: str
    id: str | None = None


class ReviewRequest(BaseModel):
    # Strict so JSON true, 3.0 and "4" are rejected rather than coerced.
    # The range is checked by the scheduler.
    quality: StrictInt
    now: int | None = Field(default=None, description="Review time in epoch ms.")


class StatsResponse(BaseModel):
    new_count: int
    learning_count: int
    review_count: int
    mastered_count: int
    due_today_count: int
    accuracy: int
    leech_count: int


class ProgressResponse(BaseModel):
    current_streak: int
    longest_streak: int
    last_study_date: str | None
    study_dates: list[str]
    total_cards_reviewed: int
    mastered_cards: int
    learning_cards: int
    new_cards: int
    accuracy: int
    cards_reviewed_today: int


# ---------- Routes ----------

start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/cards", response_model=list[CardResponse])
async def list_cards(service: ServiceDep):
    try:
        return [CardResponse.from_card(c) for c in await service.cards()]
    except SchedulerError as e:
        raise _http_error(e) from e


@app.post("/cards", response_model=CardResponse, status_code=201)
async def create_card(req: CreateCardRequest, service: ServiceDep):
    try:
        card = await service.create_card(req.front, req.back, card_id=req.id)
    except SchedulerError as e:
        raise _http_error(e) from e
    return CardResponse.from_card(card)


@app.post("/cards/{card_id}/review", response_model=CardResponse)
async def review_card(card_id: str, req: ReviewRequest, service: ServiceDep):
    """
    Record a review and return the rescheduled card.
    """
    try:
        card = await service.review(card_id, req.quality, now=req.now)
    except SchedulerError as e:
        raise _http_error(e) from e
    return CardResponse.from_card(card)


@app.get("/due", response_model=list[CardResponse])
async def due_cards(service: ServiceDep, now: int | None = None):
    try:
        return [CardResponse.from_card(c) for c in await service.due(now=now)]
    except SchedulerError as e:
        raise _http_error(e) from e


@app.get("/stats", response_model=StatsResponse)
async def deck_stats(service: ServiceDep, now: int | None = None):
    try:
        return StatsResponse(**asdict(await service.stats(now=now)))
    except SchedulerError as e:
        raise _http_error(e) from e


@app.get("/progress", response_model=ProgressResponse)
async def study_progress(service: ServiceDep):
    try:
        return ProgressResponse(**asdict(await service.progress()))
    except SchedulerError as e:
        raise _http_error(e) from e
