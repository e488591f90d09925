import pytest

from retento.application.scheduler import initialize_card
from retento.domain.constants import MS_PER_DAY

# 2024-03-01 00:00:00 UTC
NOW = 1709251200000
DAY = MS_PER_DAY


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def new_card():
    """A freshly initialized card, due at NOW."""
    return initialize_card("c1", "What is the SM-2 ease floor?", "1.3", now=NOW)


@pytest.fixture
def deck_path(tmp_path):
    """Path to a (not yet created) deck file inside a temp dir."""
    return tmp_path / "decks" / "deck.yaml"


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    for var in ("RETENTO_DECK_PATH", "RETENTO_HOST", "RETENTO_PORT"):
        monkeypatch.delenv(var, raising=False)
    return home
