"""Tests for CLI commands: add, review, due, stats, progress, serve, config."""

import json
import os
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from retento import server
from retento.interface.cli import app

runner = CliRunner()


@pytest.fixture
def deck(mock_home, tmp_path):
    return tmp_path / "deck.yaml"


def invoke(deck, *args):
    return runner.invoke(app, ["--deck", str(deck), *args])


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "spaced-repetition" in result.stdout
    for command in ("add", "review", "due", "stats", "progress", "config"):
        assert command in result.stdout


# --- Deck commands ---


def test_add_prints_card_id(deck):
    result = invoke(deck, "add", "What is 2+2?", "4", "--id", "math_1")
    assert result.exit_code == 0
    assert result.stdout.strip() == "math_1"
    assert deck.exists()


def test_add_generates_id(deck):
    result = invoke(deck, "add", "Q", "A")
    assert result.exit_code == 0
    assert result.stdout.strip().startswith("card_")


def test_add_duplicate_fails(deck):
    invoke(deck, "add", "Q", "A", "--id", "same")
    result = invoke(deck, "add", "Q", "A", "--id", "same")
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_review_reschedules(deck):
    invoke(deck, "add", "Q", "A", "--id", "c1")

    result = invoke(deck, "review", "c1", "5")
    assert result.exit_code == 0
    assert "c1: interval 1d, ease 2.60" in result.stdout

    result = invoke(deck, "review", "c1", "5")
    assert "interval 6d" in result.stdout


def test_review_out_of_range_quality(deck):
    invoke(deck, "add", "Q", "A", "--id", "c1")
    result = invoke(deck, "review", "c1", "7")
    assert result.exit_code == 1
    assert "Quality must be an integer between 0 and 5" in result.output


def test_review_unknown_card(deck):
    result = invoke(deck, "review", "nope", "3")
    assert result.exit_code == 1
    assert "Card not found: nope" in result.output


def test_review_warns_on_leech(deck):
    invoke(deck, "add", "Q", "A", "--id", "c1")
    for _ in range(3):
        invoke(deck, "review", "c1", "1")
    result = invoke(deck, "review", "c1", "1")
    assert "Leech" in result.stdout


def test_due_lists_new_cards(deck):
    invoke(deck, "add", "Capital of France?", "Paris", "--id", "geo_1")
    invoke(deck, "add", "Capital of Peru?", "Lima", "--id", "geo_2")
    invoke(deck, "review", "geo_2", "5")

    result = invoke(deck, "due")
    assert result.exit_code == 0
    assert "Due: 1" in result.stdout
    assert "geo_1" in result.stdout
    assert "geo_2" not in result.stdout


def test_due_json(deck):
    invoke(deck, "add", "Q", "A", "--id", "c1")
    result = invoke(deck, "due", "--json")
    data = json.loads(result.stdout)
    assert [c["id"] for c in data] == ["c1"]
    assert data[0]["is_leech"] is False


def test_due_empty(deck):
    result = invoke(deck, "due")
    assert result.exit_code == 0
    assert "No cards due." in result.stdout


def test_stats_json(deck):
    invoke(deck, "add", "Q1", "A1", "--id", "a")
    invoke(deck, "add", "Q2", "A2", "--id", "b")
    invoke(deck, "review", "a", "4")
    invoke(deck, "review", "b", "1")

    result = invoke(deck, "stats", "--json")
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["learning_count"] == 2
    assert data["new_count"] == 0
    assert data["accuracy"] == 50


def test_stats_text(deck):
    result = invoke(deck, "stats")
    assert result.exit_code == 0
    assert "Accuracy: 0%" in result.stdout


def test_progress_text(deck):
    invoke(deck, "add", "Q", "A", "--id", "c1")
    invoke(deck, "review", "c1", "4")

    result = invoke(deck, "progress")
    assert result.exit_code == 0
    assert "Current streak: 1 day" in result.stdout
    assert "Reviewed today: 1" in result.stdout


def test_corrupt_deck_reports_error(deck):
    deck.write_text("cards: [oops", encoding="utf-8")
    result = invoke(deck, "due")
    assert result.exit_code == 1
    assert "Invalid YAML" in result.output


# --- Config ---


def test_config_show(deck):
    result = invoke(deck, "config", "show")
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["deck_path"] == str(deck)
    assert data["port"] == 8787


# --- Server ---


@pytest.fixture
def reset_server():
    yield
    server.configure(None)


@patch("uvicorn.run")
def test_serve_command(mock_run, mock_home, reset_server):
    result = runner.invoke(app, ["serve", "--port", "9000"])
    assert result.exit_code == 0
    mock_run.assert_called_with(server.app, host="127.0.0.1", port=9000)


@patch("uvicorn.run")
def test_serve_uses_deck_option(mock_run, mock_home, reset_server, tmp_path):
    deck = tmp_path / "served.yaml"

    result = runner.invoke(app, ["--deck", str(deck), "serve"])

    assert result.exit_code == 0
    mock_run.assert_called_once()
    assert server.get_service()._repo.path == deck
    assert "RETENTO_DECK_PATH" not in os.environ
