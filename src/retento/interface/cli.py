"""retento CLI: deck commands and config subgroup."""

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer

from retento.application.config import resolve_config
from retento.application.factory import get_review_service
from retento.application.review_service import ReviewService
from retento.domain.scheduling.errors import SchedulerError
from retento.domain.scheduling.models import Card

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="retento: SM-2 spaced-repetition scheduler for flashcard decks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage retento configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


def _set_verbosity(verbose: int) -> None:
    level = logging.WARNING if verbose <= 0 else logging.INFO if verbose == 1 else logging.DEBUG
    logging.getLogger("retento").setLevel(level)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _service(ctx: typer.Context) -> ReviewService:
    config = resolve_config({"deck_path": ctx.obj.get("deck_path")})
    return get_review_service(config)


def _run(coro):
    """Run a service coroutine, turning domain errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except SchedulerError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from None


def _fmt_time(epoch_ms: int | None) -> str:
    if epoch_ms is None:
        return "never"
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def _card_json(card: Card) -> dict:
    return {**asdict(card), "is_leech": card.is_leech}


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    deck: Annotated[
        Path | None,
        typer.Option("--deck", "-d", help="Deck file. Defaults to 'deck_path' in config."),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for retento."""
    ctx.ensure_object(dict)
    ctx.obj["deck_path"] = deck
    _set_verbosity(verbose)


# ---------------------------------------------------------------------------
# Deck commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    front: Annotated[str, typer.Argument(help="Question or term.")],
    back: Annotated[str, typer.Argument(help="Answer or definition.")],
    card_id: Annotated[
        str | None, typer.Option("--id", help="Card ID. Generated if omitted.")
    ] = None,
):
    """[bold green]Add[/bold green] a new card, due immediately."""
    card = _run(_service(ctx).create_card(front, back, card_id=card_id))
    typer.echo(card.id)


@app.command()
def review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Card to review.")],
    quality: Annotated[
        int, typer.Argument(help="Recall quality: 0 (blackout) to 5 (perfect).")
    ],
):
    """Record a review and reschedule the card."""
    card = _run(_service(ctx).review(card_id, quality))

    typer.echo(
        f"{card.id}: interval {card.interval}d, ease {card.ease_factor:.2f}, "
        f"next review {_fmt_time(card.next_review_at)}"
    )
    if card.is_leech:
        typer.secho(
            f"Leech: failed {card.consecutive_failures} times in a row. Consider rewriting it.",
            fg="yellow",
        )


@app.command()
def due(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List cards due for review, oldest first."""
    cards = _run(_service(ctx).due())

    if json_output:
        typer.echo(json.dumps([_card_json(c) for c in cards], indent=2))
        return

    if not cards:
        typer.secho("No cards due.", fg="green")
        return

    typer.echo(f"Due: {len(cards)}")
    for card in cards:
        marker = " [leech]" if card.is_leech else ""
        typer.echo(f"  {card.id}  {card.front}  (due {_fmt_time(card.next_review_at)}){marker}")


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show deck statistics."""
    deck_stats = _run(_service(ctx).stats())

    if json_output:
        typer.echo(json.dumps(asdict(deck_stats), indent=2))
        return

    typer.echo(
        f"New: {deck_stats.new_count}  Learning: {deck_stats.learning_count}"
        f"  Review: {deck_stats.review_count}  Mastered: {deck_stats.mastered_count}"
    )
    typer.echo(f"Due today: {deck_stats.due_today_count}  Accuracy: {deck_stats.accuracy}%")
    if deck_stats.leech_count:
        typer.secho(f"Leeches: {deck_stats.leech_count}", fg="yellow")


@app.command()
def progress(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show study streaks and activity."""
    study = _run(_service(ctx).progress())

    if json_output:
        typer.echo(json.dumps(asdict(study), indent=2))
        return

    days = "day" if study.current_streak == 1 else "days"
    typer.echo(f"Current streak: {study.current_streak} {days} (best: {study.longest_streak})")
    typer.echo(
        f"Reviewed today: {study.cards_reviewed_today}  Total: {study.total_cards_reviewed}"
    )
    typer.echo(
        f"Mastered: {study.mastered_cards}  Learning: {study.learning_cards}"
        f"  New: {study.new_cards}  Accuracy: {study.accuracy}%"
    )


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
):
    """Run the HTTP server on the resolved deck."""
    import uvicorn

    from retento import server

    config = resolve_config({"deck_path": ctx.obj.get("deck_path"), "host": host, "port": port})
    server.configure(config)
    uvicorn.run(server.app, host=config.host, port=config.port)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = resolve_config({"deck_path": ctx.obj.get("deck_path")})
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
