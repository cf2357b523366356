"""CLI commands for querying term rankings."""

import json
import logging
import sqlite3
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import NoReturn

import click
import structlog

from termrank import __version__
from termrank.config import ConfigValidationError, load_ranking_config
from termrank.config.constants import COMPONENT_CLI, DEFAULT_LIMIT
from termrank.observability.logging import bind_request_context, configure_logging
from termrank.ranker import Recommender, RankingResult, TermOrdering
from termrank.settings import get_settings
from termrank.store import ContentStore, ContentStoreError


logger = structlog.get_logger()


@dataclass
class CliOptions:
    """Options shared by every command."""

    db_path: Path
    config_path: Path | None
    now: datetime | None
    request_id: str


def _exit_with_error(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@contextmanager
def _open_recommender(options: CliOptions) -> Iterator[Recommender]:
    """Open the store and build a Recommender, mapping failures to exit 1.

    Args:
        options: Shared CLI options.

    Yields:
        A Recommender bound to a connected store.
    """
    log = logger.bind(component=COMPONENT_CLI, request_id=options.request_id)

    try:
        config = load_ranking_config(options.config_path)
    except FileNotFoundError as e:
        log.warning("config_not_found", path=str(options.config_path))
        _exit_with_error(f"Ranking config not found: {e.filename}")
    except ConfigValidationError as e:
        click.echo(f"Error: {e}", err=True)
        for error in e.errors:
            click.echo(f"  - {error['loc']}: {error['msg']}", err=True)
        sys.exit(1)

    try:
        with ContentStore(options.db_path, request_id=options.request_id) as store:
            yield Recommender(store, config=config, now=options.now)
    except (ContentStoreError, sqlite3.Error) as e:
        log.error("store_failed", error=str(e))
        _exit_with_error(f"Content store failure: {e}")


def _echo_ids(term_ids: list[int]) -> None:
    click.echo(json.dumps(term_ids))


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to SQLite content database (default: TERMRANK_DB_PATH).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to ranking.yaml (default: TERMRANK_RANKING_CONFIG or built-ins).",
)
@click.option(
    "--now",
    type=click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"]),
    default=None,
    help="Evaluate freshness at this UTC time instead of the wall clock.",
)
@click.option(
    "--json-logs/--console-logs",
    default=None,
    help="Log format (default: TERMRANK_LOG_JSON).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    db_path: Path | None,
    config_path: Path | None,
    now: datetime | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Rank published terms by engagement, affinity or momentum."""
    settings = get_settings()
    level = logging.DEBUG if verbose else settings.log_level_number()
    configure_logging(
        level=level,
        json_format=settings.log_json if json_logs is None else json_logs,
    )

    request_id = str(uuid.uuid4())
    bind_request_context(request_id)

    ctx.obj = CliOptions(
        db_path=db_path or settings.db_path,
        config_path=config_path or settings.ranking_config_path,
        now=now,
        request_id=request_id,
    )


limit_option = click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=DEFAULT_LIMIT,
    show_default=True,
    help="Maximum number of term IDs to return.",
)
category_option = click.option(
    "--category",
    "category_id",
    type=int,
    default=None,
    help="Only rank terms in this category.",
)


@cli.command("init-db")
@click.option(
    "--reset",
    is_flag=True,
    help="Drop all tables and recreate an empty schema.",
)
@click.pass_obj
def init_db(options: CliOptions, reset: bool) -> None:
    """Create the database and apply schema migrations."""
    try:
        with ContentStore(options.db_path, request_id=options.request_id) as store:
            if reset:
                store.reset_schema()
            version = store.get_schema_version()
    except (ContentStoreError, sqlite3.Error) as e:
        _exit_with_error(f"Content store failure: {e}")
    click.echo(f"Schema version {version} at {options.db_path}")


@cli.command()
@limit_option
@category_option
@click.pass_obj
def general(options: CliOptions, limit: int, category_id: int | None) -> None:
    """Rank by engagement and freshness."""
    with _open_recommender(options) as recommender:
        _echo_ids(recommender.general(limit, category_id))


@cli.command()
@click.option(
    "--user-id",
    type=int,
    default=None,
    help="Caller to personalize for; omitted means anonymous.",
)
@limit_option
@category_option
@click.pass_obj
def personalized(
    options: CliOptions, user_id: int | None, limit: int, category_id: int | None
) -> None:
    """Rank with category and followed-author boosts."""
    with _open_recommender(options) as recommender:
        _echo_ids(recommender.personalized(user_id, limit, category_id))


@cli.command()
@limit_option
@category_option
@click.pass_obj
def trending(options: CliOptions, limit: int, category_id: int | None) -> None:
    """Rank by activity inside the trending window."""
    with _open_recommender(options) as recommender:
        _echo_ids(recommender.trending(limit, category_id))


@cli.command("list")
@click.option(
    "--order-by",
    type=click.Choice([o.value for o in TermOrdering]),
    default=TermOrdering.CREATED_AT.value,
    show_default=True,
    help="Ordering used by the terms listing.",
)
@click.option("--user-id", type=int, default=None, help="Caller for 'recommended'.")
@limit_option
@category_option
@click.pass_obj
def list_terms(
    options: CliOptions,
    order_by: str,
    user_id: int | None,
    limit: int,
    category_id: int | None,
) -> None:
    """List term IDs in a listing order."""
    with _open_recommender(options) as recommender:
        _echo_ids(recommender.rank(order_by, limit, category_id, user_id))


@cli.command()
@click.option(
    "--mode",
    type=click.Choice(["general", "personalized", "trending"]),
    default="general",
    show_default=True,
)
@click.option("--user-id", type=int, default=None, help="Caller for personalized.")
@limit_option
@category_option
@click.pass_obj
def explain(
    options: CliOptions,
    mode: str,
    user_id: int | None,
    limit: int,
    category_id: int | None,
) -> None:
    """Print ranked terms with their score breakdown as JSON."""
    with _open_recommender(options) as recommender:
        result: RankingResult
        if mode == "personalized":
            result = recommender.recommend_personalized(user_id, limit, category_id)
        elif mode == "trending":
            result = recommender.recommend_trending(limit, category_id)
        else:
            result = recommender.recommend_general(limit, category_id)

        payload = {
            "mode": result.mode.value,
            "terms": [c.to_dict() for c in result.scored],
        }
        click.echo(json.dumps(payload, indent=2))


def main() -> None:
    """Console script entry point."""
    cli()
