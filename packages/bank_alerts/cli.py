"""CLI for the ``bank_alerts`` package.

Typer-based console interface over the query API. Environment variables
(``DATABASE_URL``, ``BANK_ALERTS_DATA_DIR``, ``BANK_ALERTS_TZ``,
``BANK_ALERTS_LOG_LEVEL``) are loaded from a local ``.env`` using
``python-dotenv`` before any command runs; explicit options win over the
environment.

Commands
--------
- ``scan --inbox PATH [--since MS]``: ingest a JSON SMS-inbox export.
- ``notify --events PATH``: replay JSON notification events through the push
  adapter.
- ``since THRESHOLD_MS`` / ``recent [--days N]``: print records as wire JSON.
- ``mark-processed TS [TS ...]``: flag records as processed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .logging_setup import configure_logging, get_logger

_logger = get_logger("bank_alerts.cli")

app = typer.Typer(
    add_completion=False,
    help="Infer bank transactions from SMS and notification text.",
)


class _EventRow(BaseModel):
    """One notification event in a replay file."""

    model_config = ConfigDict(extra="ignore")

    source_id: str = Field(validation_alias=AliasChoices("source_id", "package"))
    title: str = ""
    text: str = ""
    big_text: str | None = None
    posted_at_ms: int = Field(validation_alias=AliasChoices("posted_at_ms", "timestamp"))


def _settings(ctx: typer.Context) -> dict[str, Any]:
    return ctx.obj or {}


def _open_store(ctx: typer.Context):
    from .blobs import backend_from_env
    from .store import TransactionStore

    s = _settings(ctx)
    return TransactionStore(
        backend_from_env(database_url=s.get("database_url"), data_dir=s.get("data_dir"))
    )


def _open_api(ctx: typer.Context):
    from .api import TransactionQueryApi

    return TransactionQueryApi(_open_store(ctx), tz=_settings(ctx).get("tz"))


def _echo_records(records: list) -> None:
    from .api import as_wire

    typer.echo(json.dumps(as_wire(records), ensure_ascii=False, indent=2))


@app.command("scan")
def scan_cmd(
    ctx: typer.Context,
    inbox: Annotated[Path, typer.Option("--inbox", help="JSON export of the SMS inbox.")],
    since: Annotated[int, typer.Option(help="Only messages newer than this epoch-ms.")] = 0,
) -> None:
    """Ingest bank messages from an inbox export."""

    from .pipeline import ingest
    from .sources import JsonInboxMessageStore, PullAdapter, StaticCapability

    if not inbox.is_file():
        typer.echo(f"Error: File not found: {inbox}", err=True)
        raise typer.Exit(1)

    adapter = PullAdapter(JsonInboxMessageStore(inbox), StaticCapability(granted=True))
    try:
        added = ingest(adapter.fetch(since), _open_store(ctx), tz=_settings(ctx).get("tz"))
    except Exception as e:
        typer.echo(f"Error: ingest failed: {e}", err=True)
        raise typer.Exit(1) from e
    _logger.info("scan:done inbox=%s added=%d", inbox, added)
    typer.echo(f"{added} new transaction(s)")


@app.command("notify")
def notify_cmd(
    ctx: typer.Context,
    events: Annotated[Path, typer.Option("--events", help="JSON array of notification events.")],
) -> None:
    """Replay notification events through the push adapter."""

    from .models import NotificationEvent
    from .pipeline import store_handler
    from .sources import PushAdapter

    try:
        raw = json.loads(events.read_text(encoding="utf-8"))
        rows = [_EventRow.model_validate(item) for item in raw]
    except FileNotFoundError as e:
        typer.echo(f"Error: File not found: {events}", err=True)
        raise typer.Exit(1) from e
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        typer.echo(f"Error: invalid events file: {e}", err=True)
        raise typer.Exit(1) from e

    handle = store_handler(_open_store(ctx), tz=_settings(ctx).get("tz"))
    added = 0

    def _counting(message) -> None:
        nonlocal added
        added += handle(message)

    adapter = PushAdapter(_counting)
    try:
        for row in rows:
            adapter.on_event(
                NotificationEvent(
                    source_id=row.source_id,
                    title=row.title,
                    text=row.text,
                    big_text=row.big_text,
                    posted_at_ms=row.posted_at_ms,
                )
            )
        adapter.flush()
    finally:
        adapter.close()
    _logger.info("notify:done events=%d added=%d", len(rows), added)
    typer.echo(f"{added} new transaction(s)")


@app.command("since")
def since_cmd(
    ctx: typer.Context,
    threshold_ms: Annotated[int, typer.Argument(help="Exclusive lower bound, epoch-ms.")],
) -> None:
    """Print unprocessed transactions newer than THRESHOLD_MS."""

    _echo_records(_open_api(ctx).fetch_since(threshold_ms))


@app.command("recent")
def recent_cmd(
    ctx: typer.Context,
    days: Annotated[int, typer.Option(help="Look-back window in days.")] = 30,
) -> None:
    """Print all transactions from the last DAYS days."""

    _echo_records(_open_api(ctx).fetch_recent(days))


@app.command("mark-processed")
def mark_processed_cmd(
    ctx: typer.Context,
    timestamps: Annotated[list[int], typer.Argument(help="Record timestamps (epoch-ms).")],
) -> None:
    """Flag the transactions with the given timestamps as processed."""

    _open_api(ctx).mark_processed(timestamps)


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (SQL blob backend)."
    ),
    data_dir: Path | None = typer.Option(
        None, help="Directory for the file blob backend (overrides BANK_ALERTS_DATA_DIR)."
    ),
    tz: str | None = typer.Option(
        None, help="IANA zone for record dates (overrides BANK_ALERTS_TZ)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()
    ctx.obj = {"database_url": database_url, "data_dir": data_dir, "tz": tz}

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


def main() -> None:  # pragma: no cover - console script
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
