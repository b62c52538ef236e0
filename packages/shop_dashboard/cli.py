"""CLI for the ``shop_dashboard`` package.

A Typer-based console front end over :class:`~shop_dashboard.dashboard.ShopDashboard`.
Environment variables (notably ``SHOP_DATABASE_URL``) are loaded from a local
``.env`` using ``python-dotenv`` before any command runs. Missing database
configuration is fatal: commands exit with status 2 before touching the store.

Commands
--------
- ``check-connection``: probe the ``daily_sales`` table.
- ``sell``: record one sale (``--item NAME:PRICE[:QTY]`` or interactive entry)
  and print its receipt.
- ``summary``: today's total and transaction count.
- ``history``: past daily totals, newest first.
- ``reset``: delete all sales data after two confirmations.
- ``run``: long-lived register session with day-rollover monitoring.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from typer.models import OptionInfo

from .config import Settings, load_settings
from .dashboard import ShopDashboard
from .errors import ConfigurationError, PersistenceError, ValidationError
from .events import DashboardListener
from .formatting import format_amount
from .logging_setup import configure_logging
from .term_ui import parse_item_option, prompt_line_items
from .views import ConsoleListener, build_history, build_summary, render_receipt

console = Console()
err_console = Console(stderr=True)


# ---- Small module-level helpers used by CLI commands -------------------------


def _settings(ctx: typer.Context) -> Settings:
    """Resolve settings once per invocation; configuration errors are fatal."""

    obj = ctx.ensure_object(dict)
    if "settings" not in obj:
        try:
            obj["settings"] = load_settings(database_url=obj.get("database_url"))
        except ConfigurationError as e:
            err_console.print(f"[bold red]Configuration error:[/bold red] {e}")
            raise typer.Exit(2) from e
    return obj["settings"]


def _dashboard(
    ctx: typer.Context, *, listeners: Sequence[DashboardListener] = ()
) -> ShopDashboard:
    return ShopDashboard.from_settings(_settings(ctx), listeners=listeners)


def _fail(message: str, exc: BaseException) -> typer.Exit:
    err_console.print(f"[bold red]{message}[/bold red] {exc}")
    return typer.Exit(1)


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Point-of-sale dashboard for a single shop: record sales, keep the daily "
        "total, show history and print receipts. Loads SHOP_DATABASE_URL from a "
        "local .env before running."
    ),
)

# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults). Typer will inspect this when used as a default value below.
ITEM_OPTION: OptionInfo = typer.Option(
    "--item",
    "-i",
    help="Line item as NAME:PRICE[:QTY] (repeatable). Omit to enter items interactively.",
)


@app.command("check-connection")
def check_connection_cmd(ctx: typer.Context) -> None:
    """Test the database connection (reads one row id from daily_sales)."""

    settings = _settings(ctx)
    dashboard = _dashboard(ctx)
    console.print(f"Testing connection to {settings.redacted_url} ...")
    try:
        dashboard.check_connection()
    except PersistenceError as e:
        raise _fail("Connection failed:", e) from e
    console.print("[bold green]Connected.[/bold green]")


@app.command("sell")
def sell_cmd(
    ctx: typer.Context,
    items: Annotated[list[str] | None, ITEM_OPTION] = None,
) -> None:
    """Record one sale, update today's total and print the receipt."""

    _settings(ctx)
    if items:
        try:
            candidates = [parse_item_option(raw) for raw in items]
        except ValueError as e:
            raise _fail("Invalid --item:", e) from e
    else:
        try:
            candidates = prompt_line_items(
                on_total=lambda total: console.print(f"Running total: {format_amount(total)}")
            )
        except (EOFError, KeyboardInterrupt):
            console.print("Cancelled.")
            raise typer.Exit(1) from None

    dashboard = _dashboard(ctx)
    try:
        dashboard.start(monitor=False)
        transaction = dashboard.submit_sale(candidates)
    except ValidationError as e:
        raise _fail("Invalid sale:", e) from e
    except PersistenceError as e:
        raise _fail("Failed to save sale:", e) from e

    render_receipt(transaction, console=console)
    try:
        summary = dashboard.summary()
    except PersistenceError as e:
        raise _fail("Sale saved, but today's summary could not be loaded:", e) from e
    console.print(build_summary(summary.date, summary.total_amount, summary.transaction_count))


@app.command("summary")
def summary_cmd(ctx: typer.Context) -> None:
    """Show today's total and number of transactions."""

    dashboard = _dashboard(ctx)
    try:
        summary = dashboard.summary()
    except PersistenceError as e:
        raise _fail("Failed to load today's summary:", e) from e
    console.print(build_summary(summary.date, summary.total_amount, summary.transaction_count))


@app.command("history")
def history_cmd(
    ctx: typer.Context,
    *,
    limit: int | None = typer.Option(
        None, min=1, help="Number of days to show (defaults to SHOP_HISTORY_LIMIT)."
    ),
    include_today: bool = typer.Option(False, help="Include today's running total."),
) -> None:
    """Show past daily totals, newest first."""

    dashboard = _dashboard(ctx)
    try:
        entries = dashboard.history(include_today=True, limit=limit)
    except PersistenceError as e:
        raise _fail("Failed to load history:", e) from e

    if not entries:
        console.print("No sales history yet")
        return
    if not include_today:
        today = dashboard.aggregator.today()
        entries = [e for e in entries if e.date != today]
    if not entries:
        console.print("No previous sales history")
        return
    console.print(build_history(entries))


@app.command("reset")
def reset_cmd(
    ctx: typer.Context,
    *,
    yes: bool = typer.Option(
        False, "--yes", help="Answer both confirmations with yes (scripted use)."
    ),
) -> None:
    """Delete ALL sales transactions and daily totals (asks twice)."""

    def _confirm(message: str) -> bool:
        if yes:
            return True
        return typer.confirm(message, default=False)

    dashboard = _dashboard(ctx)
    try:
        done = dashboard.reset(confirm=_confirm)
    except PersistenceError as e:
        raise _fail("Failed to reset data; retry the whole reset:", e) from e
    if not done:
        console.print("Reset cancelled; no data was deleted.")
        return
    console.print("[bold green]All data has been successfully reset.[/bold green]")


@app.command("run")
def run_cmd(ctx: typer.Context) -> None:
    """Interactive register session; Ctrl-D to quit."""

    dashboard = _dashboard(ctx, listeners=[ConsoleListener(console)])
    try:
        dashboard.start(monitor=True)
    except PersistenceError as e:
        raise _fail("Could not initialize today's record:", e) from e

    try:
        while True:
            console.rule("New sale")
            try:
                candidates = prompt_line_items(
                    on_total=lambda total: console.print(f"Running total: {format_amount(total)}")
                )
            except EOFError:
                break
            # Failures (including an entry with no valid rows) are printed by
            # the ConsoleListener's on_error.
            try:
                dashboard.submit_sale(candidates)
            except (ValidationError, PersistenceError):
                continue
    except KeyboardInterrupt:
        pass
    finally:
        dashboard.stop()
    console.print("Session closed.")


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    database_url: str | None = typer.Option(
        None, help="Override SHOP_DATABASE_URL (falls back to env var)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    # Load environment from .env in CWD (override=False to keep existing env)
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()

    ctx.ensure_object(dict)["database_url"] = database_url

    if ctx.invoked_subcommand is None:
        # No subcommand provided - show help
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover - exercised via the console script
    # Running as a module: `python -m shop_dashboard.cli`
    app()
