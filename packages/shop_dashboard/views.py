"""Rich renderables for the terminal front end: receipt, summary, history.

``ConsoleListener`` turns dashboard events into console output for the
long-running ``run`` session.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .events import DashboardListener
from .formatting import format_amount, format_date, format_long_date, format_timestamp
from .models import HistoryEntry, SalesTransaction

SHOP_TITLE = "Shop Daily Dashboard"


def build_receipt(transaction: SalesTransaction, *, printed_at: datetime | None = None) -> Panel:
    """Bill for one sale: item rows (price, qty, line total) and the grand total."""

    stamp = printed_at or transaction.created_at or datetime.now().astimezone()
    table = Table(expand=True, show_edge=False, pad_edge=False)
    table.add_column("Item")
    table.add_column("Price", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Total", justify="right")
    for item in transaction.items:
        table.add_row(
            item.name,
            format_amount(item.unit_price),
            str(item.quantity),
            format_amount(item.line_total),
        )
    total = Text.assemble(
        ("TOTAL  ", "bold"), (format_amount(transaction.total_amount), "bold"), justify="right"
    )
    return Panel(
        Group(Text(format_timestamp(stamp), style="dim"), table, total),
        title=SHOP_TITLE,
        subtitle="Thank you!",
    )


def build_summary(day: date, total_amount: Decimal, transaction_count: int) -> Panel:
    body = Text.assemble(
        ("Today's total: ", "bold"),
        format_amount(total_amount),
        "\n",
        ("Transactions: ", "bold"),
        str(transaction_count),
    )
    return Panel(body, title=format_long_date(day))


def build_history(entries: Sequence[HistoryEntry]) -> Table:
    table = Table(title="Sales history")
    table.add_column("Date")
    table.add_column("Total", justify="right")
    for entry in entries:
        table.add_row(format_date(entry.date), format_amount(entry.total_amount))
    return table


def render_receipt(
    transaction: SalesTransaction,
    *,
    console: Console | None = None,
    printed_at: datetime | None = None,
) -> None:
    (console or Console()).print(build_receipt(transaction, printed_at=printed_at))


class ConsoleListener(DashboardListener):
    """Prints dashboard events for the interactive session."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()
        self._today: date | None = None

    def on_day_changed(self, today: date) -> None:
        if self._today is not None and self._today != today:
            self.console.rule(f"New day: {format_long_date(today)}")
        self._today = today

    def on_daily_summary_changed(self, total_amount: Decimal, transaction_count: int) -> None:
        day = self._today or date.today()
        self.console.print(build_summary(day, total_amount, transaction_count))

    def on_history_changed(self, history: Sequence[HistoryEntry]) -> None:
        if not history:
            self.console.print("[dim]No previous sales history[/dim]")
            return
        self.console.print(build_history(history))

    def on_sale_recorded(self, transaction: SalesTransaction) -> None:
        self.console.print(build_receipt(transaction))

    def on_error(self, kind: str, message: str) -> None:
        self.console.print(f"[bold red]{kind} error:[/bold red] {message}")


__all__ = [
    "ConsoleListener",
    "build_history",
    "build_receipt",
    "build_summary",
    "render_receipt",
]
