"""Tiny terminal UI helpers (prompt_toolkit-based).

Line-item entry is kept apart from the dashboard core so it is easy to test in
isolation with a pipe input. Nothing is validated here beyond what the prompt
needs; the ledger decides which rows are valid.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal

from prompt_toolkit import PromptSession

from .formatting import CURRENCY_SYMBOL
from .ledger import accept_line_items, compute_total

DEFAULT_QUANTITY = "1"


def prompt_line_items(
    *,
    session: PromptSession | None = None,
    on_total: Callable[[Decimal], None] | None = None,
) -> list[dict[str, str]]:
    """Collect line items until an empty item name is entered.

    Each row asks for a name, a price and a quantity (blank quantity means
    ``1``). After every row ``on_total`` receives the running total of the
    rows that are valid so far.

    Raises ``EOFError`` when input ends before any row was entered, so a
    session loop can stop; EOF after at least one row finishes the sale.
    """

    sess: PromptSession = session or PromptSession()
    rows: list[dict[str, str]] = []

    while True:
        try:
            name = sess.prompt("Item name (blank to finish): ").strip()
            if not name:
                return rows
            price = sess.prompt(f"Price ({CURRENCY_SYMBOL}): ").strip()
            quantity = sess.prompt(f"Quantity [{DEFAULT_QUANTITY}]: ").strip() or DEFAULT_QUANTITY
        except EOFError:
            if rows:
                return rows
            raise

        rows.append({"name": name, "price": price, "quantity": quantity})
        if on_total is not None:
            on_total(compute_total(accept_line_items(rows)))


def parse_item_option(raw: str) -> dict[str, str]:
    """Parse a ``NAME:PRICE[:QTY]`` command-line item.

    The name may itself contain colons; price and quantity are taken from the
    right.
    """

    parts = raw.rsplit(":", 2)
    if len(parts) == 3 and _looks_numeric(parts[1]) and _looks_numeric(parts[2]):
        name, price, quantity = parts
    elif len(parts) >= 2 and _looks_numeric(parts[-1]):
        name, price = raw.rsplit(":", 1)
        quantity = DEFAULT_QUANTITY
    else:
        raise ValueError(f"expected NAME:PRICE[:QTY], got {raw!r}")
    return {"name": name.strip(), "price": price.strip(), "quantity": quantity.strip()}


def _looks_numeric(s: str) -> bool:
    try:
        Decimal(s.strip())
    except ArithmeticError:
        return False
    return True


__all__ = ["parse_item_option", "prompt_line_items"]
