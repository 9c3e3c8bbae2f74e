# This file collects small formatting helpers for package prices and selection totals.
# It exists so the CLI and any other presentation layer show money the same way.
# Totals stay per currency; the helpers only join them for display.

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

TOTALS_SEPARATOR = " + "


def format_price(amount: Decimal | int | float | None, currency: str) -> str:
    if amount is None:
        return "-"
    return f"{currency} {Decimal(str(amount)):,.2f}"


def format_totals(totals: Mapping[str, Decimal]) -> str:
    if not totals:
        return "-"
    return TOTALS_SEPARATOR.join(format_price(amount, currency) for currency, amount in totals.items())
