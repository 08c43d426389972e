"""Display formatting for dates, money and document identifiers."""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo

BRAZIL_TIMEZONE = ZoneInfo("America/Sao_Paulo")

__all__ = [
    "format_budget_id",
    "format_currency",
    "format_date",
    "format_sale_id",
]


def format_date(value: date | datetime | None = None) -> str:
    """Return ``value`` (default: now) as ``dd/mm/yyyy`` in Brazilian time."""

    if value is None:
        value = datetime.now(BRAZIL_TIMEZONE)
    elif isinstance(value, datetime) and value.tzinfo is not None:
        value = value.astimezone(BRAZIL_TIMEZONE)
    return value.strftime("%d/%m/%Y")


def format_currency(value: float | Decimal) -> str:
    """Format ``value`` as Brazilian reais, e.g. ``R$ 1.234,56``."""

    amount = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    grouped = f"{abs(amount):,.2f}"
    # swap the en-US separators for pt-BR ones
    grouped = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {grouped}"


def _string_hash(text: str) -> int:
    """32-bit signed rolling hash (``h = h * 31 + c``) of ``text``."""

    value = 0
    for ch in text:
        value = (value * 31 + ord(ch)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def _short_id(uuid: str, prefix: str) -> str:
    digest = abs(_string_hash(uuid.replace("-", "")))
    return f"#{prefix}{str(digest)[-8:].zfill(8)}"


def format_sale_id(sale_id: str) -> str:
    return _short_id(sale_id, "V")


def format_budget_id(budget_id: str) -> str:
    return _short_id(budget_id, "O")
