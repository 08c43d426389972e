"""Offline postal freight estimate for a packed volume.

Prices follow a simple tariff: a per-service base price scaled by the
billable weight band and a surcharge for bulky packages. Carrier
limits produce a per-service error quote instead of a price.
"""

from __future__ import annotations

import argparse
import json
import logging
import re
import sys
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from dotenv import load_dotenv

from config import Settings
from formatters import format_currency

logger = logging.getLogger(__name__)

__all__ = [
    "CarrierService",
    "DEFAULT_SERVICES",
    "ShippingError",
    "ShippingQuote",
    "ShippingRequest",
    "billable_weight",
    "main",
    "quote_shipping",
]


class ShippingError(ValueError):
    """Raised for requests that cannot be quoted at all."""


@dataclass(frozen=True)
class CarrierService:
    name: str
    code: str


PAC = CarrierService("PAC", "04669")
SEDEX = CarrierService("SEDEX", "04162")
DEFAULT_SERVICES: tuple[CarrierService, ...] = (PAC, SEDEX)

BASE_PRICES = {PAC.code: 8.50, SEDEX.code: 15.90}
DELIVERY_DAYS = {PAC.code: 5, SEDEX.code: 2}
FALLBACK_BASE_PRICE = 12.00
FALLBACK_DELIVERY_DAYS = 4

# carrier minimums (cm, kg)
MIN_HEIGHT = 2
MIN_WIDTH = 11
MIN_LENGTH = 16
MIN_WEIGHT = 0.1

MAX_WEIGHT = 30
MAX_DIMENSION_SUM = 200
MAX_DIMENSION = 105

CUBIC_DIVISOR = 6000

# (upper bound of billable kg, multiplier); above the last bound -> 4.0
WEIGHT_BANDS = ((1, 1.0), (3, 1.8), (5, 2.5), (10, 3.2))
HEAVY_MULTIPLIER = 4.0

# (volume in cm3 strictly above, multiplier), largest first
SIZE_BANDS = ((100_000, 1.15), (50_000, 1.05))


@dataclass(frozen=True)
class ShippingRequest:
    """Destination and packed dimensions: kg and cm."""

    destination_cep: str
    weight: float
    height: float
    width: float
    length: float


@dataclass(frozen=True)
class ShippingQuote:
    service_name: str
    service_code: str
    price: float
    delivery_days: int
    error: str | None = None

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def _clean_cep(cep: str) -> str:
    digits = re.sub(r"\D", "", cep or "")
    if len(digits) != 8:
        raise ShippingError(f"Invalid CEP {cep!r}: expected 8 digits")
    return digits


def _validate(request: ShippingRequest) -> None:
    for field in ("weight", "height", "width", "length"):
        value = getattr(request, field)
        if value is None or value <= 0:
            raise ShippingError(f"{field} is required and must be greater than zero")


def billable_weight(weight: float, height: float, width: float, length: float) -> float:
    """Return the larger of the real and the cubic weight."""

    return max(weight, (height * width * length) / CUBIC_DIVISOR)


def _weight_multiplier(weight: float) -> float:
    for bound, multiplier in WEIGHT_BANDS:
        if weight <= bound:
            return multiplier
    return HEAVY_MULTIPLIER


def _size_multiplier(volume: float) -> float:
    for threshold, multiplier in SIZE_BANDS:
        if volume > threshold:
            return multiplier
    return 1.0


def _price(code: str, weight: float, height: float, width: float, length: float) -> float:
    base = BASE_PRICES.get(code, FALLBACK_BASE_PRICE)
    billable = billable_weight(weight, height, width, length)
    raw = (
        base
        * _weight_multiplier(billable)
        * _size_multiplier(height * width * length)
    )
    logger.debug(
        "Service %s: base=%.2f billable=%.3fkg raw=%.4f",
        code, base, billable, raw,
    )
    return float(Decimal(str(raw)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _limit_error(weight: float, height: float, width: float, length: float) -> str | None:
    if weight > MAX_WEIGHT:
        return f"Peso máximo de {MAX_WEIGHT}kg excedido"
    if height + width + length > MAX_DIMENSION_SUM:
        return f"Soma das dimensões não pode exceder {MAX_DIMENSION_SUM}cm"
    if max(height, width, length) > MAX_DIMENSION:
        return f"Nenhuma dimensão pode exceder {MAX_DIMENSION}cm"
    return None


def quote_shipping(
    request: ShippingRequest,
    origin_cep: str,
    services: Sequence[CarrierService] = DEFAULT_SERVICES,
) -> list[ShippingQuote]:
    """Return one quote per service, in the order given.

    Raises :class:`ShippingError` for missing dimensions or malformed CEPs.
    """

    _validate(request)
    _clean_cep(origin_cep)
    _clean_cep(request.destination_cep)

    weight = max(MIN_WEIGHT, request.weight)
    height = max(MIN_HEIGHT, request.height)
    width = max(MIN_WIDTH, request.width)
    length = max(MIN_LENGTH, request.length)

    error = _limit_error(weight, height, width, length)
    quotes: list[ShippingQuote] = []
    for service in services:
        if error:
            quotes.append(ShippingQuote(service.name, service.code, 0.0, 0, error))
            continue
        quotes.append(
            ShippingQuote(
                service_name=service.name,
                service_code=service.code,
                price=_price(service.code, weight, height, width, length),
                delivery_days=DELIVERY_DAYS.get(service.code, FALLBACK_DELIVERY_DAYS),
            )
        )
    logger.info("Quoted %d services for CEP %s", len(quotes), request.destination_cep)
    return quotes


def main(argv: list[str] | None = None) -> int:
    """CLI entry point: print quotes for one package."""

    load_dotenv()
    parser = argparse.ArgumentParser(description="Estimate postal freight for a volume")
    parser.add_argument("weight", type=float, help="Weight in kg")
    parser.add_argument("height", type=float, help="Height in cm")
    parser.add_argument("width", type=float, help="Width in cm")
    parser.add_argument("length", type=float, help="Length in cm")
    parser.add_argument("--to", required=True, dest="destination", help="Destination CEP")
    parser.add_argument(
        "--from",
        dest="origin",
        default=None,
        help="Origin CEP (default: VOLUME_LABELS_ORIGIN_CEP)",
    )
    parser.add_argument("--json", action="store_true", help="Print quotes as JSON")
    args = parser.parse_args(argv)

    origin = args.origin or Settings.from_env().origin_cep
    if not origin:
        raise SystemExit("Origin CEP missing: pass --from or set VOLUME_LABELS_ORIGIN_CEP")

    try:
        quotes = quote_shipping(
            ShippingRequest(args.destination, args.weight, args.height,
                            args.width, args.length),
            origin,
        )
    except ShippingError as exc:
        raise SystemExit(str(exc)) from exc

    if args.json:
        json.dump([q.to_dict() for q in quotes], sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")
        return 0

    for quote in quotes:
        if quote.error:
            print(f"{quote.service_name} ({quote.service_code}): {quote.error}")
        else:
            print(
                f"{quote.service_name} ({quote.service_code}): "
                f"{format_currency(quote.price)} em {quote.delivery_days} dias úteis"
            )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
