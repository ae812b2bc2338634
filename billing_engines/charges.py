"""
Charge Calculator.

Pure functions with deterministic behavior. No I/O.

Prices aggregated usage against a rate-card index:
- Usage-based units (M3, PAL, EA, TON): amount = quantity x rate
- Per-period charges (MON unit, Fixed Charge service): amount = rate,
  charged exactly once per period whatever the usage

Every amount is rounded half-up to two places once, on the line. Usage
with no matching rate halts pricing; a billing run never drops a charged
activity.

Usage:
    from billing_engines.charges import price

    lines = price(aggregated, index, "C2201")
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal

from billing_engines.rate_card import RateCardIndex
from billing_engines.tracer import traced_engine
from billing_kernel.domain.dtos import InvoiceLine, RateCardEntry, ServiceType
from billing_kernel.domain.values import Money
from billing_kernel.exceptions import MissingRateError
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.charges")

_TWO_PLACES = Decimal("0.01")
_ONE = Decimal("1")


def round_amount(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def price_line(entry: RateCardEntry, quantity: Decimal) -> InvoiceLine:
    """
    Price one aggregated quantity against its rate-card entry.

    Per-period entries bill a quantity of one; the rate is already the
    amount for the whole period.
    """
    billed_quantity = _ONE if entry.is_per_period else quantity
    amount = round_amount(billed_quantity * entry.rate)
    return InvoiceLine(
        service_type=entry.service_type,
        charge_type=entry.charge_type,
        quantity=billed_quantity,
        unit=entry.unit,
        unit_rate=entry.rate,
        currency=entry.currency,
        amount=Money.of(amount, entry.currency),
    )


@traced_engine("charge_calculator", "1.0", fingerprint_fields=("aggregated_usage", "customer_id"))
def price(
    aggregated_usage: Mapping[tuple[ServiceType, str], Decimal],
    rate_index: RateCardIndex,
    customer_id: str,
) -> tuple[InvoiceLine, ...]:
    """
    Price a customer's aggregated usage.

    Lines follow the order of ``aggregated_usage``. Per-period entries on
    the customer's card that saw no usage are appended afterwards, in
    rate-card order, so a fixed charge is billed with zero records too.

    Args:
        aggregated_usage: Output of ``billing_engines.usage.aggregate``
        rate_index: Index built from the customer's rate card
        customer_id: Customer being billed

    Returns:
        Tuple of InvoiceLine

    Raises:
        MissingRateError: If any usage key has no applicable rate
    """
    lines: list[InvoiceLine] = []
    billed_keys: set[tuple[ServiceType, str]] = set()

    for (service_type, charge_type), quantity in aggregated_usage.items():
        entry = rate_index.get(customer_id, service_type, charge_type)
        if entry is None:
            logger.error("charge_rate_missing", extra={
                "customer_id": customer_id,
                "service_type": ServiceType.parse(service_type).value,
                "charge_type": charge_type,
                "quantity": str(quantity),
            })
            raise MissingRateError(customer_id, ServiceType.parse(service_type).value, charge_type)
        lines.append(price_line(entry, quantity))
        billed_keys.add((entry.service_type, entry.charge_type))

    for entry in rate_index.recurring_entries(customer_id):
        if (entry.service_type, entry.charge_type) in billed_keys:
            continue
        lines.append(price_line(entry, _ONE))
        logger.debug("recurring_charge_applied", extra={
            "customer_id": customer_id,
            "service_type": entry.service_type.value,
            "charge_type": entry.charge_type,
            "rate": str(entry.rate),
        })

    logger.debug("charges_priced", extra={
        "customer_id": customer_id,
        "line_count": len(lines),
        "usage_buckets": len(aggregated_usage),
    })
    return tuple(lines)
