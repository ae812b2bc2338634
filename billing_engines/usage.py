"""
Usage Aggregator.

Pure function. No I/O.

Collects a customer's usage records for a billing period into totals per
(service_type, charge_type). The result dict is ordered by first
occurrence of each key in the input; the totals themselves do not depend
on input order.

A record belongs to the period when the calendar date of ``occurred_at``
lies in [start_date, end_date], both ends inclusive. The timestamp's own
date is used as-is (no timezone conversion).
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from billing_engines.tracer import traced_engine
from billing_kernel.domain.dtos import BillingPeriod, ServiceType, UsageRecord
from billing_kernel.exceptions import InvalidUsageError
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.usage")

UsageKey = tuple[ServiceType, str]


def _check_quantity(record: UsageRecord) -> None:
    quantity = record.quantity
    if not isinstance(quantity, Decimal) or not quantity.is_finite():
        reason = "quantity is not a finite decimal"
    elif quantity < 0:
        reason = "negative quantity; corrections must be billed separately"
    else:
        return
    logger.warning("usage_record_rejected", extra={
        "customer_id": record.customer_id,
        "service_type": record.service_type.value,
        "charge_type": record.charge_type,
        "occurred_at": record.occurred_at.isoformat(),
        "quantity": str(quantity),
        "reason": reason,
    })
    raise InvalidUsageError(
        record.customer_id,
        record.service_type.value,
        record.charge_type,
        record.occurred_at.isoformat(),
        str(quantity),
        reason,
    )


@traced_engine("usage_aggregator", "1.0", fingerprint_fields=("customer_id", "period"))
def aggregate(
    usage_records: Iterable[UsageRecord],
    customer_id: str,
    period: BillingPeriod,
) -> dict[UsageKey, Decimal]:
    """
    Sum usage per (service_type, charge_type) for one customer and period.

    Args:
        usage_records: Raw usage from the ledger (may include other customers)
        customer_id: Customer being billed
        period: Inclusive billing window

    Returns:
        Ordered mapping of key -> total quantity; keys without records are absent

    Raises:
        InvalidUsageError: If a record in scope has a negative or non-finite quantity
    """
    totals: dict[UsageKey, Decimal] = {}
    in_scope = 0
    out_of_scope = 0

    for record in usage_records:
        if record.customer_id != customer_id or not period.contains(record.occurred_at.date()):
            out_of_scope += 1
            continue
        _check_quantity(record)
        in_scope += 1
        totals[record.key] = totals.get(record.key, Decimal("0")) + record.quantity

    logger.debug("usage_aggregated", extra={
        "customer_id": customer_id,
        "start_date": period.start_date.isoformat(),
        "end_date": period.end_date.isoformat(),
        "records_in_period": in_scope,
        "records_skipped": out_of_scope,
        "bucket_count": len(totals),
    })
    return totals
