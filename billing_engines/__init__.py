"""
Module: billing_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    billing engines. This is the canonical import surface for
    billing_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import billing_kernel.domain, billing_kernel.exceptions and
    billing_kernel.logging_config (and sibling engine modules).
    MUST NOT import billing_services, billing_config or the db layer.

Invariants enforced:
    - Purity: engines never read the clock; dates are explicit parameters.
    - Decimal-only arithmetic; floats are rejected at the DTO boundary.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from billing_engines import (
        build_billing_period, build_index, aggregate, price, assemble,
    )

    period = build_billing_period(customer.id, start, customer.billing_frequency_days)
    index = build_index(rate_card, as_of=period.start_date)
    usage = aggregate(records, customer.id, period)
    invoice = assemble(customer, period, price(usage, index, customer.id))
"""

from billing_engines.charges import price, price_line, round_amount
from billing_engines.invoice import assemble
from billing_engines.period import (
    CALENDAR_MONTH_FREQUENCY_DAYS,
    build_billing_period,
    is_calendar_month_billing,
    last_day_of_month,
    next_period_start,
    resolve_period,
)
from billing_engines.rate_card import RateCardIndex, build_index, lookup
from billing_engines.usage import aggregate

__all__ = [
    "CALENDAR_MONTH_FREQUENCY_DAYS",
    "RateCardIndex",
    "aggregate",
    "assemble",
    "build_billing_period",
    "build_index",
    "is_calendar_month_billing",
    "last_day_of_month",
    "lookup",
    "next_period_start",
    "price",
    "price_line",
    "resolve_period",
    "round_amount",
]
