"""
Invoice Assembler.

Pure function. No I/O.

Combines priced lines into an Invoice. Enforces a single currency across
lines and sums line amounts exactly; line amounts were rounded by the
charge calculator and are never re-rounded here.
"""

from __future__ import annotations

import time
from collections.abc import Sequence

from billing_kernel.domain.dtos import BillingPeriod, Customer, Invoice, InvoiceLine
from billing_kernel.domain.values import Money
from billing_kernel.exceptions import CurrencyMismatchError
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.invoice")


def assemble(
    customer: Customer,
    period: BillingPeriod,
    lines: Sequence[InvoiceLine],
    default_currency: str | None = None,
) -> Invoice:
    """
    Assemble the invoice for a customer and period.

    Args:
        customer: Customer being billed
        period: Resolved billing period for that customer
        lines: Priced lines; order is preserved on the invoice
        default_currency: Currency of an invoice with no lines

    Returns:
        Immutable Invoice

    Raises:
        CurrencyMismatchError: If lines are priced in more than one currency
        ValueError: If the period belongs to another customer, or there are
            no lines and no default currency
    """
    t0 = time.monotonic()

    if period.customer_id != customer.id:
        raise ValueError(
            f"Period belongs to customer {period.customer_id}, not {customer.id}"
        )

    if lines:
        currency = lines[0].currency
    elif default_currency:
        currency = default_currency
    else:
        raise ValueError("default_currency is required for an invoice with no lines")

    for line in lines:
        if line.currency != currency:
            logger.error("invoice_currency_mismatch", extra={
                "customer_id": customer.id,
                "expected_currency": currency,
                "line_currency": line.currency,
                "charge_type": line.charge_type,
            })
            raise CurrencyMismatchError(customer.id, currency, line.currency, line.charge_type)

    total = Money.sum((line.amount for line in lines), currency)

    invoice = Invoice(
        customer_id=customer.id,
        customer_name=customer.name,
        customer_type=customer.type,
        period=period,
        lines=tuple(lines),
        total_amount=total,
        currency=total.currency.code,
    )

    logger.info("invoice_assembled", extra={
        "customer_id": customer.id,
        "start_date": period.start_date.isoformat(),
        "end_date": period.end_date.isoformat(),
        "line_count": len(invoice.lines),
        "total_amount": str(total.amount),
        "currency": invoice.currency,
        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
    })
    return invoice
