"""
billing_services.billing_run -- one billing run for one customer and period.

Responsibility:
    Looks up the customer, resolves the billing period, indexes the rate
    card, aggregates usage, prices it and assembles the invoice, then hands
    the invoice to the sink.

Architecture position:
    Services -- imperative shell around the pure engines in
    ``billing_engines``.  The lookups and the sink are injected, so the same
    run works against SQLAlchemy selectors or in-memory registries.

Invariants enforced:
    - Only Active customers are billed.
    - The rate card is indexed as of the period start date.
    - All-or-nothing: any error aborts the run before the sink is called,
      and is re-raised unchanged.

Failure modes:
    - CustomerNotFoundError / CustomerInactiveError
    - InvalidPeriodError, DuplicateRateError, InvalidUsageError,
      MissingRateError, CurrencyMismatchError from the engines
    - Whatever the sink raises (InvoiceAlreadyExistsError for InvoiceWriter)

Audit relevance:
    Every run logs billing_run_started and either billing_run_completed or
    billing_run_failed, under a run_id bound in LogContext so engine traces
    for the run can be correlated.
"""

from __future__ import annotations

import time
from datetime import date
from uuid import uuid4

from billing_config.schema import BillingConfig
from billing_engines import aggregate, assemble, build_billing_period, build_index, price
from billing_kernel.domain.dtos import Invoice
from billing_kernel.exceptions import CustomerInactiveError, CustomerNotFoundError
from billing_kernel.logging_config import LogContext, get_logger
from billing_services.lookups import CustomerLookup, InvoiceSink, RateCardLookup, UsageLookup

logger = get_logger("services.billing_run")


class BillingRunService:
    """
    Runs billing for a customer and period start date.

    Contract:
        ``run(customer_id, start_date)`` returns the assembled Invoice, or
        raises a BillingError.  The sink, when given, receives the invoice
        only after it has been fully assembled.
    """

    def __init__(
        self,
        customers: CustomerLookup,
        rate_cards: RateCardLookup,
        usage: UsageLookup,
        config: BillingConfig | None = None,
        sink: InvoiceSink | None = None,
    ):
        self._customers = customers
        self._rate_cards = rate_cards
        self._usage = usage
        self._config = config or BillingConfig()
        self._sink = sink

    def run(self, customer_id: str, start_date: date) -> Invoice:
        run_id = str(uuid4())
        with LogContext.bind(run_id=run_id, customer_id=customer_id):
            t0 = time.monotonic()
            logger.info(
                "billing_run_started",
                extra={"start_date": str(start_date)},
            )
            try:
                invoice = self._run(customer_id, start_date)
            except Exception as exc:
                logger.error(
                    "billing_run_failed",
                    extra={
                        "start_date": str(start_date),
                        "error_type": type(exc).__name__,
                        "error_code": getattr(exc, "code", None),
                        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                    },
                )
                raise

            logger.info(
                "billing_run_completed",
                extra={
                    "start_date": invoice.period.start_date.isoformat(),
                    "end_date": invoice.period.end_date.isoformat(),
                    "line_count": len(invoice.lines),
                    "total_amount": str(invoice.total_amount.amount),
                    "currency": invoice.currency,
                    "persisted": self._sink is not None,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return invoice

    def _run(self, customer_id: str, start_date: date) -> Invoice:
        customer = self._customers.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        if not customer.is_active:
            raise CustomerInactiveError(customer_id, customer.status.value)

        period = build_billing_period(
            customer.id,
            start_date,
            customer.billing_frequency_days,
            self._config.calendar_month_frequency_days,
        )

        index = build_index(self._rate_cards.get_rate_card(customer.id), as_of=period.start_date)
        recurring = index.recurring_entries(customer.id)
        if recurring and not period.is_calendar_month:
            # Monthly rates still bill once; flag the mismatch for review
            logger.warning(
                "recurring_charge_on_non_calendar_period",
                extra={
                    "start_date": period.start_date.isoformat(),
                    "end_date": period.end_date.isoformat(),
                    "charge_types": [e.charge_type for e in recurring],
                },
            )

        records = self._usage.get_usage(customer.id, period.start_date, period.end_date)
        usage = aggregate(records, customer.id, period)
        lines = price(usage, index, customer.id)
        invoice = assemble(customer, period, lines, default_currency=self._config.default_currency)

        if self._sink is not None:
            self._sink.write_invoice(invoice)
        return invoice
