"""
Registry and sink protocols the billing run depends on.

Contract:
    CustomerLookup.get_customer() returns None for an unknown customer.
    RateCardLookup.get_rate_card() returns every entry on the card (empty
    when there is none); effective-date filtering happens in the index.
    UsageLookup.get_usage() returns records for an inclusive date window.
    InvoiceSink.write_invoice() stores an assembled invoice.

Architecture: billing_services.  The SQLAlchemy selectors in
billing_kernel.selectors and InvoiceWriter satisfy these protocols; the
in-memory implementations below back tests and dry runs.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any, Protocol, runtime_checkable

from billing_kernel.domain.dtos import Customer, Invoice, RateCardEntry, UsageRecord
from billing_kernel.exceptions import InvoiceAlreadyExistsError


@runtime_checkable
class CustomerLookup(Protocol):
    """Customer registry."""

    def get_customer(self, customer_id: str) -> Customer | None:
        ...


@runtime_checkable
class RateCardLookup(Protocol):
    """Rate card registry."""

    def get_rate_card(self, customer_id: str) -> Sequence[RateCardEntry]:
        ...


@runtime_checkable
class UsageLookup(Protocol):
    """Usage ledger."""

    def get_usage(
        self,
        customer_id: str,
        start_date: date,
        end_date: date,
    ) -> Sequence[UsageRecord]:
        ...


@runtime_checkable
class InvoiceSink(Protocol):
    """Destination for assembled invoices."""

    def write_invoice(self, invoice: Invoice) -> Any:
        ...


class InMemoryRegistry:
    """Customers, rate cards and usage held in memory."""

    def __init__(
        self,
        customers: Iterable[Customer] = (),
        rate_cards: Iterable[RateCardEntry] = (),
        usage: Iterable[UsageRecord] = (),
    ):
        self._customers: dict[str, Customer] = {c.id: c for c in customers}
        self._rate_cards: list[RateCardEntry] = list(rate_cards)
        self._usage: list[UsageRecord] = list(usage)

    def add_customer(self, customer: Customer) -> None:
        self._customers[customer.id] = customer

    def add_rate(self, entry: RateCardEntry) -> None:
        self._rate_cards.append(entry)

    def add_usage(self, record: UsageRecord) -> None:
        self._usage.append(record)

    def get_customer(self, customer_id: str) -> Customer | None:
        return self._customers.get(customer_id)

    def get_rate_card(self, customer_id: str) -> tuple[RateCardEntry, ...]:
        return tuple(e for e in self._rate_cards if e.customer_id == customer_id)

    def get_usage(
        self,
        customer_id: str,
        start_date: date,
        end_date: date,
    ) -> tuple[UsageRecord, ...]:
        return tuple(
            r
            for r in self._usage
            if r.customer_id == customer_id
            and start_date <= r.occurred_at.date() <= end_date
        )


class InMemoryInvoiceSink:
    """Collects invoices; refuses a second invoice for the same period."""

    def __init__(self) -> None:
        self.invoices: list[Invoice] = []

    def write_invoice(self, invoice: Invoice) -> None:
        for existing in self.invoices:
            if (
                existing.customer_id == invoice.customer_id
                and existing.period.start_date == invoice.period.start_date
                and existing.period.end_date == invoice.period.end_date
            ):
                raise InvoiceAlreadyExistsError(
                    invoice.customer_id,
                    invoice.period.start_date,
                    invoice.period.end_date,
                )
        self.invoices.append(invoice)
