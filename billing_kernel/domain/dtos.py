"""
Domain DTOs -- frozen records exchanged between registries, engines and sinks.

Responsibility:
    Defines the billing data model: Customer, RateCardEntry, UsageRecord,
    BillingPeriod, InvoiceLine and Invoice, plus the enums they use. These
    are the only types that cross the engine boundary; ORM models are
    translated into them by the selectors.

Architecture position:
    Kernel > Domain -- pure, zero I/O. Imports only domain.values and
    billing_kernel.exceptions.

Invariants enforced:
    - Quantities, rates and amounts are Decimal (floats rejected).
    - Rates and usage quantities are validated at construction where the
      value is known to be invalid regardless of context (negative rate,
      end before start). Negative usage is reported by the aggregator so
      the error can name the billing run that met it.
    - Invoices are immutable once assembled.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum

from billing_kernel.domain.currency import CurrencyRegistry
from billing_kernel.domain.values import Money
from billing_kernel.exceptions import InvalidUsageError


class CustomerType(str, Enum):
    INTERNAL = "Internal"
    EXTERNAL = "External"


class CustomerStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ServiceType(str, Enum):
    """Billable warehouse services, as they appear on a rate card."""

    FIXED_CHARGE = "FixedCharge"
    STORAGE = "Storage"
    INBOUND_HANDLING = "InboundHandling"
    OUTBOUND_HANDLING = "OutboundHandling"
    RETURN_HANDLING = "ReturnHandling"
    SCRAP_HANDLING = "ScrapHandling"
    LABELLING_VAS = "LabellingVAS"

    @property
    def label(self) -> str:
        """Display label used on rate sheets and exported invoices."""
        return _SERVICE_LABELS[self]

    @classmethod
    def parse(cls, value: str | ServiceType) -> ServiceType:
        """Accept either the enum value ("InboundHandling") or its label ("Inbound Handling")."""
        if isinstance(value, ServiceType):
            return value
        text = str(value).strip()
        for member in cls:
            if text == member.value or text == member.label:
                return member
        raise ValueError(f"Unknown service type: {value!r}")


_SERVICE_LABELS = {
    ServiceType.FIXED_CHARGE: "Fixed Charge",
    ServiceType.STORAGE: "Storage",
    ServiceType.INBOUND_HANDLING: "Inbound Handling",
    ServiceType.OUTBOUND_HANDLING: "Outbound Handling",
    ServiceType.RETURN_HANDLING: "Return Handling",
    ServiceType.SCRAP_HANDLING: "Scrap Handling",
    ServiceType.LABELLING_VAS: "Labelling (VAS)",
}


class UnitOfMeasure(str, Enum):
    """Quantity basis a rate is expressed per."""

    M3 = "M3"  # cubic meters
    PAL = "PAL"  # pallets
    EA = "EA"  # each
    TON = "TON"  # tonnes
    MON = "MON"  # fixed per month (per billing period)


def _to_decimal(value: Decimal | int | str, name: str) -> Decimal:
    if isinstance(value, float):
        raise ValueError(f"{name} must be Decimal, int or str, not float")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"{name} is not a decimal number: {value!r}") from e


# ============================================================================
# Registry records
# ============================================================================


@dataclass(frozen=True)
class Customer:
    """A billable customer as held by the customer registry."""

    id: str
    name: str
    type: CustomerType
    billing_frequency_days: int
    status: CustomerStatus = CustomerStatus.ACTIVE

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("customer id is required")
        object.__setattr__(self, "type", CustomerType(self.type))
        object.__setattr__(self, "status", CustomerStatus(self.status))

    @property
    def is_active(self) -> bool:
        return self.status == CustomerStatus.ACTIVE


@dataclass(frozen=True)
class RateCardEntry:
    """
    One negotiated rate on a customer's rate card.

    Attributes:
        id: Registry identifier of the entry
        customer_id: Customer the rate belongs to
        service_type: Billable service
        charge_type: Free-text sub-category ("Ambient", "Inbound Pallet")
        rate: Price per unit, non-negative
        currency: ISO 4217 code
        unit: Quantity basis of the rate
        effective_from: First day the entry is active (None = unbounded)
        effective_to: Last day the entry is active (None = unbounded)
    """

    id: str
    customer_id: str
    service_type: ServiceType
    charge_type: str
    rate: Decimal
    currency: str
    unit: UnitOfMeasure
    effective_from: date | None = None
    effective_to: date | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "service_type", ServiceType.parse(self.service_type))
        object.__setattr__(self, "unit", UnitOfMeasure(self.unit))
        object.__setattr__(self, "rate", _to_decimal(self.rate, "rate"))
        object.__setattr__(self, "currency", CurrencyRegistry.validate(self.currency))
        if self.rate < 0:
            raise ValueError(f"rate must be non-negative: {self.rate}")
        if (
            self.effective_from is not None
            and self.effective_to is not None
            and self.effective_to < self.effective_from
        ):
            raise ValueError("effective_to must not precede effective_from")

    @property
    def key(self) -> tuple[str, ServiceType, str]:
        return (self.customer_id, self.service_type, self.charge_type)

    @property
    def is_per_period(self) -> bool:
        """Charged once per billing period regardless of usage quantity."""
        return self.unit == UnitOfMeasure.MON or self.service_type == ServiceType.FIXED_CHARGE

    def is_active_on(self, on: date) -> bool:
        if self.effective_from is not None and on < self.effective_from:
            return False
        if self.effective_to is not None and on > self.effective_to:
            return False
        return True


@dataclass(frozen=True)
class UsageRecord:
    """
    A timestamped, quantified billable activity from the usage ledger.

    A quantity that is not a decimal number (a float, or unparseable text)
    raises InvalidUsageError here; a negative one is caught by the
    aggregator once the record is known to be in scope.
    """

    customer_id: str
    service_type: ServiceType
    charge_type: str
    quantity: Decimal
    occurred_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "service_type", ServiceType.parse(self.service_type))
        try:
            object.__setattr__(self, "quantity", _to_decimal(self.quantity, "quantity"))
        except ValueError as exc:
            raise InvalidUsageError(
                self.customer_id,
                self.service_type.value,
                self.charge_type,
                str(self.occurred_at),
                repr(self.quantity),
                str(exc),
            ) from exc
        if not isinstance(self.occurred_at, datetime):
            raise ValueError(f"occurred_at must be a datetime, got {type(self.occurred_at).__name__}")

    @property
    def key(self) -> tuple[ServiceType, str]:
        return (self.service_type, self.charge_type)


# ============================================================================
# Billing results
# ============================================================================


@dataclass(frozen=True)
class BillingPeriod:
    """Inclusive date window an invoice covers."""

    customer_id: str
    start_date: date
    end_date: date
    frequency_days: int

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date} precedes start_date {self.start_date}"
            )

    @property
    def days(self) -> int:
        """Inclusive day count."""
        return (self.end_date - self.start_date).days + 1

    @property
    def is_calendar_month(self) -> bool:
        """True when the period covers exactly one whole calendar month."""
        last_day = calendar.monthrange(self.start_date.year, self.start_date.month)[1]
        return (
            self.start_date.day == 1
            and self.end_date == self.start_date.replace(day=last_day)
        )

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def next_start(self) -> date:
        return self.end_date + timedelta(days=1)


@dataclass(frozen=True)
class InvoiceLine:
    """
    One priced line on an invoice.

    amount is already rounded (half-up, two places) and is never re-rounded.
    """

    service_type: ServiceType
    charge_type: str
    quantity: Decimal
    unit: UnitOfMeasure
    unit_rate: Decimal
    currency: str
    amount: Money


@dataclass(frozen=True)
class Invoice:
    """
    Assembled invoice for one customer and billing period.

    Attributes:
        customer_id: Customer billed
        customer_name: Name at the time of the run
        customer_type: Internal or External
        period: Billing period covered
        lines: Priced lines in aggregation order
        total_amount: Exact sum of line amounts
        currency: Single currency of every line
    """

    customer_id: str
    customer_name: str
    customer_type: CustomerType
    period: BillingPeriod
    lines: tuple[InvoiceLine, ...]
    total_amount: Money
    currency: str

    def subtotals_by_service(self) -> dict[ServiceType, Money]:
        """Subtotal per service type, in order of first appearance."""
        subtotals: dict[ServiceType, Money] = {}
        for line in self.lines:
            current = subtotals.get(line.service_type, Money.zero(self.currency))
            subtotals[line.service_type] = current + line.amount
        return subtotals

    def lines_for(self, service_type: ServiceType) -> tuple[InvoiceLine, ...]:
        return tuple(line for line in self.lines if line.service_type == service_type)
