"""
Typed Exception Hierarchy for the Billing Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A billing run must halt rather than under- or over-charge, and the caller
must be able to report exactly which customer, charge or date triggered the
halt. Every error here therefore:
  1. Has its own class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries the offending identifiers as attributes (not just a message)

Example:
    try:
        invoice = service.run("C2201", date(2024, 3, 1))
    except MissingRateError as e:
        report(code=e.code, customer=e.customer_id, charge=e.charge_type)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BillingError (base)
    |
    +-- PeriodError
    |   +-- InvalidPeriodError
    |
    +-- RateCardError
    |   +-- DuplicateRateError
    |   +-- MissingRateError
    |
    +-- UsageError
    |   +-- InvalidUsageError
    |
    +-- CurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- CustomerError
    |   +-- CustomerNotFoundError
    |   +-- CustomerInactiveError
    |
    +-- InvoiceError
    |   +-- InvoiceAlreadyExistsError
    |
    +-- ConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                   | When Raised
-----------|------------------------|--------------------------------------------
Period     | INVALID_PERIOD         | frequency <= 0 or start is not a date
Rate card  | DUPLICATE_RATE         | two active entries share a rate key
           | MISSING_RATE           | usage exists with no matching rate
Usage      | INVALID_USAGE          | negative or malformed usage quantity
Currency   | CURRENCY_MISMATCH      | invoice lines in more than one currency
Customer   | CUSTOMER_NOT_FOUND     | registry has no such customer
           | CUSTOMER_INACTIVE      | customer is not active for billing
Invoice    | INVOICE_ALREADY_EXISTS | invoice for the same period already stored
Config     | CONFIG_ERROR           | configuration value missing or invalid

No error is retried internally. Every error aborts the whole billing run for
that customer/period; there is no partial invoice.
"""

from datetime import date


class BillingError(Exception):
    """
    Base exception for all billing errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BILLING_ERROR"


# Period-related exceptions


class PeriodError(BillingError):
    """Base exception for billing period errors."""

    code: str = "PERIOD_ERROR"


class InvalidPeriodError(PeriodError):
    """Billing period cannot be resolved from the given inputs."""

    code: str = "INVALID_PERIOD"

    def __init__(self, start_date: object, frequency_days: object, reason: str):
        self.start_date = str(start_date)
        self.frequency_days = frequency_days
        self.reason = reason
        super().__init__(
            f"Invalid billing period (start={start_date}, "
            f"frequency_days={frequency_days}): {reason}"
        )


# Rate-card exceptions


class RateCardError(BillingError):
    """Base exception for rate-card errors."""

    code: str = "RATE_CARD_ERROR"


class DuplicateRateError(RateCardError):
    """
    Two active rate-card entries share (customer, service, charge type).

    This is a data-integrity fault in the rate-card registry. It is surfaced,
    never silently deduplicated.
    """

    code: str = "DUPLICATE_RATE"

    def __init__(
        self,
        customer_id: str,
        service_type: str,
        charge_type: str,
        first_entry_id: str,
        second_entry_id: str,
    ):
        self.customer_id = customer_id
        self.service_type = service_type
        self.charge_type = charge_type
        self.first_entry_id = first_entry_id
        self.second_entry_id = second_entry_id
        super().__init__(
            f"Duplicate active rate for customer {customer_id} "
            f"({service_type}/{charge_type}): entries {first_entry_id} "
            f"and {second_entry_id}"
        )


class MissingRateError(RateCardError):
    """Usage exists for a charge with no applicable rate-card entry."""

    code: str = "MISSING_RATE"

    def __init__(self, customer_id: str, service_type: str, charge_type: str):
        self.customer_id = customer_id
        self.service_type = service_type
        self.charge_type = charge_type
        super().__init__(
            f"No applicable rate for customer {customer_id}: "
            f"{service_type}/{charge_type}"
        )


# Usage exceptions


class UsageError(BillingError):
    """Base exception for usage-record errors."""

    code: str = "USAGE_ERROR"


class InvalidUsageError(UsageError):
    """Usage record has a negative or malformed quantity."""

    code: str = "INVALID_USAGE"

    def __init__(
        self,
        customer_id: str,
        service_type: str,
        charge_type: str,
        occurred_at: str,
        quantity: str,
        reason: str,
    ):
        self.customer_id = customer_id
        self.service_type = service_type
        self.charge_type = charge_type
        self.occurred_at = occurred_at
        self.quantity = quantity
        self.reason = reason
        super().__init__(
            f"Invalid usage for customer {customer_id} "
            f"({service_type}/{charge_type} at {occurred_at}): "
            f"quantity={quantity}: {reason}"
        )


# Currency exceptions


class CurrencyError(BillingError):
    """Base exception for currency errors."""

    code: str = "CURRENCY_ERROR"


class CurrencyMismatchError(CurrencyError):
    """Invoice lines are priced in more than one currency."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, customer_id: str, expected: str, found: str, charge_type: str):
        self.customer_id = customer_id
        self.expected = expected
        self.found = found
        self.charge_type = charge_type
        super().__init__(
            f"Currency mismatch on invoice for customer {customer_id}: "
            f"expected {expected}, line {charge_type} is in {found}"
        )


# Customer exceptions


class CustomerError(BillingError):
    """Base exception for customer registry errors."""

    code: str = "CUSTOMER_ERROR"


class CustomerNotFoundError(CustomerError):
    code: str = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer not found: {customer_id}")


class CustomerInactiveError(CustomerError):
    """Customer exists but is not active for billing."""

    code: str = "CUSTOMER_INACTIVE"

    def __init__(self, customer_id: str, status: str):
        self.customer_id = customer_id
        self.status = status
        super().__init__(f"Customer {customer_id} is {status}; billing refused")


# Invoice exceptions


class InvoiceError(BillingError):
    """Base exception for invoice persistence errors."""

    code: str = "INVOICE_ERROR"


class InvoiceAlreadyExistsError(InvoiceError):
    """An invoice for the same customer and period is already stored."""

    code: str = "INVOICE_ALREADY_EXISTS"

    def __init__(self, customer_id: str, start_date: date, end_date: date):
        self.customer_id = customer_id
        self.start_date = start_date.isoformat()
        self.end_date = end_date.isoformat()
        super().__init__(
            f"Invoice already exists for customer {customer_id} "
            f"({self.start_date} to {self.end_date})"
        )


# Configuration exceptions


class ConfigError(BillingError):
    """Configuration value is missing or invalid."""

    code: str = "CONFIG_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration '{key}': {reason}")
