"""ORM models for the customer registry, rate cards, usage ledger and invoices."""

from billing_kernel.models.customer import CustomerModel
from billing_kernel.models.invoice import InvoiceLineModel, InvoiceModel
from billing_kernel.models.rate_card import RateCardEntryModel
from billing_kernel.models.usage import UsageRecordModel

__all__ = [
    "CustomerModel",
    "InvoiceLineModel",
    "InvoiceModel",
    "RateCardEntryModel",
    "UsageRecordModel",
]
