"""Read-only selectors backing the customer, rate card and usage lookups."""

from billing_kernel.selectors.base import BaseSelector
from billing_kernel.selectors.customer_selector import CustomerSelector
from billing_kernel.selectors.invoice_selector import InvoiceSelector
from billing_kernel.selectors.rate_card_selector import RateCardSelector
from billing_kernel.selectors.usage_selector import UsageSelector

__all__ = [
    "BaseSelector",
    "CustomerSelector",
    "InvoiceSelector",
    "RateCardSelector",
    "UsageSelector",
]
