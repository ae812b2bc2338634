"""
billing_services -- orchestration over the billing engines and the kernel.

Responsibility:
    Wires the registries (customer, rate card, usage) to the pure engines
    and hands the resulting invoice to a sink.  Also owns the invoice
    export formats.

Architecture position:
    Services -- may import from billing_kernel, billing_engines and
    billing_config.  Nothing below this layer imports from it.
"""

from billing_services.billing_run import BillingRunService
from billing_services.invoice_export import invoice_to_dict, write_invoice_xlsx
from billing_services.lookups import (
    CustomerLookup,
    InMemoryInvoiceSink,
    InMemoryRegistry,
    InvoiceSink,
    RateCardLookup,
    UsageLookup,
)

__all__ = [
    "BillingRunService",
    "CustomerLookup",
    "InMemoryInvoiceSink",
    "InMemoryRegistry",
    "InvoiceSink",
    "RateCardLookup",
    "UsageLookup",
    "invoice_to_dict",
    "write_invoice_xlsx",
]
