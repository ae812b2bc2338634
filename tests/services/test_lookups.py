"""Tests for the registry protocols and in-memory implementations."""

from datetime import date, datetime

import pytest

from billing_kernel.exceptions import InvoiceAlreadyExistsError
from billing_kernel.selectors import CustomerSelector, RateCardSelector, UsageSelector
from billing_kernel.services import InvoiceWriter
from billing_services.lookups import (
    CustomerLookup,
    InMemoryInvoiceSink,
    InMemoryRegistry,
    InvoiceSink,
    RateCardLookup,
    UsageLookup,
)


class TestProtocols:

    def test_in_memory_registry_satisfies_lookups(self):
        registry = InMemoryRegistry()
        assert isinstance(registry, CustomerLookup)
        assert isinstance(registry, RateCardLookup)
        assert isinstance(registry, UsageLookup)
        assert isinstance(InMemoryInvoiceSink(), InvoiceSink)

    def test_sqlalchemy_adapters_satisfy_lookups(self, session):
        assert isinstance(CustomerSelector(session), CustomerLookup)
        assert isinstance(RateCardSelector(session), RateCardLookup)
        assert isinstance(UsageSelector(session), UsageLookup)
        assert isinstance(InvoiceWriter(session), InvoiceSink)


class TestInMemoryRegistry:

    def test_unknown_customer(self):
        assert InMemoryRegistry().get_customer("C2201") is None

    def test_add_customer_replaces_by_id(self, make_customer):
        registry = InMemoryRegistry(customers=[make_customer(frequency=30)])
        registry.add_customer(make_customer(frequency=14))
        assert registry.get_customer("C2201").billing_frequency_days == 14

    def test_rate_card_per_customer(self, c2201_registry, make_rate):
        c2201_registry.add_rate(make_rate("Storage", "Chilled", "3.75", "PAL", customer_id="C3105"))
        assert len(c2201_registry.get_rate_card("C2201")) == 3
        assert len(c2201_registry.get_rate_card("C3105")) == 1
        assert c2201_registry.get_rate_card("C0000") == ()

    def test_usage_window_inclusive(self, c2201_registry):
        records = c2201_registry.get_usage("C2201", date(2024, 3, 1), date(2024, 3, 31))
        assert len(records) == 3
        assert all(r.occurred_at < datetime(2024, 4, 1) for r in records)


class TestInMemoryInvoiceSink:

    def test_duplicate_period_refused(self, c2201_registry):
        from billing_services.billing_run import BillingRunService

        invoice = BillingRunService(c2201_registry, c2201_registry, c2201_registry).run(
            "C2201", date(2024, 3, 1)
        )
        sink = InMemoryInvoiceSink()
        sink.write_invoice(invoice)
        with pytest.raises(InvoiceAlreadyExistsError) as exc_info:
            sink.write_invoice(invoice)
        assert exc_info.value.start_date == "2024-03-01"
