"""
Property-based tests for the billing engines.

Properties checked here:
- Period resolution: end >= start for every positive frequency; the
  calendar-month rule ends on the month's last day; otherwise the window
  holds exactly N days.
- Aggregation: totals do not depend on record order.
- Pricing: linear in quantity for usage-based units, up to one cent of
  rounding per line.
- Per-period charges: billed exactly once whatever the usage.
- Assembly: total equals the exact sum of line amounts.
"""

import calendar
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from billing_engines.charges import price, price_line
from billing_engines.invoice import assemble
from billing_engines.period import build_billing_period, resolve_period
from billing_engines.rate_card import build_index
from billing_engines.usage import aggregate
from billing_kernel.domain.dtos import (
    Customer,
    RateCardEntry,
    ServiceType,
    UnitOfMeasure,
    UsageRecord,
)

_SETTINGS = settings(
    max_examples=60,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

_CUSTOMER = Customer("C2201", "Gulf Retail LLC", "External", 30)

dates = st.dates(min_value=date(2000, 1, 1), max_value=date(2099, 12, 1))
frequencies = st.integers(min_value=1, max_value=400)
quantities = st.decimals(min_value=Decimal("0"), max_value=Decimal("100000"), places=3)
rates = st.decimals(min_value=Decimal("0"), max_value=Decimal("10000"), places=4)
usage_units = st.sampled_from([UnitOfMeasure.M3, UnitOfMeasure.PAL, UnitOfMeasure.EA, UnitOfMeasure.TON])


def _entry(service_type, charge_type, rate, unit):
    return RateCardEntry(
        id=f"{service_type.value}:{charge_type}",
        customer_id="C2201",
        service_type=service_type,
        charge_type=charge_type,
        rate=rate,
        currency="AED",
        unit=unit,
    )


@st.composite
def usage_records(draw, start: date, days: int):
    keys = [
        (ServiceType.STORAGE, "Ambient"),
        (ServiceType.INBOUND_HANDLING, "Inbound Pallet"),
        (ServiceType.OUTBOUND_HANDLING, "Outbound Each"),
    ]
    count = draw(st.integers(min_value=0, max_value=25))
    records = []
    for _ in range(count):
        service_type, charge_type = draw(st.sampled_from(keys))
        offset = draw(st.integers(min_value=-3, max_value=days + 3))
        seconds = draw(st.integers(min_value=0, max_value=86_399))
        occurred = datetime.combine(start + timedelta(days=offset), time.min) + timedelta(seconds=seconds)
        records.append(UsageRecord("C2201", service_type, charge_type, draw(quantities), occurred))
    return records


# ============================================================================
# Period resolution
# ============================================================================


class TestPeriodProperties:

    @_SETTINGS
    @given(start=dates, frequency=frequencies)
    def test_end_never_before_start(self, start, frequency):
        assert resolve_period(start, frequency) >= start

    @_SETTINGS
    @given(start=dates, frequency=frequencies)
    def test_window_length(self, start, frequency):
        end = resolve_period(start, frequency)
        if frequency == 30 and start.day == 1:
            assert end.day == calendar.monthrange(start.year, start.month)[1]
            assert (end.year, end.month) == (start.year, start.month)
        else:
            assert (end - start).days + 1 == frequency

    @_SETTINGS
    @given(start=dates, frequency=frequencies)
    def test_deterministic(self, start, frequency):
        assert resolve_period(start, frequency) == resolve_period(start, frequency)


# ============================================================================
# Aggregation and pricing
# ============================================================================


class TestAggregationProperties:

    @_SETTINGS
    @given(data=st.data())
    def test_order_independent(self, data):
        period = build_billing_period("C2201", date(2024, 3, 1), 30)
        records = data.draw(usage_records(period.start_date, period.days))
        shuffled = data.draw(st.permutations(records))
        assert aggregate(records, "C2201", period) == aggregate(shuffled, "C2201", period)

    @_SETTINGS
    @given(rate=rates, unit=usage_units, a=quantities, b=quantities)
    def test_pricing_linear_within_a_cent(self, rate, unit, a, b):
        entry = _entry(ServiceType.STORAGE, "Ambient", rate, unit)
        combined = price_line(entry, a + b).amount.amount
        separate = price_line(entry, a).amount.amount + price_line(entry, b).amount.amount
        assert abs(combined - separate) <= Decimal("0.01")

    @_SETTINGS
    @given(rate=rates, quantity=st.one_of(st.just(Decimal("0")), quantities))
    def test_fixed_charge_billed_once(self, rate, quantity):
        fixed = _entry(ServiceType.FIXED_CHARGE, "Inventory Management", rate, UnitOfMeasure.MON)
        index = build_index([fixed])
        usage = {} if quantity == 0 else {(ServiceType.FIXED_CHARGE, "Inventory Management"): quantity}
        lines = price(usage, index, "C2201")
        assert len(lines) == 1
        assert lines[0].quantity == Decimal("1")
        assert lines[0].amount.amount == rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @_SETTINGS
    @given(data=st.data())
    def test_total_is_sum_of_lines(self, data):
        period = build_billing_period("C2201", date(2024, 3, 1), 30)
        index = build_index([
            _entry(ServiceType.STORAGE, "Ambient", data.draw(rates), UnitOfMeasure.M3),
            _entry(ServiceType.INBOUND_HANDLING, "Inbound Pallet", data.draw(rates), UnitOfMeasure.PAL),
            _entry(ServiceType.OUTBOUND_HANDLING, "Outbound Each", data.draw(rates), UnitOfMeasure.EA),
            _entry(ServiceType.FIXED_CHARGE, "Inventory Management", data.draw(rates), UnitOfMeasure.MON),
        ])
        records = data.draw(usage_records(period.start_date, period.days))
        lines = price(aggregate(records, "C2201", period), index, "C2201")
        invoice = assemble(_CUSTOMER, period, lines)
        assert invoice.total_amount.amount == sum((l.amount.amount for l in lines), Decimal("0"))
        assert all(l.amount.amount == l.amount.amount.quantize(Decimal("0.01")) for l in lines)
