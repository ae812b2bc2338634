"""
Pytest fixtures for the warehouse billing test suite.

Provides:
- Structured logging configured once per session, plus ``captured_logs``
- An in-memory SQLite session with all tables created
- Builders for customers, rate-card entries and usage records
- The C2201 reference scenario (March 2024, total AED 5,028.00)
"""

import json
import logging
from datetime import date, datetime
from decimal import Decimal
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from billing_config.schema import BillingConfig
from billing_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from billing_kernel.domain.clock import DeterministicClock
from billing_kernel.domain.dtos import (
    Customer,
    CustomerStatus,
    CustomerType,
    RateCardEntry,
    ServiceType,
    UnitOfMeasure,
    UsageRecord,
)
from billing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from billing_services.lookups import InMemoryRegistry


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture billing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            service.run("C2201", date(2024, 3, 1))
            logs = captured_logs()
            assert any(r["message"] == "billing_run_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("billing_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """In-memory SQLite session with all billing tables created."""
    init_engine_from_url("sqlite:///:memory:")
    create_tables()
    db_session = get_session()
    yield db_session
    db_session.rollback()
    db_session.close()
    drop_tables()
    reset_engine()


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 4, 2, 9, 0, 0))


@pytest.fixture
def config() -> BillingConfig:
    return BillingConfig()


# =============================================================================
# Builders
# =============================================================================


@pytest.fixture
def make_customer():
    def _make(
        customer_id: str = "C2201",
        name: str = "Gulf Retail LLC",
        frequency: int = 30,
        status: CustomerStatus = CustomerStatus.ACTIVE,
        customer_type: CustomerType = CustomerType.EXTERNAL,
    ) -> Customer:
        return Customer(
            id=customer_id,
            name=name,
            type=customer_type,
            billing_frequency_days=frequency,
            status=status,
        )

    return _make


@pytest.fixture
def make_rate():
    counter = iter(range(1, 10_000))

    def _make(
        service_type: ServiceType | str,
        charge_type: str,
        rate: str | Decimal,
        unit: UnitOfMeasure | str,
        customer_id: str = "C2201",
        currency: str = "AED",
        effective_from: date | None = None,
        effective_to: date | None = None,
        entry_id: str | None = None,
    ) -> RateCardEntry:
        return RateCardEntry(
            id=entry_id or f"R{next(counter):04d}",
            customer_id=customer_id,
            service_type=service_type,
            charge_type=charge_type,
            rate=Decimal(str(rate)),
            currency=currency,
            unit=unit,
            effective_from=effective_from,
            effective_to=effective_to,
        )

    return _make


@pytest.fixture
def make_usage():
    def _make(
        service_type: ServiceType | str,
        charge_type: str,
        quantity: str | int | Decimal,
        occurred_at: datetime,
        customer_id: str = "C2201",
    ) -> UsageRecord:
        return UsageRecord(
            customer_id=customer_id,
            service_type=service_type,
            charge_type=charge_type,
            quantity=Decimal(str(quantity)),
            occurred_at=occurred_at,
        )

    return _make


# =============================================================================
# Reference scenario
# =============================================================================


@pytest.fixture
def c2201_rate_card(make_rate) -> list[RateCardEntry]:
    return [
        make_rate(ServiceType.STORAGE, "Ambient", "2.00", UnitOfMeasure.M3),
        make_rate(ServiceType.OUTBOUND_HANDLING, "Outbound Each", "0.16", UnitOfMeasure.EA),
        make_rate(ServiceType.FIXED_CHARGE, "Inventory Management", "5000.00", UnitOfMeasure.MON),
    ]


@pytest.fixture
def c2201_usage(make_usage) -> list[UsageRecord]:
    return [
        make_usage(ServiceType.STORAGE, "Ambient", 10, datetime(2024, 3, 5, 9, 0)),
        make_usage(ServiceType.OUTBOUND_HANDLING, "Outbound Each", 30, datetime(2024, 3, 12, 14, 30)),
        make_usage(ServiceType.OUTBOUND_HANDLING, "Outbound Each", 20, datetime(2024, 3, 31, 23, 15)),
        # Outside March: must not be billed
        make_usage(ServiceType.STORAGE, "Ambient", 4, datetime(2024, 4, 1, 8, 0)),
    ]


@pytest.fixture
def c2201_registry(make_customer, c2201_rate_card, c2201_usage) -> InMemoryRegistry:
    return InMemoryRegistry(
        customers=[make_customer()],
        rate_cards=c2201_rate_card,
        usage=c2201_usage,
    )
