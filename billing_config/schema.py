"""
Billing configuration schema.

The runtime configuration of the billing engine and its CLI. YAML files
are parsed into ``BillingConfig`` by the loader; everything downstream
receives the frozen dataclass, never the raw mapping.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DATABASE_URL = "sqlite:///warehouse_billing.db"


@dataclass(frozen=True)
class BillingConfig:
    """
    Billing engine settings.

    Attributes:
        default_currency: Currency of an invoice that has no lines
        calendar_month_frequency_days: Frequency that triggers calendar-month billing
        database_url: SQLAlchemy URL of the registries and invoice store
        log_level: Level for the billing_kernel logger hierarchy
        checksum: SHA-256 of the canonical source mapping
    """

    default_currency: str = "AED"
    calendar_month_frequency_days: int = 30
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    checksum: str = ""
