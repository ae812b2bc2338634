#!/usr/bin/env python3
"""
Seed the billing database from a YAML file.

Creates any missing tables, then inserts the customers, rate-card entries
and usage records listed in the file, in one transaction.

File layout:
    customers:
      - {id: C2201, name: Gulf Retail LLC, type: External,
         billing_frequency_days: 30, status: Active}
    rate_cards:
      - {customer_id: C2201, service_type: Storage, charge_type: Ambient,
         rate: "2.00", currency: AED, unit: M3}
    usage:
      - {customer_id: C2201, service_type: Storage, charge_type: Ambient,
         quantity: "10", occurred_at: 2024-03-05T09:00:00}

Usage:
    python -m scripts.seed_data data/sample_seed.yaml [--config PATH] [--reset]
"""

from __future__ import annotations

import argparse
import sys
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import yaml
from sqlalchemy.orm import Session

from billing_config import get_active_config
from billing_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    session_scope,
)
from billing_kernel.domain.dtos import Customer, RateCardEntry, UsageRecord
from billing_kernel.exceptions import InvalidUsageError
from billing_kernel.logging_config import configure_logging, get_logger
from billing_kernel.models import CustomerModel, RateCardEntryModel, UsageRecordModel

logger = get_logger("scripts.seed_data")


def load_seed_file(path: Path) -> dict[str, list[dict[str, Any]]]:
    """Read a seed file; missing sections are empty."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML document must be a mapping")
    return {
        name: list(data.get(name) or [])
        for name in ("customers", "rate_cards", "usage")
    }


def _as_date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return datetime.fromisoformat(str(value))


def seed(session: Session, data: dict[str, list[dict[str, Any]]]) -> dict[str, int]:
    """
    Insert seed rows into ``session`` (flush only).

    Every row is validated through the domain DTO before it is added, so a
    bad rate or unknown service type fails with ValueError before anything
    reaches the database.

    Returns:
        Row counts per section.
    """
    for row in data.get("customers", []):
        customer = Customer(
            id=str(row["id"]),
            name=row["name"],
            type=row.get("type", "External"),
            billing_frequency_days=int(row["billing_frequency_days"]),
            status=row.get("status", "Active"),
        )
        session.add(CustomerModel(
            customer_code=customer.id,
            name=customer.name,
            customer_type=customer.type.value,
            billing_frequency_days=customer.billing_frequency_days,
            status=customer.status.value,
        ))
    session.flush()

    for row in data.get("rate_cards", []):
        entry = RateCardEntry(
            id="",
            customer_id=str(row["customer_id"]),
            service_type=row["service_type"],
            charge_type=row["charge_type"],
            rate=str(row["rate"]),
            currency=row["currency"],
            unit=row["unit"],
            effective_from=_as_date(row.get("effective_from")),
            effective_to=_as_date(row.get("effective_to")),
        )
        session.add(RateCardEntryModel(
            customer_code=entry.customer_id,
            service_type=entry.service_type.value,
            charge_type=entry.charge_type,
            rate=entry.rate,
            currency=entry.currency,
            unit=entry.unit.value,
            effective_from=entry.effective_from,
            effective_to=entry.effective_to,
        ))

    for row in data.get("usage", []):
        record = UsageRecord(
            customer_id=str(row["customer_id"]),
            service_type=row["service_type"],
            charge_type=row["charge_type"],
            quantity=str(row["quantity"]),
            occurred_at=_as_datetime(row["occurred_at"]),
        )
        session.add(UsageRecordModel(
            customer_code=record.customer_id,
            service_type=record.service_type.value,
            charge_type=record.charge_type,
            quantity=record.quantity,
            occurred_at=record.occurred_at,
        ))
    session.flush()

    counts = {name: len(rows) for name, rows in data.items()}
    logger.info("seed_data_loaded", extra=counts)
    return counts


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Load customers, rate cards and usage from a YAML file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("file", type=Path, help="Seed YAML file.")
    parser.add_argument("--config", type=Path, default=None, help="Configuration YAML file.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop and recreate all tables before seeding.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = get_active_config(args.config)
    configure_logging(level=config.log_level)

    try:
        data = load_seed_file(args.file)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    init_engine_from_url(config.database_url)
    if args.reset:
        drop_tables()
    create_tables()

    try:
        with session_scope() as session:
            counts = seed(session, data)
    except (KeyError, ValueError, InvalidUsageError) as exc:
        print(f"  ERROR: invalid seed data: {exc}", file=sys.stderr)
        return 1

    print(
        f"  Seeded {counts['customers']} customers, "
        f"{counts['rate_cards']} rate-card entries, "
        f"{counts['usage']} usage records."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
