#!/usr/bin/env python3
"""
Run billing for one customer and billing period.

Reads customers, rate cards and usage from the configured database, prints
the invoice grouped by service, and optionally writes an xlsx export and
stores the invoice.

Usage:
    python -m scripts.run_billing --customer C2201 --start 2024-03-01
    python -m scripts.run_billing --customer C2201 --start 2024-03-01 --json
    python -m scripts.run_billing --customer C2201 --start 2024-03-01 \\
        --xlsx out/C2201-2024-03.xlsx --persist

Exit codes:
    0  invoice produced
    1  billing refused (error code printed to stderr)
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path

from billing_config import get_active_config
from billing_kernel.db.engine import create_tables, init_engine_from_url, session_scope
from billing_kernel.domain.dtos import Invoice
from billing_kernel.exceptions import BillingError
from billing_kernel.logging_config import configure_logging
from billing_kernel.selectors import CustomerSelector, RateCardSelector, UsageSelector
from billing_kernel.services import InvoiceWriter
from billing_services import BillingRunService, invoice_to_dict, write_invoice_xlsx


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Produce the invoice for a customer and billing period.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--customer", required=True, help="Customer identifier, e.g. C2201.")
    parser.add_argument(
        "--start",
        required=True,
        type=date.fromisoformat,
        help="Billing period start date (YYYY-MM-DD).",
    )
    parser.add_argument("--config", type=Path, default=None, help="Configuration YAML file.")
    parser.add_argument("--xlsx", type=Path, default=None, help="Write the invoice to this xlsx file.")
    parser.add_argument("--json", action="store_true", help="Print the invoice as JSON.")
    parser.add_argument("--persist", action="store_true", help="Store the invoice in the database.")
    return parser.parse_args(argv)


def format_invoice(invoice: Invoice) -> str:
    """Plain-text rendering of an invoice, grouped by service."""
    out = [
        "",
        f"  Invoice: {invoice.customer_name} ({invoice.customer_id}, {invoice.customer_type.value})",
        f"  Period:  {invoice.period.start_date.isoformat()} to {invoice.period.end_date.isoformat()}",
        "",
    ]
    for service_type, subtotal in invoice.subtotals_by_service().items():
        out.append(f"  {service_type.label}")
        for line in invoice.lines_for(service_type):
            out.append(
                f"    {line.charge_type:<28} {line.quantity:>10} {line.unit.value:<4}"
                f" @ {line.unit_rate:>10}  {line.amount.formatted():>18}"
            )
        out.append(f"    {'Subtotal':<60}{subtotal.formatted():>18}")
        out.append("")
    out.append(f"  {'TOTAL':<62}{invoice.total_amount.formatted():>18}")
    return "\n".join(out)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    config = get_active_config(args.config)
    configure_logging(level=config.log_level)

    init_engine_from_url(config.database_url)
    create_tables()

    try:
        with session_scope() as session:
            service = BillingRunService(
                customers=CustomerSelector(session),
                rate_cards=RateCardSelector(session),
                usage=UsageSelector(session),
                config=config,
                sink=InvoiceWriter(session) if args.persist else None,
            )
            invoice = service.run(args.customer, args.start)
    except BillingError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(invoice_to_dict(invoice), indent=2))
    else:
        print(format_invoice(invoice))

    if args.xlsx is not None:
        path = write_invoice_xlsx(invoice, args.xlsx)
        print(f"  Wrote {path}", file=sys.stderr if args.json else sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
