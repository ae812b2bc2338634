"""
Invoice export formats.

Contract:
    invoice_to_dict() renders an Invoice as plain JSON-ready data: the period
    as two ISO dates, lines grouped by service label in invoice order, each
    amount both formatted ("AED 5,028.00") and as a raw Decimal string.
    write_invoice_xlsx() writes the same grouping to a workbook: a header
    block, one table section per service with a subtotal, and a grand total.

Architecture: billing_services.  File I/O only; no database access.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

from billing_kernel.domain.dtos import Invoice, InvoiceLine
from billing_kernel.logging_config import get_logger

logger = get_logger("services.invoice_export")

LINE_COLUMNS = ("Service", "Charge Type", "Quantity", "Unit", "Rate", "Amount")

_AMOUNT_FORMAT = "#,##0.00"
_QUANTITY_FORMAT = "#,##0.###"


def _line_to_dict(line: InvoiceLine) -> dict[str, Any]:
    return {
        "service_type": line.service_type.value,
        "charge_type": line.charge_type,
        "quantity": str(line.quantity),
        "unit": line.unit.value,
        "unit_rate": str(line.unit_rate),
        "amount": str(line.amount.amount),
        "amount_formatted": line.amount.formatted(),
    }


def invoice_to_dict(invoice: Invoice) -> dict[str, Any]:
    """Render an invoice as a JSON-serializable dict."""
    subtotals = invoice.subtotals_by_service()
    services = []
    for service_type, subtotal in subtotals.items():
        services.append({
            "service_type": service_type.value,
            "label": service_type.label,
            "lines": [_line_to_dict(line) for line in invoice.lines_for(service_type)],
            "subtotal": str(subtotal.amount),
            "subtotal_formatted": subtotal.formatted(),
        })

    return {
        "customer_id": invoice.customer_id,
        "customer_name": invoice.customer_name,
        "customer_type": invoice.customer_type.value,
        "period": {
            "start_date": invoice.period.start_date.isoformat(),
            "end_date": invoice.period.end_date.isoformat(),
            "frequency_days": invoice.period.frequency_days,
        },
        "currency": invoice.currency,
        "services": services,
        "total_amount": str(invoice.total_amount.amount),
        "total_formatted": invoice.total_amount.formatted(),
    }


def write_invoice_xlsx(invoice: Invoice, path: Path | str) -> Path:
    """
    Write ``invoice`` to an xlsx workbook at ``path``.

    Returns:
        The path written.
    """
    path = Path(path)
    bold = Font(bold=True)

    wb = Workbook()
    ws = wb.active
    ws.title = "Invoice"

    header = (
        ("Customer", f"{invoice.customer_name} ({invoice.customer_id})"),
        ("Customer Type", invoice.customer_type.value),
        ("Billing Period", f"{invoice.period.start_date.isoformat()} to {invoice.period.end_date.isoformat()}"),
        ("Currency", invoice.currency),
    )
    for label, value in header:
        ws.append([label, value])
        ws.cell(row=ws.max_row, column=1).font = bold
    ws.append([])

    ws.append(list(LINE_COLUMNS))
    for cell in ws[ws.max_row]:
        cell.font = bold

    for service_type, subtotal in invoice.subtotals_by_service().items():
        for line in invoice.lines_for(service_type):
            ws.append([
                service_type.label,
                line.charge_type,
                line.quantity,
                line.unit.value,
                line.unit_rate,
                line.amount.amount,
            ])
            row = ws.max_row
            ws.cell(row=row, column=3).number_format = _QUANTITY_FORMAT
            ws.cell(row=row, column=5).number_format = _QUANTITY_FORMAT
            ws.cell(row=row, column=6).number_format = _AMOUNT_FORMAT

        ws.append([f"{service_type.label} Subtotal", None, None, None, None, subtotal.amount])
        row = ws.max_row
        ws.cell(row=row, column=1).font = bold
        ws.cell(row=row, column=6).font = bold
        ws.cell(row=row, column=6).number_format = _AMOUNT_FORMAT

    ws.append([])
    ws.append(["Total", None, None, None, invoice.currency, invoice.total_amount.amount])
    row = ws.max_row
    for col in (1, 5, 6):
        ws.cell(row=row, column=col).font = bold
    ws.cell(row=row, column=6).number_format = _AMOUNT_FORMAT
    ws.cell(row=row, column=5).alignment = Alignment(horizontal="right")

    for letter, width in zip("ABCDEF", (26, 28, 12, 8, 12, 16)):
        ws.column_dimensions[letter].width = width

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)

    logger.info(
        "invoice_exported",
        extra={
            "customer_id": invoice.customer_id,
            "path": str(path),
            "format": "xlsx",
            "line_count": len(invoice.lines),
            "total_amount": str(invoice.total_amount.amount),
        },
    )
    return path
