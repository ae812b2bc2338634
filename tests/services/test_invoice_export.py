"""Tests for invoice export (billing_services.invoice_export)."""

import json
from datetime import date
from decimal import Decimal

import pytest
from openpyxl import load_workbook

from billing_services.billing_run import BillingRunService
from billing_services.invoice_export import LINE_COLUMNS, invoice_to_dict, write_invoice_xlsx


@pytest.fixture
def invoice(c2201_registry):
    service = BillingRunService(c2201_registry, c2201_registry, c2201_registry)
    return service.run("C2201", date(2024, 3, 1))


class TestInvoiceToDict:

    def test_header(self, invoice):
        data = invoice_to_dict(invoice)
        assert data["customer_id"] == "C2201"
        assert data["customer_type"] == "External"
        assert data["period"] == {
            "start_date": "2024-03-01",
            "end_date": "2024-03-31",
            "frequency_days": 30,
        }
        assert data["currency"] == "AED"
        assert data["total_amount"] == "5028.00"
        assert data["total_formatted"] == "AED 5,028.00"

    def test_grouped_by_service(self, invoice):
        services = invoice_to_dict(invoice)["services"]
        assert [s["label"] for s in services] == ["Storage", "Outbound Handling", "Fixed Charge"]
        outbound = services[1]
        assert outbound["subtotal_formatted"] == "AED 8.00"
        assert outbound["lines"] == [{
            "service_type": "OutboundHandling",
            "charge_type": "Outbound Each",
            "quantity": "50",
            "unit": "EA",
            "unit_rate": "0.16",
            "amount": "8.00",
            "amount_formatted": "AED 8.00",
        }]

    def test_json_serializable(self, invoice):
        assert json.loads(json.dumps(invoice_to_dict(invoice)))["total_amount"] == "5028.00"

    def test_subtotals_add_up_to_total(self, invoice):
        services = invoice_to_dict(invoice)["services"]
        assert sum(Decimal(s["subtotal"]) for s in services) == Decimal("5028.00")


class TestWriteInvoiceXlsx:

    def test_workbook_contents(self, invoice, tmp_path):
        path = write_invoice_xlsx(invoice, tmp_path / "out" / "C2201-2024-03.xlsx")
        assert path.exists()

        ws = load_workbook(path).active
        rows = [tuple(c for c in row) for row in ws.iter_rows(values_only=True)]

        assert rows[0][:2] == ("Customer", "Gulf Retail LLC (C2201)")
        assert rows[2][:2] == ("Billing Period", "2024-03-01 to 2024-03-31")
        assert tuple(rows[5][:6]) == LINE_COLUMNS

        labels = [row[0] for row in rows if row and row[0]]
        assert "Storage Subtotal" in labels
        assert "Fixed Charge Subtotal" in labels

        total_row = rows[-1]
        assert total_row[0] == "Total"
        assert Decimal(str(total_row[5])) == Decimal("5028")

    def test_export_is_logged(self, invoice, tmp_path, captured_logs):
        write_invoice_xlsx(invoice, tmp_path / "inv.xlsx")
        exported = [r for r in captured_logs() if r["message"] == "invoice_exported"]
        assert exported[0]["format"] == "xlsx"
        assert exported[0]["line_count"] == 3
