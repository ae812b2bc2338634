"""End-to-end tests for the seed and billing-run command-line scripts."""

import json
from datetime import date
from pathlib import Path

import pytest
from openpyxl import load_workbook

from billing_kernel.db.engine import reset_engine, session_scope
from billing_kernel.selectors import InvoiceSelector
from scripts import run_billing, seed_data

SAMPLE_SEED = Path(__file__).resolve().parents[2] / "scripts" / "data" / "sample_seed.yaml"


@pytest.fixture
def database(tmp_path, monkeypatch):
    """A file-backed SQLite database selected through the environment."""
    url = f"sqlite:///{tmp_path / 'billing.db'}"
    monkeypatch.delenv("WAREHOUSE_BILLING_CONFIG", raising=False)
    monkeypatch.setenv("WAREHOUSE_BILLING_DATABASE_URL", url)
    yield url
    reset_engine()


@pytest.fixture
def seeded(database):
    assert seed_data.main([str(SAMPLE_SEED), "--reset"]) == 0
    return database


class TestSeedData:

    def test_load_seed_file(self):
        data = seed_data.load_seed_file(SAMPLE_SEED)
        assert {c["id"] for c in data["customers"]} == {"C2201", "C3105", "C9001"}
        assert len(data["rate_cards"]) == 7

    def test_seed_reports_counts(self, database, capsys):
        assert seed_data.main([str(SAMPLE_SEED)]) == 0
        assert "Seeded 3 customers, 7 rate-card entries, 6 usage records." in capsys.readouterr().out

    def test_invalid_seed_rejected(self, database, tmp_path, capsys):
        bad = tmp_path / "bad.yaml"
        bad.write_text(
            "customers:\n"
            "  - {id: C1, name: X, billing_frequency_days: 30}\n"
            "rate_cards:\n"
            "  - {customer_id: C1, service_type: Teleportation, charge_type: X,"
            " rate: '1', currency: AED, unit: EA}\n"
        )
        assert seed_data.main([str(bad)]) == 1
        assert "invalid seed data" in capsys.readouterr().err


class TestRunBilling:

    def test_text_invoice(self, seeded, capsys):
        assert run_billing.main(["--customer", "C2201", "--start", "2024-03-01"]) == 0
        out = capsys.readouterr().out
        assert "2024-03-01 to 2024-03-31" in out
        assert "Fixed Charge" in out
        assert "AED 5,028.00" in out

    def test_json_invoice(self, seeded, capsys):
        assert run_billing.main(["--customer", "C2201", "--start", "2024-03-01", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["total_amount"] == "5028.00"
        assert [s["service_type"] for s in data["services"]] == [
            "Storage", "OutboundHandling", "FixedCharge",
        ]

    def test_xlsx_and_persist(self, seeded, tmp_path, capsys):
        out_path = tmp_path / "C2201.xlsx"
        argv = ["--customer", "C2201", "--start", "2024-03-01", "--xlsx", str(out_path), "--persist"]
        assert run_billing.main(argv) == 0
        capsys.readouterr()

        assert load_workbook(out_path).active["A1"].value == "Customer"
        with session_scope() as session:
            stored = InvoiceSelector(session).get_invoice("C2201", date(2024, 3, 1), date(2024, 3, 31))
        assert stored is not None

        # A second persisted run for the same period is refused
        assert run_billing.main(argv) == 1
        assert "INVOICE_ALREADY_EXISTS" in capsys.readouterr().err

    def test_day_count_customer(self, seeded, capsys):
        assert run_billing.main(["--customer", "C3105", "--start", "2024-03-02", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["period"]["end_date"] == "2024-03-15"
        assert data["total_amount"] == "123.75"

    def test_inactive_customer(self, seeded, capsys):
        assert run_billing.main(["--customer", "C9001", "--start", "2024-03-01"]) == 1
        assert "CUSTOMER_INACTIVE" in capsys.readouterr().err

    def test_unknown_customer(self, seeded, capsys):
        assert run_billing.main(["--customer", "C0000", "--start", "2024-03-01"]) == 1
        assert "CUSTOMER_NOT_FOUND" in capsys.readouterr().err
