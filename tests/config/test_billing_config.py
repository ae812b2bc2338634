"""Tests for configuration loading (billing_config)."""

import textwrap

import pytest
import yaml

from billing_config import get_active_config
from billing_config.loader import compute_checksum, load_config, parse_config
from billing_config.schema import DEFAULT_DATABASE_URL, BillingConfig
from billing_kernel.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _no_env_overrides(monkeypatch):
    monkeypatch.delenv("WAREHOUSE_BILLING_CONFIG", raising=False)
    monkeypatch.delenv("WAREHOUSE_BILLING_DATABASE_URL", raising=False)


def _write(tmp_path, text, name="billing.yaml"):
    path = tmp_path / name
    path.write_text(textwrap.dedent(text))
    return path


class TestParseConfig:

    def test_empty_mapping_gives_defaults(self):
        config = parse_config({})
        assert config.default_currency == "AED"
        assert config.calendar_month_frequency_days == 30
        assert config.database_url == DEFAULT_DATABASE_URL
        assert config.log_level == "INFO"
        assert config.checksum

    def test_values_normalized(self):
        config = parse_config({
            "billing": {"default_currency": "sar"},
            "logging": {"level": "debug"},
        })
        assert config.default_currency == "SAR"
        assert config.log_level == "DEBUG"

    @pytest.mark.parametrize(
        "data, key",
        [
            ({"billing": {"default_currency": "XYZ"}}, "billing.default_currency"),
            ({"billing": {"calendar_month_frequency_days": 0}}, "billing.calendar_month_frequency_days"),
            ({"billing": {"calendar_month_frequency_days": "30"}}, "billing.calendar_month_frequency_days"),
            ({"billing": {"calendar_month_frequency_days": True}}, "billing.calendar_month_frequency_days"),
            ({"database": {"url": ""}}, "database.url"),
            ({"logging": {"level": "LOUD"}}, "logging.level"),
            ({"billing": ["not", "a", "mapping"]}, "billing"),
        ],
    )
    def test_invalid_values(self, data, key):
        with pytest.raises(ConfigError) as exc_info:
            parse_config(data)
        assert exc_info.value.code == "CONFIG_ERROR"
        assert exc_info.value.key == key

    def test_checksum_deterministic(self):
        a = {"billing": {"default_currency": "AED"}, "logging": {"level": "INFO"}}
        b = {"logging": {"level": "INFO"}, "billing": {"default_currency": "AED"}}
        assert compute_checksum(a) == compute_checksum(b)
        assert compute_checksum(a) != compute_checksum({})


class TestLoadConfig:

    def test_load_file(self, tmp_path):
        path = _write(tmp_path, """
            billing:
              default_currency: QAR
              calendar_month_frequency_days: 31
            database:
              url: "sqlite:///:memory:"
        """)
        config = load_config(path)
        assert config == BillingConfig(
            default_currency="QAR",
            calendar_month_frequency_days=31,
            database_url="sqlite:///:memory:",
            log_level="INFO",
            checksum=config.checksum,
        )

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_non_mapping_document(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(_write(tmp_path, "- just\n- a list\n"))

    def test_malformed_yaml(self, tmp_path):
        with pytest.raises(yaml.YAMLError):
            load_config(_write(tmp_path, "billing: [unclosed\n"))


class TestGetActiveConfig:

    def test_packaged_default(self):
        config = get_active_config()
        assert config.default_currency == "AED"
        assert config.calendar_month_frequency_days == 30

    def test_explicit_path(self, tmp_path):
        path = _write(tmp_path, "billing:\n  default_currency: USD\n")
        assert get_active_config(path).default_currency == "USD"

    def test_env_path(self, tmp_path, monkeypatch):
        path = _write(tmp_path, "billing:\n  default_currency: EUR\n")
        monkeypatch.setenv("WAREHOUSE_BILLING_CONFIG", str(path))
        assert get_active_config().default_currency == "EUR"

    def test_env_database_url_override(self, monkeypatch):
        monkeypatch.setenv("WAREHOUSE_BILLING_DATABASE_URL", "postgresql://billing@db/billing")
        assert get_active_config().database_url == "postgresql://billing@db/billing"

    def test_trace_logged(self, captured_logs):
        config = get_active_config()
        traces = [r for r in captured_logs() if r["message"] == "BILLING_CONFIG_TRACE"]
        assert traces[-1]["checksum"] == config.checksum
        assert traces[-1]["database_url_overridden"] is False
