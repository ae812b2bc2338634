"""
Configuration Loader (``billing_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``BillingConfig`` dataclass. Runtime callers go through
``billing_config.get_active_config()``; this module is the parsing step.

Invariants enforced
-------------------
* Every value is type-checked; invalid values raise ``ConfigError`` naming
  the offending key. Missing optional sections fall back to the schema
  defaults.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  source mapping for configuration identity in run logs.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid value  -> ``ConfigError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from billing_config.schema import BillingConfig
from billing_kernel.domain.currency import CurrencyRegistry
from billing_kernel.exceptions import ConfigError

_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(str(path), "top-level YAML document must be a mapping")
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(name, "section must be a mapping")
    return section


def _positive_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(key, f"must be a positive integer, got {value!r}")
    return value


def parse_config(data: dict[str, Any]) -> BillingConfig:
    """
    Parse a ``BillingConfig`` from a configuration mapping.

    Raises:
        ConfigError: if any value is invalid.
    """
    defaults = BillingConfig()
    billing = _section(data, "billing")
    database = _section(data, "database")
    logging_section = _section(data, "logging")

    currency = billing.get("default_currency", defaults.default_currency)
    try:
        currency = CurrencyRegistry.validate(currency)
    except ValueError as e:
        raise ConfigError("billing.default_currency", str(e)) from e

    frequency = _positive_int(
        billing.get("calendar_month_frequency_days", defaults.calendar_month_frequency_days),
        "billing.calendar_month_frequency_days",
    )

    url = database.get("url", defaults.database_url)
    if not isinstance(url, str) or not url:
        raise ConfigError("database.url", "must be a non-empty string")

    level = str(logging_section.get("level", defaults.log_level)).upper()
    if level not in _LOG_LEVELS:
        raise ConfigError("logging.level", f"unknown level {level!r}")

    return BillingConfig(
        default_currency=currency,
        calendar_month_frequency_days=frequency,
        database_url=url,
        log_level=level,
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> BillingConfig:
    """Load and parse a YAML configuration file."""
    return parse_config(load_yaml_file(path))
