"""
billing_config -- single public entrypoint for billing configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``. Services and scripts receive the returned
    ``BillingConfig``; they never read YAML files or environment variables
    themselves.

Architecture position:
    Configuration -- sits above ``billing_kernel`` and below
    ``billing_services`` / ``scripts``. The kernel and the engines MUST
    NEVER import from ``billing_config``.

Resolution order:
    1. Explicit ``path`` argument
    2. ``$WAREHOUSE_BILLING_CONFIG``
    3. Packaged ``sets/default.yaml``
    ``$WAREHOUSE_BILLING_DATABASE_URL`` overrides ``database.url``.

Failure modes:
    - ``FileNotFoundError`` -- the selected file does not exist.
    - ``ConfigError`` -- a value failed validation.

Audit relevance:
    Every successful call emits a ``BILLING_CONFIG_TRACE`` log entry with
    the source path and checksum, tying each billing run to the exact
    configuration that governed it.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path

from billing_config.loader import compute_checksum, load_config, parse_config
from billing_config.schema import BillingConfig

_logger = logging.getLogger("billing_kernel.config")

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"

CONFIG_PATH_ENV = "WAREHOUSE_BILLING_CONFIG"
DATABASE_URL_ENV = "WAREHOUSE_BILLING_DATABASE_URL"


def get_active_config(path: Path | str | None = None) -> BillingConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Explicit configuration file; overrides the environment.

    Returns:
        Frozen BillingConfig.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ConfigError: If a configuration value is invalid.
    """
    if path is not None:
        source = Path(path)
    elif os.environ.get(CONFIG_PATH_ENV):
        source = Path(os.environ[CONFIG_PATH_ENV])
    else:
        source = _DEFAULT_CONFIG_PATH

    config = load_config(source)

    override_url = os.environ.get(DATABASE_URL_ENV)
    if override_url:
        config = dataclasses.replace(config, database_url=override_url)

    _logger.info(
        "BILLING_CONFIG_TRACE",
        extra={
            "trace_type": "BILLING_CONFIG_TRACE",
            "config_path": str(source),
            "checksum": config.checksum,
            "default_currency": config.default_currency,
            "calendar_month_frequency_days": config.calendar_month_frequency_days,
            "database_url_overridden": bool(override_url),
        },
    )
    return config


__all__ = [
    "BillingConfig",
    "compute_checksum",
    "get_active_config",
    "load_config",
    "parse_config",
]
