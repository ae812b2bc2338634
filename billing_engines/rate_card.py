"""
Rate Card Index.

Pure in-memory lookup over rate-card entries, keyed by
(customer_id, service_type, charge_type). Built once per billing run.

Absence of a rate is not an error at this layer: ``lookup`` returns None
and the charge calculator decides what that means. Two active entries for
the same key, on the other hand, make every lookup ambiguous and are
rejected at build time.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from billing_engines.tracer import traced_engine
from billing_kernel.domain.dtos import RateCardEntry, ServiceType
from billing_kernel.exceptions import DuplicateRateError
from billing_kernel.logging_config import get_logger

logger = get_logger("engines.rate_card")

RateKey = tuple[str, ServiceType, str]


class RateCardIndex:
    """Mapping of rate key -> unique active RateCardEntry (insertion-ordered)."""

    def __init__(self, entries: dict[RateKey, RateCardEntry], as_of: date | None = None):
        self._entries = entries
        self.as_of = as_of

    def get(
        self,
        customer_id: str,
        service_type: ServiceType | str,
        charge_type: str,
    ) -> RateCardEntry | None:
        return self._entries.get((customer_id, ServiceType.parse(service_type), charge_type))

    def recurring_entries(self, customer_id: str) -> tuple[RateCardEntry, ...]:
        """Per-period entries for a customer, in rate-card order."""
        return tuple(
            entry
            for entry in self._entries.values()
            if entry.customer_id == customer_id and entry.is_per_period
        )

    def entries(self) -> tuple[RateCardEntry, ...]:
        return tuple(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


@traced_engine("rate_card_index", "1.0", fingerprint_fields=("as_of",))
def build_index(entries: Iterable[RateCardEntry], as_of: date | None = None) -> RateCardIndex:
    """
    Build a rate-card index.

    Args:
        entries: Rate-card entries, typically one customer's card
        as_of: When given, only entries active on this date are indexed

    Returns:
        RateCardIndex

    Raises:
        DuplicateRateError: If two indexed entries share a rate key
    """
    indexed: dict[RateKey, RateCardEntry] = {}
    skipped = 0
    for entry in entries:
        if as_of is not None and not entry.is_active_on(as_of):
            skipped += 1
            continue
        existing = indexed.get(entry.key)
        if existing is not None:
            logger.error("rate_card_duplicate_key", extra={
                "customer_id": entry.customer_id,
                "service_type": entry.service_type.value,
                "charge_type": entry.charge_type,
                "first_entry_id": existing.id,
                "second_entry_id": entry.id,
            })
            raise DuplicateRateError(
                entry.customer_id,
                entry.service_type.value,
                entry.charge_type,
                existing.id,
                entry.id,
            )
        indexed[entry.key] = entry

    logger.debug("rate_card_index_built", extra={
        "entry_count": len(indexed),
        "inactive_skipped": skipped,
        "as_of": as_of.isoformat() if as_of else None,
    })
    return RateCardIndex(indexed, as_of=as_of)


def lookup(
    index: RateCardIndex,
    customer_id: str,
    service_type: ServiceType | str,
    charge_type: str,
) -> RateCardEntry | None:
    """Find the applicable entry, or None when the card has no such rate."""
    return index.get(customer_id, service_type, charge_type)
