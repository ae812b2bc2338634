"""
Module: billing_kernel.selectors.rate_card_selector
Responsibility: Rate card lookups backed by the rate_card_entries table.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Entries are returned in a deterministic order (service type, charge
      type, effective_from) so recurring charges appear on the invoice in
      the same order on every run.
    - Every entry on the card is returned; filtering by effective date and
      duplicate detection belong to the rate card index.
"""

from sqlalchemy import select

from billing_kernel.domain.dtos import RateCardEntry, ServiceType, UnitOfMeasure
from billing_kernel.models.rate_card import RateCardEntryModel
from billing_kernel.selectors.base import BaseSelector


class RateCardSelector(BaseSelector[RateCardEntryModel]):
    """Selector for rate card queries."""

    @staticmethod
    def _to_dto(model: RateCardEntryModel) -> RateCardEntry:
        return RateCardEntry(
            id=str(model.id),
            customer_id=model.customer_code,
            service_type=ServiceType.parse(model.service_type),
            charge_type=model.charge_type,
            rate=model.rate,
            currency=model.currency,
            unit=UnitOfMeasure(model.unit),
            effective_from=model.effective_from,
            effective_to=model.effective_to,
        )

    def get_rate_card(self, customer_id: str) -> tuple[RateCardEntry, ...]:
        """All rate-card entries for a customer (empty when none)."""
        models = self.session.execute(
            select(RateCardEntryModel)
            .where(RateCardEntryModel.customer_code == customer_id)
            .order_by(
                RateCardEntryModel.service_type,
                RateCardEntryModel.charge_type,
                RateCardEntryModel.effective_from,
            )
        ).scalars()
        return tuple(self._to_dto(m) for m in models)
