"""
Module: billing_kernel.selectors.usage_selector
Responsibility: Usage ledger lookups backed by the usage_records table.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - The window is inclusive by calendar day: a record belongs to
      [start_date, end_date] when occurred_at falls on or after start_date
      00:00 and before the day after end_date.
    - Records come back ordered by occurred_at.  The aggregator re-checks
      the window, so a wider result set never changes an invoice.
"""

from datetime import date, datetime, time, timedelta

from sqlalchemy import select

from billing_kernel.domain.dtos import ServiceType, UsageRecord
from billing_kernel.models.usage import UsageRecordModel
from billing_kernel.selectors.base import BaseSelector


class UsageSelector(BaseSelector[UsageRecordModel]):
    """Selector for usage ledger queries."""

    @staticmethod
    def _to_dto(model: UsageRecordModel) -> UsageRecord:
        return UsageRecord(
            customer_id=model.customer_code,
            service_type=ServiceType.parse(model.service_type),
            charge_type=model.charge_type,
            quantity=model.quantity,
            occurred_at=model.occurred_at,
        )

    def get_usage(
        self,
        customer_id: str,
        start_date: date,
        end_date: date,
    ) -> tuple[UsageRecord, ...]:
        """Usage records for a customer within an inclusive date window."""
        lower = datetime.combine(start_date, time.min)
        upper = datetime.combine(end_date + timedelta(days=1), time.min)
        models = self.session.execute(
            select(UsageRecordModel)
            .where(UsageRecordModel.customer_code == customer_id)
            .where(UsageRecordModel.occurred_at >= lower)
            .where(UsageRecordModel.occurred_at < upper)
            .order_by(UsageRecordModel.occurred_at, UsageRecordModel.id)
        ).scalars()
        return tuple(self._to_dto(m) for m in models)
