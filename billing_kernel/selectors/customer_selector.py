"""
Module: billing_kernel.selectors.customer_selector
Responsibility: Customer registry lookups backed by the customers table.
Architecture position: Kernel > Selectors.

Failure modes:
    - Returns None when the customer does not exist (the billing run turns
      that into CustomerNotFoundError).
"""

from sqlalchemy import select

from billing_kernel.domain.dtos import Customer, CustomerStatus, CustomerType
from billing_kernel.models.customer import CustomerModel
from billing_kernel.selectors.base import BaseSelector


class CustomerSelector(BaseSelector[CustomerModel]):
    """Selector for customer queries."""

    @staticmethod
    def _to_dto(model: CustomerModel) -> Customer:
        return Customer(
            id=model.customer_code,
            name=model.name,
            type=CustomerType(model.customer_type),
            billing_frequency_days=model.billing_frequency_days,
            status=CustomerStatus(model.status),
        )

    def get_customer(self, customer_id: str) -> Customer | None:
        """Get a customer by business identifier."""
        model = self.session.execute(
            select(CustomerModel).where(CustomerModel.customer_code == customer_id)
        ).scalar_one_or_none()
        if model is None:
            return None
        return self._to_dto(model)

    def list_active(self) -> list[Customer]:
        """All Active customers, ordered by identifier."""
        models = self.session.execute(
            select(CustomerModel)
            .where(CustomerModel.status == CustomerStatus.ACTIVE.value)
            .order_by(CustomerModel.customer_code)
        ).scalars()
        return [self._to_dto(m) for m in models]
