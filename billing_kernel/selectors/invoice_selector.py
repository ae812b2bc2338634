"""
Module: billing_kernel.selectors.invoice_selector
Responsibility: Read back invoices stored by InvoiceWriter as Invoice DTOs.
Architecture position: Kernel > Selectors.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from billing_kernel.domain.dtos import (
    BillingPeriod,
    CustomerType,
    Invoice,
    InvoiceLine,
    ServiceType,
    UnitOfMeasure,
)
from billing_kernel.domain.values import Money
from billing_kernel.models.invoice import InvoiceModel
from billing_kernel.selectors.base import BaseSelector


class InvoiceSelector(BaseSelector[InvoiceModel]):
    """Selector for stored invoices."""

    @staticmethod
    def _to_dto(model: InvoiceModel) -> Invoice:
        lines = tuple(
            InvoiceLine(
                service_type=ServiceType.parse(line.service_type),
                charge_type=line.charge_type,
                quantity=line.quantity,
                unit=UnitOfMeasure(line.unit),
                unit_rate=line.unit_rate,
                currency=line.currency,
                amount=Money.of(line.amount, line.currency).quantize(),
            )
            for line in model.lines
        )
        return Invoice(
            customer_id=model.customer_code,
            customer_name=model.customer_name,
            customer_type=CustomerType(model.customer_type),
            period=BillingPeriod(
                customer_id=model.customer_code,
                start_date=model.start_date,
                end_date=model.end_date,
                frequency_days=model.frequency_days,
            ),
            lines=lines,
            total_amount=Money.of(model.total_amount, model.currency).quantize(),
            currency=model.currency,
        )

    def get_invoice(
        self,
        customer_id: str,
        start_date: date,
        end_date: date,
    ) -> Invoice | None:
        """The stored invoice for a customer and period, if any."""
        model = self.session.execute(
            select(InvoiceModel)
            .options(selectinload(InvoiceModel.lines))
            .where(InvoiceModel.customer_code == customer_id)
            .where(InvoiceModel.start_date == start_date)
            .where(InvoiceModel.end_date == end_date)
        ).scalar_one_or_none()
        if model is None:
            return None
        return self._to_dto(model)

    def exists(self, customer_id: str, start_date: date, end_date: date) -> bool:
        found = self.session.execute(
            select(InvoiceModel.id)
            .where(InvoiceModel.customer_code == customer_id)
            .where(InvoiceModel.start_date == start_date)
            .where(InvoiceModel.end_date == end_date)
        ).first()
        return found is not None
