"""
InvoiceWriter -- invoice sink backed by the invoices tables.

Responsibility:
    Persists an assembled ``Invoice`` DTO as one ``InvoiceModel`` row and
    one ``InvoiceLineModel`` row per line, preserving line order.

Architecture position:
    Kernel > Services -- imperative shell.  Used by the billing run as its
    ``InvoiceSink`` when invoices are persisted.

Invariants enforced:
    - At most one invoice per (customer, start_date, end_date).  A second
      write raises ``InvoiceAlreadyExistsError``; the unique constraint on
      ``invoices`` catches concurrent writers.
    - Amounts are written exactly as assembled; nothing is re-rounded.
    - ``generated_at`` comes from the injected ``Clock``.
    - Flush-only: the caller owns the transaction.

Failure modes:
    - ``InvoiceAlreadyExistsError`` -- invoice for the period already stored.
"""

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.domain.dtos import Invoice
from billing_kernel.exceptions import InvoiceAlreadyExistsError
from billing_kernel.logging_config import get_logger
from billing_kernel.models.invoice import InvoiceLineModel, InvoiceModel
from billing_kernel.selectors.invoice_selector import InvoiceSelector
from billing_kernel.services.base import BaseService

logger = get_logger("services.invoice_writer")


class InvoiceWriter(BaseService[InvoiceModel]):
    """
    Writes assembled invoices.

    Contract:
        ``write_invoice(invoice)`` stores the invoice and flushes.  It never
        commits, so a failure later in the caller's transaction discards the
        invoice too.  After InvoiceAlreadyExistsError the caller must roll
        back its session.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._invoices = InvoiceSelector(session)

    def write_invoice(self, invoice: Invoice) -> UUID:
        """
        Persist ``invoice`` and return the id of the stored row.

        Raises:
            InvoiceAlreadyExistsError: An invoice for the same customer and
                period is already stored.
        """
        period = invoice.period
        if self._invoices.exists(invoice.customer_id, period.start_date, period.end_date):
            self._reject_duplicate(invoice)

        model = InvoiceModel(
            customer_code=invoice.customer_id,
            customer_name=invoice.customer_name,
            customer_type=invoice.customer_type.value,
            start_date=period.start_date,
            end_date=period.end_date,
            frequency_days=period.frequency_days,
            currency=invoice.currency,
            total_amount=invoice.total_amount.amount,
            generated_at=self._clock.now(),
        )
        model.lines = [
            InvoiceLineModel(
                line_seq=seq,
                service_type=line.service_type.value,
                charge_type=line.charge_type,
                quantity=line.quantity,
                unit=line.unit.value,
                unit_rate=line.unit_rate,
                currency=line.currency,
                amount=line.amount.amount,
            )
            for seq, line in enumerate(invoice.lines, start=1)
        ]

        self.session.add(model)
        try:
            self.session.flush()
        except IntegrityError as exc:
            # Another writer stored the same period between the check and the
            # flush.  The session must be rolled back by its owner.
            logger.warning(
                "concurrent_insert_conflict",
                extra={"customer_id": invoice.customer_id},
            )
            raise InvoiceAlreadyExistsError(
                invoice.customer_id, period.start_date, period.end_date
            ) from exc

        logger.info(
            "invoice_persisted",
            extra={
                "invoice_id": str(model.id),
                "customer_id": invoice.customer_id,
                "start_date": period.start_date.isoformat(),
                "end_date": period.end_date.isoformat(),
                "line_count": len(invoice.lines),
                "total_amount": str(invoice.total_amount.amount),
                "currency": invoice.currency,
            },
        )
        return model.id

    @staticmethod
    def _reject_duplicate(invoice: Invoice) -> None:
        period = invoice.period
        logger.warning(
            "invoice_already_exists",
            extra={
                "customer_id": invoice.customer_id,
                "start_date": period.start_date.isoformat(),
                "end_date": period.end_date.isoformat(),
            },
        )
        raise InvoiceAlreadyExistsError(
            invoice.customer_id, period.start_date, period.end_date
        )
