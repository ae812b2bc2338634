"""
Module: billing_kernel.models.invoice
Responsibility: ORM persistence for assembled invoices and their lines.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One invoice per (customer, start_date, end_date)
      (uq_invoice_customer_period).  InvoiceWriter checks first and raises
      InvoiceAlreadyExistsError; the constraint backs it up under races.
    - Lines are stored with line_seq so the invoice reads back in the order
      it was assembled.
    - total_amount equals the exact sum of line amounts (written together
      by InvoiceWriter, never recomputed).

Audit relevance:
    generated_at comes from the injected clock, never datetime.now(), so
    stored invoices are reproducible in tests.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import BigInteger, Date, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import TrackedBase, UUIDString


class InvoiceModel(TrackedBase):
    """A persisted invoice header."""

    __tablename__ = "invoices"

    __table_args__ = (
        UniqueConstraint(
            "customer_code",
            "start_date",
            "end_date",
            name="uq_invoice_customer_period",
        ),
    )

    customer_code: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("customers.customer_code"),
        nullable=False,
    )

    # Snapshot of the customer at the time of the run
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_type: Mapped[str] = mapped_column(String(20), nullable=False)

    # Billing period (inclusive)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    frequency_days: Mapped[int] = mapped_column(BigInteger, nullable=False)

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(38, 9),
        nullable=False,
    )

    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    lines: Mapped[list["InvoiceLineModel"]] = relationship(
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineModel.line_seq",
    )

    def __repr__(self) -> str:
        return (
            f"<InvoiceModel {self.customer_code} {self.start_date}..{self.end_date}: "
            f"{self.total_amount} {self.currency}>"
        )


class InvoiceLineModel(TrackedBase):
    """One priced line of a persisted invoice."""

    __tablename__ = "invoice_lines"

    invoice_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("invoices.id"),
        nullable=False,
    )

    line_seq: Mapped[int] = mapped_column(BigInteger, nullable=False)

    service_type: Mapped[str] = mapped_column(String(40), nullable=False)
    charge_type: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    unit: Mapped[str] = mapped_column(String(8), nullable=False)
    unit_rate: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(38, 9), nullable=False)

    invoice: Mapped[InvoiceModel] = relationship(back_populates="lines")

    def __repr__(self) -> str:
        return f"<InvoiceLineModel #{self.line_seq} {self.service_type}/{self.charge_type}: {self.amount}>"
