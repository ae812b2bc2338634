"""
Module: billing_kernel.models.usage
Responsibility: ORM persistence for the usage ledger.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - quantity is Numeric(38, 9); never float.
    - Rows are append-only from the billing engine's point of view; the
      engine only reads them through UsageSelector.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import TrackedBase


class UsageRecordModel(TrackedBase):
    """A timestamped, quantified billable activity."""

    __tablename__ = "usage_records"

    __table_args__ = (
        Index("idx_usage_customer_time", "customer_code", "occurred_at"),
    )

    customer_code: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("customers.customer_code"),
        nullable=False,
    )

    service_type: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
    )

    charge_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    quantity: Mapped[Decimal] = mapped_column(
        Numeric(38, 9),
        nullable=False,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<UsageRecordModel {self.customer_code} "
            f"{self.service_type}/{self.charge_type}: {self.quantity} @ {self.occurred_at}>"
        )
