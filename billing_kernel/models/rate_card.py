"""
Module: billing_kernel.models.rate_card
Responsibility: ORM persistence for negotiated rate-card entries.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - rate is Numeric(38, 9); never float.
    - Uniqueness of (customer, service, charge type) among the entries active
      on a given day is NOT a database constraint because effective ranges
      may be superseded; it is checked by the rate card index at run time
      (DuplicateRateError).
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import TrackedBase


class RateCardEntryModel(TrackedBase):
    """One negotiated rate on a customer's rate card."""

    __tablename__ = "rate_card_entries"

    __table_args__ = (
        Index("idx_rate_card_customer", "customer_code"),
        Index("idx_rate_card_key", "customer_code", "service_type", "charge_type"),
    )

    customer_code: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("customers.customer_code"),
        nullable=False,
    )

    # ServiceType value, e.g. "InboundHandling"
    service_type: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
    )

    charge_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    rate: Mapped[Decimal] = mapped_column(
        Numeric(38, 9),
        nullable=False,
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
    )

    # UnitOfMeasure value, e.g. "PAL"
    unit: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
    )

    # Inclusive validity range; NULL means unbounded
    effective_from: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    effective_to: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<RateCardEntryModel {self.customer_code} "
            f"{self.service_type}/{self.charge_type}: {self.rate} {self.currency}/{self.unit}>"
        )
