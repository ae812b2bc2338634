"""
Module: billing_kernel.models.customer
Responsibility: ORM persistence for the customer registry.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - customer_code is unique (uq_customer_code).  It is the business
      identifier ("C2201") used by rate cards, usage and invoices.
    - billing_frequency_days is stored as given; positivity is checked by
      the period resolver when a run starts.

Audit relevance:
    status gates billing: an Inactive customer is refused by the billing run.
"""

from sqlalchemy import BigInteger, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import TrackedBase


class CustomerModel(TrackedBase):
    """A billable customer."""

    __tablename__ = "customers"

    __table_args__ = (
        UniqueConstraint("customer_code", name="uq_customer_code"),
    )

    customer_code: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    # Internal / External
    customer_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    billing_frequency_days: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    # Active / Inactive
    status: Mapped[str] = mapped_column(
        String(20),
        default="Active",
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<CustomerModel {self.customer_code}: {self.status}>"
