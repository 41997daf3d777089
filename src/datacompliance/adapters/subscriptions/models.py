"""Subscription store models.

Credit notes reference invoices and invoices reference subscriptions.
The foreign keys do not cascade: a parent row can only be deleted once
nothing references it.

Pseudonymized rows are detached from their owner: user_id becomes NULL.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from datacompliance.db.models.base import Base, JSONDocument


class PayState:
    """Payment states of a subscription."""

    FAILED = "N"
    PENDING = "P"
    COMPLETED = "C"
    CANCELLED = "X"


class Subscription(Base):
    """One purchase of a subscription level by a user."""

    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    level: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    paystate: Mapped[str] = mapped_column(String(1), nullable=False, default=PayState.PENDING)

    # Payment processor details
    processor: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    processor_key: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    payment_token: Mapped[str | None] = mapped_column(String(255), nullable=True)

    net_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)

    # Purchase context
    ip: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    ua: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_on: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_subscriptions_user", "user_id"),
        Index("idx_subscriptions_paystate_created", "paystate", "created_on"),
    )

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, paystate={self.paystate})>"


class Invoice(Base):
    """Invoice issued for a subscription."""

    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subscription_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("subscriptions.id"), nullable=False, unique=True
    )
    display_number: Mapped[str] = mapped_column(String(64), nullable=False)
    invoice_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    gross_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    html: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Invoice(id={self.id}, number={self.display_number})>"


class CreditNote(Base):
    """Credit note cancelling an invoice."""

    __tablename__ = "credit_notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invoice_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("invoices.id"), nullable=False, unique=True
    )
    display_number: Mapped[str] = mapped_column(String(64), nullable=False)
    credit_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    html: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<CreditNote(id={self.id}, number={self.display_number})>"


class SubscriptionUser(Base):
    """Invoicing profile of a user."""

    __tablename__ = "subscription_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True, unique=True)

    isbusiness: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    businessname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    occupation: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    vatnumber: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    viesregistered: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    taxauthority: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    address1: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    address2: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    city: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    state: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    zip: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    country: Mapped[str] = mapped_column(String(8), nullable=False, default="")

    params: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    needs_logout: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<SubscriptionUser(id={self.id})>"
