from __future__ import annotations

import enum
from types import MappingProxyType

from ..extensions import db
from ..validation import HasErrors
from invoicing.currency import to_dollars
from invoicing.time_utils import to_utc_z, utcnow


class PaymentMethod(enum.IntEnum):
    """
    Accepted payment methods and their stored codes.

    The set is closed: payments carry one of these three codes.
    """
    CASH = 1
    CHECK = 2
    CHARGE = 3

    @property
    def tag(self) -> str:
        return self.name.lower()

    @classmethod
    def from_token(cls, token) -> "PaymentMethod | None":
        """Case-insensitive lookup from a tag ('cash', 'CHECK', PaymentMethod.CHARGE)."""
        if isinstance(token, cls):
            return token
        if not isinstance(token, str):
            return None
        return cls.__members__.get(token.strip().upper())

    @classmethod
    def from_code(cls, code) -> "PaymentMethod | None":
        if isinstance(code, bool) or not isinstance(code, int):
            return None
        try:
            return cls(code)
        except ValueError:
            return None


# Read-only tag -> code table
PAYMENT_METHODS = MappingProxyType({m.tag: m.value for m in PaymentMethod})


class Invoice(HasErrors, db.Model):
    """
    Invoice with a fixed total and the payments applied against it.

    Totals and payment amounts are stored in cents. The balance is never
    stored; amount_owed() sums the live payment rows every time.
    """
    __tablename__ = "invoices"
    __table_args__ = (
        db.CheckConstraint("total > 0", name="ck_invoices_total_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Invoice total (in cents)
    total = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    payments = db.relationship(
        "Payment",
        back_populates="invoice",
        order_by="Payment.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy=True,
    )

    def amount_owed(self) -> float:
        from invoicing.services import invoice_service
        return invoice_service.amount_owed(self)

    def fully_paid(self) -> bool:
        from invoicing.services import invoice_service
        return invoice_service.fully_paid(self)

    def record_payment(self, amount, method):
        """Record a payment in dollars. Returns the Payment, or False (see self.errors)."""
        from invoicing.services import invoice_service
        return invoice_service.record_payment(self, amount, method)

    def to_dict(self, include_payments: bool = False) -> dict:
        from invoicing.services import invoice_service
        paid_cents = invoice_service.payments_total_cents(self.id)
        data = {
            "id": self.id,
            "total_cents": self.total,
            "total": to_dollars(self.total),
            "paid": to_dollars(paid_cents),
            "amount_owed": to_dollars(self.total - paid_cents),
            "fully_paid": self.total - paid_cents <= 0,
            "payment_count": len(self.payments),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_payments:
            data["payments"] = [p.to_dict() for p in self.payments]
        return data

    def __repr__(self) -> str:
        return f"<Invoice id={self.id} total={self.total}>"


class Payment(HasErrors, db.Model):
    """
    A single payment applied to one invoice.

    Immutable once created; removed only when its invoice is deleted.
    """
    __tablename__ = "payments"
    __table_args__ = (
        db.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(
        db.Integer,
        db.ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # PaymentMethod code (1=cash, 2=check, 3=charge)
    payment_method_id = db.Column(db.Integer, nullable=False)

    # Amount paid (in cents)
    amount = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    invoice = db.relationship("Invoice", back_populates="payments")

    @property
    def payment_method(self) -> str | None:
        method = PaymentMethod.from_code(self.payment_method_id)
        return method.tag if method else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_id": self.invoice_id,
            "payment_method_id": self.payment_method_id,
            "payment_method": self.payment_method,
            "amount_cents": self.amount,
            "amount": to_dollars(self.amount),
            "created_at": to_utc_z(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Payment id={self.id} invoice_id={self.invoice_id} amount={self.amount} method={self.payment_method}>"
