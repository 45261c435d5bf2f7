# Overview: Service-layer operations for payments; method normalization, validation, and direct creation.

"""
Payment Service

Payments are built through one explicit pipeline:

    normalize method token -> validate fields -> persist

build_payment() never touches the session, so an invalid payment is never
partially persisted. create_payment() is the direct creation path and does
NOT apply the overpayment guard; invoice_service.record_payment() is the
guarded path used for taking payments.
"""

from __future__ import annotations

import logging

from ..extensions import db
from ..models import Invoice, Payment, PaymentMethod
from ..validation import Errors, ValidationError

logger = logging.getLogger(__name__)


MSG_BLANK = "can't be blank"
MSG_NOT_INTEGER = "must be an integer"
MSG_NOT_POSITIVE = "must be greater than 0"
MSG_INVALID_METHOD_ID = "must be valid"
MSG_INVALID_METHOD = "must be cash, check, or charge"
MSG_INVOICE_MISSING = "must exist"


def normalize_method(raw) -> PaymentMethod | None:
    """Map a raw method token (symbolic or textual, any case) to a PaymentMethod."""
    return PaymentMethod.from_token(raw)


def build_payment(
    invoice: Invoice | None,
    amount,
    *,
    method=None,
    payment_method_id=None,
) -> Payment:
    """
    Build (but do not persist) a payment and validate it.

    Args:
        invoice: Owning invoice (must already be persisted)
        amount: Amount in cents (positive integer)
        method: Raw method token ('cash', 'CHECK', PaymentMethod.CHARGE);
            when given it decides payment_method_id
        payment_method_id: Numeric method code, used when method is omitted

    Returns:
        Payment with .errors populated when invalid
    """
    errors = Errors()

    if invoice is None or invoice.id is None:
        errors.add("invoice", MSG_INVOICE_MISSING)

    if method is not None:
        normalized = normalize_method(method)
        if normalized is None:
            errors.add("raw_payment_method", MSG_INVALID_METHOD)
        payment_method_id = normalized.value if normalized else None

    if PaymentMethod.from_code(payment_method_id) is None:
        errors.add("payment_method_id", MSG_INVALID_METHOD_ID)

    if amount is None:
        errors.add("amount", MSG_BLANK)
    elif isinstance(amount, bool) or not isinstance(amount, int):
        errors.add("amount", MSG_NOT_INTEGER)
    elif amount <= 0:
        errors.add("amount", MSG_NOT_POSITIVE)

    payment = Payment(
        invoice_id=invoice.id if invoice is not None else None,
        amount=amount,
        payment_method_id=payment_method_id,
    )
    payment.errors.update(errors)
    return payment


def create_payment(
    invoice: Invoice,
    amount,
    *,
    method=None,
    payment_method_id=None,
    commit: bool = True,
) -> Payment:
    """
    Validate and persist a payment against an invoice.

    Raises:
        ValidationError: If any field is invalid (nothing is persisted)
    """
    payment = build_payment(invoice, amount, method=method, payment_method_id=payment_method_id)
    if payment.errors:
        raise ValidationError(payment.errors, record=payment)

    db.session.add(payment)
    if commit:
        db.session.commit()
    else:
        db.session.flush()

    logger.info(
        "Payment created",
        extra={"invoice_id": payment.invoice_id, "payment_id": payment.id, "amount_cents": payment.amount},
    )
    return payment


def get_invoice_payments(invoice_id: int) -> list[Payment]:
    """All payments for an invoice, in creation order."""
    return (
        db.session.query(Payment)
        .filter_by(invoice_id=invoice_id)
        .order_by(Payment.id)
        .all()
    )
