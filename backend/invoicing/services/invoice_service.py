# Overview: Service-layer operations for invoices; balance queries and guarded payment recording.

"""
Invoice Service

Invoices own a total (cents) and the payments applied against it.

DESIGN PRINCIPLES:
- Totals pass through validate -> normalize -> persist, in that order
- The balance is derived, never stored: total - SUM(payments.amount)
- Payments are taken under a row lock on the invoice so concurrent
  callers against the same invoice are serialized
- A single payment may not exceed the remaining balance (overpayment guard)
- Business failures in record_payment() roll back and return False with
  messages on invoice.errors; infrastructure failures propagate
"""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Invoice, Payment
from ..validation import BASE, Errors, ValidationError
from ..currency import format_dollars, normalize_invoice_total, to_cents, to_decimal, to_dollars
from . import payment_service
from .concurrency import lock_for_update, run_with_retry

logger = logging.getLogger(__name__)


class InvoiceError(Exception):
    """Raised for invoice operation errors."""
    pass


class InvoiceNotFoundError(InvoiceError):
    pass


class InvalidAmountError(InvoiceError):
    """Payment amount is missing, not a number, or not positive."""
    pass


class OverpaymentError(InvoiceError):
    """Payment exceeds the remaining balance of the invoice."""
    pass


# =============================================================================
# INVOICE CREATION
# =============================================================================

def _validate_total(total) -> tuple[Errors, int | None]:
    """Validate a caller-supplied total and normalize it. Returns (errors, cents)."""
    errors = Errors()
    if total is None or (isinstance(total, str) and not total.strip()):
        errors.add("total", "can't be blank")
        return errors, None
    try:
        value = to_decimal(total)
    except ValueError:
        errors.add("total", "is not a number")
        return errors, None
    if value <= 0:
        errors.add("total", "must be greater than 0")
        return errors, None

    # Sub-cent totals (0.004) round to 0 cents
    cents = normalize_invoice_total(value)
    if cents <= 0:
        errors.add("total", "must be greater than 0")
        return errors, None
    return errors, cents


def build_invoice(total) -> Invoice:
    """
    Validate and normalize a total into an unsaved Invoice.

    The total is checked as supplied by the caller, normalized to cents
    (values under DOLLAR_THRESHOLD are taken as dollars), then checked again
    so a total that rounds to 0 cents is rejected. Invalid input yields
    an Invoice with populated .errors and no total.
    """
    errors, cents = _validate_total(total)
    invoice = Invoice(total=cents)
    invoice.errors.update(errors)
    return invoice


def create_invoice(total) -> Invoice:
    """
    Create and persist an invoice.

    Raises:
        ValidationError: If total is missing, not a number, or not positive
    """
    invoice = build_invoice(total)
    if invoice.errors:
        raise ValidationError(invoice.errors, record=invoice)

    db.session.add(invoice)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info("Invoice created", extra={"invoice_id": invoice.id, "total_cents": invoice.total})
    return invoice


def update_invoice_total(invoice_id: int, total) -> Invoice:
    """
    Change an invoice's total, applying the same validation and normalization
    as creation.

    Raises:
        InvoiceNotFoundError: If the invoice does not exist
        ValidationError: If total is invalid (nothing is changed)
    """
    errors, cents = _validate_total(total)
    if errors:
        raise ValidationError(errors)

    def _op():
        invoice = lock_for_update(db.session.query(Invoice).filter_by(id=invoice_id)).first()
        if not invoice:
            raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")
        invoice.total = cents
        db.session.commit()
        return invoice

    try:
        return run_with_retry(_op)
    except InvoiceError:
        db.session.rollback()
        raise


# =============================================================================
# INVOICE QUERIES
# =============================================================================

def get_invoice(invoice_id: int) -> Invoice:
    invoice = db.session.get(Invoice, invoice_id)
    if not invoice:
        raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")
    return invoice


def list_invoices() -> list[Invoice]:
    return db.session.query(Invoice).order_by(Invoice.id).all()


def payments_total_cents(invoice_id: int | None) -> int:
    """
    Live sum of payment amounts for an invoice (cents).

    Always queried; never cached on the instance.
    """
    if invoice_id is None:
        return 0
    paid = (
        db.session.query(func.coalesce(func.sum(Payment.amount), 0))
        .filter(Payment.invoice_id == invoice_id)
        .scalar()
    )
    return int(paid)


def amount_owed(invoice: Invoice) -> float:
    """Remaining balance in dollars. Negative when overpaid."""
    return to_dollars(invoice.total - payments_total_cents(invoice.id))


def fully_paid(invoice: Invoice) -> bool:
    # Overpaid invoices (negative balance) count as paid
    return amount_owed(invoice) <= 0


def status_counts() -> dict:
    """Count invoices by payment state (fully paid / partially paid / unpaid)."""
    paid = (
        db.session.query(
            Payment.invoice_id.label("invoice_id"),
            func.sum(Payment.amount).label("paid_cents"),
        )
        .group_by(Payment.invoice_id)
        .subquery()
    )
    rows = (
        db.session.query(Invoice.total, paid.c.paid_cents)
        .outerjoin(paid, paid.c.invoice_id == Invoice.id)
        .all()
    )

    counts = {
        "invoices": len(rows),
        "payments": db.session.query(func.count(Payment.id)).scalar(),
        "fully_paid": 0,
        "partially_paid": 0,
        "unpaid": 0,
    }
    for total, paid_cents in rows:
        paid_cents = paid_cents or 0
        if total - paid_cents <= 0:
            counts["fully_paid"] += 1
        elif paid_cents > 0:
            counts["partially_paid"] += 1
        else:
            counts["unpaid"] += 1
    return counts


# =============================================================================
# PAYMENT RECORDING
# =============================================================================

def _payment_cents(amount) -> int:
    """Validate a dollar amount for record_payment and convert it to cents."""
    if amount is None:
        raise InvalidAmountError("Payment amount can't be blank")
    try:
        value = to_decimal(amount)
    except ValueError:
        raise InvalidAmountError("Payment amount is not a number")
    if value <= 0:
        raise InvalidAmountError("Payment amount must be greater than 0")
    return to_cents(value)


def record_payment(invoice: Invoice, amount, method) -> Payment | bool:
    """
    Record a payment against an invoice.

    Runs as one transaction:
    1. Reject non-positive amounts before touching the database
    2. Lock the invoice row (SELECT ... FOR UPDATE)
    3. Re-read the sum of existing payments under the lock
    4. Reject the payment if it exceeds the remaining balance
    5. Validate and insert the payment, then commit

    Args:
        invoice: Invoice being paid
        amount: Amount in dollars
        method: 'cash', 'check' or 'charge' (any case) or a PaymentMethod

    Returns:
        The persisted Payment, or False. On False, invoice.errors explains why
        and nothing has been written.
    """
    invoice.errors.clear()

    try:
        amount_in_cents = _payment_cents(amount)
    except InvalidAmountError as exc:
        invoice.errors.add(BASE, str(exc))
        logger.warning("Payment rejected: %s", exc, extra={"invoice_id": invoice.id, "amount": str(amount)})
        return False

    invoice_id = invoice.id

    def _op():
        locked = lock_for_update(db.session.query(Invoice).filter_by(id=invoice_id)).first()
        if not locked:
            raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")

        remaining_cents = locked.total - payments_total_cents(locked.id)
        if amount_in_cents > remaining_cents:
            raise OverpaymentError(
                f"Payment amount ({format_dollars(amount_in_cents)}) exceeds "
                f"amount owed ({format_dollars(remaining_cents)})"
            )

        payment = payment_service.create_payment(locked, amount_in_cents, method=method, commit=False)
        db.session.commit()
        return payment

    try:
        payment = run_with_retry(_op)
    except ValidationError as exc:
        db.session.rollback()
        invoice.errors.update(exc.errors)
        logger.warning("Payment rejected: %s", exc, extra={"invoice_id": invoice_id, "method": str(method)})
        return False
    except InvoiceError as exc:
        db.session.rollback()
        invoice.errors.add(BASE, str(exc))
        logger.warning("Payment rejected: %s", exc, extra={"invoice_id": invoice_id, "amount_cents": amount_in_cents})
        return False

    logger.info(
        "Payment recorded",
        extra={"invoice_id": invoice_id, "payment_id": payment.id, "amount_cents": amount_in_cents},
    )
    return payment


# =============================================================================
# INVOICE DELETION
# =============================================================================

def delete_invoice(invoice_id: int) -> None:
    """
    Delete an invoice and all of its payments in one transaction.

    Payments are deleted first, then the invoice.

    Raises:
        InvoiceNotFoundError: If the invoice does not exist
    """
    def _op():
        invoice = lock_for_update(db.session.query(Invoice).filter_by(id=invoice_id)).first()
        if not invoice:
            raise InvoiceNotFoundError(f"Invoice {invoice_id} not found")

        payments = payment_service.get_invoice_payments(invoice_id)
        for payment in payments:
            db.session.delete(payment)
        db.session.delete(invoice)
        db.session.commit()
        return len(payments)

    try:
        deleted = run_with_retry(_op)
    except InvoiceError:
        db.session.rollback()
        raise

    logger.info("Invoice deleted", extra={"invoice_id": invoice_id, "payments_deleted": deleted})
