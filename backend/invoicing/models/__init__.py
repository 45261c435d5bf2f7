from .invoices import Invoice, Payment, PaymentMethod, PAYMENT_METHODS

__all__ = [
    'Invoice', 'Payment', 'PaymentMethod', 'PAYMENT_METHODS',
]
