from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAYMENT_UPLOADED = "PAYMENT_UPLOADED"
    PAYMENT_VERIFIED = "PAYMENT_VERIFIED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "BANK_TRANSFER"
    CASH = "CASH"
    QRIS = "QRIS"
    E_WALLET = "E_WALLET"


TERMINAL_STATUSES = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

# Statuses each event may start from. Verify depends on the payment method,
# so it is split by whether the method requires proof.
ALLOWED_TRANSITIONS = {
    "upload_proof": {OrderStatus.PENDING, OrderStatus.PAYMENT_UPLOADED},
    "verify_with_proof": {OrderStatus.PAYMENT_UPLOADED},
    "verify_without_proof": {OrderStatus.PENDING, OrderStatus.PAYMENT_VERIFIED},
    "complete": {OrderStatus.PAYMENT_VERIFIED},
    "cancel": {
        OrderStatus.PENDING,
        OrderStatus.PAYMENT_UPLOADED,
        OrderStatus.PAYMENT_VERIFIED,
    },
}


def initial_status(requires_proof: bool) -> OrderStatus:
    if requires_proof:
        return OrderStatus.PENDING
    return OrderStatus.PAYMENT_VERIFIED
