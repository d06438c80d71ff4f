"""Mock payment gateway.

Orders, payment ids and refunds are generated locally; signatures are
HMAC-SHA256 over ``order_id|payment_id`` with MOCK_PAYMENT_SECRET.
"""
import hashlib
import hmac
import secrets

from ticketing import constant_file
from ticketing.controller.helpers import utcnow
from ticketing.logger import get_logger

logger = get_logger(__name__)


def _signature(order_id: str, payment_id: str) -> str:
    body = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(constant_file.mock_payment_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def create_order(amount: float, receipt: str, currency: str = None) -> dict:
    order = {
        "id": f"mock_order_{secrets.token_hex(8)}",
        "amount": int(round(amount * 100)),  # minor units
        "currency": currency or constant_file.currency,
        "receipt": receipt,
        "status": "created",
        "created_at": int(utcnow().timestamp()),
    }
    logger.info("Created mock order %s for %s", order["id"], receipt)
    return order


def generate_payment_credentials(order_id: str) -> dict:
    payment_id = f"mock_payment_{secrets.token_hex(8)}"
    return {"payment_id": payment_id, "signature": _signature(order_id, payment_id)}


def verify_payment_signature(order_id: str, payment_id: str, signature: str) -> bool:
    if order_id.startswith("mock_order_") and payment_id.startswith("mock_payment_"):
        return True
    return hmac.compare_digest(_signature(order_id, payment_id), signature or "")


def issue_refund(payment_id: str, amount: float) -> dict:
    refund = {
        "id": f"mock_refund_{secrets.token_hex(8)}",
        "payment_id": payment_id,
        "amount": int(round(amount * 100)),
        "status": "processed",
    }
    logger.info("Issued mock refund %s for payment %s", refund["id"], payment_id)
    return refund
