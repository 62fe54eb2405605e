from __future__ import annotations

import hashlib
import hmac
from typing import Any, Dict, Optional, Protocol

import httpx

from herald.shared.logging import get_logger

logger = get_logger("payment.gateway")


DEFAULT_TIMEOUT = 15.0


class PaymentError(Exception):
    pass


class OrderCreationError(PaymentError):
    pass


class PaymentGateway(Protocol):
    def create_order(self, amount: int, currency: str, receipt: str, notes: Dict[str, str]) -> Dict[str, Any]: ...

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool: ...

    def verify_webhook_signature(self, body: bytes, signature: str) -> bool: ...


def hmac_sha256_hex(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


class RazorpayGateway:
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        webhook_secret: str = "",
        *,
        api_base: str = "https://api.razorpay.com/v1",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def create_order(self, amount: int, currency: str, receipt: str, notes: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        if not (self.key_id and self.key_secret):
            raise OrderCreationError("payment provider not configured")
        body = {"amount": amount, "currency": currency, "receipt": receipt, "notes": notes or {}}
        try:
            with httpx.Client(timeout=self.timeout, auth=(self.key_id, self.key_secret), transport=self.transport) as client:
                resp = client.post(f"{self.api_base}/orders", json=body)
        except httpx.HTTPError as e:
            logger.warning(f"order creation failed: {type(e).__name__}")
            raise OrderCreationError("Failed to create payment order") from e
        if resp.status_code >= 400:
            try:
                desc = (resp.json().get("error") or {}).get("description")
            except ValueError:
                desc = None
            logger.warning(f"order creation rejected: http_{resp.status_code} {desc or ''}")
            raise OrderCreationError(desc or "Failed to create payment order")
        return resp.json()

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        if not self.key_secret or not signature:
            return False
        expected = hmac_sha256_hex(self.key_secret, f"{order_id}|{payment_id}".encode("utf-8"))
        return hmac.compare_digest(expected, signature)

    def verify_webhook_signature(self, body: bytes, signature: str) -> bool:
        if not self.webhook_secret or not signature:
            return False
        return hmac.compare_digest(hmac_sha256_hex(self.webhook_secret, body), signature)
