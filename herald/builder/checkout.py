from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from herald.shared.logging import get_logger
from .client import ApiError, ProfileApiClient
from .notifications import NotificationCenter

logger = get_logger("builder.checkout")


class CheckoutOutcome(str, Enum):
    ORDER_FAILED = "order_failed"
    CANCELLED = "cancelled"
    VERIFICATION_FAILED = "verification_failed"
    SUCCEEDED = "succeeded"


# outcome -> (title, status, description)
MESSAGES = {
    CheckoutOutcome.ORDER_FAILED: ("Payment Failed", "error", "Could not start the payment. Please try again or contact support."),
    CheckoutOutcome.CANCELLED: ("Payment Cancelled", "warning", "Checkout was closed before the payment completed."),
    CheckoutOutcome.VERIFICATION_FAILED: ("Payment Verification Failed", "error", "We could not confirm your payment. Please contact support."),
    CheckoutOutcome.SUCCEEDED: ("Payment Successful!", "success", "Your profile is now published."),
}


@dataclass
class CheckoutResult:
    outcome: CheckoutOutcome
    message: str
    public_url: Optional[str] = None
    order: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.outcome == CheckoutOutcome.SUCCEEDED


# Given the order, opens the hosted checkout and returns its success payload
# ({razorpay_payment_id, razorpay_order_id, razorpay_signature}) or None.
OpenCheckout = Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]


class CheckoutFlow:
    def __init__(self, client: ProfileApiClient, notifications: Optional[NotificationCenter] = None):
        self.client = client
        self.notifications = notifications or NotificationCenter()

    def _finish(self, outcome: CheckoutOutcome, **kwargs: Any) -> CheckoutResult:
        title, status, description = MESSAGES[outcome]
        self.notifications.notify(title, status, description)
        return CheckoutResult(outcome=outcome, message=description, **kwargs)

    def run(self, profile_id: str, tier: str, open_checkout: OpenCheckout) -> CheckoutResult:
        try:
            order = self.client.create_order(profile_id, tier)["order"]
        except ApiError as e:
            logger.warning(f"order creation failed: {e.status} {e.message}")
            return self._finish(CheckoutOutcome.ORDER_FAILED)

        callback = open_checkout(order)
        if not callback:
            logger.info(f"checkout cancelled for order {order.get('id')}")
            return self._finish(CheckoutOutcome.CANCELLED, order=order)

        try:
            resp = self.client.verify_payment(callback)
        except ApiError as e:
            logger.warning(f"payment verification failed: {e.status} {e.message}")
            return self._finish(CheckoutOutcome.VERIFICATION_FAILED, order=order)

        return self._finish(CheckoutOutcome.SUCCEEDED, order=order, public_url=resp.get("publicUrl"))
