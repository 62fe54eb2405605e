from __future__ import annotations

import json
from typing import Any, Dict, Tuple

from herald.profiles.service import ProfileNotFound, mark_paid_and_publish
from herald.shared.db import Database
from herald.shared.logging import get_logger
from herald.shared.utils import now_ms, utc_now_iso
from herald.tiers.capabilities import parse_tier
from .gateway import PaymentError, PaymentGateway

logger = get_logger("payment.service")


class PaymentAlreadyCompleted(PaymentError):
    pass


class SignatureMismatch(PaymentError):
    pass


class PaymentRecordNotFound(PaymentError):
    pass


def create_order(db: Database, gateway: PaymentGateway, user_id: str, profile_id: str, tier: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    profile = db.first("profiles", id=profile_id, user_id=user_id)
    if not profile:
        raise ProfileNotFound("Profile not found")

    if db.first("payments", profile_id=profile_id, status="captured"):
        raise PaymentAlreadyCompleted("Payment already completed for this profile")

    price = parse_tier(tier).capabilities.price  # ValueError on unknown tier

    order = gateway.create_order(
        price.amount,
        price.currency,
        f"profile_{profile_id}_{now_ms()}",
        {"profile_id": profile_id, "user_id": user_id, "tier": tier},
    )
    payment = db.insert(
        "payments",
        {
            "user_id": user_id,
            "profile_id": profile_id,
            "razorpay_order_id": order["id"],
            "amount": price.amount,
            "currency": price.currency,
            "status": "created",
            "tier": tier,
        },
    )
    logger.info(f"order created profile={profile_id} order={order['id']} amount={price.amount}")
    return order, payment


def verify_payment(db: Database, gateway: PaymentGateway, user_id: str, payment_id: str, order_id: str, signature: str) -> Dict[str, Any]:
    if not gateway.verify_payment_signature(order_id, payment_id, signature):
        raise SignatureMismatch("Invalid payment signature")

    payment = db.first("payments", razorpay_order_id=order_id, user_id=user_id)
    if not payment:
        raise PaymentRecordNotFound("Payment record not found")

    db.update("payments", payment["id"], {"razorpay_payment_id": payment_id, "status": "captured", "updated_at": utc_now_iso()})
    profile = mark_paid_and_publish(db, payment["profile_id"], payment["id"])
    logger.info(f"payment verified order={order_id} profile={profile['id']}")
    return profile


def _capture(db: Database, entity: Dict[str, Any]) -> None:
    order_id = entity.get("order_id")
    payment = db.first("payments", razorpay_order_id=order_id)
    if not payment:
        raise PaymentRecordNotFound(f"no payment for order {order_id}")
    db.update("payments", payment["id"], {"razorpay_payment_id": entity.get("id"), "status": "captured"})
    mark_paid_and_publish(db, payment["profile_id"], payment["id"])
    logger.info(f"payment captured via webhook: {entity.get('id')}")


def _fail(db: Database, entity: Dict[str, Any]) -> None:
    updated = db.update_where("payments", {"razorpay_payment_id": entity.get("id"), "status": "failed"}, razorpay_order_id=entity.get("order_id"))
    for p in updated:
        db.update("profiles", p["profile_id"], {"payment_status": "failed"})
    logger.info(f"payment failed: {entity.get('id')}")


def handle_webhook(db: Database, gateway: PaymentGateway, body: bytes, signature: str) -> str:
    if not gateway.verify_webhook_signature(body, signature):
        raise SignatureMismatch("Invalid signature")
    event = json.loads(body.decode("utf-8"))
    name = event.get("event") or ""
    payload = event.get("payload") or {}
    if name == "payment.captured":
        _capture(db, (payload.get("payment") or {}).get("entity") or {})
    elif name == "payment.failed":
        _fail(db, (payload.get("payment") or {}).get("entity") or {})
    elif name == "order.paid":
        logger.info(f"order paid: {((payload.get('order') or {}).get('entity') or {}).get('id')}")
    else:
        logger.info(f"unhandled webhook event: {name}")
    return name
