"""Order creation, checkout verification and webhooks."""

import json

import pytest

from herald.payment.gateway import RazorpayGateway, hmac_sha256_hex

from conftest import KEY_SECRET, WEBHOOK_SECRET, FakeGateway


def _draft(client, headers, content, tier="elite", slug="jane-doe-1"):
    return client.post("/api/profiles/draft", json={"content": content, "tier": tier, "slug": slug}, headers=headers).json()["profile"]


def _sign(order_id: str, payment_id: str) -> str:
    return hmac_sha256_hex(KEY_SECRET, f"{order_id}|{payment_id}".encode())


class TestSignatures:
    def test_payment_signature_round_trip(self):
        gw = RazorpayGateway("id", KEY_SECRET)
        assert gw.verify_payment_signature("order_1", "pay_1", _sign("order_1", "pay_1"))
        assert not gw.verify_payment_signature("order_1", "pay_2", _sign("order_1", "pay_1"))

    def test_empty_signature_is_rejected(self):
        assert not RazorpayGateway("id", KEY_SECRET).verify_payment_signature("o", "p", "")

    def test_webhook_signature(self):
        gw = RazorpayGateway("id", KEY_SECRET, WEBHOOK_SECRET)
        body = b'{"event":"order.paid"}'
        assert gw.verify_webhook_signature(body, hmac_sha256_hex(WEBHOOK_SECRET, body))
        assert not gw.verify_webhook_signature(body, hmac_sha256_hex(KEY_SECRET, body))


class TestCreateOrder:
    def test_creates_order_for_tier_price(self, client, login, make_content, gateway, db):
        headers = login()
        profile = _draft(client, headers, make_content())
        resp = client.post("/api/payment/create-order", json={"profileId": profile["id"], "tier": "elite"}, headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["order"]["amount"] == 1000000
        assert body["order"]["receipt"].startswith(f"profile_{profile['id']}_")
        assert body["payment"]["status"] == "created"
        assert gateway.orders[0]["notes"]["tier"] == "elite"
        assert db.count("payments") == 1

    def test_missing_fields(self, client, login):
        resp = client.post("/api/payment/create-order", json={"tier": "elite"}, headers=login())
        assert resp.status_code == 400

    def test_unknown_tier(self, client, login, make_content):
        headers = login()
        profile = _draft(client, headers, make_content())
        resp = client.post("/api/payment/create-order", json={"profileId": profile["id"], "tier": "gold"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid tier"

    def test_profile_of_another_user(self, client, login, make_content):
        profile = _draft(client, login("owner"), make_content())
        resp = client.post("/api/payment/create-order", json={"profileId": profile["id"], "tier": "elite"}, headers=login("other"))
        assert resp.status_code == 404

    def test_gateway_failure_is_bad_gateway(self, settings, db, auth, polisher, login, make_content):
        from fastapi.testclient import TestClient

        from apps.api.main import create_app

        client = TestClient(create_app(settings, db=db, auth_provider=auth, gateway=FakeGateway(fail=True), polisher=polisher))
        headers = login()
        profile = _draft(client, headers, make_content())
        resp = client.post("/api/payment/create-order", json={"profileId": profile["id"], "tier": "elite"}, headers=headers)
        assert resp.status_code == 502
        assert resp.json()["error"] == "Payment provider unavailable"


class TestVerify:
    def _order(self, client, headers, make_content):
        profile = _draft(client, headers, make_content())
        order = client.post("/api/payment/create-order", json={"profileId": profile["id"], "tier": "elite"}, headers=headers).json()["order"]
        return profile, order

    def test_verified_payment_publishes(self, client, login, make_content, db):
        headers = login()
        profile, order = self._order(client, headers, make_content)
        payload = {
            "razorpay_order_id": order["id"],
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": _sign(order["id"], "pay_1"),
        }
        resp = client.post("/api/payment/verify", json=payload, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["publicUrl"] == "/profile/jane-doe-1"
        stored = db.get("profiles", profile["id"])
        assert stored["status"] == "published"
        assert stored["payment_status"] == "completed"
        assert db.first("payments", razorpay_order_id=order["id"])["status"] == "captured"

    def test_bad_signature(self, client, login, make_content, db):
        headers = login()
        profile, order = self._order(client, headers, make_content)
        payload = {"razorpay_order_id": order["id"], "razorpay_payment_id": "pay_1", "razorpay_signature": "deadbeef"}
        resp = client.post("/api/payment/verify", json=payload, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid payment signature"
        assert db.get("profiles", profile["id"])["status"] == "draft"

    def test_missing_data(self, client, login):
        resp = client.post("/api/payment/verify", json={"razorpay_order_id": "order_1"}, headers=login())
        assert resp.status_code == 400

    def test_unknown_order(self, client, login):
        payload = {"razorpay_order_id": "order_x", "razorpay_payment_id": "pay_1", "razorpay_signature": _sign("order_x", "pay_1")}
        assert client.post("/api/payment/verify", json=payload, headers=login()).status_code == 404

    def test_second_order_after_capture_is_refused(self, client, login, make_content):
        headers = login()
        profile, order = self._order(client, headers, make_content)
        payload = {"razorpay_order_id": order["id"], "razorpay_payment_id": "pay_1", "razorpay_signature": _sign(order["id"], "pay_1")}
        client.post("/api/payment/verify", json=payload, headers=headers)
        again = client.post("/api/payment/create-order", json={"profileId": profile["id"], "tier": "elite"}, headers=headers)
        assert again.status_code == 400
        assert again.json()["error"] == "Payment already completed for this profile"


class TestWebhook:
    def _post(self, client, event: dict, secret: str = WEBHOOK_SECRET):
        body = json.dumps(event).encode()
        return client.post(
            "/api/payment/webhook",
            content=body,
            headers={"x-razorpay-signature": hmac_sha256_hex(secret, body), "content-type": "application/json"},
        )

    @pytest.fixture
    def order(self, client, login, make_content):
        headers = login()
        profile = _draft(client, headers, make_content())
        order = client.post("/api/payment/create-order", json={"profileId": profile["id"], "tier": "elite"}, headers=headers).json()["order"]
        return profile, order

    def test_missing_signature(self, client):
        assert client.post("/api/payment/webhook", content=b"{}").status_code == 400

    def test_forged_signature(self, client):
        assert self._post(client, {"event": "order.paid"}, secret="wrong").status_code == 400

    def test_captured_publishes(self, client, order, db):
        profile, o = order
        event = {"event": "payment.captured", "payload": {"payment": {"entity": {"id": "pay_9", "order_id": o["id"]}}}}
        resp = self._post(client, event)
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}
        assert db.get("profiles", profile["id"])["is_published"] is True

    def test_failed_marks_payment(self, client, order, db):
        profile, o = order
        event = {"event": "payment.failed", "payload": {"payment": {"entity": {"id": "pay_9", "order_id": o["id"]}}}}
        assert self._post(client, event).status_code == 200
        assert db.first("payments", razorpay_order_id=o["id"])["status"] == "failed"
        assert db.get("profiles", profile["id"])["payment_status"] == "failed"

    def test_unhandled_event_is_acknowledged(self, client):
        assert self._post(client, {"event": "refund.created"}).status_code == 200
