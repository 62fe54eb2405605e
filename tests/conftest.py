from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from apps.api.main import create_app
from herald.auth.provider import AuthError
from herald.auth.schemas import AuthSession, AuthUser
from herald.payment.gateway import OrderCreationError, RazorpayGateway
from herald.shared.config import Settings
from herald.shared.db import Database
from herald.shared.ratelimit import RateLimiter


KEY_SECRET = "test_key_secret"
WEBHOOK_SECRET = "test_webhook_secret"


class MockClock:
    """Deterministic clock. Zero real sleeps."""

    def __init__(self, start: float = 1_700_000_000.0):
        self._now = start

    def __call__(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


class FakeAuthProvider:
    def __init__(self):
        self.tokens: Dict[str, AuthUser] = {}
        self.codes: Dict[str, AuthSession] = {}
        self.lookups = 0
        self.signed_out: List[str] = []

    def add_token(self, token: str, user_id: str, email: Optional[str] = None) -> AuthUser:
        user = AuthUser(id=user_id, email=email or f"{user_id}@example.com")
        self.tokens[token] = user
        return user

    def add_code(self, code: str, token: str, user_id: str) -> None:
        user = self.add_token(token, user_id)
        self.codes[code] = AuthSession(access_token=token, user=user)

    def exchange_code(self, code: str, code_verifier: Optional[str] = None) -> AuthSession:
        if code not in self.codes:
            raise AuthError("invalid code")
        return self.codes[code]

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        self.lookups += 1
        return self.tokens.get(access_token)

    def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)
        self.tokens.pop(access_token, None)


class FakeGateway(RazorpayGateway):
    """Real signature checks, canned orders."""

    def __init__(self, fail: bool = False):
        super().__init__("rzp_test_key", KEY_SECRET, WEBHOOK_SECRET)
        self.fail = fail
        self.orders = []

    def create_order(self, amount, currency, receipt, notes=None):
        if self.fail:
            raise OrderCreationError("Payment provider unavailable")
        order = {
            "id": f"order_{len(self.orders) + 1}",
            "entity": "order",
            "amount": amount,
            "amount_due": amount,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
            "notes": notes or {},
        }
        self.orders.append(order)
        return order


class FakePolisher:
    def __init__(self, result: str = "Jane Doe is a celebrated engineer whose tools help small teams ship reliable software.", error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls = []

    def polish(self, bio, *, tone, tier):
        self.calls.append({"bio": bio, "tone": tone, "tier": tier})
        if self.error is not None:
            raise self.error
        return self.result


def valid_content(**overrides) -> dict:
    content = {
        "name": "Jane Doe",
        "tagline": "Engineer, founder and mentor",
        "bio": {"original": "Jane Doe has spent two decades building tools that help small teams ship reliable software."},
        "heroImage": "https://cdn.example.com/jane.jpg",
        "achievements": [{"title": "Founded Acme", "description": "Grew Acme from two people to a team of two hundred."}],
        "links": [{"title": "Website", "url": "https://jane.example.com", "type": "website"}],
    }
    content.update(overrides)
    return content


@pytest.fixture
def clock():
    return MockClock()


@pytest.fixture
def db():
    return Database()


@pytest.fixture
def auth():
    return FakeAuthProvider()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def polisher():
    return FakePolisher()


@pytest.fixture
def settings():
    return Settings().with_overrides(
        public_site_url="http://site.test",
        cors_origins=["*"],
        enforce_tier_sections=False,
        require_payment_to_publish=False,
        ai_polish_hourly_limit=5,
        ai_polish_daily_limit=10,
        nomination_hourly_limit=5,
    )


@pytest.fixture
def app(settings, db, auth, gateway, polisher, clock):
    return create_app(settings, db=db, auth_provider=auth, gateway=gateway, polisher=polisher, rate_limiter=RateLimiter(clock=clock))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def login(auth, db):
    """Registers a signed-in user; returns request headers carrying the token."""

    def _login(user_id: str = "user-1", role: str = "member", token: Optional[str] = None, tier: Optional[str] = None) -> Dict[str, str]:
        token = token or f"token-{user_id}"
        auth.add_token(token, user_id)
        if db.get("users", user_id) is None:
            db.insert("users", {"id": user_id, "email": f"{user_id}@example.com", "role": role, "tier": tier})
        return {"Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture
def make_content():
    return valid_content
