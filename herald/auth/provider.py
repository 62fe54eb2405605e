from __future__ import annotations

from typing import Optional, Protocol

import httpx

from herald.shared.logging import get_logger
from .schemas import AuthSession, AuthUser

logger = get_logger("auth.provider")


DEFAULT_TIMEOUT = 10.0


class AuthError(Exception):
    pass


class AuthProvider(Protocol):
    def exchange_code(self, code: str, code_verifier: Optional[str] = None) -> AuthSession: ...

    def get_user(self, access_token: str) -> Optional[AuthUser]: ...

    def sign_out(self, access_token: str) -> None: ...


class HostedAuthProvider:
    """Hosted auth backend reached over its REST API (``<backend>/auth/v1``)."""

    def __init__(self, base_url: str, anon_key: str, *, timeout: float = DEFAULT_TIMEOUT, transport: httpx.BaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=f"{self.base_url}/auth/v1",
            timeout=self.timeout,
            headers={"apikey": self.anon_key, "Content-Type": "application/json"},
            transport=self.transport,
        )

    def exchange_code(self, code: str, code_verifier: Optional[str] = None) -> AuthSession:
        if not self.base_url:
            raise AuthError("auth backend not configured")
        payload = {"auth_code": code}
        if code_verifier:
            payload["code_verifier"] = code_verifier
        try:
            with self._client() as client:
                resp = client.post("/token", params={"grant_type": "pkce"}, json=payload)
        except httpx.HTTPError as e:
            raise AuthError(f"code exchange failed: {type(e).__name__}") from e
        if resp.status_code >= 400:
            raise AuthError(f"code exchange rejected: http_{resp.status_code}")
        data = resp.json()
        user = data.get("user") or {}
        if not data.get("access_token") or not user.get("id"):
            raise AuthError("code exchange returned no session")
        return AuthSession(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            user=AuthUser(id=user["id"], email=user.get("email")),
        )

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        if not self.base_url or not access_token:
            return None
        try:
            with self._client() as client:
                resp = client.get("/user", headers={"Authorization": f"Bearer {access_token}"})
        except httpx.HTTPError as e:
            logger.warning(f"user lookup failed: {type(e).__name__}")
            return None
        if resp.status_code != 200:
            return None
        data = resp.json()
        if not data.get("id"):
            return None
        return AuthUser(id=data["id"], email=data.get("email"))

    def sign_out(self, access_token: str) -> None:
        """Revoke the session on the backend (``POST /logout``)."""
        if not self.base_url or not access_token:
            return
        try:
            with self._client() as client:
                resp = client.post("/logout", headers={"Authorization": f"Bearer {access_token}"})
        except httpx.HTTPError as e:
            raise AuthError(f"sign out failed: {type(e).__name__}") from e
        if resp.status_code >= 400 and resp.status_code != 401:
            raise AuthError(f"sign out rejected: http_{resp.status_code}")
