from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request

from herald.shared.cache import TTLCache
from herald.shared.db import Database, UniqueViolation
from herald.shared.logging import get_logger
from .provider import AuthError, AuthProvider
from .schemas import AuthSession, AuthUser, UserRecord

logger = get_logger("auth.session")


SESSION_TTL_SEC = 300


class SessionService:
    """
    Current-session lookups for the whole app.

    One instance lives on ``app.state``; handlers receive it through
    ``get_session_service`` instead of importing a module-level global.
    """

    def __init__(self, provider: AuthProvider, db: Database, *, ttl_seconds: float = SESSION_TTL_SEC):
        self.provider = provider
        self.db = db
        self._cache = TTLCache(ttl_seconds=ttl_seconds)

    def resolve(self, access_token: Optional[str]) -> Optional[AuthUser]:
        if not access_token:
            return None
        cached = self._cache.get(access_token)
        if cached is not None:
            return cached
        user = self.provider.get_user(access_token)
        if user is not None:
            self._cache.set(access_token, user)
        return user

    def sign_in_with_code(self, code: str, code_verifier: Optional[str] = None) -> AuthSession:
        session = self.provider.exchange_code(code, code_verifier)
        self._cache.set(session.access_token, session.user)
        self.provision_user(session.user)
        return session

    def provision_user(self, user: AuthUser) -> UserRecord:
        """Create the users row on first sign-in, with role visitor."""
        row = self.db.get("users", user.id)
        if row is None:
            try:
                row = self.db.insert("users", {"id": user.id, "email": user.email, "role": "visitor"})
                logger.info(f"provisioned user {user.id}")
            except UniqueViolation:
                row = self.db.get("users", user.id)
        return UserRecord(**{k: row.get(k) for k in ("id", "email", "role", "tier") if row.get(k) is not None})

    def user_record(self, user_id: str) -> Optional[UserRecord]:
        row = self.db.get("users", user_id)
        if row is None:
            return None
        return UserRecord(**{k: row.get(k) for k in ("id", "email", "role", "tier") if row.get(k) is not None})

    def sign_out(self, access_token: Optional[str]) -> None:
        if not access_token:
            return
        self._cache.delete(access_token)
        try:
            self.provider.sign_out(access_token)
        except AuthError as e:
            logger.warning(f"backend sign out failed: {e}")


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get("access_token")


def get_session_service(request: Request) -> SessionService:
    return request.app.state.sessions


def optional_user(request: Request, sessions: SessionService = Depends(get_session_service)) -> Optional[AuthUser]:
    return sessions.resolve(bearer_token(request))


def current_user(user: Optional[AuthUser] = Depends(optional_user)) -> AuthUser:
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def require_role(*roles: str):
    """Dependency factory: the signed-in user must hold one of ``roles``."""

    def dependency(user: AuthUser = Depends(current_user), sessions: SessionService = Depends(get_session_service)) -> UserRecord:
        record = sessions.user_record(user.id)
        if record is None or record.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden")
        return record

    return dependency
