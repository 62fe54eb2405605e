from typing import Optional
from pydantic import BaseModel


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    user: AuthUser


class UserRecord(BaseModel):
    id: str
    email: Optional[str] = None
    role: str = "visitor"  # visitor | member | admin | super_admin
    tier: Optional[str] = None


class SignOutOutput(BaseModel):
    success: bool = True
