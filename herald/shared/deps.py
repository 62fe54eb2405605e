from fastapi import HTTPException, Request

from herald.shared.config import Settings
from herald.shared.db import Database
from herald.shared.ratelimit import RateLimiter
from herald.shared.utils import client_identifier


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def enforce_rate_limit(request: Request, requests: int, window: str, message: str) -> None:
    limiter: RateLimiter = request.app.state.rate_limiter
    ident = client_identifier(request.headers, request.client.host if request.client else None)
    result = limiter.limit(f"{request.url.path}|{ident}", requests, window)
    if not result.success:
        raise HTTPException(status_code=429, detail=message)
