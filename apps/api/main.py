from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from herald.ai.polish import BioPolisher
from herald.ai.router import router as ai_router
from herald.auth.provider import AuthProvider, HostedAuthProvider
from herald.auth.router import api_router as auth_api_router
from herald.auth.router import router as auth_router
from herald.auth.session import SessionService
from herald.nominations.router import router as nominations_router
from herald.payment.gateway import PaymentGateway, RazorpayGateway
from herald.payment.router import router as payment_router
from herald.profiles.router import router as profiles_router
from herald.shared.config import Settings, get_settings
from herald.shared.db import Database
from herald.shared.errors import INVALID_INPUT, validation_details
from herald.shared.logging import configure_logging, get_logger
from herald.shared.ratelimit import RateLimiter

logger = get_logger("api.main")


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = dict(exc.detail) if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": INVALID_INPUT, "details": validation_details(exc.errors())})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"unhandled error on {request.method} {request.url.path}: {type(exc).__name__}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Optional[Settings] = None,
    *,
    db: Optional[Database] = None,
    auth_provider: Optional[AuthProvider] = None,
    gateway: Optional[PaymentGateway] = None,
    polisher: Optional[BioPolisher] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Icons Herald API", version="0.1.0")

    app.state.settings = settings
    app.state.db = db or Database()
    app.state.rate_limiter = rate_limiter or RateLimiter()
    app.state.sessions = SessionService(
        auth_provider or HostedAuthProvider(settings.backend_url, settings.backend_anon_key),
        app.state.db,
    )
    app.state.payment_gateway = gateway or RazorpayGateway(
        settings.razorpay_key_id,
        settings.razorpay_key_secret,
        settings.razorpay_webhook_secret,
        api_base=settings.razorpay_api_base,
    )
    app.state.polisher = polisher or BioPolisher(settings.gpt_api_key, settings.openai_model_polish)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(profiles_router, prefix="/api/profiles", tags=["profiles"])
    app.include_router(payment_router, prefix="/api/payment", tags=["payment"])
    app.include_router(ai_router, prefix="/api/ai", tags=["ai"])
    app.include_router(nominations_router, prefix="/api/nominations", tags=["nominations"])
    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(auth_api_router, prefix="/api/auth", tags=["auth"])
    return app


app = create_app()
