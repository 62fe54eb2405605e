import asyncio
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from herald.auth.schemas import AuthUser
from herald.auth.session import optional_user
from herald.shared.config import Settings
from herald.shared.db import Database
from herald.shared.deps import enforce_rate_limit, get_db, get_settings
from herald.shared.errors import invalid_input
from herald.shared.logging import get_logger
from herald.shared.utils import utc_now
from .polish import BioPolisher, PolishContentRejected, PolishError, PolishRateLimited, PolishUnavailable
from .schemas import PolishFeatures, PolishInput, PolishMetadata, PolishOutput, PolishStatusOutput, PolishUsage

logger = get_logger("ai.router")


router = APIRouter()

AI_ROLES = {"member", "admin", "super_admin"}


def get_polisher(request: Request) -> BioPolisher:
    return request.app.state.polisher


def _require_user_row(user: Optional[AuthUser], db: Database) -> dict:
    if user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    row = db.get("users", user.id)
    if not row:
        raise HTTPException(status_code=404, detail="User not found")
    return row


@router.post("/polish-bio", response_model=PolishOutput)
async def polish_bio(
    request: Request,
    user: Optional[AuthUser] = Depends(optional_user),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
    polisher: BioPolisher = Depends(get_polisher),
):
    enforce_rate_limit(request, settings.ai_polish_hourly_limit, "1h", "AI usage limit exceeded. Please try again later.")
    row = _require_user_row(user, db)
    if row.get("role") not in AI_ROLES:
        raise HTTPException(status_code=403, detail="AI features require membership. Please upgrade your account.")

    try:
        payload = PolishInput.model_validate(await request.json())
    except ValueError as e:
        # ValidationError is a ValueError; so is a malformed JSON body
        raise invalid_input(e.errors() if isinstance(e, ValidationError) else [{"loc": (), "msg": "Malformed JSON body"}])

    try:
        polished = await asyncio.to_thread(polisher.polish, payload.bio, tone=payload.tone, tier=payload.tier)
    except PolishRateLimited:
        raise HTTPException(status_code=503, detail="AI service is currently busy. Please try again in a few minutes.")
    except PolishUnavailable:
        raise HTTPException(status_code=503, detail="AI service is currently unavailable. Please try again later.")
    except PolishContentRejected:
        raise HTTPException(status_code=400, detail="Content violates AI usage policies. Please revise your bio.")
    except PolishError as e:
        logger.error(f"AI processing error: {e}")
        raise HTTPException(status_code=500, detail="AI processing failed. Please try again.")

    db.log_event(
        "ai_bio_polish",
        user.id,
        {
            "feature": "bio_polish",
            "input_length": len(payload.bio),
            "output_length": len(polished),
            "tier": payload.tier.value,
            "tone": payload.tone.value,
        },
    )
    return PolishOutput(
        original_bio=payload.bio,
        polished_bio=polished,
        metadata=PolishMetadata(
            tone=payload.tone,
            tier=payload.tier,
            original_length=len(payload.bio),
            polished_length=len(polished),
        ),
    )


@router.get("/polish-bio", response_model=PolishStatusOutput)
def polish_status(
    user: Optional[AuthUser] = Depends(optional_user),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    row = _require_user_row(user, db)
    has_access = row.get("role") in AI_ROLES
    since = (utc_now() - timedelta(days=1)).isoformat()
    daily = len(db.select("analytics_events", user_id=user.id, event_type="ai_bio_polish", where=lambda r: r["created_at"] >= since))
    daily_limit = settings.ai_polish_daily_limit if has_access else 0
    return PolishStatusOutput(
        has_access=has_access,
        user_role=row.get("role") or "visitor",
        user_tier=row.get("tier"),
        usage=PolishUsage(daily=daily, daily_limit=daily_limit, remaining=max(0, daily_limit - daily)),
        features=PolishFeatures(bio_polish=has_access),
    )
