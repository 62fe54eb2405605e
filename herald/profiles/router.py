from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from herald.auth.schemas import AuthUser
from herald.auth.session import current_user, optional_user
from herald.shared.config import Settings
from herald.shared.db import Database, UniqueViolation
from herald.shared.deps import get_db, get_settings
from herald.shared.utils import client_identifier
from .schemas import (
    DailyViews,
    DeleteDraftOutput,
    DraftUser,
    GetDraftOutput,
    ProfileAnalyticsOutput,
    ProfileRecord,
    PublicProfileOutput,
    PublishInput,
    PublishOutput,
    PublishStatusOutput,
    SaveDraftInput,
    SaveDraftOutput,
    SourceCount,
)
from .service import (
    ContentInvalid,
    PaymentRequired,
    ProfileNotFound,
    TierPolicyViolation,
    delete_draft,
    get_draft,
    get_published,
    profile_analytics,
    public_url,
    publish,
    publish_status,
    save_draft,
    visible_sections,
)


router = APIRouter()


@router.get("/draft", response_model=GetDraftOutput)
def read_draft(user: AuthUser = Depends(current_user), db: Database = Depends(get_db)):
    row = get_draft(db, user.id)
    user_row = db.get("users", user.id)
    return GetDraftOutput(
        has_draft=row is not None,
        profile=ProfileRecord(**row) if row else None,
        user=DraftUser(role=user_row.get("role"), tier=user_row.get("tier")) if user_row else None,
    )


@router.post("/draft", response_model=SaveDraftOutput)
def write_draft(
    payload: SaveDraftInput,
    user: AuthUser = Depends(current_user),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not payload.content or not payload.tier:
        raise HTTPException(status_code=400, detail="Missing required fields")
    try:
        row = save_draft(
            db,
            user.id,
            payload.content,
            payload.tier,
            payload.slug,
            auto_save=payload.auto_save and not payload.manual_save,
            enforce_tier=settings.enforce_tier_sections,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TierPolicyViolation as e:
        raise HTTPException(status_code=422, detail={"error": "Sections not available for this tier", "sections": e.sections})
    except UniqueViolation:
        raise HTTPException(status_code=409, detail="Profile already exists for this user. Please try refreshing the page.")
    return SaveDraftOutput(profile=ProfileRecord(**row))


@router.delete("/draft", response_model=DeleteDraftOutput)
def remove_draft(user: AuthUser = Depends(current_user), db: Database = Depends(get_db)):
    delete_draft(db, user.id)
    return DeleteDraftOutput()


@router.post("/publish", response_model=PublishOutput)
def publish_profile(
    payload: PublishInput,
    user: AuthUser = Depends(current_user),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if not payload.slug:
        raise HTTPException(status_code=400, detail="Profile slug is required")
    try:
        row = publish(db, user.id, payload.slug, require_payment=settings.require_payment_to_publish)
    except ProfileNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ContentInvalid as e:
        raise HTTPException(status_code=422, detail={"error": "Profile content is incomplete", "details": e.errors})
    except PaymentRequired as e:
        return JSONResponse(
            status_code=402,
            content={
                "error": "Payment required",
                "requiresPayment": True,
                "tier": e.tier.value,
                "amount": {"amount": e.price.amount, "currency": e.price.currency, "period": e.price.period},
            },
        )
    return PublishOutput(profile=ProfileRecord(**row), public_url=public_url(payload.slug))


@router.get("/publish", response_model=PublishStatusOutput)
def read_publish_status(slug: str = Query(default=""), db: Database = Depends(get_db)):
    if not slug:
        raise HTTPException(status_code=400, detail="Profile slug is required")
    is_published, published_at = publish_status(db, slug)
    return PublishStatusOutput(is_published=is_published, published_at=published_at)


@router.get("/analytics", response_model=ProfileAnalyticsOutput)
def read_analytics(
    profile_id: str = Query(default="", alias="profileId"),
    user: AuthUser = Depends(current_user),
    db: Database = Depends(get_db),
):
    if not profile_id:
        raise HTTPException(status_code=400, detail="Profile ID is required")
    try:
        stats = profile_analytics(db, user.id, profile_id)
    except ProfileNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ProfileAnalyticsOutput(
        total_views=stats["total_views"],
        unique_visitors=stats["unique_visitors"],
        engagement_rate=stats["engagement_rate"],
        daily_views=[DailyViews(**d) for d in stats["daily_views"]],
        top_sources=[SourceCount(**s) for s in stats["top_sources"]],
        last_updated=stats["last_updated"],
    )


@router.get("/{slug}", response_model=PublicProfileOutput)
def read_public_profile(
    slug: str,
    request: Request,
    viewer: Optional[AuthUser] = Depends(optional_user),
    db: Database = Depends(get_db),
):
    try:
        row = get_published(
            db,
            slug,
            viewer_id=viewer.id if viewer else None,
            visitor=client_identifier(request.headers, request.client.host if request.client else None),
            source=request.headers.get("referer") or "Direct",
        )
    except ProfileNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return PublicProfileOutput(profile=ProfileRecord(**row), visible_sections=visible_sections(row.get("content") or {}))
