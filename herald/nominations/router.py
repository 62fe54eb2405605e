from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from herald.auth.schemas import UserRecord
from herald.auth.session import require_role
from herald.shared.config import Settings
from herald.shared.db import Database, DatabaseError
from herald.shared.deps import enforce_rate_limit, get_db, get_settings
from herald.shared.errors import invalid_input
from herald.shared.logging import get_logger
from .schemas import (
    NominationInput,
    NominationListOutput,
    NominationRecord,
    NominationStatus,
    Pagination,
    ReviewNominationInput,
    ReviewNominationOutput,
    SubmitNominationOutput,
)
from .service import NominationNotFound, list_nominations, review_nomination, submit_nomination, total_pages

logger = get_logger("nominations.router")


router = APIRouter()

require_admin = require_role("admin", "super_admin")


@router.post("", status_code=201, response_model=SubmitNominationOutput)
async def create_nomination(request: Request, db: Database = Depends(get_db), settings: Settings = Depends(get_settings)):
    enforce_rate_limit(request, settings.nomination_hourly_limit, "1h", "Too many requests. Please try again later.")
    try:
        body = await request.json()
    except ValueError:
        raise invalid_input([{"loc": (), "msg": "Malformed JSON body"}])

    if isinstance(body, dict) and body.get("website"):
        logger.info("nomination honeypot tripped")
        raise HTTPException(status_code=400, detail="Spam detected")

    try:
        data = NominationInput.model_validate(body)
    except ValidationError as e:
        raise invalid_input(e.errors())

    try:
        submit_nomination(db, data)
    except DatabaseError as e:
        logger.error(f"nomination insert failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to submit nomination")
    return SubmitNominationOutput()


@router.get("", response_model=NominationListOutput)
def read_nominations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[NominationStatus] = Query(None),
    admin: UserRecord = Depends(require_admin),
    db: Database = Depends(get_db),
):
    rows, total = list_nominations(db, page=page, limit=limit, status=status.value if status else None)
    return NominationListOutput(
        nominations=[NominationRecord(**r) for r in rows],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
    )


@router.patch("/{nomination_id}", response_model=ReviewNominationOutput)
def review(
    nomination_id: str,
    payload: ReviewNominationInput,
    admin: UserRecord = Depends(require_admin),
    db: Database = Depends(get_db),
):
    try:
        row = review_nomination(db, nomination_id, payload.status, admin.id, payload.assigned_tier)
    except NominationNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ReviewNominationOutput(nomination=NominationRecord(**row))
