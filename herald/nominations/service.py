import math
from typing import Any, Dict, List, Optional, Tuple

from herald.shared.db import Database
from herald.shared.logging import get_logger
from herald.shared.utils import utc_now_iso
from herald.tiers.capabilities import NominationTier
from .schemas import NominationInput, NominationStatus

logger = get_logger("nominations.service")


class NominationNotFound(Exception):
    pass


def submit_nomination(db: Database, data: NominationInput) -> Dict[str, Any]:
    row = db.insert(
        "nominations",
        {
            "nominator_email": str(data.nominator_email),
            "nominator_name": data.nominator_name,
            "nominee_name": data.nominee_name,
            "nominee_email": str(data.nominee_email),
            "pitch": data.pitch,
            "links": data.links or None,
            "assigned_tier": data.suggested_tier.value if data.suggested_tier else None,
            "status": NominationStatus.PENDING.value,
        },
    )
    logger.info(f"nomination received id={row['id']}")
    return row


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit > 0 else 0


def list_nominations(db: Database, *, page: int = 1, limit: int = 10, status: Optional[str] = None) -> Tuple[List[Dict[str, Any]], int]:
    filters = {"status": status} if status else {}
    rows = db.select("nominations", order_by="created_at", descending=True, **filters)
    offset = (page - 1) * limit
    return rows[offset:offset + limit], len(rows)


def review_nomination(
    db: Database,
    nomination_id: str,
    status: NominationStatus,
    reviewer_id: str,
    assigned_tier: Optional[NominationTier] = None,
) -> Dict[str, Any]:
    row = db.get("nominations", nomination_id)
    if row is None:
        raise NominationNotFound("Nomination not found")
    changes: Dict[str, Any] = {"status": status.value, "reviewed_by": reviewer_id, "reviewed_at": utc_now_iso()}
    if assigned_tier is not None:
        changes["assigned_tier"] = assigned_tier.value
    updated = db.update("nominations", nomination_id, changes)
    logger.info(f"nomination {nomination_id} {status.value} by {reviewer_id}")
    return updated
