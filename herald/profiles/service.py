from __future__ import annotations

from collections import Counter
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from herald.content.validator import AUTO_HIDE_SECTIONS, should_show_section, validate_profile_content
from herald.shared.db import Database
from herald.shared.logging import get_logger
from herald.shared.utils import generate_slug, utc_now, utc_now_iso
from herald.tiers.capabilities import ProfileTier, TierPrice, disallowed_sections, over_limit_sections, parse_tier
from .schemas import PaymentStatus, ProfileStatus

logger = get_logger("profiles.service")


SITE_NAME = "ICONS HERALD"

ANALYTICS_WINDOW_DAYS = 30
TOP_SOURCES = 5
ENGAGED_SECONDS = 30


class ProfileNotFound(Exception):
    pass


class TierPolicyViolation(Exception):
    def __init__(self, tier: ProfileTier, sections: List[str]):
        super().__init__(f"{tier.value} tier cannot edit: {', '.join(sections)}")
        self.tier = tier
        self.sections = sections


class ContentInvalid(Exception):
    def __init__(self, errors: Dict[str, str]):
        super().__init__("Profile content failed validation")
        self.errors = errors


class PaymentRequired(Exception):
    def __init__(self, tier: ProfileTier):
        super().__init__("Payment required")
        self.tier = tier
        self.price: TierPrice = tier.capabilities.price


def public_url(slug: str) -> str:
    return f"/profile/{slug}"


def save_draft(
    db: Database,
    user_id: str,
    content: Dict[str, Any],
    tier: str,
    slug: Optional[str] = None,
    *,
    auto_save: bool = False,
    enforce_tier: bool = False,
) -> Dict[str, Any]:
    """
    Create or overwrite the user's single profile row as a draft.

    Drafts are stored as submitted; they may be incomplete. Saving a
    published profile puts it back into draft.
    """
    ptier = parse_tier(tier)
    if enforce_tier:
        bad = sorted(set(disallowed_sections(content, ptier)) | set(over_limit_sections(content, ptier)))
        if bad:
            raise TierPolicyViolation(ptier, bad)

    profile_slug = slug or generate_slug(str(content.get("name") or ""))
    now = utc_now_iso()
    existing = db.first("profiles", user_id=user_id)
    if existing:
        row = db.update(
            "profiles",
            existing["id"],
            {
                "content": content,
                "tier": ptier.value,
                "slug": profile_slug,
                "status": ProfileStatus.DRAFT.value,
                "is_published": False,
                "updated_at": now,
            },
        )
    else:
        row = db.insert(
            "profiles",
            {
                "user_id": user_id,
                "content": content,
                "tier": ptier.value,
                "slug": profile_slug,
                "status": ProfileStatus.DRAFT.value,
                "payment_status": PaymentStatus.PENDING.value,
                "is_published": False,
                "created_at": now,
                "updated_at": now,
            },
        )
    logger.info(f"draft saved user={user_id} slug={profile_slug} kind={'auto' if auto_save else 'manual'}")
    return row


def get_draft(db: Database, user_id: str) -> Optional[Dict[str, Any]]:
    return db.first("profiles", user_id=user_id, status=ProfileStatus.DRAFT.value)


def delete_draft(db: Database, user_id: str) -> int:
    return db.delete("profiles", user_id=user_id, status=ProfileStatus.DRAFT.value)


def build_meta(content: Dict[str, Any], tier: str) -> Tuple[str, str]:
    name = str(content.get("name") or "").strip()
    bio = content.get("bio") or {}
    original = bio.get("original") if isinstance(bio, dict) else str(bio)
    title = f"{name} - {parse_tier(tier).label} Profile | {SITE_NAME}"
    description = (original or "")[:160] or f"Discover {name}'s profile in our exclusive archive."
    return title, description


def publication_fields(content: Dict[str, Any], tier: str) -> Dict[str, Any]:
    title, description = build_meta(content, tier)
    return {
        "status": ProfileStatus.PUBLISHED.value,
        "is_published": True,
        "published_at": utc_now_iso(),
        "meta_title": title,
        "meta_description": description,
    }


def publish(db: Database, user_id: str, slug: str, *, require_payment: bool = False) -> Dict[str, Any]:
    draft = db.first("profiles", slug=slug, user_id=user_id, status=ProfileStatus.DRAFT.value)
    if not draft:
        raise ProfileNotFound("Draft profile not found")

    result = validate_profile_content(draft.get("content") or {})
    if not result.ok:
        raise ContentInvalid(result.errors)

    if require_payment and draft.get("payment_status") != PaymentStatus.COMPLETED.value:
        raise PaymentRequired(parse_tier(draft["tier"]))

    content = result.content.to_blob()
    row = db.update("profiles", draft["id"], {"content": content, **publication_fields(content, draft["tier"])})
    db.log_event("profile_published", user_id, {"profile_id": row["id"], "tier": row["tier"], "slug": slug})
    logger.info(f"profile published user={user_id} slug={slug}")
    return row


def mark_paid_and_publish(db: Database, profile_id: str, payment_id: str) -> Dict[str, Any]:
    """Publication triggered by a verified payment."""
    row = db.get("profiles", profile_id)
    if row is None:
        raise ProfileNotFound(f"profile {profile_id} not found")
    content = row.get("content") or {}
    result = validate_profile_content(content)
    if result.ok:
        content = result.content.to_blob()
    else:
        logger.warning(f"paid profile {profile_id} has invalid content; publishing as stored")
    changes = {
        "content": content,
        "payment_status": PaymentStatus.COMPLETED.value,
        "payment_id": payment_id,
        **publication_fields(content, row["tier"]),
    }
    updated = db.update("profiles", profile_id, changes)
    db.log_event("profile_published", row["user_id"], {"profile_id": profile_id, "tier": row["tier"], "slug": row["slug"], "via": "payment"})
    return updated


def publish_status(db: Database, slug: str) -> Tuple[bool, Optional[str]]:
    row = db.first("profiles", slug=slug, status=ProfileStatus.PUBLISHED.value)
    if not row:
        return False, None
    return bool(row.get("is_published")), row.get("published_at")


def get_published(
    db: Database,
    slug: str,
    *,
    viewer_id: Optional[str] = None,
    visitor: Optional[str] = None,
    source: str = "Direct",
) -> Dict[str, Any]:
    row = db.first("profiles", slug=slug, status=ProfileStatus.PUBLISHED.value)
    if not row:
        raise ProfileNotFound("Profile not found")
    db.log_event("profile_view", viewer_id, {"profile_id": row["id"], "source": source, "visitor": viewer_id or visitor})
    return row


def visible_sections(content: Dict[str, Any]) -> List[str]:
    sections = content.get("sections") or {}
    return [name for name in AUTO_HIDE_SECTIONS if should_show_section(name, content.get(name), sections)]


def profile_analytics(db: Database, user_id: str, profile_id: str, *, days: int = ANALYTICS_WINDOW_DAYS) -> Dict[str, Any]:
    """
    View statistics for one of the caller's profiles over the last ``days``.

    Visitors are counted by signed-in user id, else by client address.
    Engagement counts views with more than ENGAGED_SECONDS of ``time_spent``.
    """
    if not db.first("profiles", id=profile_id, user_id=user_id):
        raise ProfileNotFound("Profile not found or access denied")

    since = (utc_now() - timedelta(days=days)).isoformat()
    events = db.select(
        "analytics_events",
        event_type="profile_view",
        order_by="created_at",
        where=lambda r: (r.get("metadata") or {}).get("profile_id") == profile_id and r["created_at"] >= since,
    )
    meta = [e.get("metadata") or {} for e in events]

    daily = Counter(e["created_at"][:10] for e in events)
    sources = Counter(m.get("source") or "Direct" for m in meta)
    visitors = {m.get("visitor") or e.get("user_id") for e, m in zip(events, meta)}
    visitors.discard(None)
    if events:
        engaged = sum(1 for m in meta if (m.get("time_spent") or 0) > ENGAGED_SECONDS)
        engagement = f"{engaged / len(events) * 100:.1f}%"
    else:
        engagement = "0%"

    return {
        "total_views": len(events),
        "unique_visitors": len(visitors),
        "engagement_rate": engagement,
        "daily_views": [{"date": d, "views": n} for d, n in sorted(daily.items())],
        "top_sources": [{"source": s, "count": n} for s, n in sources.most_common(TOP_SOURCES)],
        "last_updated": utc_now_iso(),
    }
