from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping


class ProfileTier(str, Enum):
    RISING = "rising"
    ELITE = "elite"
    LEGACY = "legacy"

    @property
    def capabilities(self) -> "TierCapabilities":
        return CAPABILITIES[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()


class NominationTier(str, Enum):
    EMERGING = "emerging"
    ACCOMPLISHED = "accomplished"
    DISTINGUISHED = "distinguished"
    LEGACY = "legacy"


@dataclass(frozen=True)
class TierPrice:
    amount: int  # paise
    currency: str
    period: str  # year | lifetime

    @property
    def display(self) -> str:
        rupees = self.amount // 100
        suffix = " lifetime" if self.period == "lifetime" else f"/{self.period}"
        return f"₹{rupees:,}{suffix}"


@dataclass(frozen=True)
class TierCapabilities:
    tier: ProfileTier
    sections: FrozenSet[str]
    max_links: int
    max_gallery: int
    price: TierPrice
    description: str

    def allows(self, section: str) -> bool:
        return section in self.sections


BASE_SECTIONS = frozenset({"name", "tagline", "bio", "heroImage", "achievements", "links", "sections"})
RISING_SECTIONS = frozenset({"milestones", "inspirations", "futureVision"})
ELITE_SECTIONS = frozenset({"quote", "gallery", "heroVideo", "leadershipHighlights", "impactMetrics", "featuredPress"})
LEGACY_SECTIONS = frozenset({"timeline", "enduringContributions", "tributes", "archivalNotes"})


CAPABILITIES: Dict[ProfileTier, TierCapabilities] = {
    ProfileTier.RISING: TierCapabilities(
        tier=ProfileTier.RISING,
        sections=BASE_SECTIONS | RISING_SECTIONS,
        max_links=3,
        max_gallery=0,
        price=TierPrice(300000, "INR", "year"),
        description="For emerging brilliance, showcase your potential",
    ),
    ProfileTier.ELITE: TierCapabilities(
        tier=ProfileTier.ELITE,
        sections=BASE_SECTIONS | ELITE_SECTIONS,
        max_links=8,
        max_gallery=10,
        price=TierPrice(1000000, "INR", "year"),
        description="For commanding presence, establish your authority",
    ),
    ProfileTier.LEGACY: TierCapabilities(
        tier=ProfileTier.LEGACY,
        sections=BASE_SECTIONS | ELITE_SECTIONS | LEGACY_SECTIONS,
        max_links=15,
        max_gallery=25,
        price=TierPrice(2000000, "INR", "lifetime"),
        description="For eternal reverence, immortalize your impact",
    ),
}


def parse_tier(value: Any) -> ProfileTier:
    if isinstance(value, ProfileTier):
        return value
    try:
        return ProfileTier(str(value or "").strip().lower())
    except ValueError:
        raise ValueError(f"Unknown tier: {value!r}")


def _is_populated(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    return True


def disallowed_sections(content: Mapping[str, Any], tier: ProfileTier | str) -> List[str]:
    """Populated content keys the tier is not allowed to edit, sorted."""
    caps = parse_tier(tier).capabilities
    return sorted(k for k, v in (content or {}).items() if _is_populated(v) and not caps.allows(k))


def over_limit_sections(content: Mapping[str, Any], tier: ProfileTier | str) -> List[str]:
    """Sections holding more items than the tier allows (links, gallery)."""
    caps = parse_tier(tier).capabilities
    limits = {"links": caps.max_links, "gallery": caps.max_gallery}
    out = []
    for key, limit in limits.items():
        items = (content or {}).get(key)
        if isinstance(items, list) and len(items) > limit:
            out.append(key)
    return sorted(out)
