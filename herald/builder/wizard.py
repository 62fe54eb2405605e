from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Set

from herald.shared.config import SLUG_POLICY
from herald.shared.logging import get_logger
from herald.shared.utils import generate_slug, now_ms, utc_now
from herald.tiers.capabilities import BASE_SECTIONS, ProfileTier, parse_tier
from .client import ApiError, ProfileApiClient
from .notifications import NotificationCenter

logger = get_logger("builder.wizard")


class WizardStep(IntEnum):
    TIER_SELECTION = 0
    BASIC_INFO = 1
    BIOGRAPHY = 2
    ACHIEVEMENTS = 3
    LINKS_MEDIA = 4
    PREVIEW = 5

    @property
    def title(self) -> str:
        return STEP_TITLES[self]


STEP_TITLES = {
    WizardStep.TIER_SELECTION: "Choose Tier",
    WizardStep.BASIC_INFO: "Basic Info",
    WizardStep.BIOGRAPHY: "Biography",
    WizardStep.ACHIEVEMENTS: "Achievements",
    WizardStep.LINKS_MEDIA: "Links & Media",
    WizardStep.PREVIEW: "Preview",
}

FIRST_STEP = WizardStep.TIER_SELECTION
LAST_STEP = WizardStep.PREVIEW

MIN_AUTO_SAVE_NAME = 2


@dataclass
class WizardState:
    current_step: WizardStep = FIRST_STEP
    completed_steps: Set[WizardStep] = field(default_factory=set)
    form: Dict[str, Any] = field(default_factory=dict)
    tier: Optional[ProfileTier] = None
    slug: Optional[str] = None
    profile_id: Optional[str] = None
    hero_preview: Optional[str] = None  # picked but not yet uploaded
    last_saved_at: Optional[datetime] = None
    is_saving: bool = False


def _text(value: Any) -> str:
    return str(value or "").strip()


def _bio_text(form: Dict[str, Any]) -> str:
    bio = form.get("bio")
    if isinstance(bio, dict):
        return _text(bio.get("original"))
    return _text(bio)


STEP_GATES: Dict[WizardStep, Callable[[WizardState], bool]] = {
    WizardStep.TIER_SELECTION: lambda s: s.tier is not None,
    WizardStep.BASIC_INFO: lambda s: bool(
        _text(s.form.get("name")) and _text(s.form.get("tagline")) and (s.form.get("heroImage") or s.hero_preview)
    ),
    WizardStep.BIOGRAPHY: lambda s: bool(_bio_text(s.form)),
    WizardStep.ACHIEVEMENTS: lambda s: len(s.form.get("achievements") or []) > 0,
    WizardStep.LINKS_MEDIA: lambda s: len(s.form.get("links") or []) > 0,
    WizardStep.PREVIEW: lambda s: True,
}


class WizardController:
    """
    Drives the profile builder: step navigation, per-step gates, and the
    draft/publish calls against the profile API.

    Auto-save failures are only logged. Manual save, publish and bio
    polishing report failures through ``notifications`` and leave the
    wizard where it was so the user can retry.
    """

    def __init__(
        self,
        client: ProfileApiClient,
        *,
        notifications: Optional[NotificationCenter] = None,
        slug_policy: str = SLUG_POLICY,
        clock: Callable[[], int] = now_ms,
        state: Optional[WizardState] = None,
    ):
        if slug_policy not in ("per_save", "stable"):
            raise ValueError(f"Unknown slug policy: {slug_policy}")
        self.client = client
        self.notifications = notifications or NotificationCenter()
        self.slug_policy = slug_policy
        self.clock = clock
        self.state = state or WizardState()

    # Navigation
    def can_continue(self) -> bool:
        return STEP_GATES[self.state.current_step](self.state)

    def go_to_next_step(self) -> bool:
        s = self.state
        if s.current_step >= LAST_STEP or not self.can_continue():
            return False
        s.completed_steps.add(s.current_step)
        s.current_step = WizardStep(s.current_step + 1)
        return True

    def go_to_previous_step(self) -> bool:
        s = self.state
        if s.current_step <= FIRST_STEP:
            return False
        s.current_step = WizardStep(s.current_step - 1)
        return True

    # Form editing
    def update(self, **fields: Any) -> None:
        self.state.form.update(fields)

    def select_tier(self, tier: ProfileTier | str) -> None:
        self.state.tier = parse_tier(tier)

    def set_bio(self, original: str) -> None:
        bio = dict(self.state.form.get("bio") or {})
        bio["original"] = original
        self.state.form["bio"] = bio

    def visible_sections(self) -> List[str]:
        if self.state.tier is None:
            return sorted(BASE_SECTIONS)
        return sorted(self.state.tier.capabilities.sections)

    # Persistence
    def _slug_for_save(self) -> str:
        if self.slug_policy == "stable" and self.state.slug:
            return self.state.slug
        return generate_slug(_text(self.state.form.get("name")), self.clock())

    def _save(self, *, auto: bool) -> Dict[str, Any]:
        s = self.state
        slug = self._slug_for_save()
        tier = s.tier.value if s.tier else None
        s.is_saving = True
        try:
            resp = self.client.save_draft(dict(s.form), tier, slug, auto_save=auto)
        finally:
            s.is_saving = False
        profile = resp.get("profile") or {}
        s.slug = profile.get("slug") or slug
        s.profile_id = profile.get("id") or s.profile_id
        s.last_saved_at = utc_now()
        return profile

    def auto_save(self) -> bool:
        """Returns whether a save request was issued."""
        if len(_text(self.state.form.get("name"))) < MIN_AUTO_SAVE_NAME:
            return False
        try:
            self._save(auto=True)
        except ApiError as e:
            logger.warning(f"auto-save failed: {e.status} {e.message}")
        return True

    def save_draft(self) -> bool:
        try:
            self._save(auto=False)
        except ApiError as e:
            logger.error(f"save draft failed: {e.status} {e.message}")
            self.notifications.notify("Failed to save draft", "error", e.message)
            return False
        self.notifications.notify("Draft saved", "success", "Your progress has been saved.")
        return True

    def publish(self) -> Optional[str]:
        """Save, then publish by slug. Returns the public URL on success."""
        try:
            self._save(auto=False)
            resp = self.client.publish(self.state.slug)
        except ApiError as e:
            logger.error(f"publish failed: {e.status} {e.message}")
            self.notifications.notify("Failed to publish profile", "error", e.message)
            return None
        url = resp.get("publicUrl")
        self.notifications.notify("Profile published", "success", resp.get("message"))
        return url

    def polish_bio(self, tone: str = "professional") -> Optional[str]:
        original = _bio_text(self.state.form)
        tier = self.state.tier.value if self.state.tier else None
        try:
            resp = self.client.polish_bio(original, tone, tier)
        except ApiError as e:
            logger.warning(f"bio polish failed: {e.status} {e.message}")
            self.notifications.notify("AI Enhancement Failed", "error", e.message)
            return None
        polished = resp.get("polishedBio") or ""
        bio = dict(self.state.form.get("bio") or {})
        bio.setdefault("original", original)
        bio["ai_polished"] = polished
        self.state.form["bio"] = bio
        self.notifications.notify("Biography Enhanced", "success", "Your bio has been polished with AI. Review and edit as needed.")
        return polished
