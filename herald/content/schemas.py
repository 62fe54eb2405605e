from __future__ import annotations

import datetime as dt
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from herald.shared.utils import is_http_url, url_path


IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
VIDEO_EXTENSIONS = (".mp4", ".webm")
# Storage/CDN hosts whose URLs carry no file extension
IMAGE_HOST_MARKERS = ("supabase", "cloudinary", "imgur")
VIDEO_HOST_MARKERS = ("supabase",)
VIDEO_EMBED_MARKERS = ("youtube.com/embed/", "youtu.be/", "vimeo.com/", "player.vimeo.com/")

MIN_YEAR = 1800


def is_image_url(url: str) -> bool:
    if not is_http_url(url):
        return False
    return url_path(url).endswith(IMAGE_EXTENSIONS) or any(m in url for m in IMAGE_HOST_MARKERS)


def is_video_url(url: str) -> bool:
    if not is_http_url(url):
        return False
    if url_path(url).endswith(VIDEO_EXTENSIONS) or any(m in url for m in VIDEO_HOST_MARKERS):
        return True
    return any(m in url for m in VIDEO_EMBED_MARKERS)


def _check_url(v: str) -> str:
    if not is_http_url(v):
        raise ValueError("Invalid URL format")
    return v


def _check_image(v: str) -> str:
    _check_url(v)
    if not is_image_url(v):
        raise ValueError("Must be a valid image URL")
    return v


def _check_video(v: str) -> str:
    _check_url(v)
    if not is_video_url(v):
        raise ValueError("Must be a valid video URL or embed")
    return v


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Timestamped(_Model):
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class SectionConfig(_Model):
    visible: bool = True
    auto_hide_if_empty: bool = True


class SectionsConfig(_Model):
    achievements: Optional[SectionConfig] = None
    timeline: Optional[SectionConfig] = None
    gallery: Optional[SectionConfig] = None
    milestones: Optional[SectionConfig] = None
    leadership_highlights: Optional[SectionConfig] = Field(None, alias="leadershipHighlights")
    tributes: Optional[SectionConfig] = None


class PolishableText(_Model):
    original: str = Field(..., min_length=50, max_length=2000)
    ai_polished: Optional[str] = Field(None, max_length=3000)


class ShortText(_Model):
    original: Optional[str] = Field(None, max_length=1000)
    ai_polished: Optional[str] = Field(None, max_length=1500)


class LongText(_Model):
    original: Optional[str] = Field(None, max_length=2000)
    ai_polished: Optional[str] = Field(None, max_length=3000)


class MediaItem(Timestamped):
    url: str
    caption: Optional[str] = Field(None, max_length=200)
    type: Literal["image", "video"] = "image"
    year: Optional[str] = Field(None, max_length=4)
    order: int = Field(0, ge=0)
    featured: bool = False

    @field_validator("url")
    @classmethod
    def check_media_url(cls, v: str) -> str:
        _check_url(v)
        if not (is_image_url(v) or is_video_url(v)):
            raise ValueError("Must be a valid image or video URL")
        return v


class Milestone(Timestamped):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=10, max_length=500)
    date: str = Field(..., min_length=1)
    category: Optional[str] = Field(None, max_length=50)


class Inspiration(Timestamped):
    quote: str = Field(..., min_length=10, max_length=500)
    author: str = Field(..., min_length=1, max_length=100)
    context: Optional[str] = Field(None, max_length=200)


class LeadershipHighlight(Timestamped):
    title: str = Field(..., min_length=1, max_length=100)
    organization: str = Field(..., min_length=1, max_length=100)
    duration: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=10, max_length=500)
    impact: Optional[str] = Field(None, max_length=500)


class ImpactMetric(Timestamped):
    metric: str = Field(..., min_length=1, max_length=100)
    value: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=200)


class PressFeature(Timestamped):
    title: str = Field(..., min_length=1, max_length=200)
    publication: str = Field(..., min_length=1, max_length=100)
    url: str
    date: str = Field(..., min_length=1)
    excerpt: Optional[str] = Field(None, max_length=300)

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        return _check_url(v)


class TimelineEntry(Timestamped):
    year: StrictInt
    event: str = Field(..., min_length=1, max_length=200)
    significance: str = Field(..., min_length=10, max_length=500)

    @field_validator("year")
    @classmethod
    def check_year(cls, v: int) -> int:
        # upper bound moves with the calendar, so it is checked per call
        current = dt.date.today().year
        if v < MIN_YEAR or v > current:
            raise ValueError(f"Year must be between {MIN_YEAR} and {current}")
        return v


class Tribute(Timestamped):
    text: str = Field(..., min_length=10, max_length=1000)
    author: str = Field(..., min_length=1, max_length=100)
    relationship: Optional[str] = Field(None, max_length=100)
    date: Optional[str] = None


class Achievement(Timestamped):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=10, max_length=1000)
    year: Optional[str] = Field(None, max_length=4)
    category: Optional[str] = Field(None, max_length=50)


class Quote(_Model):
    text: str = Field(..., min_length=10, max_length=1000)
    attribution: Optional[str] = Field(None, max_length=200)


class Link(Timestamped):
    title: str = Field(..., min_length=1, max_length=100)
    url: str
    type: Literal["website", "linkedin", "twitter", "other"] = "other"

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        return _check_url(v)


class ProfileContent(_Model):
    """
    Superset content blob shared by every tier.

    Only name and bio are required; every tier-specific section is optional
    whatever the profile's tier is.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    # Base fields (all tiers)
    name: str = Field(..., min_length=2, max_length=100)
    tagline: Optional[str] = Field(None, max_length=200)
    bio: PolishableText

    hero_image: Optional[str] = Field(None, alias="heroImage")
    hero_video: Optional[str] = Field(None, alias="heroVideo")
    gallery: Optional[List[MediaItem]] = None

    sections: Optional[SectionsConfig] = None

    # Rising
    milestones: Optional[List[Milestone]] = None
    inspirations: Optional[List[Inspiration]] = None
    future_vision: Optional[ShortText] = Field(None, alias="futureVision")

    # Elite
    leadership_highlights: Optional[List[LeadershipHighlight]] = Field(None, alias="leadershipHighlights")
    impact_metrics: Optional[List[ImpactMetric]] = Field(None, alias="impactMetrics")
    featured_press: Optional[List[PressFeature]] = Field(None, alias="featuredPress")

    # Legacy
    timeline: Optional[List[TimelineEntry]] = None
    enduring_contributions: Optional[LongText] = Field(None, alias="enduringContributions")
    tributes: Optional[List[Tribute]] = None
    archival_notes: Optional[ShortText] = Field(None, alias="archivalNotes")

    # Common
    achievements: Optional[List[Achievement]] = None
    quote: Optional[Quote] = None
    links: Optional[List[Link]] = None

    @field_validator("hero_image")
    @classmethod
    def check_hero_image(cls, v: Optional[str]) -> Optional[str]:
        return _check_image(v) if v is not None else v

    @field_validator("hero_video")
    @classmethod
    def check_hero_video(cls, v: Optional[str]) -> Optional[str]:
        return _check_video(v) if v is not None else v

    def to_blob(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ContentValidation(BaseModel):
    ok: bool
    content: Optional[ProfileContent] = None
    errors: dict[str, str] = {}
