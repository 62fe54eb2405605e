from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProfileStatus(str, Enum):
    DRAFT = "draft"
    UNDER_REVIEW = "under_review"
    PUBLISHED = "published"
    REJECTED = "rejected"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ProfileRecord(BaseModel):
    id: str
    user_id: str
    tier: str
    content: Dict[str, Any] = {}
    slug: str
    status: ProfileStatus = ProfileStatus.DRAFT
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_id: Optional[str] = None
    is_published: bool = False
    published_at: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class SaveDraftInput(BaseModel):
    # content/tier are checked by hand so a missing one yields a 400, not a 422
    content: Optional[Dict[str, Any]] = None
    tier: Optional[str] = None
    slug: Optional[str] = None
    auto_save: bool = False
    manual_save: bool = False


class SaveDraftOutput(BaseModel):
    success: bool = True
    profile: ProfileRecord
    message: str = "Draft saved successfully"


class DraftUser(BaseModel):
    role: Optional[str] = None
    tier: Optional[str] = None


class GetDraftOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_draft: bool = Field(False, alias="hasDraft")
    profile: Optional[ProfileRecord] = None
    user: Optional[DraftUser] = None


class DeleteDraftOutput(BaseModel):
    success: bool = True
    message: str = "Draft deleted successfully"


class PublishInput(BaseModel):
    slug: Optional[str] = None


class PublishOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    profile: ProfileRecord
    public_url: str = Field(..., alias="publicUrl")
    message: str = "Profile published successfully!"


class PublishStatusOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_published: bool = Field(False, alias="isPublished")
    published_at: Optional[str] = Field(None, alias="publishedAt")


class PublicProfileOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    profile: ProfileRecord
    visible_sections: List[str] = Field([], alias="visibleSections")


class DailyViews(BaseModel):
    date: str
    views: int


class SourceCount(BaseModel):
    source: str
    count: int


class ProfileAnalyticsOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_views: int = Field(0, alias="totalViews")
    unique_visitors: int = Field(0, alias="uniqueVisitors")
    engagement_rate: str = Field("0%", alias="engagementRate")
    daily_views: List[DailyViews] = Field([], alias="dailyViews")
    top_sources: List[SourceCount] = Field([], alias="topSources")
    last_updated: str = Field(..., alias="lastUpdated")
