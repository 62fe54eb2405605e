from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from herald.shared.utils import is_http_url
from herald.tiers.capabilities import NominationTier


class NominationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NominationInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nominator_email: EmailStr = Field(..., alias="nominatorEmail")
    nominator_name: str = Field(..., alias="nominatorName", min_length=2, max_length=100)
    nominee_name: str = Field(..., alias="nomineeName", min_length=2, max_length=100)
    nominee_email: EmailStr = Field(..., alias="nomineeEmail")
    pitch: str = Field(..., min_length=100, max_length=2000)
    links: List[str] = Field(default_factory=list)
    suggested_tier: Optional[NominationTier] = Field(None, alias="suggestedTier")
    # honeypot; humans never fill it in
    website: str = Field("", max_length=0)
    consent: bool

    @field_validator("links")
    @classmethod
    def check_links(cls, v: List[str]) -> List[str]:
        for url in v:
            if not is_http_url(url):
                raise ValueError("Please enter a valid URL")
        return v

    @field_validator("consent")
    @classmethod
    def check_consent(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must agree to the terms and conditions")
        return v


class NominationRecord(BaseModel):
    id: str
    nominator_email: str
    nominator_name: str
    nominee_name: str
    nominee_email: str
    pitch: str
    links: Optional[List[str]] = None
    assigned_tier: Optional[NominationTier] = None
    status: NominationStatus = NominationStatus.PENDING
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class SubmitNominationOutput(BaseModel):
    success: bool = True
    message: str = "Nomination submitted successfully"


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(..., alias="totalPages")


class NominationListOutput(BaseModel):
    nominations: List[NominationRecord]
    pagination: Pagination


class ReviewNominationInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: NominationStatus
    assigned_tier: Optional[NominationTier] = Field(None, alias="assignedTier")

    @field_validator("status")
    @classmethod
    def check_decision(cls, v: NominationStatus) -> NominationStatus:
        if v == NominationStatus.PENDING:
            raise ValueError("Review must approve or reject")
        return v


class ReviewNominationOutput(BaseModel):
    success: bool = True
    nomination: NominationRecord
