from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from herald.tiers.capabilities import ProfileTier


class PolishTone(str, Enum):
    PROFESSIONAL = "professional"
    CASUAL = "casual"
    FORMAL = "formal"


class PolishInput(BaseModel):
    bio: str = Field(..., min_length=50, max_length=5000)
    tone: PolishTone = PolishTone.PROFESSIONAL
    tier: ProfileTier = ProfileTier.ELITE


class PolishMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tone: PolishTone
    tier: ProfileTier
    original_length: int = Field(..., alias="originalLength")
    polished_length: int = Field(..., alias="polishedLength")


class PolishOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    original_bio: str = Field(..., alias="originalBio")
    polished_bio: str = Field(..., alias="polishedBio")
    metadata: PolishMetadata


class PolishUsage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    daily: int = 0
    daily_limit: int = Field(0, alias="dailyLimit")
    remaining: int = 0


class PolishFeatures(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    bio_polish: bool = Field(False, alias="bioPolish")
    tone_options: List[str] = Field(default_factory=lambda: [t.value for t in PolishTone], alias="toneOptions")
    supported_tiers: List[str] = Field(default_factory=lambda: [t.value for t in ProfileTier], alias="supportedTiers")


class PolishStatusOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    has_access: bool = Field(False, alias="hasAccess")
    user_role: str = Field(..., alias="userRole")
    user_tier: Optional[str] = Field(None, alias="userTier")
    usage: PolishUsage
    features: PolishFeatures
