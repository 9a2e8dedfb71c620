from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class UnlockRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    profile_id: int = Field(..., alias="profileId")


class UnlockResponse(BaseModel):
    success: bool = True
    message: str
    profile_id: int
    credits: int
    already_unlocked: bool


class ApproveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Optional: falls back to the package chosen at registration
    tier: Optional[str] = Field(None, alias="packageType")
