"""Pydantic schemas for the caller's profile."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str | None
    is_pro: bool
    subscription_status: str | None
    trial_ends_at: datetime | None
    created_at: datetime
    updated_at: datetime
