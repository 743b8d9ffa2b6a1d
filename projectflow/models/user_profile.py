"""
projectflow/models/user_profile.py

User profile keyed by the identity provider's user ID.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    profile_id: str
    user_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    timezone: str = "UTC"
    stripe_customer_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def display_name(self, fallback: str = "A user") -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or fallback


class EnsureProfileRequest(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    timezone: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    timezone: Optional[str] = None


class ProfilesByIdsRequest(BaseModel):
    user_ids: List[str]
