"""
projectflow/models/user_plan.py

Credit ledger per user. A new plan is free with the default credit grant.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PlanType(str, Enum):
    FREE = "free"
    BASIC = "basic"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class UserPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    plan_type: PlanType = PlanType.FREE
    credits_remaining: int
    credits_used: int = 0
    plan_started_at: datetime
    plan_ends_at: Optional[datetime] = None
    is_active: bool = True
    cancel_at_period_end: bool = False
    current_period_end: Optional[datetime] = None
    team_size: int = 1


class DeductCreditsRequest(BaseModel):
    credits_to_deduct: int = Field(gt=0)


class AddCreditsRequest(BaseModel):
    user_id: str
    credits_to_add: int = Field(gt=0)
