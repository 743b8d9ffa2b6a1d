"""
projectflow/models/feature.py

Product feature records. Enum members carry the exact display strings
used by clients ("UI/UX", "XL").
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FeaturePriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class FeatureEffort(str, Enum):
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"
    XL = "XL"


class FeatureCategory(str, Enum):
    CORE = "Core"
    ENHANCEMENT = "Enhancement"
    INTEGRATION = "Integration"
    UI_UX = "UI/UX"
    PERFORMANCE = "Performance"
    SECURITY = "Security"


class Feature(BaseModel):
    model_config = ConfigDict(frozen=True)

    feature_id: str
    project_id: str
    title: str
    description: Optional[str] = None
    priority: FeaturePriority = FeaturePriority.MEDIUM
    effort: FeatureEffort = FeatureEffort.MEDIUM
    category: FeatureCategory = FeatureCategory.CORE
    user_id: Optional[str] = Field(default=None, description="Creator user ID")
    added_to_task: bool = False
    implementation_details: Optional[str] = None
    created_at: Optional[datetime] = None


class FeatureInput(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    priority: FeaturePriority = FeaturePriority.MEDIUM
    effort: FeatureEffort = FeatureEffort.MEDIUM
    category: FeatureCategory = FeatureCategory.CORE
    implementation_details: Optional[str] = None


class CreateFeaturesRequest(BaseModel):
    features: List[FeatureInput] = Field(min_length=1)


class FeatureUpdateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[FeaturePriority] = None
    effort: Optional[FeatureEffort] = None
    category: Optional[FeatureCategory] = None
    implementation_details: Optional[str] = None
