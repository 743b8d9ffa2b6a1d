from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PromptType(str, Enum):
    PROJECT = "project"
    FEATURE = "feature"


class Prompt(BaseModel):
    """A generated implementation prompt saved against a project or feature."""

    model_config = ConfigDict(frozen=True)

    prompt_id: str
    project_id: str
    feature_id: Optional[str] = None
    content: str
    type: PromptType
    user_id: str
    created_at: datetime


class SavePromptRequest(BaseModel):
    project_id: str
    feature_id: Optional[str] = None
    content: str = Field(min_length=1)
    type: PromptType
    created_at: Optional[datetime] = None
