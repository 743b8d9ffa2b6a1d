from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Project chat message; only its author may delete it."""

    model_config = ConfigDict(frozen=True)

    message_id: int
    project_id: str
    user_id: str
    content: str
    timestamp: datetime
    user_name: Optional[str] = None
    user_image_url: Optional[str] = None


class SendMessageRequest(BaseModel):
    content: str = Field(min_length=1, max_length=4000)
    user_name: Optional[str] = None
    user_image_url: Optional[str] = None
