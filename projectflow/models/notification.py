from typing import Optional

from pydantic import BaseModel, ConfigDict


class EmailMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    sender: str
    to: str
    subject: str
    html: str


class EmailResult(BaseModel):
    """Outcome of one send attempt. Failures are reported here, never raised."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
