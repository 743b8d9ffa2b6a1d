"""
Project chat.

Messages are append-only except that an author may delete their own.
Listing returns the newest ``limit`` messages in reading order.
"""

from datetime import datetime, timezone
from typing import List

from sqlalchemy import delete, insert, select

from projectflow.core.database import chat_messages, get_db_session
from projectflow.core.errors import NotFoundError, PermissionError, ValidationError
from projectflow.core.logging import log_event
from projectflow.features.projects.access import load_project, require_access
from projectflow.models.chat import ChatMessage, SendMessageRequest

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def to_message(row) -> ChatMessage:
    return ChatMessage(**dict(row._mapping))


def send_message(user_id: str, project_id: str, body: SendMessageRequest) -> ChatMessage:
    # Existence is checked before the insert.
    load_project(project_id)
    with get_db_session() as session:
        result = session.execute(
            insert(chat_messages).values(
                project_id=project_id,
                user_id=user_id,
                content=body.content,
                timestamp=datetime.now(timezone.utc),
                user_name=body.user_name,
                user_image_url=body.user_image_url,
            )
        )
        message_id = result.inserted_primary_key[0]
        row = session.execute(
            select(chat_messages).where(chat_messages.c.message_id == message_id)
        ).first()
    return to_message(row)


def list_messages(user_id: str, project_id: str, limit: int = DEFAULT_LIMIT) -> List[ChatMessage]:
    require_access(project_id, user_id)
    if limit < 1 or limit > MAX_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_LIMIT}")
    with get_db_session() as session:
        rows = session.execute(
            select(chat_messages)
            .where(chat_messages.c.project_id == project_id)
            .order_by(chat_messages.c.timestamp.desc(), chat_messages.c.message_id.desc())
            .limit(limit)
        ).fetchall()
    return [to_message(r) for r in reversed(rows)]


def delete_message(user_id: str, message_id: int) -> bool:
    """Delete a message. Only its author may do this."""
    with get_db_session() as session:
        row = session.execute(
            select(chat_messages).where(chat_messages.c.message_id == message_id)
        ).first()
        if not row:
            raise NotFoundError("Message not found")
        if row.user_id != user_id:
            log_event("warning", "chat.delete.denied", user_id=user_id, project_id=row.project_id, error_code="forbidden")
            raise PermissionError("You can only delete your own messages")
        session.execute(delete(chat_messages).where(chat_messages.c.message_id == message_id))
    return True
