"""
projectflow/api/chat.py
Project chat API.
"""

from fastapi import APIRouter, Depends, Query, Request

from projectflow.core.auth import get_current_user_id
from projectflow.core.logging import request_id_for
from projectflow.features.chat import service
from projectflow.features.chat.service import DEFAULT_LIMIT
from projectflow.models.chat import SendMessageRequest

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("/{project_id}/messages", status_code=201)
def send_message_endpoint(
    project_id: str,
    body: SendMessageRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    message = service.send_message(user_id, project_id, body)
    return {"data": message.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.get("/{project_id}/messages")
def list_messages_endpoint(
    project_id: str,
    request: Request,
    limit: int = Query(DEFAULT_LIMIT, description="Newest messages to return, oldest first"),
    user_id: str = Depends(get_current_user_id),
):
    messages = service.list_messages(user_id, project_id, limit)
    return {
        "data": [m.model_dump(mode="json") for m in messages],
        "count": len(messages),
        "request_id": request_id_for(request),
    }


@router.delete("/messages/{message_id}")
def delete_message_endpoint(message_id: int, request: Request, user_id: str = Depends(get_current_user_id)):
    service.delete_message(user_id, message_id)
    return {"data": {"message_id": message_id, "deleted": True}, "request_id": request_id_for(request)}
