"""
projectflow/api/members.py
Project membership API. Email notifications are sent when Resend is
configured and skipped otherwise.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from projectflow.core.auth import get_current_user_id
from projectflow.core.logging import request_id_for
from projectflow.features.members import service
from projectflow.features.notifications.email import EmailClient, get_optional_email_client
from projectflow.models.member import AddMemberRequest, UpdateMemberRoleRequest

router = APIRouter(prefix="/api/members", tags=["members"])


@router.get("/shared-projects")
def shared_projects_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    projects = service.list_shared_projects(user_id)
    return {"data": [p.model_dump(mode="json") for p in projects], "request_id": request_id_for(request)}


@router.get("/workspace")
def workspace_members_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    members = service.list_workspace_members(user_id)
    return {"data": [m.model_dump(mode="json") for m in members], "request_id": request_id_for(request)}


@router.get("/{project_id}")
def list_members_endpoint(project_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    members = service.list_members(user_id, project_id)
    return {"data": [m.model_dump(mode="json") for m in members], "request_id": request_id_for(request)}


@router.post("/{project_id}", status_code=201)
def add_member_endpoint(
    project_id: str,
    body: AddMemberRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    email_client: Optional[EmailClient] = Depends(get_optional_email_client),
):
    member = service.add_member(user_id, project_id, body.member_email, body.role, email_client)
    return {"data": member.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.put("/{project_id}/{member_user_id}")
def update_member_role_endpoint(
    project_id: str,
    member_user_id: str,
    body: UpdateMemberRoleRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    email_client: Optional[EmailClient] = Depends(get_optional_email_client),
):
    member = service.update_member_role(user_id, project_id, member_user_id, body.new_role, email_client)
    return {"data": member.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.delete("/{project_id}/{member_user_id}")
def remove_member_endpoint(
    project_id: str,
    member_user_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    email_client: Optional[EmailClient] = Depends(get_optional_email_client),
):
    service.remove_member(user_id, project_id, member_user_id, email_client)
    return {"data": {"user_id": member_user_id, "removed": True}, "request_id": request_id_for(request)}
