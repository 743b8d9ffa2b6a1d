from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class MemberRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class MemberWithRole(BaseModel):
    """Read-only view joining a project's role map with user profiles."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    name: str
    email: Optional[str] = None
    role: MemberRole


class AddMemberRequest(BaseModel):
    member_email: str = Field(min_length=3)
    role: MemberRole = MemberRole.MEMBER


class UpdateMemberRoleRequest(BaseModel):
    new_role: MemberRole


class WorkspaceMember(BaseModel):
    """One person across every project the caller owns or belongs to."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    name: str
    email: Optional[str] = None
    roles: Dict[str, MemberRole] = Field(default_factory=dict, description="project_id -> role")
    projects: Dict[str, str] = Field(default_factory=dict, description="project_id -> project name")
