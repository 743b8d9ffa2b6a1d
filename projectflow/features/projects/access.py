"""
Project authorization.

Roles come from the project row: the owner is `projects.user_id`, every
other member is a key in `members_with_role`. All permission checks for
projects, features, tasks and members go through this module.
"""

from typing import Optional

from sqlalchemy import select

from projectflow.core.database import get_db_session, projects
from projectflow.core.errors import NotFoundError, PermissionError
from projectflow.models.member import MemberRole
from projectflow.models.project import Project

MANAGE_ROLES = {MemberRole.OWNER.value, MemberRole.ADMIN.value}
TASK_EDIT_ROLES = {MemberRole.OWNER.value, MemberRole.ADMIN.value, MemberRole.MEMBER.value}


def to_project(row) -> Project:
    data = dict(row._mapping)
    data["members_with_role"] = data.get("members_with_role") or {}
    data["context_answers"] = data.get("context_answers") or {}
    return Project(**data)


def load_project(project_id: str) -> Project:
    """Fetch a project row or raise NotFoundError."""
    with get_db_session() as session:
        row = session.execute(
            select(projects).where(projects.c.project_id == project_id)
        ).first()
    if not row:
        raise NotFoundError(f"Project {project_id} not found")
    return to_project(row)


def role_for(project: Project, user_id: Optional[str]) -> Optional[str]:
    if not user_id:
        return None
    if project.user_id == user_id:
        return MemberRole.OWNER.value
    return project.members_with_role.get(user_id)


def is_member(project: Project, user_id: Optional[str]) -> bool:
    return role_for(project, user_id) is not None


def can_access_project(project: Project, user_id: Optional[str]) -> bool:
    return is_member(project, user_id)


def can_manage_project(project: Project, user_id: Optional[str]) -> bool:
    return role_for(project, user_id) in MANAGE_ROLES


def can_edit_tasks(project: Project, user_id: Optional[str]) -> bool:
    return role_for(project, user_id) in TASK_EDIT_ROLES


def require_access(project_id: str, user_id: str) -> Project:
    project = load_project(project_id)
    if not can_access_project(project, user_id):
        raise PermissionError("Access denied: you are not a member of this project")
    return project


def require_manage(project_id: str, user_id: str) -> Project:
    project = load_project(project_id)
    if not can_manage_project(project, user_id):
        raise PermissionError("Access denied: owner or admin role required")
    return project


def require_edit_tasks(project_id: str, user_id: str) -> Project:
    project = load_project(project_id)
    if not can_edit_tasks(project, user_id):
        raise PermissionError("Access denied: you don't have permission to modify tasks for this project")
    return project


def require_owner(project_id: str, user_id: str) -> Project:
    project = load_project(project_id)
    if project.user_id != user_id:
        raise PermissionError("Not authorized: only the project owner can do this")
    return project
