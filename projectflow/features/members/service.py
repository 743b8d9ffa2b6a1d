"""
projectflow/features/members/service.py

Project membership.

Handles:
- Projects shared with a user
- Adding, re-roling and removing members (owner or admin)
- Member listing joined with profiles, per project and workspace-wide

Role map writes are compare-and-swap on `members_version`: a write that
lost the race re-reads the map and applies its change again.

Every change sends the matching notification email. A failed or skipped
email is logged and never fails the membership change.
"""

from typing import Callable, Dict, List, Optional

from sqlalchemy import select, update

from projectflow.core.database import get_db_session, projects
from projectflow.core.errors import ConflictError, NotFoundError, PermissionError, ValidationError
from projectflow.core.logging import log_event
from projectflow.features.notifications.email import (
    EmailClient,
    send_invitation_email,
    send_removal_email,
    send_role_update_email,
)
from projectflow.features.projects.access import require_access, require_manage, to_project
from projectflow.features.users.service import get_profile, get_profile_by_email, get_profiles_by_ids
from projectflow.models.member import MemberRole, MemberWithRole, WorkspaceMember
from projectflow.models.project import Project

UNTITLED_PROJECT = "Untitled Project"
ROLE_WRITE_ATTEMPTS = 5


def _project_name(project: Project) -> str:
    return project.name or UNTITLED_PROJECT


def _actor_name(user_id: str) -> str:
    profile = get_profile(user_id)
    return profile.display_name() if profile else "A user"


def _change_roles(project_id: str, change: Callable[[Dict[str, str]], None]) -> Dict[str, str]:
    """
    Apply ``change`` to the freshest role map and write it back.

    ``change`` mutates the dict in place and may raise to abort.
    """
    for attempt in range(ROLE_WRITE_ATTEMPTS):
        with get_db_session() as session:
            row = session.execute(
                select(projects.c.members_with_role, projects.c.members_version)
                .where(projects.c.project_id == project_id)
                .with_for_update()
            ).first()
            if row is None:
                raise NotFoundError("Project not found")

            roles = dict(row.members_with_role or {})
            change(roles)
            result = session.execute(
                update(projects)
                .where(
                    projects.c.project_id == project_id,
                    projects.c.members_version == row.members_version,
                )
                .values(members_with_role=roles, members_version=row.members_version + 1)
            )
            if result.rowcount == 1:
                return roles
        log_event("info", "member.write.retry", project_id=project_id, extra={"attempt": attempt + 1})

    raise ConflictError("Project members changed concurrently, try again")


def list_shared_projects(user_id: str) -> List[Project]:
    """Projects where the user holds a role but is not the owner."""
    with get_db_session() as session:
        rows = session.execute(
            select(projects).where(projects.c.user_id != user_id).order_by(projects.c.created_at.desc())
        ).fetchall()
    shared = []
    for row in rows:
        project = to_project(row)
        if user_id in project.members_with_role:
            shared.append(project)
    return shared


def add_member(
    user_id: str,
    project_id: str,
    member_email: str,
    role: MemberRole,
    email_client: Optional[EmailClient] = None,
) -> MemberWithRole:
    project = require_manage(project_id, user_id)
    role = MemberRole(role)
    if role == MemberRole.OWNER:
        raise ValidationError("A project can only have one owner")

    profile = get_profile_by_email(member_email)
    if profile is None:
        raise NotFoundError("User not found")
    if profile.user_id == project.user_id:
        raise ValidationError("The owner is already a member of this project")

    def grant(roles: Dict[str, str]) -> None:
        roles[profile.user_id] = role.value

    _change_roles(project_id, grant)
    log_event(
        "info",
        "member.added",
        user_id=user_id,
        project_id=project_id,
        event_type="member.added",
        extra={"member_id": profile.user_id, "role": role.value},
    )

    if email_client is not None and profile.email:
        send_invitation_email(
            email_client,
            to=profile.email,
            project_name=_project_name(project),
            inviter_name=_actor_name(user_id),
            role=role.value,
        )
    else:
        log_event("info", "member.added.email_skipped", user_id=user_id, project_id=project_id)

    return MemberWithRole(user_id=profile.user_id, name=profile.display_name("Unknown"), email=profile.email, role=role)


def update_member_role(
    user_id: str,
    project_id: str,
    member_user_id: str,
    new_role: MemberRole,
    email_client: Optional[EmailClient] = None,
) -> MemberWithRole:
    project = require_manage(project_id, user_id)
    new_role = MemberRole(new_role)
    if member_user_id == project.user_id:
        raise PermissionError("Cannot change the owner's role")
    if new_role == MemberRole.OWNER:
        raise ValidationError("A project can only have one owner")

    profile = get_profile(member_user_id)
    if profile is None:
        raise NotFoundError("Member profile not found")

    def reassign(roles: Dict[str, str]) -> None:
        if member_user_id not in roles:
            raise NotFoundError("User is not a member of this project")
        roles[member_user_id] = new_role.value

    _change_roles(project_id, reassign)
    log_event("info", "member.role_updated", user_id=user_id, project_id=project_id, extra={"member_id": member_user_id, "role": new_role.value})

    if email_client is not None and profile.email:
        send_role_update_email(
            email_client,
            to=profile.email,
            project_name=_project_name(project),
            updater_name=_actor_name(user_id),
            new_role=new_role.value,
        )

    return MemberWithRole(user_id=member_user_id, name=profile.display_name("Unknown"), email=profile.email, role=new_role)


def remove_member(
    user_id: str,
    project_id: str,
    member_user_id: str,
    email_client: Optional[EmailClient] = None,
) -> bool:
    project = require_manage(project_id, user_id)
    if member_user_id == project.user_id:
        raise PermissionError("Cannot remove the owner")

    def revoke(roles: Dict[str, str]) -> None:
        if roles.pop(member_user_id, None) is None:
            raise NotFoundError("User is not a member of this project")

    _change_roles(project_id, revoke)
    log_event("info", "member.removed", user_id=user_id, project_id=project_id, extra={"member_id": member_user_id})

    profile = get_profile(member_user_id)
    if email_client is not None and profile is not None and profile.email:
        send_removal_email(
            email_client,
            to=profile.email,
            project_name=_project_name(project),
            remover_name=_actor_name(user_id),
        )
    return True


def list_members(user_id: str, project_id: str) -> List[MemberWithRole]:
    """Owner first, then the role map, joined with profiles."""
    project = require_access(project_id, user_id)
    roles = {project.user_id: MemberRole.OWNER.value}
    for member_id, role in project.members_with_role.items():
        roles.setdefault(member_id, role)

    profiles = {p.user_id: p for p in get_profiles_by_ids(list(roles))}
    members = []
    for member_id, role in roles.items():
        profile = profiles.get(member_id)
        members.append(
            MemberWithRole(
                user_id=member_id,
                name=profile.display_name("Unknown") if profile else "Unknown",
                email=profile.email if profile else None,
                role=role,
            )
        )
    return members


def list_workspace_members(user_id: str) -> List[WorkspaceMember]:
    """
    Everyone across the projects the caller owns or belongs to.

    Each entry carries its role and the project name per project id. The
    caller comes first even with no projects.
    """
    with get_db_session() as session:
        rows = session.execute(
            select(projects).order_by(projects.c.created_at)
        ).fetchall()

    roles: Dict[str, Dict[str, str]] = {user_id: {}}
    names: Dict[str, Dict[str, str]] = {user_id: {}}
    for row in rows:
        project = to_project(row)
        if project.user_id != user_id and user_id not in project.members_with_role:
            continue
        project_roles = {project.user_id: MemberRole.OWNER.value}
        for member_id, role in project.members_with_role.items():
            project_roles.setdefault(member_id, role)
        for member_id, role in project_roles.items():
            roles.setdefault(member_id, {})[project.project_id] = role
            names.setdefault(member_id, {})[project.project_id] = _project_name(project)

    profiles = {p.user_id: p for p in get_profiles_by_ids(list(roles))}
    members = []
    for member_id, member_roles in roles.items():
        profile = profiles.get(member_id)
        members.append(
            WorkspaceMember(
                user_id=member_id,
                name=profile.display_name("Unknown") if profile else "Unknown",
                email=profile.email if profile else None,
                roles=member_roles,
                projects=names[member_id],
            )
        )
    return members
