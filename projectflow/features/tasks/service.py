"""
projectflow/features/tasks/service.py

Task board operations. Members of any role can read a project's tasks;
owners, admins and members can change them. Viewers are read-only.

Position orders tasks inside one status column. Moving a task into a
column shifts the tasks at or after the target position down by one.
"""

from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import delete, func, insert, select, update

from projectflow.core.database import get_db_session, projects, tasks
from projectflow.core.errors import ConflictError, NotFoundError, ValidationError
from projectflow.core.logging import log_event
from projectflow.features.product_features.service import load_feature, set_added_to_task
from projectflow.features.projects.access import (
    is_member,
    require_access,
    require_edit_tasks,
)
from projectflow.models.project import Project
from projectflow.models.task import (
    AddFeatureToTaskRequest,
    Task,
    TaskCreateRequest,
    TaskStatus,
)

DEFAULT_PRIORITY = "Medium"
DEFAULT_EFFORT = "Medium"
DEFAULT_CATEGORY = "Core"


def to_task(row) -> Task:
    return Task(**dict(row._mapping))


def load_task(task_id: str) -> Task:
    with get_db_session() as session:
        row = session.execute(select(tasks).where(tasks.c.task_id == task_id)).first()
    if not row:
        raise NotFoundError(f"Task {task_id} not found")
    return to_task(row)


def _next_position(session, project_id: str) -> int:
    current = session.execute(
        select(func.max(tasks.c.position)).where(tasks.c.project_id == project_id)
    ).scalar()
    return 1 if current is None else current + 1


def _check_assignee(project: Project, assigned_to: Optional[str]) -> None:
    if assigned_to and not is_member(project, assigned_to):
        raise ValidationError("Can only assign tasks to project members")


def list_project_tasks(user_id: str, project_id: str) -> List[Task]:
    require_access(project_id, user_id)
    with get_db_session() as session:
        rows = session.execute(
            select(tasks)
            .where(tasks.c.project_id == project_id)
            .order_by(tasks.c.position, tasks.c.created_at)
        ).fetchall()
    return [to_task(r) for r in rows]


def list_all_tasks(user_id: str) -> List[Task]:
    """Tasks across every project the user owns."""
    with get_db_session() as session:
        owned = select(projects.c.project_id).where(projects.c.user_id == user_id)
        rows = session.execute(
            select(tasks)
            .where(tasks.c.project_id.in_(owned))
            .order_by(tasks.c.project_id, tasks.c.position)
        ).fetchall()
    return [to_task(r) for r in rows]


def list_feature_tasks(user_id: str, feature_id: str) -> List[Task]:
    feature = load_feature(feature_id)
    require_access(feature.project_id, user_id)
    with get_db_session() as session:
        rows = session.execute(
            select(tasks).where(tasks.c.feature_id == feature_id).order_by(tasks.c.position)
        ).fetchall()
    return [to_task(r) for r in rows]


def add_feature_to_task(user_id: str, body: AddFeatureToTaskRequest) -> Task:
    """Turn a feature into a todo task at the end of the board."""
    project = require_edit_tasks(body.project_id, user_id)
    feature = load_feature(body.feature_id)
    if feature.project_id != body.project_id:
        raise ValidationError("Feature does not belong to this project")
    if feature.added_to_task:
        raise ConflictError("This feature has already been added to tasks")
    _check_assignee(project, body.assigned_to)

    task_id = str(uuid4())
    with get_db_session() as session:
        session.execute(
            insert(tasks).values(
                task_id=task_id,
                project_id=body.project_id,
                feature_id=feature.feature_id,
                title=feature.title,
                description=feature.description or "",
                status=TaskStatus.TODO.value,
                position=_next_position(session, body.project_id),
                priority=feature.priority.value,
                effort=feature.effort.value,
                category=feature.category.value,
                due_date=body.due_date,
                assigned_to=body.assigned_to,
                created_at=datetime.now(timezone.utc),
            )
        )
        set_added_to_task(feature.feature_id, True, session=session)

    log_event("info", "task.from_feature", user_id=user_id, project_id=body.project_id, extra={"feature_id": feature.feature_id})
    return load_task(task_id)


def remove_feature_from_task(user_id: str, feature_id: str) -> bool:
    feature = load_feature(feature_id)
    require_edit_tasks(feature.project_id, user_id)
    with get_db_session() as session:
        session.execute(delete(tasks).where(tasks.c.feature_id == feature_id))
        set_added_to_task(feature_id, False, session=session)
    return True


def create_task(user_id: str, body: TaskCreateRequest) -> Task:
    project = require_edit_tasks(body.project_id, user_id)
    _check_assignee(project, body.assigned_to)
    if body.parent_task_id:
        parent = load_task(body.parent_task_id)
        if parent.project_id != body.project_id:
            raise ValidationError("Parent task must belong to the same project")

    task_id = str(uuid4())
    with get_db_session() as session:
        session.execute(
            insert(tasks).values(
                task_id=task_id,
                project_id=body.project_id,
                parent_task_id=body.parent_task_id,
                title=body.title,
                description=body.description or "",
                status=body.status.value,
                position=_next_position(session, body.project_id),
                priority=body.priority or DEFAULT_PRIORITY,
                effort=body.effort or DEFAULT_EFFORT,
                category=body.category or DEFAULT_CATEGORY,
                due_date=body.due_date,
                assigned_to=body.assigned_to,
                created_at=datetime.now(timezone.utc),
            )
        )
    return load_task(task_id)


def _editable(user_id: str, task_id: str):
    task = load_task(task_id)
    project = require_edit_tasks(task.project_id, user_id)
    return task, project


def update_task_status(user_id: str, task_id: str, new_status: TaskStatus, new_position: int) -> Task:
    """Move a task into a column, making room at ``new_position``."""
    task, _ = _editable(user_id, task_id)
    status = TaskStatus(new_status).value
    with get_db_session() as session:
        session.execute(
            update(tasks)
            .where(tasks.c.task_id == task_id)
            .values(status=status, position=new_position)
        )
        session.execute(
            update(tasks)
            .where(
                tasks.c.project_id == task.project_id,
                tasks.c.status == status,
                tasks.c.position >= new_position,
                tasks.c.task_id != task_id,
            )
            .values(position=tasks.c.position + 1)
        )
    return load_task(task_id)


def update_task_position(user_id: str, task_id: str, new_position: int) -> Task:
    _editable(user_id, task_id)
    with get_db_session() as session:
        session.execute(update(tasks).where(tasks.c.task_id == task_id).values(position=new_position))
    return load_task(task_id)


def update_task_assignment(user_id: str, task_id: str, assigned_to: Optional[str]) -> Task:
    _, project = _editable(user_id, task_id)
    _check_assignee(project, assigned_to)
    with get_db_session() as session:
        session.execute(update(tasks).where(tasks.c.task_id == task_id).values(assigned_to=assigned_to))
    return load_task(task_id)


def update_task_notes(user_id: str, task_id: str, notes: str) -> Task:
    task = load_task(task_id)
    require_access(task.project_id, user_id)
    with get_db_session() as session:
        session.execute(update(tasks).where(tasks.c.task_id == task_id).values(notes=notes))
    return load_task(task_id)


def delete_task(user_id: str, task_id: str) -> bool:
    task, _ = _editable(user_id, task_id)
    with get_db_session() as session:
        session.execute(delete(tasks).where(tasks.c.task_id == task_id))
        if task.feature_id:
            set_added_to_task(task.feature_id, False, session=session)
    return True
