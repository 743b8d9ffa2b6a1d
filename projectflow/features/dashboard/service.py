"""
projectflow/features/dashboard/service.py

Read-only aggregates over every project a user owns or belongs to.
"""

from typing import Any, Dict, List

from sqlalchemy import select

from projectflow.core.database import features, get_db_session, projects, tasks
from projectflow.features.projects.access import to_project
from projectflow.models.feature import FeatureEffort, FeaturePriority
from projectflow.models.project import Project, ProjectStatus
from projectflow.models.task import TaskStatus

RECENT_PROJECTS = 5
DEFAULT_ACTIVITY_LIMIT = 10


def _visible_projects(user_id: str):
    """Return (owned, member) project lists, newest first."""
    with get_db_session() as session:
        rows = session.execute(select(projects).order_by(projects.c.created_at.desc())).fetchall()
    owned, member = [], []
    for row in rows:
        project = to_project(row)
        if project.user_id == user_id:
            owned.append(project)
        elif user_id in project.members_with_role:
            member.append(project)
    return owned, member


def _rows_for(table, project_ids: List[str]):
    if not project_ids:
        return []
    with get_db_session() as session:
        return session.execute(
            select(table).where(table.c.project_id.in_(project_ids)).order_by(table.c.created_at.desc())
        ).fetchall()


def _summary(project: Project) -> Dict[str, Any]:
    return project.model_dump(
        mode="json",
        include={"project_id", "name", "description", "status", "category", "current_step", "created_at"},
    )


def get_dashboard_stats(user_id: str) -> Dict[str, Any]:
    owned, member = _visible_projects(user_id)
    visible = owned + member
    task_rows = _rows_for(tasks, [p.project_id for p in visible])

    projects_by_status = {s.value: 0 for s in ProjectStatus}
    for project in visible:
        projects_by_status[project.status.value] += 1

    tasks_by_status = {s.value: 0 for s in TaskStatus}
    for row in task_rows:
        if row.status in tasks_by_status:
            tasks_by_status[row.status] += 1

    recent = sorted(visible, key=lambda p: p.created_at, reverse=True)[:RECENT_PROJECTS]
    return {
        "total_projects": len(visible),
        "projects_by_status": projects_by_status,
        "member_projects_count": len(member),
        "tasks_by_status": tasks_by_status,
        "total_tasks": len(task_rows),
        "recent_projects": [_summary(p) for p in recent],
    }


def get_project_stats_by_category(user_id: str) -> Dict[str, int]:
    owned, member = _visible_projects(user_id)
    categories: Dict[str, int] = {}
    for project in owned + member:
        category = project.category or "Uncategorized"
        categories[category] = categories.get(category, 0) + 1
    return categories


def get_feature_stats(user_id: str) -> Dict[str, Dict[str, int]]:
    owned, member = _visible_projects(user_id)
    rows = _rows_for(features, [p.project_id for p in owned + member])

    by_priority = {p.value: 0 for p in FeaturePriority}
    by_effort = {e.value: 0 for e in FeatureEffort}
    by_category: Dict[str, int] = {}
    for row in rows:
        if row.priority in by_priority:
            by_priority[row.priority] += 1
        if row.effort in by_effort:
            by_effort[row.effort] += 1
        if row.category:
            by_category[row.category] = by_category.get(row.category, 0) + 1

    return {"by_priority": by_priority, "by_effort": by_effort, "by_category": by_category}


def get_recent_activities(user_id: str, limit: int = DEFAULT_ACTIVITY_LIMIT) -> List[Dict[str, Any]]:
    """Project, task and feature creation events, newest first."""
    owned, member = _visible_projects(user_id)
    visible = owned + member
    ids = [p.project_id for p in visible]

    activities = [
        {"type": "project_created", "timestamp": p.created_at, "project_id": p.project_id, "title": p.name}
        for p in visible
    ]
    activities += [
        {"type": "task_created", "timestamp": r.created_at, "project_id": r.project_id, "title": r.title}
        for r in _rows_for(tasks, ids)[:limit]
    ]
    activities += [
        {"type": "feature_created", "timestamp": r.created_at, "project_id": r.project_id, "title": r.title}
        for r in _rows_for(features, ids)[:limit]
    ]
    activities.sort(key=lambda a: a["timestamp"], reverse=True)
    return activities[:limit]
