"""
projectflow/features/product_features/service.py

Product features of a project. Any member may read them; only the owner
or an admin may create, edit or delete them.
"""

from datetime import datetime, timezone
from typing import List, Sequence
from uuid import uuid4

from sqlalchemy import delete, insert, select, update

from projectflow.core.database import features, get_db_session
from projectflow.core.errors import NotFoundError
from projectflow.core.logging import log_event
from projectflow.features.projects.access import require_access, require_manage
from projectflow.models.feature import Feature, FeatureInput, FeatureUpdateRequest


def to_feature(row) -> Feature:
    return Feature(**dict(row._mapping))


def load_feature(feature_id: str) -> Feature:
    with get_db_session() as session:
        row = session.execute(
            select(features).where(features.c.feature_id == feature_id)
        ).first()
    if not row:
        raise NotFoundError(f"Feature {feature_id} not found")
    return to_feature(row)


def list_project_features(user_id: str, project_id: str) -> List[Feature]:
    require_access(project_id, user_id)
    with get_db_session() as session:
        rows = session.execute(
            select(features)
            .where(features.c.project_id == project_id)
            .order_by(features.c.created_at, features.c.feature_id)
        ).fetchall()
    return [to_feature(r) for r in rows]


def _values(project_id: str, user_id: str, item: FeatureInput) -> dict:
    return {
        "feature_id": str(uuid4()),
        "project_id": project_id,
        "title": item.title,
        "description": item.description,
        "priority": item.priority.value,
        "effort": item.effort.value,
        "category": item.category.value,
        "user_id": user_id,
        "added_to_task": False,
        "implementation_details": item.implementation_details,
        "created_at": datetime.now(timezone.utc),
    }


def create_features(user_id: str, project_id: str, items: Sequence[FeatureInput]) -> List[Feature]:
    """Insert features in one session; returns them in input order."""
    require_manage(project_id, user_id)
    rows = [_values(project_id, user_id, item) for item in items]
    with get_db_session() as session:
        for values in rows:
            session.execute(insert(features).values(**values))

    log_event(
        "info",
        "features.created",
        user_id=user_id,
        project_id=project_id,
        event_type="features.created",
        extra={"count": len(rows)},
    )
    return [Feature(**values) for values in rows]


def create_feature(user_id: str, project_id: str, item: FeatureInput) -> Feature:
    return create_features(user_id, project_id, [item])[0]


def update_feature(user_id: str, feature_id: str, patch: FeatureUpdateRequest) -> Feature:
    feature = load_feature(feature_id)
    require_manage(feature.project_id, user_id)

    changes = patch.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    if changes:
        with get_db_session() as session:
            session.execute(
                update(features).where(features.c.feature_id == feature_id).values(**changes)
            )
    return load_feature(feature_id)


def delete_feature(user_id: str, feature_id: str) -> bool:
    feature = load_feature(feature_id)
    require_manage(feature.project_id, user_id)
    with get_db_session() as session:
        session.execute(delete(features).where(features.c.feature_id == feature_id))
    return True


def set_added_to_task(feature_id: str, added: bool, session=None) -> None:
    stmt = update(features).where(features.c.feature_id == feature_id).values(added_to_task=added)
    if session is not None:
        session.execute(stmt)
        return
    with get_db_session() as own_session:
        own_session.execute(stmt)

