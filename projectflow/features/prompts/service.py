"""Saved implementation prompts, per project and per feature."""

from datetime import datetime, timezone
from typing import List
from uuid import uuid4

from sqlalchemy import delete, insert, select

from projectflow.core.database import get_db_session, prompts
from projectflow.core.errors import NotFoundError
from projectflow.features.product_features.service import load_feature
from projectflow.features.projects.access import require_access
from projectflow.models.prompt import Prompt, SavePromptRequest


def to_prompt(row) -> Prompt:
    return Prompt(**dict(row._mapping))


def save_prompt(user_id: str, body: SavePromptRequest) -> Prompt:
    require_access(body.project_id, user_id)
    values = {
        "prompt_id": str(uuid4()),
        "project_id": body.project_id,
        "feature_id": body.feature_id,
        "content": body.content,
        "type": body.type.value,
        "user_id": user_id,
        "created_at": body.created_at or datetime.now(timezone.utc),
    }
    with get_db_session() as session:
        session.execute(insert(prompts).values(**values))
    return Prompt(**values)


def list_project_prompts(user_id: str, project_id: str) -> List[Prompt]:
    require_access(project_id, user_id)
    with get_db_session() as session:
        rows = session.execute(
            select(prompts)
            .where(prompts.c.project_id == project_id)
            .order_by(prompts.c.created_at.desc())
        ).fetchall()
    return [to_prompt(r) for r in rows]


def list_feature_prompts(user_id: str, feature_id: str) -> List[Prompt]:
    feature = load_feature(feature_id)
    require_access(feature.project_id, user_id)
    with get_db_session() as session:
        rows = session.execute(
            select(prompts)
            .where(prompts.c.feature_id == feature_id)
            .order_by(prompts.c.created_at.desc())
        ).fetchall()
    return [to_prompt(r) for r in rows]


def delete_prompt(user_id: str, prompt_id: str) -> bool:
    with get_db_session() as session:
        row = session.execute(select(prompts).where(prompts.c.prompt_id == prompt_id)).first()
    if not row:
        raise NotFoundError("Prompt not found")
    require_access(row.project_id, user_id)
    with get_db_session() as session:
        session.execute(delete(prompts).where(prompts.c.prompt_id == prompt_id))
    return True
