"""
projectflow/features/projects/service.py

Project records and the creation wizard.

Handles:
- Owner project listings (all, by status)
- Draft creation and step bookkeeping
- Context questions and upserted answers
- Saving generated features and the final summary
- Patch and delete
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Union
from uuid import uuid4

from sqlalchemy import delete, insert, select, update

from projectflow.core.database import (
    chat_messages,
    features,
    get_db_session,
    project_answers,
    project_questions,
    projects,
    prompts,
    tasks,
)
from projectflow.core.errors import NotFoundError, ValidationError
from projectflow.core.logging import log_event
from projectflow.features.product_features.service import create_features
from projectflow.features.projects.access import (
    load_project,
    require_access,
    require_owner,
    to_project,
)
from projectflow.features.ai.prompts import tech_stack_display_name
from projectflow.models.feature import Feature, FeatureInput
from projectflow.models.project import (
    AnswerInput,
    Project,
    ProjectAnswer,
    ProjectPatchRequest,
    ProjectQuestion,
    ProjectStatus,
    QuestionInput,
    TOTAL_STEPS,
)

DEFAULT_CATEGORY = "Other"
DEFAULT_PLATFORM = "Web"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _patch(project_id: str, **values) -> Project:
    values.setdefault("last_draft_save", _now())
    with get_db_session() as session:
        session.execute(update(projects).where(projects.c.project_id == project_id).values(**values))
    return load_project(project_id)


def _advance(step: int) -> Dict[str, Any]:
    return {"current_step": step, "last_edited_step": step}


def list_user_projects(user_id: str) -> List[Project]:
    """Projects owned by ``user_id``, newest first."""
    with get_db_session() as session:
        rows = session.execute(
            select(projects)
            .where(projects.c.user_id == user_id)
            .order_by(projects.c.created_at.desc())
        ).fetchall()
    return [to_project(r) for r in rows]


def list_projects_by_statuses(user_id: str, statuses: Sequence[Union[ProjectStatus, str]]) -> List[Project]:
    wanted = [ProjectStatus(s).value for s in statuses]
    if not wanted:
        return []
    with get_db_session() as session:
        rows = session.execute(
            select(projects)
            .where(projects.c.user_id == user_id, projects.c.status.in_(wanted))
            .order_by(projects.c.created_at.desc())
        ).fetchall()
    return [to_project(r) for r in rows]


def get_project(user_id: str, project_id: str) -> Project:
    return require_access(project_id, user_id)


def create_project(user_id: str) -> Project:
    """Create an empty draft at step 1."""
    project_id = str(uuid4())
    now = _now()
    with get_db_session() as session:
        session.execute(
            insert(projects).values(
                project_id=project_id,
                user_id=user_id,
                name="",
                description="",
                status=ProjectStatus.DRAFT.value,
                category=DEFAULT_CATEGORY,
                platform=DEFAULT_PLATFORM,
                context_answers={},
                members_with_role={},
                current_step=1,
                last_edited_step=1,
                total_steps=TOTAL_STEPS,
                questions_generated=False,
                questions_answered=False,
                can_proceed_from_context=False,
                prompts_generated=False,
                last_draft_save=now,
                created_at=now,
            )
        )
    log_event("info", "project.created", user_id=user_id, project_id=project_id, event_type="project.created")
    return load_project(project_id)


def set_current_step(user_id: str, project_id: str, current_step: int) -> Project:
    require_owner(project_id, user_id)
    if not 1 <= current_step <= TOTAL_STEPS:
        raise ValidationError(f"current_step must be between 1 and {TOTAL_STEPS}")
    return _patch(project_id, current_step=current_step)


def update_project_name(user_id: str, project_id: str, name: str) -> Project:
    require_owner(project_id, user_id)
    if not name.strip():
        raise ValidationError("Project name is required")
    return _patch(project_id, name=name.strip(), **_advance(2))


def update_project_description(user_id: str, project_id: str, description: str, tech_stack: str = None) -> Project:
    require_owner(project_id, user_id)
    values: Dict[str, Any] = {"description": description, **_advance(3)}
    if tech_stack:
        values["tech_stack"] = {"id": tech_stack, "name": tech_stack_display_name(tech_stack)}
    return _patch(project_id, **values)


def _to_question(row) -> ProjectQuestion:
    return ProjectQuestion(**dict(row._mapping))


def list_questions(user_id: str, project_id: str) -> List[ProjectQuestion]:
    require_access(project_id, user_id)
    with get_db_session() as session:
        rows = session.execute(
            select(project_questions)
            .where(project_questions.c.project_id == project_id)
            .order_by(project_questions.c.order_index)
        ).fetchall()
    return [_to_question(r) for r in rows]


def save_questions(user_id: str, project_id: str, questions: Sequence[QuestionInput]) -> List[ProjectQuestion]:
    """Store generated questions once; later calls return the stored set."""
    require_owner(project_id, user_id)
    existing = list_questions(user_id, project_id)
    if existing:
        log_event("info", "project.questions.exists", user_id=user_id, project_id=project_id)
        return existing

    with get_db_session() as session:
        for index, question in enumerate(questions):
            session.execute(
                insert(project_questions).values(
                    question_id=str(uuid4()),
                    project_id=project_id,
                    section=question.section.value,
                    question_text=question.question_text,
                    placeholder_text=question.placeholder_text,
                    input_type=question.input_type.value,
                    options=question.options,
                    order_index=question.order_index if question.order_index is not None else index,
                    is_required=question.is_required,
                )
            )
    _patch(project_id, questions_generated=True, **_advance(3))
    return list_questions(user_id, project_id)


def _to_answer(row) -> ProjectAnswer:
    return ProjectAnswer(**dict(row._mapping))


def list_answers(user_id: str, project_id: str) -> List[ProjectAnswer]:
    require_access(project_id, user_id)
    with get_db_session() as session:
        rows = session.execute(
            select(project_answers).where(project_answers.c.project_id == project_id)
        ).fetchall()
    return [_to_answer(r) for r in rows]


def save_answers(user_id: str, project_id: str, answers: Sequence[AnswerInput]) -> List[ProjectAnswer]:
    """Upsert one answer per (project, question) and move to step 4."""
    require_owner(project_id, user_id)
    with get_db_session() as session:
        known = {
            r.question_id
            for r in session.execute(
                select(project_questions.c.question_id).where(project_questions.c.project_id == project_id)
            ).fetchall()
        }
        for answer in answers:
            if answer.question_id not in known:
                raise NotFoundError(f"Question {answer.question_id} not found in project {project_id}")
            existing = session.execute(
                select(project_answers.c.answer_id).where(
                    project_answers.c.project_id == project_id,
                    project_answers.c.question_id == answer.question_id,
                )
            ).first()
            if existing:
                session.execute(
                    update(project_answers)
                    .where(project_answers.c.answer_id == existing.answer_id)
                    .values(answer_text=answer.answer)
                )
            else:
                session.execute(
                    insert(project_answers).values(
                        answer_id=str(uuid4()),
                        project_id=project_id,
                        question_id=answer.question_id,
                        answer_text=answer.answer,
                    )
                )
    _patch(project_id, questions_answered=True, **_advance(4))
    return list_answers(user_id, project_id)


def save_generated_features(user_id: str, project_id: str, items: Sequence[FeatureInput]) -> List[Feature]:
    require_owner(project_id, user_id)
    created = create_features(user_id, project_id, items)
    _patch(project_id, can_proceed_from_context=True, **_advance(5))
    return created


def save_summary(user_id: str, project_id: str, summary: Union[str, Dict[str, Any]]) -> Project:
    """Store the summary and activate the project."""
    require_owner(project_id, user_id)
    text = summary if isinstance(summary, str) else json.dumps(summary, ensure_ascii=False)
    if not text.strip():
        raise ValidationError("Summary is required")
    return _patch(project_id, summary=text, status=ProjectStatus.ACTIVE.value, **_advance(6))


def patch_project(user_id: str, project_id: str, patch: ProjectPatchRequest) -> Project:
    require_owner(project_id, user_id)
    changes = patch.model_dump(exclude_unset=True, mode="json")
    return _patch(project_id, **changes)


def delete_project(user_id: str, project_id: str) -> str:
    """Delete a project and every row that references it."""
    require_owner(project_id, user_id)
    with get_db_session() as session:
        for table in (chat_messages, prompts, tasks, features, project_answers, project_questions):
            session.execute(delete(table).where(table.c.project_id == project_id))
        session.execute(delete(projects).where(projects.c.project_id == project_id))
    log_event("info", "project.deleted", user_id=user_id, project_id=project_id, event_type="project.deleted")
    return project_id
