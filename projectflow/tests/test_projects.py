"""Project wizard and project-level permissions."""

import json

import pytest
from sqlalchemy import select

from projectflow.core.database import features, get_db_session, project_questions, tasks
from projectflow.core.errors import NotFoundError, PermissionError, ValidationError
from projectflow.features.projects import service
from projectflow.features.tasks.service import create_task
from projectflow.models.feature import FeatureInput
from projectflow.models.project import AnswerInput, ProjectPatchRequest, QuestionInput
from projectflow.models.task import TaskCreateRequest

OWNER = "owner_wizard"


def _questions():
    return [
        QuestionInput(section="business", question_text="Who are the users?"),
        QuestionInput(section="technical", question_text="Which platforms?"),
        QuestionInput(section="general", question_text="Deadline?"),
    ]


def test_new_project_is_an_empty_draft():
    project = service.create_project(OWNER)

    assert project.status.value == "draft"
    assert project.name == ""
    assert project.category == "Other"
    assert project.platform == "Web"
    assert (project.current_step, project.last_edited_step, project.total_steps) == (1, 1, 6)
    assert project.members_with_role == {}
    assert project.last_draft_save is not None


def test_wizard_walkthrough():
    project_id = service.create_project(OWNER).project_id

    named = service.update_project_name(OWNER, project_id, "  Task Flow ")
    assert named.name == "Task Flow"
    assert named.current_step == 2

    described = service.update_project_description(OWNER, project_id, "Kanban for teams", "nextjs")
    assert described.current_step == 3
    assert described.tech_stack["id"] == "nextjs"
    assert described.tech_stack["name"]

    questions = service.save_questions(OWNER, project_id, _questions())
    assert [q.order_index for q in questions] == [0, 1, 2]
    assert service.get_project(OWNER, project_id).questions_generated

    answers = service.save_answers(OWNER, project_id, [AnswerInput(question_id=questions[0].question_id, answer="Agencies")])
    assert len(answers) == 1
    project = service.get_project(OWNER, project_id)
    assert project.questions_answered
    assert project.current_step == 4

    created = service.save_generated_features(OWNER, project_id, [FeatureInput(title="Task Creation", priority="High")])
    assert created[0].title == "Task Creation"
    assert service.get_project(OWNER, project_id).current_step == 5

    activated = service.save_summary(OWNER, project_id, {"overview": "Boards"})
    assert activated.status.value == "active"
    assert activated.current_step == 6
    assert json.loads(activated.summary) == {"overview": "Boards"}


def test_questions_are_saved_once():
    project_id = service.create_project(OWNER).project_id
    first = service.save_questions(OWNER, project_id, _questions())

    second = service.save_questions(OWNER, project_id, [QuestionInput(question_text="Other?")])

    assert [q.question_id for q in second] == [q.question_id for q in first]


def test_answers_are_upserted():
    project_id = service.create_project(OWNER).project_id
    question = service.save_questions(OWNER, project_id, _questions())[0]

    service.save_answers(OWNER, project_id, [AnswerInput(question_id=question.question_id, answer="v1")])
    answers = service.save_answers(OWNER, project_id, [AnswerInput(question_id=question.question_id, answer="v2")])

    assert [a.answer_text for a in answers] == ["v2"]


def test_answer_for_unknown_question_is_rejected():
    project_id = service.create_project(OWNER).project_id

    with pytest.raises(NotFoundError):
        service.save_answers(OWNER, project_id, [AnswerInput(question_id="nope", answer="x")])


def test_only_owner_runs_the_wizard():
    project_id = service.create_project(OWNER).project_id

    with pytest.raises(PermissionError):
        service.update_project_name("stranger", project_id, "Hijack")
    with pytest.raises(PermissionError):
        service.set_current_step("stranger", project_id, 3)


def test_step_bounds():
    project_id = service.create_project(OWNER).project_id

    assert service.set_current_step(OWNER, project_id, 4).current_step == 4
    with pytest.raises(ValidationError):
        service.set_current_step(OWNER, project_id, 7)


def test_patch_only_touches_set_fields():
    project = service.create_project(OWNER)
    service.update_project_name(OWNER, project.project_id, "Task Flow")

    patched = service.patch_project(OWNER, project.project_id, ProjectPatchRequest(status="completed"))

    assert patched.status.value == "completed"
    assert patched.name == "Task Flow"


def test_list_by_status():
    draft = service.create_project(OWNER)
    active = service.create_project(OWNER)
    service.save_summary(OWNER, active.project_id, "Summary text")
    service.create_project("someone_else")

    assert {p.project_id for p in service.list_user_projects(OWNER)} == {draft.project_id, active.project_id}
    assert [p.project_id for p in service.list_projects_by_statuses(OWNER, ["active"])] == [active.project_id]
    assert service.list_projects_by_statuses(OWNER, []) == []


def test_delete_removes_children():
    project_id = service.create_project(OWNER).project_id
    service.save_questions(OWNER, project_id, _questions())
    service.save_generated_features(OWNER, project_id, [FeatureInput(title="Boards")])
    create_task(OWNER, TaskCreateRequest(project_id=project_id, title="Set up repo"))

    service.delete_project(OWNER, project_id)

    with pytest.raises(NotFoundError):
        service.get_project(OWNER, project_id)
    with get_db_session() as session:
        for table in (project_questions, features, tasks):
            assert session.execute(select(table).where(table.c.project_id == project_id)).fetchall() == []


def test_project_api_roundtrip(client):
    headers = {"X-User-Id": OWNER}

    created = client.post("/api/projects", headers=headers)
    assert created.status_code == 201
    project_id = created.json()["data"]["project_id"]

    renamed = client.put(f"/api/projects/{project_id}/name", json={"name": "Task Flow"}, headers=headers)
    assert renamed.json()["data"]["current_step"] == 2

    forbidden = client.get(f"/api/projects/{project_id}", headers={"X-User-Id": "stranger"})
    assert forbidden.status_code == 403

    missing = client.get("/api/projects/does-not-exist", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "not_found"

    listed = client.get("/api/projects", params={"status": "draft"}, headers=headers)
    assert [p["project_id"] for p in listed.json()["data"]] == [project_id]

    deleted = client.delete(f"/api/projects/{project_id}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(f"/api/projects/{project_id}", headers=headers).status_code == 404
