"""
projectflow/api/projects.py
Projects API: owner listings, the creation wizard, patch and delete.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from projectflow.core.auth import get_current_user_id
from projectflow.core.logging import request_id_for
from projectflow.features.projects import service
from projectflow.models.feature import CreateFeaturesRequest
from projectflow.models.project import (
    ProjectPatchRequest,
    ProjectStatus,
    SaveAnswersRequest,
    SaveQuestionsRequest,
    SaveSummaryRequest,
    SetStepRequest,
    UpdateDescriptionRequest,
    UpdateNameRequest,
)

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _dump(items) -> list:
    return [item.model_dump(mode="json") for item in items]


@router.get("")
def list_projects_endpoint(
    request: Request,
    status: Optional[List[ProjectStatus]] = Query(None, description="Filter by one or more statuses"),
    user_id: str = Depends(get_current_user_id),
):
    if status:
        projects = service.list_projects_by_statuses(user_id, status)
    else:
        projects = service.list_user_projects(user_id)
    return {"data": _dump(projects), "count": len(projects), "request_id": request_id_for(request)}


@router.post("", status_code=201)
def create_project_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    """Start a new draft at step 1."""
    project = service.create_project(user_id)
    return {"data": project.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.get("/{project_id}")
def get_project_endpoint(project_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    project = service.get_project(user_id, project_id)
    return {"data": project.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.patch("/{project_id}")
def patch_project_endpoint(
    project_id: str,
    body: ProjectPatchRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    project = service.patch_project(user_id, project_id, body)
    return {"data": project.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.delete("/{project_id}")
def delete_project_endpoint(project_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    deleted = service.delete_project(user_id, project_id)
    return {"data": {"project_id": deleted, "deleted": True}, "request_id": request_id_for(request)}


@router.put("/{project_id}/step")
def set_step_endpoint(
    project_id: str,
    body: SetStepRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    project = service.set_current_step(user_id, project_id, body.current_step)
    return {"data": project.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.put("/{project_id}/name")
def update_name_endpoint(
    project_id: str,
    body: UpdateNameRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    project = service.update_project_name(user_id, project_id, body.name)
    return {"data": project.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.put("/{project_id}/description")
def update_description_endpoint(
    project_id: str,
    body: UpdateDescriptionRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    project = service.update_project_description(user_id, project_id, body.description, body.tech_stack)
    return {"data": project.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.get("/{project_id}/questions")
def list_questions_endpoint(project_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    questions = service.list_questions(user_id, project_id)
    return {"data": _dump(questions), "request_id": request_id_for(request)}


@router.post("/{project_id}/questions")
def save_questions_endpoint(
    project_id: str,
    body: SaveQuestionsRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    """Store generated questions; a second call returns the first set."""
    questions = service.save_questions(user_id, project_id, body.questions)
    return {"data": _dump(questions), "request_id": request_id_for(request)}


@router.get("/{project_id}/answers")
def list_answers_endpoint(project_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    answers = service.list_answers(user_id, project_id)
    return {"data": _dump(answers), "request_id": request_id_for(request)}


@router.put("/{project_id}/answers")
def save_answers_endpoint(
    project_id: str,
    body: SaveAnswersRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    answers = service.save_answers(user_id, project_id, body.answers)
    return {"data": _dump(answers), "request_id": request_id_for(request)}


@router.post("/{project_id}/generated-features")
def save_generated_features_endpoint(
    project_id: str,
    body: CreateFeaturesRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    features = service.save_generated_features(user_id, project_id, body.features)
    return {"data": _dump(features), "request_id": request_id_for(request)}


@router.put("/{project_id}/summary")
def save_summary_endpoint(
    project_id: str,
    body: SaveSummaryRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    project = service.save_summary(user_id, project_id, body.summary)
    return {"data": project.model_dump(mode="json"), "request_id": request_id_for(request)}
