"""
projectflow/api/tasks.py
Task board API.
"""

from fastapi import APIRouter, Depends, Request

from projectflow.core.auth import get_current_user_id
from projectflow.core.logging import request_id_for
from projectflow.features.tasks import service
from projectflow.models.task import (
    AddFeatureToTaskRequest,
    TaskAssignmentRequest,
    TaskCreateRequest,
    TaskNotesRequest,
    TaskPositionUpdateRequest,
    TaskStatusUpdateRequest,
)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _one(task, request: Request) -> dict:
    return {"data": task.model_dump(mode="json"), "request_id": request_id_for(request)}


def _many(tasks, request: Request) -> dict:
    return {
        "data": [t.model_dump(mode="json") for t in tasks],
        "count": len(tasks),
        "request_id": request_id_for(request),
    }


@router.get("")
def list_all_tasks_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    """Tasks across every project the caller owns."""
    return _many(service.list_all_tasks(user_id), request)


@router.get("/project/{project_id}")
def list_project_tasks_endpoint(project_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    return _many(service.list_project_tasks(user_id, project_id), request)


@router.get("/feature/{feature_id}")
def list_feature_tasks_endpoint(feature_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    return _many(service.list_feature_tasks(user_id, feature_id), request)


@router.post("", status_code=201)
def create_task_endpoint(body: TaskCreateRequest, request: Request, user_id: str = Depends(get_current_user_id)):
    return _one(service.create_task(user_id, body), request)


@router.post("/from-feature", status_code=201)
def add_feature_to_task_endpoint(
    body: AddFeatureToTaskRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    return _one(service.add_feature_to_task(user_id, body), request)


@router.delete("/from-feature/{feature_id}")
def remove_feature_from_task_endpoint(feature_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    service.remove_feature_from_task(user_id, feature_id)
    return {"data": {"feature_id": feature_id, "removed": True}, "request_id": request_id_for(request)}


@router.put("/{task_id}/status")
def update_status_endpoint(
    task_id: str,
    body: TaskStatusUpdateRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    return _one(service.update_task_status(user_id, task_id, body.new_status, body.new_position), request)


@router.put("/{task_id}/position")
def update_position_endpoint(
    task_id: str,
    body: TaskPositionUpdateRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    return _one(service.update_task_position(user_id, task_id, body.new_position), request)


@router.put("/{task_id}/assignment")
def update_assignment_endpoint(
    task_id: str,
    body: TaskAssignmentRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    return _one(service.update_task_assignment(user_id, task_id, body.assigned_to), request)


@router.put("/{task_id}/notes")
def update_notes_endpoint(
    task_id: str,
    body: TaskNotesRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    return _one(service.update_task_notes(user_id, task_id, body.notes), request)


@router.delete("/{task_id}")
def delete_task_endpoint(task_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    service.delete_task(user_id, task_id)
    return {"data": {"task_id": task_id, "deleted": True}, "request_id": request_id_for(request)}
