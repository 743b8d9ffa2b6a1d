"""
projectflow/api/prompts.py
Saved prompts API.
"""

from fastapi import APIRouter, Depends, Request

from projectflow.core.auth import get_current_user_id
from projectflow.core.logging import request_id_for
from projectflow.features.prompts import service
from projectflow.models.prompt import SavePromptRequest

router = APIRouter(prefix="/api/prompts", tags=["prompts"])


@router.post("", status_code=201)
def save_prompt_endpoint(body: SavePromptRequest, request: Request, user_id: str = Depends(get_current_user_id)):
    prompt = service.save_prompt(user_id, body)
    return {"data": prompt.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.get("/project/{project_id}")
def list_project_prompts_endpoint(project_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    prompts = service.list_project_prompts(user_id, project_id)
    return {"data": [p.model_dump(mode="json") for p in prompts], "request_id": request_id_for(request)}


@router.get("/feature/{feature_id}")
def list_feature_prompts_endpoint(feature_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    prompts = service.list_feature_prompts(user_id, feature_id)
    return {"data": [p.model_dump(mode="json") for p in prompts], "request_id": request_id_for(request)}


@router.delete("/{prompt_id}")
def delete_prompt_endpoint(prompt_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    service.delete_prompt(user_id, prompt_id)
    return {"data": {"prompt_id": prompt_id, "deleted": True}, "request_id": request_id_for(request)}
