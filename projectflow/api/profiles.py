"""
projectflow/api/profiles.py
User profile API.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from projectflow.core.auth import get_current_user_id
from projectflow.core.errors import NotFoundError
from projectflow.core.logging import request_id_for
from projectflow.features.users import service
from projectflow.models.user_profile import EnsureProfileRequest, ProfilesByIdsRequest, ProfileUpdateRequest

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.get("/me")
def get_my_profile_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    profile = service.get_profile(user_id)
    if profile is None:
        raise NotFoundError("Profile not found", request_id=request_id_for(request))
    return {"data": profile.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.post("/me")
def ensure_profile_endpoint(
    request: Request,
    body: Optional[EnsureProfileRequest] = None,
    user_id: str = Depends(get_current_user_id),
):
    """Create the caller's profile and free plan if missing."""
    profile = service.ensure_profile(user_id, body)
    return {"data": profile.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.patch("/me")
def update_profile_endpoint(
    body: ProfileUpdateRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    profile = service.update_profile(user_id, body)
    return {"data": profile.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.post("/by-ids")
def profiles_by_ids_endpoint(
    body: ProfilesByIdsRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    profiles = service.get_profiles_by_ids(body.user_ids)
    return {"data": [p.model_dump(mode="json") for p in profiles], "request_id": request_id_for(request)}
