"""
projectflow/api/features.py
Product features of a project.
"""

from fastapi import APIRouter, Depends, Request

from projectflow.core.auth import get_current_user_id
from projectflow.core.logging import request_id_for
from projectflow.features.product_features import service
from projectflow.models.feature import CreateFeaturesRequest, FeatureUpdateRequest

router = APIRouter(tags=["features"])


@router.get("/api/projects/{project_id}/features")
def list_features_endpoint(project_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    features = service.list_project_features(user_id, project_id)
    return {
        "data": [f.model_dump(mode="json") for f in features],
        "count": len(features),
        "request_id": request_id_for(request),
    }


@router.post("/api/projects/{project_id}/features", status_code=201)
def create_features_endpoint(
    project_id: str,
    body: CreateFeaturesRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    """Create one or many features (owner or admin)."""
    features = service.create_features(user_id, project_id, body.features)
    return {"data": [f.model_dump(mode="json") for f in features], "request_id": request_id_for(request)}


@router.patch("/api/features/{feature_id}")
def update_feature_endpoint(
    feature_id: str,
    body: FeatureUpdateRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    feature = service.update_feature(user_id, feature_id, body)
    return {"data": feature.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.delete("/api/features/{feature_id}")
def delete_feature_endpoint(feature_id: str, request: Request, user_id: str = Depends(get_current_user_id)):
    service.delete_feature(user_id, feature_id)
    return {"data": {"feature_id": feature_id, "deleted": True}, "request_id": request_id_for(request)}
