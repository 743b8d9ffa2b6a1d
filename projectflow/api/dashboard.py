"""
projectflow/api/dashboard.py
Dashboard aggregates for the signed-in user.
"""

from fastapi import APIRouter, Depends, Query, Request

from projectflow.core.auth import get_current_user_id
from projectflow.core.logging import request_id_for
from projectflow.features.dashboard import service

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats")
def dashboard_stats_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    return {"data": service.get_dashboard_stats(user_id), "request_id": request_id_for(request)}


@router.get("/categories")
def project_categories_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    return {"data": service.get_project_stats_by_category(user_id), "request_id": request_id_for(request)}


@router.get("/features")
def feature_stats_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    return {"data": service.get_feature_stats(user_id), "request_id": request_id_for(request)}


@router.get("/activities")
def recent_activities_endpoint(
    request: Request,
    limit: int = Query(service.DEFAULT_ACTIVITY_LIMIT, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
):
    activities = service.get_recent_activities(user_id, limit)
    return {
        "data": [{**a, "timestamp": a["timestamp"].isoformat()} for a in activities],
        "request_id": request_id_for(request),
    }
