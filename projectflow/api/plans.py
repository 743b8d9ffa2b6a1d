"""
projectflow/api/plans.py
Credit ledger API.
"""

from fastapi import APIRouter, Depends, Request

from projectflow.core.admin_auth import AdminActor, require_admin
from projectflow.core.auth import get_current_user_id
from projectflow.core.logging import log_event, request_id_for
from projectflow.features.plans import service
from projectflow.models.user_plan import AddCreditsRequest, DeductCreditsRequest

router = APIRouter(prefix="/api/plans", tags=["plans"])


@router.get("/me")
def get_my_plan_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    plan = service.get_plan(user_id)
    return {"data": plan.model_dump(mode="json") if plan else None, "request_id": request_id_for(request)}


@router.post("/me")
def ensure_plan_endpoint(request: Request, user_id: str = Depends(get_current_user_id)):
    plan = service.ensure_plan(user_id)
    return {"data": plan.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.post("/me/deduct")
def deduct_credits_endpoint(
    body: DeductCreditsRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    plan = service.deduct_credits(user_id, body.credits_to_deduct)
    return {"data": plan.model_dump(mode="json"), "request_id": request_id_for(request)}


@router.post("/credits")
def add_credits_endpoint(
    body: AddCreditsRequest,
    request: Request,
    actor: AdminActor = Depends(require_admin),
):
    plan = service.add_credits(body.user_id, body.credits_to_add)
    log_event(
        "info",
        "admin.credits.added",
        request_id=request_id_for(request),
        user_id=body.user_id,
        extra={"actor_id": actor.actor_id, "actor_type": actor.actor_type, "amount": body.credits_to_add},
    )
    return {"data": plan.model_dump(mode="json"), "request_id": request_id_for(request)}
