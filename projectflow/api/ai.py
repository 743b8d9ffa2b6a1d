"""
projectflow/api/ai.py

LLM-backed generation endpoints for the project wizard.

Responses keep the client-facing keys (questions, features, summary,
prompt, documentation, pdfBase64, implementationGuide) at the top level
alongside request_id.
"""

from fastapi import APIRouter, Depends, Request

from projectflow.core.auth import get_current_user_id
from projectflow.core.errors import RateLimitError
from projectflow.core.logging import log_event, request_id_for
from projectflow.features.ai import service
from projectflow.features.ai.completion import CompletionClient, get_completion_client
from projectflow.models.generation import (
    GenerateDocumentationRequest,
    GenerateFeaturesRequest,
    GenerateImplementationRequest,
    GeneratePromptRequest,
    GenerateQuestionsRequest,
    GenerateSummaryRequest,
)

router = APIRouter(prefix="/api/ai", tags=["ai"])


def _guard(request: Request, user_id: str, route: str) -> str:
    rid = request_id_for(request)
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter and not limiter.allow(f"ai:{route}:{user_id}"):
        log_event("warning", "ai.rate_limited", request_id=rid, user_id=user_id, error_code="rate_limited", extra={"route": route})
        raise RateLimitError("Rate limit exceeded for AI generation", request_id=rid)
    return rid


@router.post("/generate-questions")
def generate_questions_endpoint(
    body: GenerateQuestionsRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    client: CompletionClient = Depends(get_completion_client),
):
    rid = _guard(request, user_id, "questions")
    questions = service.generate_questions(client, body)
    return {"questions": service.dump_camel(questions), "request_id": rid}


@router.post("/generate-features")
def generate_features_endpoint(
    body: GenerateFeaturesRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    client: CompletionClient = Depends(get_completion_client),
):
    rid = _guard(request, user_id, "features")
    features = service.generate_features(client, body)
    return {"features": service.dump_camel(features), "request_id": rid}


@router.post("/generate-summary")
def generate_summary_endpoint(
    body: GenerateSummaryRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    client: CompletionClient = Depends(get_completion_client),
):
    rid = _guard(request, user_id, "summary")
    summary = service.generate_summary(client, body)
    return {"summary": summary.model_dump(mode="json", by_alias=True), "request_id": rid}


@router.post("/generate-prompt")
def generate_prompt_endpoint(
    body: GeneratePromptRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    client: CompletionClient = Depends(get_completion_client),
):
    rid = _guard(request, user_id, "prompt")
    prompt = service.generate_prompt(client, body)
    return {"prompt": prompt, "request_id": rid}


@router.post("/generate-documentation")
def generate_documentation_endpoint(
    body: GenerateDocumentationRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    client: CompletionClient = Depends(get_completion_client),
):
    """Markdown documentation plus a base64-encoded PDF rendering."""
    rid = _guard(request, user_id, "documentation")
    result = service.generate_documentation(client, body)
    return {
        "documentation": result.documentation,
        "pdfBase64": result.pdf_base64,
        "pageCount": result.page_count,
        "request_id": rid,
    }


@router.post("/generate-implementation")
def generate_implementation_endpoint(
    body: GenerateImplementationRequest,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    client: CompletionClient = Depends(get_completion_client),
):
    rid = _guard(request, user_id, "implementation")
    guide = service.generate_implementation(client, body)
    return {"implementationGuide": guide.model_dump(mode="json", by_alias=True), "request_id": rid}
