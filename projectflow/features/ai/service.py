"""Generation service for the project-planning wizard.

Each function formats a prompt, makes exactly one completion call and
normalizes the provider output into typed results. Provider problems
surface as UpstreamError subclasses; nothing is retried.
"""

import logging
from typing import Any, Dict, List, Optional

from projectflow.core.config import settings
from projectflow.core.errors import (
    DuplicateFeatureError,
    InvalidFormatError,
    ValidationError,
)
from projectflow.core.logging import log_event
from projectflow.features.ai import prompts
from projectflow.features.ai.completion import CompletionClient, CompletionRequest
from projectflow.features.ai.structured import complete_json, complete_structured, validate_as
from projectflow.features.documentation.renderer import render_documentation
from projectflow.models.generation import (
    DocumentationResult,
    GenerateDocumentationRequest,
    GenerateFeaturesRequest,
    GenerateImplementationRequest,
    GeneratePromptRequest,
    GenerateQuestionsRequest,
    GeneratedFeature,
    GeneratedQuestion,
    GenerateSummaryRequest,
    ImplementationGuide,
    ProjectSummary,
)
from projectflow.models.prompt import PromptType

logger = logging.getLogger("projectflow")

QUESTION_COUNT = 3
FEATURE_COUNT = 1


def _request(pair: prompts.PromptPair, *, temperature: float, max_tokens: int, json_mode: bool = False, model: Optional[str] = None) -> CompletionRequest:
    return CompletionRequest(
        system=pair.system,
        user=pair.user,
        temperature=temperature,
        max_tokens=max_tokens,
        json_mode=json_mode,
        model=model,
    )


def _question_items(data: Any) -> List[Any]:
    if isinstance(data, dict):
        data = data.get("questions")
    if not isinstance(data, list):
        raise InvalidFormatError("Invalid questions format")
    return data


def generate_questions(client: CompletionClient, body: GenerateQuestionsRequest) -> List[GeneratedQuestion]:
    """Return exactly three clarifying questions or raise InvalidFormatError."""
    pair = prompts.questions_prompt(body.project_name, body.project_description)
    data = complete_json(client, _request(pair, temperature=0.7, max_tokens=800, json_mode=True))

    items = _question_items(data)
    if len(items) != QUESTION_COUNT:
        log_event(
            "warning",
            "ai.questions.wrong_count",
            error_code="invalid_format",
            extra={"count": len(items)},
        )
        raise InvalidFormatError(f"Expected {QUESTION_COUNT} questions, got {len(items)}")

    questions = []
    for index, item in enumerate(items, start=1):
        if isinstance(item, dict) and not item.get("orderIndex"):
            item = {**item, "orderIndex": index}
        questions.append(validate_as(item, GeneratedQuestion))
    return questions


def generate_features(client: CompletionClient, body: GenerateFeaturesRequest) -> List[GeneratedFeature]:
    """Return one feature whose title is not among ``previous_features``."""
    pair = prompts.features_prompt(
        body.project_name,
        body.project_description,
        body.question_answers,
        body.previous_features,
    )
    data = complete_json(client, _request(pair, temperature=0.7, max_tokens=1500, json_mode=True))

    items = data.get("features") if isinstance(data, dict) else None
    if not isinstance(items, list) or not items:
        raise InvalidFormatError("Invalid features format")

    taken = prompts.previous_titles(body.previous_features)
    candidates = [validate_as(item if isinstance(item, dict) else {}, GeneratedFeature) for item in items]
    distinct = [f for f in candidates if f.title.strip().lower() not in taken]

    if not distinct:
        raise DuplicateFeatureError("Generated feature duplicates a previously generated feature")
    if len(candidates) > FEATURE_COUNT:
        logger.warning(f"[ai.features] provider returned {len(candidates)} features, keeping one")
    return distinct[:FEATURE_COUNT]


def generate_summary(client: CompletionClient, body: GenerateSummaryRequest) -> ProjectSummary:
    pair = prompts.summary_prompt(
        body.project_name,
        body.project_description,
        body.features,
        body.question_answers,
    )
    return complete_structured(client, _request(pair, temperature=0.6, max_tokens=2000, json_mode=True), ProjectSummary)


def generate_prompt(client: CompletionClient, body: GeneratePromptRequest) -> str:
    project = body.project
    if body.type == PromptType.PROJECT.value:
        pair = prompts.project_prompt(project.project_name, project.project_description, project.features)
        max_tokens = 2000
    elif body.type == PromptType.FEATURE.value and body.feature is not None:
        pair = prompts.feature_prompt(project.project_name, project.project_description, body.feature)
        max_tokens = 1500
    else:
        raise ValidationError("Invalid prompt type or missing feature details")

    text = client.complete(_request(pair, temperature=0.7, max_tokens=max_tokens))
    return text.strip()


def generate_documentation(client: CompletionClient, body: GenerateDocumentationRequest) -> DocumentationResult:
    """Generate markdown documentation and its paginated PDF rendering."""
    stack_name = prompts.tech_stack_display_name(body.tech_stack)
    pair = prompts.documentation_prompt(
        body.project_name,
        body.project_description,
        stack_name,
        body.features,
        body.summary,
    )
    documentation = client.complete(
        _request(pair, temperature=0.7, max_tokens=4000, model=settings.GROQ_DOCUMENTATION_MODEL)
    )

    pdf_bytes, pdf_base64, page_count = render_documentation(documentation, body.project_name, stack_name or None)
    log_event(
        "info",
        "ai.documentation.generated",
        event_type="ai.documentation",
        extra={"pages": page_count, "chars": len(documentation)},
    )
    return DocumentationResult(
        documentation=documentation,
        pdf_bytes=pdf_bytes,
        pdf_base64=pdf_base64,
        page_count=page_count,
    )


def generate_implementation(client: CompletionClient, body: GenerateImplementationRequest) -> ImplementationGuide:
    pair = prompts.implementation_prompt(
        body.feature_title,
        body.feature_description,
        body.project_context,
        body.tech_stack,
    )
    return complete_structured(
        client,
        _request(pair, temperature=0.6, max_tokens=2000, json_mode=True),
        ImplementationGuide,
    )


def dump_camel(items: List[Any]) -> List[Dict[str, Any]]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]
