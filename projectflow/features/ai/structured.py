"""
Structured completion: ask for JSON, get parsed data or a typed failure.

All JSON parsing of provider text goes through here.
"""

import json
import logging
import re
from typing import Any, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from projectflow.core.errors import InvalidFormatError, InvalidProviderJSONError
from projectflow.core.logging import truncate
from projectflow.features.ai.completion import CompletionClient, CompletionRequest

logger = logging.getLogger("projectflow")

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"^\s*```(?:json|JSON)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text.strip()


def parse_json(raw: str) -> Any:
    try:
        return json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as exc:
        logger.error(
            "[structured] invalid JSON from provider",
            extra={"error_code": "invalid_provider_json", "details": {"raw": truncate(raw, 300)}},
        )
        raise InvalidProviderJSONError("Invalid JSON response from LLM provider") from exc


def complete_json(client: CompletionClient, request: CompletionRequest) -> Any:
    return parse_json(client.complete(request))


def validate_as(data: Any, model_type: Type[T]) -> T:
    try:
        return model_type.model_validate(data)
    except PydanticValidationError as exc:
        logger.error(
            f"[structured] response did not match {model_type.__name__}",
            extra={"error_code": "invalid_format", "details": {"raw": truncate(data, 300)}},
        )
        raise InvalidFormatError(f"Invalid {model_type.__name__} format from LLM provider") from exc


def complete_structured(client: CompletionClient, request: CompletionRequest, model_type: Type[T]) -> T:
    return validate_as(complete_json(client, request), model_type)
