"""
LLM completion client.

One chat completion per call: no retry, no streaming. Handlers receive the
client through the `get_completion_client` dependency so tests can swap in
a fake without touching module state.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import groq

from projectflow.core.config import settings
from projectflow.core.errors import EmptyCompletionError, UpstreamError

logger = logging.getLogger("projectflow")


@dataclass(frozen=True)
class CompletionRequest:
    system: str
    user: str
    temperature: float = 0.7
    max_tokens: int = 1000
    json_mode: bool = False
    model: Optional[str] = None


class CompletionClient(Protocol):
    def complete(self, request: CompletionRequest) -> str:
        """Return the provider's text for one request."""
        ...


class GroqCompletionClient:
    """CompletionClient backed by the Groq chat completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[groq.Groq] = None,
    ):
        self.model = model or settings.GROQ_MODEL
        self._client = client or groq.Groq(
            api_key=api_key or settings.GROQ_API_KEY,
            timeout=timeout or settings.LLM_TIMEOUT_SECONDS,
        )

    def complete(self, request: CompletionRequest) -> str:
        params = {
            "messages": [
                {"role": "system", "content": request.system},
                {"role": "user", "content": request.user},
            ],
            "model": request.model or self.model,
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        if request.json_mode:
            params["response_format"] = {"type": "json_object"}

        try:
            completion = self._client.chat.completions.create(**params)
        except groq.APIError as exc:
            logger.error(f"[completion] provider error: {exc}", extra={"error_code": "upstream_error"})
            raise UpstreamError("LLM provider request failed") from exc

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise EmptyCompletionError("No response from LLM provider")
        return content


_default_client: Optional[GroqCompletionClient] = None


def get_completion_client() -> CompletionClient:
    """FastAPI dependency returning the process-wide Groq client."""
    global _default_client
    if _default_client is None:
        if not settings.GROQ_API_KEY:
            raise UpstreamError("GROQ_API_KEY is not configured")
        _default_client = GroqCompletionClient()
    return _default_client
