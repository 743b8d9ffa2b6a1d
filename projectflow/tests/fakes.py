"""In-process stand-ins for the completion and email clients."""

import json
import time
from typing import Any, List, Optional

from projectflow.features.ai.completion import CompletionRequest
from projectflow.models.notification import EmailMessage


class FakeCompletionClient:
    """Returns queued responses in order; repeats the last one when drained."""

    def __init__(self, *responses: Any, delay: float = 0.0):
        self.delay = delay
        self.responses: List[str] = [self._text(r) for r in responses]
        self.requests: List[CompletionRequest] = []

    @staticmethod
    def _text(response: Any) -> str:
        return response if isinstance(response, str) else json.dumps(response)

    def queue(self, *responses: Any) -> None:
        self.responses.extend(self._text(r) for r in responses)

    def complete(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        if self.delay:
            time.sleep(self.delay)
        if not self.responses:
            raise AssertionError("FakeCompletionClient has no queued response")
        if len(self.responses) == 1:
            return self.responses[0]
        return self.responses.pop(0)

    @property
    def last_request(self) -> Optional[CompletionRequest]:
        return self.requests[-1] if self.requests else None


class FakeEmailClient:
    def __init__(self, fail_with: Optional[Exception] = None, message_id: Optional[str] = "email_123"):
        self.fail_with = fail_with
        self.message_id = message_id
        self.sent: List[EmailMessage] = []

    def send(self, message: EmailMessage) -> Optional[str]:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)
        return self.message_id
