"""
projectflow/features/notifications/email.py

Membership notification emails over the Resend HTTP API.

Each send is a single POST. Failures come back as EmailResult(success=False)
and are logged; they are never raised and never retried.
"""

import html
from typing import Optional, Protocol

import httpx

from projectflow.core.config import settings
from projectflow.core.errors import UpstreamError
from projectflow.core.logging import log_event
from projectflow.models.notification import EmailMessage, EmailResult

_LAYOUT = (
    '<div style="font-family: sans-serif; max-width: 600px; margin: 0 auto;">'
    '<h2 style="color: #4F46E5;">{heading}</h2>'
    "<p>Hello,</p>"
    "{body}"
    "<p>Thanks,<br>The ProjectFlow Team</p>"
    "</div>"
)


class EmailClient(Protocol):
    def send(self, message: EmailMessage) -> Optional[str]:
        """Submit one message and return the provider's message id, if any."""
        ...


class ResendEmailClient:
    def __init__(self, api_key: str, base_url: Optional[str] = None, timeout: Optional[float] = None, client: Optional[httpx.Client] = None):
        self.api_key = api_key
        self.base_url = (base_url or settings.RESEND_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.EMAIL_TIMEOUT_SECONDS
        self._client = client

    def send(self, message: EmailMessage) -> Optional[str]:
        payload = {
            "from": message.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        url = f"{self.base_url}/emails"

        if self._client is not None:
            response = self._client.post(url, json=payload, headers=headers, timeout=self.timeout)
        else:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(url, json=payload, headers=headers)
        response.raise_for_status()
        return (response.json() or {}).get("id")


def get_email_client() -> EmailClient:
    """FastAPI dependency; raises when no API key is configured."""
    if not settings.RESEND_API_KEY:
        raise UpstreamError("Email service is not configured")
    return ResendEmailClient(settings.RESEND_API_KEY)


def get_optional_email_client() -> Optional[EmailClient]:
    """Membership routes use this so a missing key never blocks the change."""
    if not settings.RESEND_API_KEY:
        return None
    return ResendEmailClient(settings.RESEND_API_KEY)


def _deliver(client: EmailClient, message: EmailMessage, kind: str) -> EmailResult:
    try:
        message_id = client.send(message)
    except Exception as exc:
        log_event(
            "error",
            f"email.{kind}.failed",
            error_code="email_failed",
            extra={"to": message.to, "error": str(exc)},
        )
        return EmailResult(success=False, error=str(exc) or exc.__class__.__name__)

    log_event("info", f"email.{kind}.sent", event_type=f"email.{kind}")
    return EmailResult(success=True, message_id=message_id or "sent")


def _message(to: str, subject: str, heading: str, body: str) -> EmailMessage:
    return EmailMessage(
        sender=settings.RESEND_FROM_EMAIL,
        to=to,
        subject=subject,
        html=_LAYOUT.format(heading=heading, body=body),
    )


def send_invitation_email(client: EmailClient, *, to: str, project_name: str, inviter_name: str, role: str) -> EmailResult:
    project = html.escape(project_name)
    body = (
        f"<p>{html.escape(inviter_name)} has invited you to collaborate on "
        f"<strong>{project}</strong> as a <strong>{html.escape(role)}</strong>.</p>"
        "<p>Log in to the application to start collaborating on this project.</p>"
        "<p>If you didn't expect this invitation, you can safely ignore this email.</p>"
    )
    message = _message(to, f"You've been invited to collaborate on {project_name}", "Project Invitation", body)
    return _deliver(client, message, "invitation")


def send_role_update_email(client: EmailClient, *, to: str, project_name: str, updater_name: str, new_role: str) -> EmailResult:
    body = (
        f"<p>{html.escape(updater_name)} has updated your role in <strong>{html.escape(project_name)}</strong>.</p>"
        f"<p>Your new role is: <strong>{html.escape(new_role)}</strong></p>"
        "<p>Log in to the application to see your updated permissions.</p>"
        "<p>If you have any questions about this change, please contact the project owner or administrator.</p>"
    )
    message = _message(to, f"Your role has been updated in {project_name}", "Role Update", body)
    return _deliver(client, message, "role_update")


def send_removal_email(client: EmailClient, *, to: str, project_name: str, remover_name: str) -> EmailResult:
    body = (
        f"<p>{html.escape(remover_name)} has removed you from the project <strong>{html.escape(project_name)}</strong>.</p>"
        "<p>If you believe this was done in error, please contact the project owner or administrator.</p>"
    )
    message = _message(to, f"You've been removed from {project_name}", "Project Removal", body)
    return _deliver(client, message, "removal")
