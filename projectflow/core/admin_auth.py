"""
Admin authentication for credit top-ups.

Two credentials are accepted:
- Clerk JWT whose claims carry the admin role
- X-Admin-Key header matching ADMIN_API_KEY

Every admin action is logged with the actor identity.
"""
import hashlib
import hmac
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from fastapi import Request

from projectflow.core.auth import bearer_token, decode_clerk_jwt
from projectflow.core.config import settings
from projectflow.core.errors import AppError, AuthenticationError, PermissionError
from projectflow.core.logging import request_id_for


@dataclass
class AdminActor:
    """An authenticated admin."""
    actor_type: Literal["clerk", "admin_key"]
    actor_id: str  # Clerk user ID or "key:<hash>"
    actor_email: Optional[str] = None


def is_admin_claims(claims: Dict[str, Any]) -> bool:
    public_metadata = claims.get("public_metadata") or {}
    if isinstance(public_metadata, dict) and public_metadata.get("role") == "admin":
        return True
    return claims.get("org_role") == "admin"


def verify_admin_key(request: Request) -> Optional[AdminActor]:
    """Return an actor when X-Admin-Key matches ADMIN_API_KEY, else None."""
    expected_key = settings.ADMIN_API_KEY
    if not expected_key:
        return None

    header_key = request.headers.get("X-Admin-Key", "").strip()
    if not header_key or not hmac.compare_digest(header_key, expected_key):
        return None

    key_hash = hashlib.sha256(header_key.encode()).hexdigest()[:16]
    return AdminActor(actor_type="admin_key", actor_id=f"key:{key_hash}")


def verify_admin_jwt(request: Request) -> Optional[AdminActor]:
    token = bearer_token(request)
    if not token:
        return None
    try:
        claims = decode_clerk_jwt(token)
    except AuthenticationError:
        return None
    if not claims or not is_admin_claims(claims):
        return None
    return AdminActor(actor_type="clerk", actor_id=claims["sub"], actor_email=claims.get("email"))


def require_admin(request: Request) -> AdminActor:
    """
    FastAPI dependency: require an admin credential.

    503 when neither ADMIN_API_KEY nor CLERK_SECRET_KEY is configured,
    403 for any caller without an admin credential.
    """
    actor = verify_admin_jwt(request) or verify_admin_key(request)
    if actor:
        return actor

    if not settings.ADMIN_API_KEY and not settings.CLERK_SECRET_KEY:
        raise AppError(
            "Admin authentication not configured",
            code="admin_auth_unconfigured",
            status_code=503,
            request_id=request_id_for(request),
        )
    raise PermissionError("Admin credentials required", request_id=request_id_for(request))
