"""
Auth utilities for the ProjectFlow API.

Validates Clerk session JWTs and extracts the user id from the request.
The X-User-Id header is honoured only while no CLERK_SECRET_KEY is
configured (local development and tests).
"""
import logging
from typing import Any, Dict, Optional

import jwt
from fastapi import Header, Request

from projectflow.core.config import settings
from projectflow.core.errors import AuthenticationError

logger = logging.getLogger(__name__)


def decode_clerk_jwt(token: str, secret: Optional[str] = None, issuer: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Verify a Clerk JWT and return its claims.

    Returns None when no signing secret is configured.

    Raises:
        AuthenticationError: expired, malformed or subject-less token
    """
    key = secret if secret is not None else settings.CLERK_SECRET_KEY
    if not key:
        logger.debug("No CLERK_SECRET_KEY configured, skipping JWT validation")
        return None

    expected_issuer = issuer if issuer is not None else settings.CLERK_ISSUER
    options = {"verify_signature": True, "verify_exp": True, "verify_iss": bool(expected_issuer)}
    try:
        payload = jwt.decode(
            token,
            key,
            algorithms=["HS256", "RS256"],
            issuer=expected_issuer or None,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid token: {e}")
        raise AuthenticationError("Invalid token")

    if not payload.get("sub"):
        raise AuthenticationError("Token has no subject")
    return payload


def verify_clerk_jwt(token: str, secret: Optional[str] = None, issuer: Optional[str] = None) -> Optional[str]:
    """Verify a Clerk JWT and return its subject (None when no secret is configured)."""
    claims = decode_clerk_jwt(token, secret=secret, issuer=issuer)
    return claims["sub"] if claims else None


def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:]
    return None


async def get_current_user_id(
    request: Request,
    x_user_id: Optional[str] = Header(None, description="Development/test user ID"),
) -> str:
    """
    Resolve the authenticated user id.

    With CLERK_SECRET_KEY set only a valid bearer JWT identifies the
    caller and X-User-Id is ignored. Without it the header is accepted.
    """
    token = bearer_token(request)
    if settings.CLERK_SECRET_KEY:
        if not token:
            raise AuthenticationError("Missing Authorization bearer token")
        return verify_clerk_jwt(token)

    if x_user_id:
        return x_user_id

    raise AuthenticationError("Missing Authorization (Bearer JWT) or X-User-Id header")
