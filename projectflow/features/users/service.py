"""User profiles keyed by identity-provider user id."""

from datetime import datetime, timezone
from typing import List, Optional, Sequence
from uuid import uuid4

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from projectflow.core.database import get_db_session, user_profiles
from projectflow.core.errors import NotFoundError
from projectflow.core.logging import log_event
from projectflow.features.plans.service import ensure_plan
from projectflow.models.user_profile import EnsureProfileRequest, ProfileUpdateRequest, UserProfile


def to_profile(row) -> UserProfile:
    return UserProfile(**dict(row._mapping))


def get_profile(user_id: str) -> Optional[UserProfile]:
    with get_db_session() as session:
        row = session.execute(select(user_profiles).where(user_profiles.c.user_id == user_id)).first()
    return to_profile(row) if row else None


def get_profile_by_email(email: str) -> Optional[UserProfile]:
    with get_db_session() as session:
        row = session.execute(
            select(user_profiles).where(user_profiles.c.email == email.strip().lower())
        ).first()
    return to_profile(row) if row else None


def get_profiles_by_ids(user_ids: Sequence[str]) -> List[UserProfile]:
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return []
    with get_db_session() as session:
        rows = session.execute(select(user_profiles).where(user_profiles.c.user_id.in_(ids))).fetchall()
    return [to_profile(r) for r in rows]


def _normalize_email(email: Optional[str]) -> Optional[str]:
    return email.strip().lower() if email else email


def ensure_profile(user_id: str, body: Optional[EnsureProfileRequest] = None) -> UserProfile:
    """Create the profile and free plan on first sign-in; idempotent."""
    body = body or EnsureProfileRequest()
    existing = get_profile(user_id)
    if existing is None:
        try:
            with get_db_session() as session:
                session.execute(
                    insert(user_profiles).values(
                        profile_id=str(uuid4()),
                        user_id=user_id,
                        first_name=body.first_name,
                        last_name=body.last_name,
                        email=_normalize_email(body.email),
                        company=body.company,
                        timezone=body.timezone or "UTC",
                        created_at=datetime.now(timezone.utc),
                    )
                )
            log_event("info", "profile.created", user_id=user_id, event_type="profile.created")
        except IntegrityError:
            log_event("info", "profile.create.race", user_id=user_id)

    ensure_plan(user_id)
    return get_profile(user_id)


def update_profile(user_id: str, patch: ProfileUpdateRequest) -> UserProfile:
    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        changes["email"] = _normalize_email(changes["email"])

    with get_db_session() as session:
        row = session.execute(select(user_profiles.c.profile_id).where(user_profiles.c.user_id == user_id)).first()
        if not row:
            raise NotFoundError("Profile not found")
        if changes:
            session.execute(update(user_profiles).where(user_profiles.c.user_id == user_id).values(**changes))
    return get_profile(user_id)
