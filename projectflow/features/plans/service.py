"""
projectflow/features/plans/service.py

Credit ledger.

Handles:
- Lazy creation of the free plan
- Credit deduction as one conditional UPDATE
- Credit top-ups
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from projectflow.core.config import settings
from projectflow.core.database import get_db_session, user_plans
from projectflow.core.errors import InsufficientCreditsError, NotFoundError, ValidationError
from projectflow.core.logging import log_event
from projectflow.models.user_plan import PlanType, UserPlan


def to_plan(row) -> UserPlan:
    return UserPlan(**dict(row._mapping))


def get_plan(user_id: str) -> Optional[UserPlan]:
    with get_db_session() as session:
        row = session.execute(select(user_plans).where(user_plans.c.user_id == user_id)).first()
    return to_plan(row) if row else None


def ensure_plan(user_id: str) -> UserPlan:
    """
    Return the user's plan, creating the free plan if none exists.

    Two concurrent first calls both try the insert; the loser hits the
    primary key and reads the winner's row.
    """
    existing = get_plan(user_id)
    if existing:
        return existing

    credits = settings.DEFAULT_FREE_CREDITS
    try:
        with get_db_session() as session:
            session.execute(
                insert(user_plans).values(
                    user_id=user_id,
                    plan_type=PlanType.FREE.value,
                    credits_remaining=credits,
                    credits_used=0,
                    plan_started_at=datetime.now(timezone.utc),
                    is_active=True,
                    cancel_at_period_end=False,
                    team_size=1,
                )
            )
        log_event("info", "plan.created", user_id=user_id, event_type="plan.created", extra={"credits": credits})
    except IntegrityError:
        log_event("info", "plan.create.race", user_id=user_id)

    plan = get_plan(user_id)
    if plan is None:
        raise NotFoundError("User plan not found")
    return plan


def deduct_credits(user_id: str, amount: int) -> UserPlan:
    """
    Spend ``amount`` credits.

    The balance check and the decrement are one statement, so two
    concurrent deductions can never take the balance below zero.
    """
    if amount <= 0:
        raise ValidationError("Credits to deduct must be positive")
    ensure_plan(user_id)

    with get_db_session() as session:
        result = session.execute(
            update(user_plans)
            .where(
                user_plans.c.user_id == user_id,
                user_plans.c.credits_remaining >= amount,
            )
            .values(
                credits_remaining=user_plans.c.credits_remaining - amount,
                credits_used=user_plans.c.credits_used + amount,
            )
        )
        updated = result.rowcount

    if updated == 0:
        log_event(
            "warning",
            "plan.credits.insufficient",
            user_id=user_id,
            error_code="insufficient_credits",
            extra={"requested": amount},
        )
        raise InsufficientCreditsError("Insufficient credits")
    return get_plan(user_id)


def add_credits(user_id: str, amount: int) -> UserPlan:
    if amount <= 0:
        raise ValidationError("Credits to add must be positive")
    with get_db_session() as session:
        result = session.execute(
            update(user_plans)
            .where(user_plans.c.user_id == user_id)
            .values(credits_remaining=user_plans.c.credits_remaining + amount)
        )
        if result.rowcount == 0:
            raise NotFoundError("User plan not found")
    log_event("info", "plan.credits.added", user_id=user_id, extra={"amount": amount})
    return get_plan(user_id)
