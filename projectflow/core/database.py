"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine and session management
- Connection pooling with sane defaults (SQLite for tests)
- Table definitions for every persisted entity
"""
import logging
import os
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    select,
)
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool
from sqlalchemy.sql import func

from projectflow.core.config import settings

logger = logging.getLogger("projectflow")

# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour

# Global engine and session factory
_engine = None
_SessionLocal = None


def get_database_url() -> Optional[str]:
    """
    Get the database URL from settings or environment.

    For testing, use TEST_DATABASE_URL if available.
    """
    test_url = os.getenv("TEST_DATABASE_URL")
    if test_url:
        return test_url

    return settings.DATABASE_URL


def init_engine(database_url: Optional[str] = None):
    """
    Initialize the SQLAlchemy engine.

    Args:
        database_url: Optional override for DATABASE_URL
    """
    global _engine, _SessionLocal

    url = database_url or get_database_url()

    if not url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )

    if url.startswith("sqlite"):
        _engine = create_engine(url, connect_args={"check_same_thread": False}, echo=False)
    else:
        _engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            echo=False,
        )

    _SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine
    )

    return _engine


def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def get_engine():
    """Get the current SQLAlchemy engine."""
    if _engine is None:
        init_engine()
    return _engine


def get_session_factory():
    """Get the session factory."""
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.execute(...)
    """
    SessionLocal = get_session_factory()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all_tables():
    """
    Create all tables defined in metadata.

    This is idempotent - tables that already exist will not be recreated.
    """
    metadata.create_all(bind=get_engine())


def check_connection() -> bool:
    """
    Check if database connection is available.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        with get_engine().connect() as conn:
            conn.execute(select(1))
        return True
    except Exception as e:
        logger.warning(f"Database connection check failed: {e}")
        return False


# Projects (owner in user_id, collaborators in members_with_role)
projects = Table(
    'projects',
    metadata,
    Column('project_id', String(100), primary_key=True),
    Column('user_id', String(100), nullable=False, index=True),
    Column('name', Text, nullable=False, default=''),
    Column('description', Text, nullable=True),
    Column('category', String(100), nullable=True),
    Column('platform', String(100), nullable=True),
    Column('status', String(20), nullable=False, default='draft', index=True),
    Column('current_step', Integer, nullable=False, default=1),
    Column('last_edited_step', Integer, nullable=False, default=1),
    Column('total_steps', Integer, nullable=False, default=6),
    Column('last_draft_save', DateTime(timezone=True), nullable=True),
    Column('members_with_role', JSON, nullable=True),
    # Bumped on every role map write; compare-and-swap guard
    Column('members_version', Integer, nullable=False, default=0),
    Column('context_answers', JSON, nullable=True),
    Column('summary', Text, nullable=True),
    Column('tech_stack', JSON, nullable=True),
    Column('questions_generated', Boolean, nullable=False, default=False),
    Column('questions_answered', Boolean, nullable=False, default=False),
    Column('can_proceed_from_context', Boolean, nullable=False, default=False),
    Column('prompts_generated', Boolean, nullable=False, default=False),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # Composite index for the owner dashboard: (user_id, status)
    Index('idx_projects_user_status', 'user_id', 'status'),
)

project_questions = Table(
    'project_questions',
    metadata,
    Column('question_id', String(100), primary_key=True),
    Column('project_id', String(100), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False, index=True),
    Column('section', String(50), nullable=False),
    Column('question_text', Text, nullable=False),
    Column('placeholder_text', Text, nullable=True),
    Column('input_type', String(20), nullable=False, default='textarea'),
    Column('options', JSON, nullable=True),
    Column('order_index', Integer, nullable=False, default=0),
    Column('is_required', Boolean, nullable=False, default=True),
)

project_answers = Table(
    'project_answers',
    metadata,
    Column('answer_id', String(100), primary_key=True),
    Column('project_id', String(100), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False, index=True),
    Column('question_id', String(100), ForeignKey('project_questions.question_id', ondelete='CASCADE'), nullable=False),
    Column('answer_text', Text, nullable=True),
    UniqueConstraint('project_id', 'question_id', name='uq_project_answers_project_question'),
)

features = Table(
    'features',
    metadata,
    Column('feature_id', String(100), primary_key=True),
    Column('project_id', String(100), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False, index=True),
    Column('title', Text, nullable=False),
    Column('description', Text, nullable=True),
    Column('priority', String(20), nullable=False, default='Medium'),
    Column('effort', String(20), nullable=False, default='Medium'),
    Column('category', String(20), nullable=False, default='Core'),
    Column('user_id', String(100), nullable=True, index=True),
    Column('added_to_task', Boolean, nullable=False, default=False),
    Column('implementation_details', Text, nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
)

tasks = Table(
    'tasks',
    metadata,
    Column('task_id', String(100), primary_key=True),
    Column('project_id', String(100), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False, index=True),
    Column('feature_id', String(100), nullable=True, index=True),
    Column('parent_task_id', String(100), nullable=True, index=True),
    Column('title', Text, nullable=False),
    Column('description', Text, nullable=True),
    Column('status', String(20), nullable=False, default='todo'),
    Column('position', Integer, nullable=False, default=0),
    Column('priority', String(20), nullable=True),
    Column('effort', String(20), nullable=True),
    Column('category', String(20), nullable=True),
    Column('due_date', DateTime(timezone=True), nullable=True),
    Column('assigned_to', String(100), nullable=True, index=True),
    Column('notes', Text, nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    # Composite index for board columns: (project_id, status, position)
    Index('idx_tasks_project_status_position', 'project_id', 'status', 'position'),
)

chat_messages = Table(
    'chat_messages',
    metadata,
    Column('message_id', Integer, primary_key=True, autoincrement=True),
    Column('project_id', String(100), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False),
    Column('user_id', String(100), nullable=False),
    Column('content', Text, nullable=False),
    Column('timestamp', DateTime(timezone=True), nullable=False),
    Column('user_name', Text, nullable=True),
    Column('user_image_url', Text, nullable=True),
    Index('idx_chat_messages_project_timestamp', 'project_id', 'timestamp'),
)

prompts = Table(
    'prompts',
    metadata,
    Column('prompt_id', String(100), primary_key=True),
    Column('project_id', String(100), ForeignKey('projects.project_id', ondelete='CASCADE'), nullable=False, index=True),
    Column('feature_id', String(100), nullable=True, index=True),
    Column('content', Text, nullable=False),
    Column('type', String(20), nullable=False),
    Column('user_id', String(100), nullable=False, index=True),
    Column('created_at', DateTime(timezone=True), nullable=False),
)

user_profiles = Table(
    'user_profiles',
    metadata,
    Column('profile_id', String(100), primary_key=True),
    Column('user_id', String(100), nullable=False, unique=True),
    Column('first_name', Text, nullable=True),
    Column('last_name', Text, nullable=True),
    Column('email', String(320), nullable=True, index=True),
    Column('company', Text, nullable=True),
    Column('timezone', String(64), nullable=False, default='UTC'),
    Column('stripe_customer_id', String(100), nullable=True),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
)

user_plans = Table(
    'user_plans',
    metadata,
    Column('user_id', String(100), primary_key=True),
    Column('plan_type', String(20), nullable=False, default='free'),
    Column('credits_remaining', Integer, nullable=False),
    Column('credits_used', Integer, nullable=False, default=0),
    Column('plan_started_at', DateTime(timezone=True), nullable=False),
    Column('plan_ends_at', DateTime(timezone=True), nullable=True),
    Column('is_active', Boolean, nullable=False, default=True),
    Column('cancel_at_period_end', Boolean, nullable=False, default=False),
    Column('current_period_end', DateTime(timezone=True), nullable=True),
    Column('team_size', Integer, nullable=False, default=1),
)
