"""
projectflow/models/project.py

Project records and the project-creation wizard payloads.

A project moves through a six step wizard: name, description and tech
stack, context questions, answers, features, summary. Saving the summary
activates the project.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


TOTAL_STEPS = 6


class ProjectStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class QuestionSection(str, Enum):
    GENERAL = "general"
    TECHNICAL = "technical"
    BUSINESS = "business"
    USER_EXPERIENCE = "user_experience"


class QuestionInputType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    MULTISELECT = "multiselect"
    RADIO = "radio"
    CHECKBOX = "checkbox"


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_id: str
    user_id: str = Field(description="Owner user ID")
    name: str = ""
    description: Optional[str] = None
    category: Optional[str] = None
    platform: Optional[str] = None
    status: ProjectStatus = ProjectStatus.DRAFT
    current_step: int = 1
    last_edited_step: int = 1
    total_steps: int = TOTAL_STEPS
    last_draft_save: Optional[datetime] = None
    members_with_role: Dict[str, str] = Field(default_factory=dict, description="user_id -> role, owner excluded")
    context_answers: Dict[str, Any] = Field(default_factory=dict)
    summary: Optional[str] = None
    tech_stack: Optional[Dict[str, Any]] = None
    questions_generated: bool = False
    questions_answered: bool = False
    can_proceed_from_context: bool = False
    prompts_generated: bool = False
    created_at: Optional[datetime] = None


class ProjectQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: str
    project_id: str
    section: QuestionSection
    question_text: str
    placeholder_text: Optional[str] = None
    input_type: QuestionInputType = QuestionInputType.TEXTAREA
    options: Optional[List[Any]] = None
    order_index: int = 0
    is_required: bool = True


class ProjectAnswer(BaseModel):
    model_config = ConfigDict(frozen=True)

    answer_id: str
    project_id: str
    question_id: str
    answer_text: Optional[str] = None


class SetStepRequest(BaseModel):
    current_step: int = Field(ge=1, le=TOTAL_STEPS)


class UpdateNameRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class UpdateDescriptionRequest(BaseModel):
    description: str
    tech_stack: Optional[str] = Field(default=None, description="Tech stack identifier or display name")


class QuestionInput(BaseModel):
    section: QuestionSection = QuestionSection.GENERAL
    question_text: str = Field(min_length=1)
    placeholder_text: Optional[str] = None
    input_type: QuestionInputType = QuestionInputType.TEXTAREA
    options: Optional[List[Any]] = None
    order_index: Optional[int] = None
    is_required: bool = True


class SaveQuestionsRequest(BaseModel):
    questions: List[QuestionInput]


class AnswerInput(BaseModel):
    question_id: str
    answer: str


class SaveAnswersRequest(BaseModel):
    answers: List[AnswerInput]


class SaveSummaryRequest(BaseModel):
    summary: Union[str, Dict[str, Any]]


class ProjectPatchRequest(BaseModel):
    """Partial update; only fields that are set are written."""

    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    platform: Optional[str] = None
    status: Optional[ProjectStatus] = None
    context_answers: Optional[Dict[str, Any]] = None
    tech_stack: Optional[Dict[str, Any]] = None
    can_proceed_from_context: Optional[bool] = None
    prompts_generated: Optional[bool] = None
