"""
projectflow/models/generation.py

Request and response schemas for the LLM generation endpoints.

Wire format is camelCase (projectName, questionText, ...). Python code uses
snake_case; aliases are generated and both spellings are accepted on input.
Provider output models are lenient: missing fields take defaults and
unknown enum values fall back to the default member.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from projectflow.models.feature import FeatureCategory, FeatureEffort, FeaturePriority
from projectflow.models.project import QuestionInputType, QuestionSection


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _coerce_enum(value: Any, enum_cls: Type[Enum], default: Enum) -> Enum:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == wanted:
                return member
    return default


def _not_blank(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValueError(f"{field_name} is required")
    return value.strip()


# --- Request payloads -------------------------------------------------------


class QuestionAnswer(CamelModel):
    model_config = ConfigDict(extra="ignore")

    question_text: str = ""
    answer: str = ""


class FeatureBrief(CamelModel):
    """A feature as clients send it to the generation endpoints."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    description: Optional[str] = None
    priority: Optional[str] = None
    effort: Optional[str] = None
    category: Optional[str] = None
    implementation_details: Optional[str] = None


class GenerateQuestionsRequest(CamelModel):
    project_name: str
    project_description: str

    @field_validator("project_name", "project_description")
    @classmethod
    def required_text(cls, value: str, info) -> str:
        return _not_blank(value, info.field_name)


class GenerateFeaturesRequest(CamelModel):
    project_name: str
    project_description: str
    question_answers: List[QuestionAnswer] = Field(default_factory=list)
    previous_features: List[str] = Field(default_factory=list)

    @field_validator("project_name", "project_description")
    @classmethod
    def required_text(cls, value: str, info) -> str:
        return _not_blank(value, info.field_name)

    @field_validator("question_answers", "previous_features", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return [] if value is None else value


class GenerateSummaryRequest(CamelModel):
    project_name: str
    project_description: str
    features: List[FeatureBrief]
    question_answers: List[QuestionAnswer] = Field(default_factory=list)

    @field_validator("project_name", "project_description")
    @classmethod
    def required_text(cls, value: str, info) -> str:
        return _not_blank(value, info.field_name)

    @field_validator("question_answers", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return [] if value is None else value


class PromptProject(CamelModel):
    model_config = ConfigDict(extra="ignore")

    project_name: str = ""
    project_description: str = ""
    features: List[FeatureBrief] = Field(default_factory=list)


class GeneratePromptRequest(CamelModel):
    type: str
    project: PromptProject
    feature: Optional[FeatureBrief] = None


class GenerateDocumentationRequest(CamelModel):
    project_name: str
    project_description: str
    tech_stack: Optional[Union[str, Dict[str, Any]]] = None
    features: List[FeatureBrief] = Field(default_factory=list)
    summary: Optional[Union[str, Dict[str, Any]]] = None

    @field_validator("project_name", "project_description")
    @classmethod
    def required_text(cls, value: str, info) -> str:
        return _not_blank(value, info.field_name)

    @field_validator("features", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return [] if value is None else value


class GenerateImplementationRequest(CamelModel):
    feature_title: str
    feature_description: str
    project_context: Optional[str] = None
    tech_stack: Optional[str] = None

    @field_validator("feature_title", "feature_description")
    @classmethod
    def required_text(cls, value: str, info) -> str:
        return _not_blank(value, info.field_name)


# --- Normalized provider output ---------------------------------------------


class GeneratedQuestion(CamelModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    question_text: str
    section: QuestionSection = QuestionSection.GENERAL
    input_type: QuestionInputType = QuestionInputType.TEXTAREA
    placeholder_text: str = ""
    is_required: bool = True
    order_index: int = 0

    @field_validator("question_text")
    @classmethod
    def question_required(cls, value: str) -> str:
        return _not_blank(value, "questionText")

    @field_validator("section", mode="before")
    @classmethod
    def coerce_section(cls, value):
        return _coerce_enum(value, QuestionSection, QuestionSection.GENERAL)

    @field_validator("input_type", mode="before")
    @classmethod
    def coerce_input_type(cls, value):
        return _coerce_enum(value, QuestionInputType, QuestionInputType.TEXTAREA)

    @field_validator("placeholder_text", mode="before")
    @classmethod
    def placeholder_default(cls, value):
        return value or ""


class GeneratedFeature(CamelModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    title: str = "Untitled Feature"
    description: str = ""
    priority: FeaturePriority = FeaturePriority.MEDIUM
    effort: FeatureEffort = FeatureEffort.MEDIUM
    category: FeatureCategory = FeatureCategory.CORE

    @field_validator("title", mode="before")
    @classmethod
    def title_default(cls, value):
        if not isinstance(value, str) or not value.strip():
            return "Untitled Feature"
        return value.strip()

    @field_validator("description", mode="before")
    @classmethod
    def description_default(cls, value):
        return value if isinstance(value, str) else ""

    @field_validator("priority", mode="before")
    @classmethod
    def coerce_priority(cls, value):
        return _coerce_enum(value, FeaturePriority, FeaturePriority.MEDIUM)

    @field_validator("effort", mode="before")
    @classmethod
    def coerce_effort(cls, value):
        return _coerce_enum(value, FeatureEffort, FeatureEffort.MEDIUM)

    @field_validator("category", mode="before")
    @classmethod
    def coerce_category(cls, value):
        return _coerce_enum(value, FeatureCategory, FeatureCategory.CORE)


class FeaturesBreakdown(CamelModel):
    model_config = ConfigDict(extra="ignore")

    phase1: List[str] = Field(default_factory=list)
    phase2: List[str] = Field(default_factory=list)
    phase3: List[str] = Field(default_factory=list)


class DevelopmentPhase(CamelModel):
    model_config = ConfigDict(extra="ignore")

    phase: str = ""
    duration: str = ""
    description: str = ""


class ProjectSummary(CamelModel):
    model_config = ConfigDict(extra="ignore")

    overview: str = ""
    objectives: List[str] = Field(default_factory=list)
    target_audience: str = ""
    use_cases: List[str] = Field(default_factory=list)
    features_breakdown: FeaturesBreakdown = Field(default_factory=FeaturesBreakdown)
    technical_considerations: List[str] = Field(default_factory=list)
    development_phases: List[DevelopmentPhase] = Field(default_factory=list)
    success_metrics: List[str] = Field(default_factory=list)


class ImplementationChallenge(CamelModel):
    model_config = ConfigDict(extra="ignore")

    challenge: str = ""
    solution: str = ""


class ImplementationGuide(CamelModel):
    model_config = ConfigDict(extra="ignore")

    implementation_steps: List[str] = Field(default_factory=list)
    technical_considerations: List[str] = Field(default_factory=list)
    challenges: List[ImplementationChallenge] = Field(default_factory=list)
    code_structure: str = ""
    ai_prompt: str = ""


class DocumentationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    documentation: str
    pdf_bytes: bytes
    pdf_base64: str
    page_count: int
