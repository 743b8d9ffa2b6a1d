"""
Prompt formatters for the generation endpoints.

Every formatter is a pure function returning a PromptPair. Conditional
blocks (answers, previously generated features, summary, implementation
details) are omitted or replaced with a fixed placeholder when absent.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from projectflow.models.generation import FeatureBrief, QuestionAnswer

TECH_STACK_NAMES: Dict[str, str] = {
    "nextjs-supabase": "Next.js + Supabase",
    "nextjs-convex": "Next.js + Convex",
    "mern": "MERN Stack (MongoDB, Express, React, Node)",
    "reactjs-supabase": "React.js + Supabase",
    "reactjs-convex": "React.js + Convex",
}

JSON_SYSTEM_SUFFIX = "Always respond with valid JSON."


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str


def tech_stack_display_name(tech_stack: Optional[Union[str, Dict[str, Any]]]) -> str:
    """Map a stack identifier (or a {"name": ...} mapping) to its display name."""
    if not tech_stack:
        return ""
    if isinstance(tech_stack, dict):
        name = tech_stack.get("name")
        return str(name) if name else ""
    return TECH_STACK_NAMES.get(tech_stack, tech_stack)


def _numbered_answers(answers: Sequence[QuestionAnswer]) -> str:
    return "\n\n".join(
        f"Question {i}: {qa.question_text}\nAnswer: {qa.answer}"
        for i, qa in enumerate(answers, start=1)
    )


def questions_prompt(project_name: str, project_description: str) -> PromptPair:
    user = f"""
You are an expert project manager and business analyst. Based on the following project information, generate exactly 3 smart, insightful questions that will help better understand the project requirements, target audience, technical needs, and business goals.

Project Name: {project_name}
Project Description: {project_description}

Please generate 3 questions that cover different aspects:
1. One question about the target users/audience or business goals
2. One question about technical requirements, constraints, or integrations
3. One question about specific features, functionality, or user experience

Return the response as a JSON object with this exact structure:
{{
  "questions": [
    {{
      "questionText": "Your question here?",
      "section": "business",
      "inputType": "textarea",
      "placeholderText": "Describe your answer...",
      "isRequired": true,
      "orderIndex": 1
    }}
  ]
}}

Section types should be: "business", "technical", or "user_experience"
Input types should be: "text" or "textarea"
Make questions specific, actionable, and relevant to the project described.
"""
    system = (
        "You are an expert project manager who generates insightful questions "
        f"to understand project requirements better. {JSON_SYSTEM_SUFFIX}"
    )
    return PromptPair(system=system, user=user)


def features_prompt(
    project_name: str,
    project_description: str,
    question_answers: Sequence[QuestionAnswer] = (),
    previous_features: Sequence[str] = (),
) -> PromptPair:
    answers_text = _numbered_answers(question_answers) if question_answers else "No additional answers provided."
    previous_text = ""
    if previous_features:
        listed = "\n".join(f"{i}. {title}" for i, title in enumerate(previous_features, start=1))
        previous_text = f"\nPreviously Generated Features (DO NOT DUPLICATE THESE):\n{listed}"

    user = f"""
You are an expert product manager and software architect. Based on the following project information, generate exactly ONE high-quality feature that would be essential for this project.

Project Name: {project_name}
Project Description: {project_description}

Additional Context:
{answers_text}{previous_text}

Requirements:
1. Generate exactly ONE feature that is directly relevant to the project goals
2. The feature must be technically feasible
3. The feature must provide clear user value
4. The feature should be unique and valuable
5. DO NOT duplicate any of the previously generated features listed above

Format your response as a JSON object with the following structure:
{{
  "features": [
    {{
      "title": "Feature Name",
      "description": "Clear description of what the feature does and why it's valuable",
      "priority": "High|Medium|Low|Critical",
      "effort": "Small|Medium|Large|XL",
      "category": "Core|Enhancement|Integration|UI/UX|Performance|Security"
    }}
  ]
}}
"""
    system = (
        "You are an expert product manager who generates high-quality, implementable "
        f"features for software projects. {JSON_SYSTEM_SUFFIX} Generate exactly ONE "
        "feature per request that does not duplicate any previously generated features."
    )
    return PromptPair(system=system, user=user)


def summary_prompt(
    project_name: str,
    project_description: str,
    features: Sequence[FeatureBrief],
    question_answers: Sequence[QuestionAnswer] = (),
) -> PromptPair:
    features_text = "\n".join(
        f"{i}. {f.title}: {f.description or ''} (Priority: {f.priority}, Effort: {f.effort})"
        for i, f in enumerate(features, start=1)
    )
    answers_text = "\n\n".join(f"Q: {qa.question_text}\nA: {qa.answer}" for qa in question_answers)

    user = f"""
You are a senior product manager creating a comprehensive project summary. Based on the following information, generate a detailed project summary that includes project overview, key objectives, features breakdown, and next steps.

Project Name: {project_name}
Project Description: {project_description}

Generated Features:
{features_text}

Additional Context:
{answers_text}

Return the response as JSON with this structure:
{{
  "overview": "Comprehensive project overview",
  "objectives": ["Objective 1", "Objective 2", "Objective 3"],
  "targetAudience": "Description of target users",
  "useCases": ["Use case 1", "Use case 2", "Use case 3"],
  "featuresBreakdown": {{
    "phase1": ["Feature for MVP"],
    "phase2": ["Enhancement features"],
    "phase3": ["Advanced features"]
  }},
  "technicalConsiderations": ["Tech consideration 1", "Tech consideration 2"],
  "developmentPhases": [
    {{
      "phase": "Phase 1 - MVP",
      "duration": "Estimated timeline",
      "description": "What to accomplish in this phase"
    }}
  ],
  "successMetrics": ["Metric 1", "Metric 2", "Metric 3"]
}}
"""
    system = (
        "You are a senior product manager who creates comprehensive, strategic "
        f"project summaries. {JSON_SYSTEM_SUFFIX}"
    )
    return PromptPair(system=system, user=user)


_PROMPT_WRITER_SYSTEM = (
    "You are an expert software developer and technical writer. "
    "Your task is to create a comprehensive, detailed prompt that will guide the implementation of {target}. "
    "The prompt should be structured, clear, and provide enough technical details for a developer to {goal}."
)


def project_prompt(project_name: str, project_description: str, features: Sequence[FeatureBrief]) -> PromptPair:
    features_text = "\n".join(f"- {f.title}: {f.description or 'No description'}" for f in features)
    user = f"""Create a detailed implementation prompt for the following project:

Project Name: {project_name}
Project Description: {project_description}

Features:
{features_text}

Your prompt should:
1. Start with a high-level overview of the project
2. Break down the technical requirements
3. Suggest a suitable architecture and technology stack if not already specified
4. Outline implementation steps in a logical order
5. Highlight potential challenges and how to address them
6. Include any best practices that should be followed

Format the prompt in a clear, structured way that a developer can easily follow."""
    system = _PROMPT_WRITER_SYSTEM.format(
        target="a software project", goal="understand what needs to be built"
    )
    return PromptPair(system=system, user=user)


def feature_prompt(project_name: str, project_description: str, feature: FeatureBrief) -> PromptPair:
    user = f"""Create a detailed implementation prompt for the following feature:

Project Name: {project_name}
Project Description: {project_description}

Feature: {feature.title}
Description: {feature.description or 'No description'}
Priority: {feature.priority or 'Not specified'}
Effort: {feature.effort or 'Not specified'}

Your prompt should:
1. Start with a clear description of what this feature should accomplish
2. Detail the technical requirements for implementing this feature
3. Suggest implementation approaches and potential libraries/tools to use
4. Outline step-by-step implementation instructions
5. Describe how this feature should integrate with other parts of the project
6. Include considerations for testing, edge cases, and performance

Format the prompt in a clear, structured way that a developer can easily follow."""
    system = _PROMPT_WRITER_SYSTEM.format(
        target="a specific feature of a software project", goal="implement the feature"
    )
    return PromptPair(system=system, user=user)


def _feature_block(index: int, feature: FeatureBrief) -> str:
    lines = [
        f"Feature {index}: {feature.title}",
        f"Description: {feature.description or ''}",
        f"Priority: {feature.priority or ''}",
        f"Effort: {feature.effort or ''}",
        f"Category: {feature.category or ''}",
    ]
    if feature.implementation_details:
        lines.append(f"Implementation Details: {feature.implementation_details}")
    return "\n".join(lines)


def summary_text(summary: Optional[Union[str, Dict[str, Any]]]) -> str:
    if not summary:
        return ""
    if isinstance(summary, str):
        return summary
    return json.dumps(summary, ensure_ascii=False)


def documentation_prompt(
    project_name: str,
    project_description: str,
    tech_stack_name: str,
    features: Sequence[FeatureBrief],
    summary: Optional[Union[str, Dict[str, Any]]] = None,
) -> PromptPair:
    features_text = (
        "\n\n".join(_feature_block(i, f) for i, f in enumerate(features, start=1))
        if features
        else "No features provided."
    )
    summary_block = f"\nProject Summary: {summary_text(summary)}\n" if summary else ""

    user = f"""
You are an expert technical documentation writer. Based on the following project information, generate comprehensive documentation for this software project.

Project Name: {project_name}
Project Description: {project_description}
Tech Stack: {tech_stack_name or "Not specified"}

Features:
{features_text}
{summary_block}
Requirements:
1. Generate professional documentation that covers the project overview, architecture, features, and implementation guidelines
2. Structure the documentation with clear sections and headings
3. Include technical details relevant to the specified tech stack
4. Provide implementation guidance for each feature
5. Include a section on getting started with the project

Format your response as a well-structured document with markdown formatting. Include:
- Title and project overview
- Tech stack details and architecture
- Feature descriptions with implementation guidelines
- Setup and installation instructions
- Development workflow recommendations
"""
    system = (
        "You are an expert technical documentation writer who creates comprehensive, "
        "well-structured documentation for software projects. Your documentation is "
        "clear, professional, and technically accurate."
    )
    return PromptPair(system=system, user=user)


def implementation_prompt(
    feature_title: str,
    feature_description: str,
    project_context: Optional[str] = None,
    tech_stack: Optional[str] = None,
) -> PromptPair:
    user = f"""
You are a senior software engineer and technical architect. Generate a detailed implementation guide for the following feature:

Feature: {feature_title}
Description: {feature_description}
Project Context: {project_context or 'General web application'}
Tech Stack: {tech_stack_display_name(tech_stack) or 'React, TypeScript, Node.js'}

Provide:
1. Detailed implementation steps (4-6 steps)
2. Technical considerations and best practices
3. Potential challenges and solutions
4. Code structure recommendations
5. A comprehensive AI prompt for developers

Return the response as JSON with this structure:
{{
  "implementationSteps": ["Step 1: Description of what to do", "Step 2: Next step..."],
  "technicalConsiderations": ["Important technical point 1", "Important technical point 2"],
  "challenges": [
    {{"challenge": "Potential challenge description", "solution": "How to solve this challenge"}}
  ],
  "codeStructure": "Recommended file structure and architecture approach",
  "aiPrompt": "Comprehensive prompt for AI coding assistants that includes all necessary context, requirements, and technical specifications"
}}
"""
    system = (
        "You are a senior software engineer who creates detailed, practical "
        f"implementation guides. {JSON_SYSTEM_SUFFIX}"
    )
    return PromptPair(system=system, user=user)


def previous_titles(previous_features: List[str]) -> set:
    """Normalized titles used for duplicate detection."""
    return {title.strip().lower() for title in previous_features if title and title.strip()}
