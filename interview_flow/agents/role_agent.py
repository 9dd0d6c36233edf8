from __future__ import annotations  # Role agent turning a job title or resume into a role block

from textwrap import dedent
from typing import Dict, List, Optional, Sequence, Type

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from config import LlmRoute
from llm_gateway import LlmGatewayError
from llm_gateway import runnable as llm_runnable
from ..errors import ExternalServiceFailure, InputValidationError
from ..models import RoleBlock
from ..parsing import ParseError, parse_role_block
from .toolkit import clamp_text


ROLE_AGENT_KEY = "interview_flow.role_agent"  # Registry key for role block generation

MAX_RESUME_CHARS = 15000


ROLE_GUIDANCE = dedent(
    """
    You are an expert technical interviewer designing an interview plan.
    Pick the skills that best discriminate candidates for the target role.
    When a resume is supplied, favour its projects and technologies while staying on the target role.
    Choose a difficulty matching the stated experience level.
    Rubric weights are positive integers, typically 5 each.
    """
).strip()


class RolePlan(BaseModel):  # LLM-enforced role payload
    role_name: str
    skills: List[str] = Field(default_factory=list)
    difficulty: str = "medium"
    evaluation_rubric: Dict[str, int] = Field(default_factory=dict)


class RoleAgent:  # Agent generating reusable role blocks
    def __init__(self, route: LlmRoute, schema: Type[RolePlan] = RolePlan) -> None:
        self._route = route
        self._schema = schema
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{instructions}"),
                (
                    "human",
                    (
                        "Target Role: {role_text}\n"
                        "Experience Level: {experience_level}\n"
                        "Interview Types: {categories}\n"
                        "Total Questions: {total_questions}\n\n"
                        "Resume Content:\n{resume}\n\n"
                        "Return JSON with role_name, skills, difficulty and evaluation_rubric"
                        " (correctness, clarity, depth, relevance)."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(self._route, self._schema)

    def generate(
        self,
        *,
        role_text: str,
        experience_level: str,
        categories: Sequence[str],
        total_questions: int,
        custom_category: Optional[str] = None,
        resume_text: Optional[str] = None,
    ) -> RoleBlock:  # Run role chain and validate the result against the category plan
        if not role_text.strip() or not experience_level.strip():
            raise InputValidationError("Role and experience level are required", details={"fields": ["role", "experience_level"]})
        if not categories or total_questions < 1:
            raise InputValidationError("Select at least one interview type and one question", details={"fields": ["categories", "total_questions"]})
        if any(item in ("custom", "other") for item in categories) and not (custom_category or "").strip():
            raise InputValidationError("Custom interview type must be specified", details={"field": "custom_category"})
        labels = list(categories)
        if custom_category and custom_category.strip():
            labels.append(f"custom ({custom_category.strip()})")
        resume = (resume_text or "").strip()[:MAX_RESUME_CHARS]
        try:
            plan = self._chain.invoke(
                {
                    "instructions": ROLE_GUIDANCE,
                    "role_text": clamp_text(role_text, limit=300),
                    "experience_level": experience_level.strip(),
                    "categories": ", ".join(labels),
                    "total_questions": total_questions,
                    "resume": resume or "(no resume provided)",
                }
            )
        except LlmGatewayError as exc:
            raise ExternalServiceFailure("Role generation is unavailable", details={"reason": str(exc)}) from exc
        parsed = parse_role_block(
            plan.model_dump(),
            categories=categories,
            total_questions=total_questions,
            custom_category=custom_category,
        )
        if isinstance(parsed, ParseError):
            raise ExternalServiceFailure("The role generator returned an unusable role", details={"reason": parsed.reason})
        return parsed.data


__all__ = ["MAX_RESUME_CHARS", "ROLE_AGENT_KEY", "ROLE_GUIDANCE", "RoleAgent", "RolePlan"]
