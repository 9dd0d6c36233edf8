from __future__ import annotations  # Report agent narrating the final interview summary

import json
from textwrap import dedent
from typing import Any, Dict, List, Mapping, Sequence, Type

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from config import LlmRoute
from llm_gateway import LlmGatewayError
from llm_gateway import runnable as llm_runnable
from ..errors import ReportGenerationFailed
from ..models import RoleBlock
from .toolkit import bullet_list


REPORT_AGENT_KEY = "interview_flow.report_agent"  # Registry key for report narration

REPORT_GUIDANCE = dedent(
    """
    You are writing the final debrief for a mock interview.
    Base every statement on the supplied statistics and evaluator notes.
    Strengths and weak areas should name skills, not repeat scores.
    Recommendations must be concrete next steps for practice.
    """
).strip()


class ReportPlan(BaseModel):  # LLM-enforced narrative payload
    summary: str
    strengths: List[str] = Field(default_factory=list)
    weak_areas: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ReportAgent:
    def __init__(self, route: LlmRoute, schema: Type[ReportPlan] = ReportPlan) -> None:
        self._route = route
        self._schema = schema
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{instructions}"),
                (
                    "human",
                    (
                        "Role: {role_name} ({difficulty})\n"
                        "Statistics:\n{statistics}\n\n"
                        "Average Score per Skill:\n{skill_averages}\n\n"
                        "Evaluator Notes:\n{notes}\n\n"
                        "Return JSON with summary, strengths, weak_areas and recommendations."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(self._route, self._schema)

    def generate(
        self,
        role_block: RoleBlock,
        statistics: Mapping[str, Any],
        skill_averages: Mapping[str, int],
        notes: Sequence[str],
    ) -> Dict[str, Any]:
        try:
            plan = self._chain.invoke(
                {
                    "instructions": REPORT_GUIDANCE,
                    "role_name": role_block.role_name,
                    "difficulty": role_block.difficulty,
                    "statistics": json.dumps(dict(statistics), indent=2, default=str),
                    "skill_averages": bullet_list(f"{skill}: {score}/10" for skill, score in skill_averages.items()),
                    "notes": bullet_list(notes),
                }
            )
        except LlmGatewayError as exc:
            raise ReportGenerationFailed("Report generation is unavailable", details={"reason": str(exc)}) from exc
        return plan.model_dump()


__all__ = ["REPORT_AGENT_KEY", "REPORT_GUIDANCE", "ReportAgent", "ReportPlan"]
