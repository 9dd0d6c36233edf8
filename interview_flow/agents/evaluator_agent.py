from __future__ import annotations  # Evaluator agent scoring answers against the role rubric

from textwrap import dedent
from typing import Any, Dict, List, Optional, Type

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from config import LlmRoute
from llm_gateway import LlmGatewayError
from llm_gateway import runnable as llm_runnable
from ..errors import InvalidEvaluationShape
from ..models import EvaluationRubric, QuestionBlock
from .toolkit import clamp_text, format_rubric


EVALUATOR_AGENT_KEY = "interview_flow.evaluator_agent"  # Registry key for answer evaluation

EVALUATOR_GUIDANCE = dedent(  # Scoring guardrails for rubric-aware evaluation
    """
    You are a strict but fair interview evaluator.
    Score each criterion between 0 and its rubric maximum; never exceed the maximum.
    overall_score is on a 0-10 scale and must reflect the criterion scores.
    Vague, off-topic or memorised answers score low on depth and relevance.
    List concrete weaknesses and set needs_followup when a gap deserves probing.
    """
).strip()


class CriterionScores(BaseModel):  # Four rubric sub-scores
    correctness: float
    clarity: float
    depth: float
    relevance: float


class EvaluationPlan(BaseModel):  # LLM-enforced evaluator payload
    scores: CriterionScores
    overall_score: float
    weaknesses: List[str] = Field(default_factory=list)
    notes: str = ""
    needs_followup: bool = False
    followup_reason: Optional[str] = None


class EvaluatorAgent:  # Agent evaluating one answer
    def __init__(self, route: LlmRoute, schema: Type[EvaluationPlan] = EvaluationPlan, *, answer_limit: int = 4000) -> None:
        self._route = route
        self._schema = schema
        self._answer_limit = answer_limit
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{instructions}"),
                (
                    "human",
                    (
                        "Category: {category}\n"
                        "Skill: {skill}\n"
                        "Difficulty: {difficulty}\n"
                        "Question: {question}\n\n"
                        "Rubric Maximums:\n{rubric}\n\n"
                        "Candidate Answer:\n{answer}\n\n"
                        "Return JSON with scores, overall_score, weaknesses, notes, needs_followup and followup_reason."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(self._route, self._schema)

    def evaluate(self, question: QuestionBlock, rubric: EvaluationRubric, answer_text: str) -> Dict[str, Any]:
        try:
            plan = self._chain.invoke(
                {
                    "instructions": EVALUATOR_GUIDANCE,
                    "category": question.category,
                    "skill": question.skill,
                    "difficulty": question.difficulty,
                    "question": question.question,
                    "rubric": format_rubric(rubric),
                    "answer": clamp_text(answer_text, limit=self._answer_limit),
                }
            )
        except LlmGatewayError as exc:
            raise InvalidEvaluationShape("Answer evaluation is unavailable", details={"reason": str(exc)}) from exc
        return plan.model_dump()


__all__ = ["CriterionScores", "EVALUATOR_AGENT_KEY", "EVALUATOR_GUIDANCE", "EvaluationPlan", "EvaluatorAgent"]
