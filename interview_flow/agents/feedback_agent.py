from __future__ import annotations  # Feedback agent writing coaching notes for an answered question

from textwrap import dedent
from typing import Any, Dict, List, Type

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from config import LlmRoute
from llm_gateway import LlmGatewayError
from llm_gateway import runnable as llm_runnable
from ..errors import FeedbackGenerationFailed
from ..models import EvaluationBlock, QuestionBlock
from .toolkit import bullet_list, clamp_text


FEEDBACK_AGENT_KEY = "interview_flow.feedback_agent"  # Registry key for feedback generation

FEEDBACK_GUIDANCE = dedent(
    """
    You are an interview coach reviewing one answer after the fact.
    Write a concise ideal answer the candidate could have given.
    Name specific mistakes from the candidate's answer, not generic advice.
    Give short, actionable improvement tips.
    """
).strip()


class FeedbackPlan(BaseModel):  # LLM-enforced feedback payload
    ideal_answer: str
    mistakes: List[str] = Field(default_factory=list)
    improvement_tips: List[str] = Field(default_factory=list)


class FeedbackAgent:
    def __init__(self, route: LlmRoute, schema: Type[FeedbackPlan] = FeedbackPlan) -> None:
        self._route = route
        self._schema = schema
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{instructions}"),
                (
                    "human",
                    (
                        "Question ({category}, {skill}): {question}\n\n"
                        "Candidate Answer:\n{answer}\n\n"
                        "Evaluator Score: {score}/10\n"
                        "Evaluator Weaknesses:\n{weaknesses}\n\n"
                        "Return JSON with ideal_answer, mistakes and improvement_tips."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(self._route, self._schema)

    def generate(self, question: QuestionBlock, answer_text: str, evaluation: EvaluationBlock) -> Dict[str, Any]:
        try:
            plan = self._chain.invoke(
                {
                    "instructions": FEEDBACK_GUIDANCE,
                    "category": question.category,
                    "skill": question.skill,
                    "question": question.question,
                    "answer": clamp_text(answer_text, limit=4000) or "(no answer)",
                    "score": f"{evaluation.overall_score:g}",
                    "weaknesses": bullet_list(evaluation.weaknesses),
                }
            )
        except LlmGatewayError as exc:
            raise FeedbackGenerationFailed("Feedback generation is unavailable", details={"reason": str(exc)}) from exc
        return plan.model_dump()


__all__ = ["FEEDBACK_AGENT_KEY", "FEEDBACK_GUIDANCE", "FeedbackAgent", "FeedbackPlan"]
