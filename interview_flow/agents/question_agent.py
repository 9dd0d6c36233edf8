from __future__ import annotations  # Question agent producing the next interview question

from textwrap import dedent
from typing import Any, Dict, Optional, Type

from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from pydantic import BaseModel

from config import LlmRoute
from llm_gateway import LlmGatewayError
from llm_gateway import runnable as llm_runnable
from ..errors import QuestionGenerationFailed
from ..models import MemorySummary, QAEntry, RoleBlock
from .toolkit import bullet_list, format_memory, last_turn_messages


QUESTION_AGENT_KEY = "interview_flow.question_agent"  # Registry key for question generation

QUESTION_GUIDANCE = dedent(  # Interviewer persona and adaptation rules
    """
    You are a professional interviewer running a mock interview.
    Ask exactly one question of the required category at the requested difficulty.
    Prefer skills listed as weak; avoid repeating a skill the candidate just covered well.
    If a follow-up is needed, probe the gap in the previous answer instead of changing topic.
    Keep the intro to one short sentence and never reveal the expected answer.
    """
).strip()

CATEGORY_HINTS = {  # Category focus lines shown to the model
    "technical": "Assess technical knowledge, problem solving and applied engineering judgement.",
    "behavioral": "Ask about past situations; expect situation, task, action and result.",
    "hr": "Cover motivation, culture fit, career goals and collaboration style.",
    "custom": "Follow the custom focus area named for this interview.",
}


class QuestionPlan(BaseModel):  # LLM-enforced question payload
    intro: str = ""
    question: str
    skill: str
    difficulty: str
    category: str = ""


class QuestionAgent:  # Agent generating category-constrained questions
    def __init__(self, route: LlmRoute, schema: Type[QuestionPlan] = QuestionPlan) -> None:
        self._route = route
        self._schema = schema
        self._prompt = ChatPromptTemplate.from_messages(
            [
                ("system", "{instructions}"),
                MessagesPlaceholder("history"),
                (
                    "human",
                    (
                        "Role: {role_name}\n"
                        "Target Skills:\n{skills}\n\n"
                        "Candidate Memory:\n{memory}\n\n"
                        "Required Category: {category}\n"
                        "Category Focus: {category_hint}\n"
                        "Target Difficulty: {difficulty}\n"
                        "Question Number: {question_index} of {total_questions}\n\n"
                        "Return JSON with intro, question, skill, difficulty and category."
                        " The category must equal the required category."
                    ),
                ),
            ]
        )
        self._chain = self._prompt | llm_runnable(self._route, self._schema)

    def generate(
        self,
        role_block: RoleBlock,
        memory: MemorySummary,
        last_qa: Optional[QAEntry],
        required_category: str,
        question_index: int,
    ) -> Dict[str, Any]:  # Run the question chain for one turn
        hint = CATEGORY_HINTS.get(required_category, CATEGORY_HINTS["technical"])
        if required_category == "custom" and role_block.custom_category:
            hint = f"Focus on: {role_block.custom_category}."
        try:
            plan = self._chain.invoke(
                {
                    "instructions": QUESTION_GUIDANCE,
                    "history": last_turn_messages(last_qa),
                    "role_name": role_block.role_name,
                    "skills": bullet_list(role_block.skills),
                    "memory": format_memory(memory),
                    "category": required_category,
                    "category_hint": hint,
                    "difficulty": memory.difficulty if memory.question_count else role_block.difficulty,
                    "question_index": question_index,
                    "total_questions": role_block.total_questions,
                }
            )
        except LlmGatewayError as exc:
            raise QuestionGenerationFailed("Question generation is unavailable", details={"reason": str(exc)}) from exc
        return plan.model_dump()


__all__ = ["CATEGORY_HINTS", "QUESTION_AGENT_KEY", "QUESTION_GUIDANCE", "QuestionAgent", "QuestionPlan"]
