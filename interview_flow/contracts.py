from __future__ import annotations  # Collaborator interfaces consumed by the orchestrator

from typing import Any, List, Mapping, Optional, Protocol, Sequence

from .models import EvaluationBlock, EvaluationRubric, InterviewSession, MemorySummary, QAEntry, QuestionBlock, RoleBlock


class QuestionGenerator(Protocol):  # Produces the next question for a required category
    def generate(
        self,
        role_block: RoleBlock,
        memory: MemorySummary,
        last_qa: Optional[QAEntry],
        required_category: str,
        question_index: int,
    ) -> Mapping[str, Any]: ...


class AnswerEvaluator(Protocol):  # Scores one answer against the rubric
    def evaluate(self, question: QuestionBlock, rubric: EvaluationRubric, answer_text: str) -> Mapping[str, Any]: ...


class FeedbackGenerator(Protocol):  # Coaching for an already evaluated answer
    def generate(self, question: QuestionBlock, answer_text: str, evaluation: EvaluationBlock) -> Mapping[str, Any]: ...


class ReportNarrator(Protocol):  # Prose fields of the final report
    def generate(
        self,
        role_block: RoleBlock,
        statistics: Mapping[str, Any],
        skill_averages: Mapping[str, int],
        notes: Sequence[str],
    ) -> Mapping[str, Any]: ...


class Transcriber(Protocol):  # Speech to text for recorded answers
    def transcribe(self, audio: bytes, *, content_type: str) -> str: ...


class SessionRepository(Protocol):  # Persistence for the session aggregate
    def create(self, session: InterviewSession) -> None: ...

    def get(self, session_id: str) -> InterviewSession: ...

    def save(self, session: InterviewSession, *, expected_version: int) -> InterviewSession: ...

    def list_for_user(self, user_id: Optional[str], *, limit: int = 50) -> List[InterviewSession]: ...


__all__ = [
    "AnswerEvaluator",
    "FeedbackGenerator",
    "QuestionGenerator",
    "ReportNarrator",
    "SessionRepository",
    "Transcriber",
]
