from __future__ import annotations  # Answer evaluation pipeline with the auto-fail short circuit

import math
from datetime import datetime, timezone
from typing import NamedTuple, Optional

from observability import log_event

from .contracts import AnswerEvaluator
from .errors import InvalidEvaluationShape, NoActiveQuestion
from .memory import update_memory
from .models import EvaluationBlock, EvaluationScores, InterviewSession, NoPendingQuestion, PendingQuestion, QAEntry
from .parsing import ParseError, parse_evaluation

MIN_ANSWER_TOKENS = 5
AUTO_FAIL_WEAKNESSES = ("No meaningful answer provided", "Response is too short to evaluate")
AUTO_FAIL_REASON = "no answer provided"


class EvaluatedTurn(NamedTuple):  # Outcome of one answered question
    evaluation: EvaluationBlock
    entry: QAEntry
    session: InterviewSession


def count_tokens(answer_text: str) -> int:  # Whitespace-delimited non-empty tokens
    return len(answer_text.split())


def auto_fail_evaluation(word_count: int) -> EvaluationBlock:
    return EvaluationBlock(
        scores=EvaluationScores(correctness=0, clarity=0, depth=0, relevance=0),
        overall_score=0.0,
        weaknesses=list(AUTO_FAIL_WEAKNESSES),
        notes=f"Answer contains only {word_count} word(s). Minimum effort required.",
        needs_followup=True,
        followup_reason=AUTO_FAIL_REASON,
    )


def time_spent_seconds(started_at: datetime, submitted_at: datetime) -> int:  # Floored, never negative
    return max(0, math.floor((submitted_at - started_at).total_seconds()))


def evaluate_answer(
    session: InterviewSession,
    answer_text: str,
    audio_url: Optional[str],
    question_started_at: Optional[datetime],
    *,
    evaluator: AnswerEvaluator,
    now: datetime,
    min_tokens: int = MIN_ANSWER_TOKENS,
) -> EvaluatedTurn:
    """Score the pending question's answer and build the next session state.

    Answers shorter than ``min_tokens`` are failed locally without calling
    ``evaluator``. The returned session is a deep copy; ``session`` itself is
    left untouched so a failure anywhere in the turn commits nothing.
    """

    pending = session.pending
    if not isinstance(pending, PendingQuestion):
        raise NoActiveQuestion("There is no question awaiting an answer", details={"session_id": session.session_id})

    trimmed = answer_text.strip()
    words = count_tokens(trimmed)
    if not trimmed or words < min_tokens:
        evaluation = auto_fail_evaluation(words)
        log_event("auto_fail", session.session_id, question_number=pending.question_number, words=words)
    else:
        raw = evaluator.evaluate(pending.question, session.role_block.evaluation_rubric, trimmed)
        parsed = parse_evaluation(raw, session.role_block.evaluation_rubric)
        if isinstance(parsed, ParseError):
            log_event(
                "evaluation_rejected",
                session.session_id,
                question_number=pending.question_number,
                reason=parsed.reason,
            )
            raise InvalidEvaluationShape("The evaluator returned an unusable result", details={"reason": parsed.reason})
        evaluation = parsed.data

    started_at = question_started_at or now
    if started_at.tzinfo is None:  # Offset-less client timestamps are UTC
        started_at = started_at.replace(tzinfo=timezone.utc)
    entry = QAEntry(
        question_number=session.current_question_number + 1,
        question=pending.question,
        answer_text=trimmed,
        answer_audio_url=audio_url,
        evaluation=evaluation,
        question_started_at=started_at,
        answer_submitted_at=now,
        time_spent_seconds=time_spent_seconds(started_at, now),
    )

    working = session.model_copy(deep=True)
    working.qa_history.append(entry)
    working.current_question_number = entry.question_number
    working.pending = NoPendingQuestion()
    working.memory = update_memory(session.memory, evaluation, pending.question, trimmed)
    working.updated_at = now
    return EvaluatedTurn(evaluation=evaluation, entry=entry, session=working)


__all__ = [
    "AUTO_FAIL_REASON",
    "AUTO_FAIL_WEAKNESSES",
    "EvaluatedTurn",
    "MIN_ANSWER_TOKENS",
    "auto_fail_evaluation",
    "count_tokens",
    "evaluate_answer",
    "time_spent_seconds",
]
