from __future__ import annotations  # Rolling memory summary and difficulty adaptation

from typing import List

from .models import DIFFICULTY_TIERS, Difficulty, EvaluationBlock, MemorySummary, QuestionBlock

STRONG_THRESHOLD = 8.0  # overall_score at or above marks a skill strong
WEAK_THRESHOLD = 5.0  # overall_score below marks a skill weak
ESCALATE_THRESHOLD = 9.0
DEESCALATE_THRESHOLD = 4.0
SUMMARY_TOKENS = 30


def initialize_memory() -> MemorySummary:  # Zero state used at interview start
    return MemorySummary()


def update_memory(
    current: MemorySummary,
    evaluation: EvaluationBlock,
    question: QuestionBlock,
    answer_text: str,
) -> MemorySummary:
    """Return the memory state after one evaluated answer.

    Skill membership moves between the strong and weak sets based on the
    overall score, difficulty moves at most one tier, and the previous answer
    is compressed to its first thirty tokens. ``current`` is never modified.
    """

    score = evaluation.overall_score
    strong = list(current.strong_skills)
    weak = list(current.weak_skills)
    skill = question.skill
    if score >= STRONG_THRESHOLD:
        strong = _with(strong, skill)
        weak = _without(weak, skill)
    elif score < WEAK_THRESHOLD:
        weak = _with(weak, skill)
        strong = _without(strong, skill)

    return MemorySummary(
        question_count=current.question_count + 1,
        weak_skills=weak,
        strong_skills=strong,
        last_score=score,
        difficulty=next_difficulty(current.difficulty, score),
        prev_answer_summary=summarize_answer(answer_text),
        needs_followup=evaluation.needs_followup,
    )


def next_difficulty(current: Difficulty, score: float) -> Difficulty:  # Single-step tier move
    index = DIFFICULTY_TIERS.index(current)
    if score >= ESCALATE_THRESHOLD and index < len(DIFFICULTY_TIERS) - 1:
        return DIFFICULTY_TIERS[index + 1]
    if score < DEESCALATE_THRESHOLD and index > 0:
        return DIFFICULTY_TIERS[index - 1]
    return current


def summarize_answer(answer_text: str, limit: int = SUMMARY_TOKENS) -> str:
    tokens = answer_text.split()
    summary = " ".join(tokens[:limit])
    if len(tokens) > limit:
        summary += "..."
    return summary


def _with(items: List[str], skill: str) -> List[str]:
    return items if skill in items else items + [skill]


def _without(items: List[str], skill: str) -> List[str]:
    return [item for item in items if item != skill]


__all__ = ["initialize_memory", "next_difficulty", "summarize_answer", "update_memory"]
