from __future__ import annotations  # Shared LangChain helpers for interview agents

from typing import Iterable, List, Optional

from ..models import EvaluationRubric, MemorySummary, QAEntry


def last_turn_messages(last_qa: Optional[QAEntry]) -> List[dict]:  # Map the previous turn to LangChain message dicts
    if last_qa is None:
        return []
    messages: List[dict] = []
    question = last_qa.question.question.strip()
    if question:
        messages.append({"role": "assistant", "content": question})
    answer = last_qa.answer_text.strip()
    if answer:
        messages.append({"role": "user", "content": answer})
    return messages


def clamp_text(text: str, limit: int = 600) -> str:  # Compact whitespace and clip length
    compact = " ".join(text.split())
    if len(compact) <= limit:
        return compact
    return compact[: limit - 1].rstrip() + "…"


def bullet_list(entries: Iterable[str]) -> str:  # Render entries as markdown bullets
    lines = [item.strip() for item in entries if item and item.strip()]
    if not lines:
        return "None provided."
    return "\n".join(f"- {line}" for line in lines)


def format_rubric(rubric: EvaluationRubric) -> str:  # One line per criterion with its maximum
    return "\n".join(f"- {name}: 0-{value}" for name, value in rubric.model_dump().items())


def format_memory(memory: MemorySummary) -> str:
    return "\n".join(
        [
            f"Questions answered: {memory.question_count}",
            f"Current difficulty: {memory.difficulty}",
            f"Last score: {memory.last_score:g}/10",
            f"Strong skills: {', '.join(memory.strong_skills) or 'none yet'}",
            f"Weak skills: {', '.join(memory.weak_skills) or 'none yet'}",
            f"Previous answer: {memory.prev_answer_summary or '(none)'}",
            f"Follow-up needed: {'yes' if memory.needs_followup else 'no'}",
        ]
    )


__all__ = ["bullet_list", "clamp_text", "format_memory", "format_rubric", "last_turn_messages"]
