from __future__ import annotations  # Question-type scheduler picking the most starved category

from typing import Dict, Mapping, Sequence

from .errors import InputValidationError


def distribute_targets(categories: Sequence[str], total_questions: int) -> Dict[str, int]:
    """Spread ``total_questions`` across categories, remainder to the first listed."""

    if not categories:
        raise InputValidationError("At least one category is required", details={"field": "categories"})
    if total_questions < 1:
        raise InputValidationError("total_questions must be at least 1", details={"field": "total_questions"})
    base, remainder = divmod(total_questions, len(categories))
    return {category: base + (1 if index < remainder else 0) for index, category in enumerate(categories)}


def remaining_counts(targets: Mapping[str, int], asked: Mapping[str, int]) -> Dict[str, int]:
    return {category: target - asked.get(category, 0) for category, target in targets.items()}


def select_next_category(
    targets: Mapping[str, int],
    asked: Mapping[str, int],
    order: Sequence[str],
    default: str,
) -> str:  # Deterministic pick; never mutates its inputs
    remaining = remaining_counts(targets, asked)
    ranked = [category for category in order if category in remaining]
    ranked.extend(category for category in remaining if category not in ranked)
    best = None
    best_remaining = 0
    for category in ranked:
        if remaining[category] > best_remaining:
            best = category
            best_remaining = remaining[category]
    return best if best is not None else default


def commit_category(asked: Mapping[str, int], category: str) -> Dict[str, int]:  # Count one recorded question
    updated = dict(asked)
    updated[category] = updated.get(category, 0) + 1
    return updated


__all__ = ["commit_category", "distribute_targets", "remaining_counts", "select_next_category"]
