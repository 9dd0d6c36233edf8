from __future__ import annotations  # Session lifecycle state machine with pause accounting

import math
from datetime import datetime
from typing import Dict, FrozenSet

from .errors import InvalidTransition
from .models import InterviewSession, SessionStatus

TRANSITIONS: Dict[SessionStatus, FrozenSet[SessionStatus]] = {
    "in_progress": frozenset({"paused", "completed"}),
    "paused": frozenset({"in_progress", "completed"}),
    "completed": frozenset(),
}


def can_transition(current: SessionStatus, target: SessionStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def ensure_transition(session: InterviewSession, target: SessionStatus) -> None:
    if not can_transition(session.status, target):
        raise InvalidTransition(
            f"Cannot move interview from {session.status} to {target}",
            details={"session_id": session.session_id, "status": session.status, "target": target},
        )


def pause(session: InterviewSession, now: datetime) -> InterviewSession:
    ensure_transition(session, "paused")
    working = session.model_copy(deep=True)
    working.status = "paused"
    working.paused_at = now
    working.pause_count += 1
    working.updated_at = now
    return working


def resume(session: InterviewSession, now: datetime) -> InterviewSession:
    ensure_transition(session, "in_progress")
    working = session.model_copy(deep=True)
    working.pause_duration_seconds += _open_pause_seconds(session, now)
    working.paused_at = None
    working.status = "in_progress"
    working.updated_at = now
    return working


def complete(session: InterviewSession, now: datetime) -> InterviewSession:
    """Finish the interview from either live state.

    An open pause is closed first so the elapsed total never counts it.
    """

    ensure_transition(session, "completed")
    working = session.model_copy(deep=True)
    if working.status == "paused":
        working.pause_duration_seconds += _open_pause_seconds(session, now)
        working.paused_at = None
    working.status = "completed"
    working.completed_at = now
    working.updated_at = now
    return working


def elapsed_seconds(session: InterviewSession, now: datetime) -> int:  # Active interview time, clamped at 0
    end = session.completed_at or now
    paused = session.pause_duration_seconds
    if session.status == "paused":
        paused += _open_pause_seconds(session, end)
    return max(0, math.floor((end - session.started_at).total_seconds()) - paused)


def _open_pause_seconds(session: InterviewSession, now: datetime) -> int:
    if session.paused_at is None:
        return 0
    return max(0, math.floor((now - session.paused_at).total_seconds()))


__all__ = ["TRANSITIONS", "can_transition", "complete", "elapsed_seconds", "ensure_transition", "pause", "resume"]
