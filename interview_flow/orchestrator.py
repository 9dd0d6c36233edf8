from __future__ import annotations  # Interview orchestrator driving turns against injected collaborators

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

from pydantic import ValidationError

from config import InterviewSettings, Settings
from config import settings as default_settings
from observability import log_event, span

from . import lifecycle
from .contracts import AnswerEvaluator, FeedbackGenerator, QuestionGenerator, ReportNarrator, SessionRepository
from .errors import (
    ConcurrencyConflict,
    ExternalServiceFailure,
    FeedbackGenerationFailed,
    InputValidationError,
    InvalidTransition,
    NotFound,
    QuestionGenerationFailed,
)
from .evaluation import evaluate_answer
from .export import build_export
from .memory import initialize_memory
from .models import (
    Bookmark,
    EvaluationBlock,
    FeedbackBlock,
    FinalReportBlock,
    InterviewComplete,
    InterviewSession,
    PendingQuestion,
    QuestionBlock,
    RoleBlock,
)
from .parsing import ParseError, parse_feedback, parse_question
from .report import build_report
from .scheduler import commit_category, distribute_targets, select_next_category

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _LockEntry:  # Per-session lock with a count of holders and waiters
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class InterviewOrchestrator:
    """Owns interview lifecycle, question scheduling, evaluation and reporting.

    Every operation loads the session, works on a copy, and writes it back
    with a version check only after its external calls have succeeded. Turns
    on the same session are serialized by a per-session lock.
    """

    def __init__(
        self,
        store: SessionRepository,
        question_generator: QuestionGenerator,
        answer_evaluator: AnswerEvaluator,
        feedback_generator: FeedbackGenerator,
        report_narrator: ReportNarrator,
        *,
        settings: Optional[Settings] = None,
        interview: Optional[InterviewSettings] = None,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._question_generator = question_generator
        self._answer_evaluator = answer_evaluator
        self._feedback_generator = feedback_generator
        self._report_narrator = report_narrator
        self._settings = settings or default_settings
        self._interview = interview or InterviewSettings()
        self._now = now or utc_now
        self._locks: Dict[str, _LockEntry] = {}
        self._locks_guard = threading.Lock()

    def start_interview(self, role_block: Union[RoleBlock, Mapping[str, Any]], user_id: Optional[str] = None) -> str:
        block = _coerce_role_block(role_block)
        now = self._now()
        session = InterviewSession(
            session_id=uuid.uuid4().hex,
            user_id=user_id,
            role_block=block,
            memory=initialize_memory(),
            type_targets=distribute_targets(block.categories, block.total_questions),
            started_at=now,
            created_at=now,
            updated_at=now,
        )
        self._store.create(session)
        log_event(
            "interview_started",
            session.session_id,
            status=session.status,
            difficulty=block.difficulty,
            category=",".join(block.categories),
            total_questions=block.total_questions,
        )
        return session.session_id

    def select_next_question(self, session_id: str) -> Union[QuestionBlock, InterviewComplete]:
        issued = self.issue_question(session_id)
        if isinstance(issued, InterviewComplete):
            return issued
        return issued.question

    def issue_question(self, session_id: str) -> Union[PendingQuestion, InterviewComplete]:  # Pending question together with its number
        with self._session_lock(session_id):
            session = self._store.get(session_id)
            if session.status == "completed" or session.current_question_number >= session.role_block.total_questions:
                return InterviewComplete(
                    session_id=session_id,
                    questions_answered=session.current_question_number,
                    total_questions=session.role_block.total_questions,
                )
            if session.status == "paused":
                raise InvalidTransition("Resume the interview before requesting a question", details={"session_id": session_id})
            if isinstance(session.pending, PendingQuestion):
                return session.pending

            required = select_next_category(
                session.type_targets,
                session.asked_type_count,
                session.role_block.categories,
                self._interview.default_category,
            )
            question_number = session.current_question_number + 1
            last_qa = session.qa_history[-1] if session.qa_history else None
            with span("question_generator") as timing:
                raw = self._call(
                    "question_generator",
                    session_id,
                    lambda: self._question_generator.generate(
                        session.role_block,
                        session.memory,
                        last_qa,
                        required,
                        question_number,
                    ),
                )
            parsed = parse_question(raw, fallback_category=required)
            if isinstance(parsed, ParseError):
                log_event("question_rejected", session_id, level=logging.WARNING, question_number=question_number, reason=parsed.reason)
                raise QuestionGenerationFailed("The question generator returned an unusable question", details={"reason": parsed.reason})
            block = parsed.data
            if block.category != required:
                logger.warning(
                    "Generated category %s does not match required %s session=%s",
                    block.category,
                    required,
                    session_id,
                )
                block = block.model_copy(update={"category": required})

            now = self._now()
            working = session.model_copy(deep=True)
            working.pending = PendingQuestion(question=block, question_number=question_number, issued_at=now)
            working.asked_type_count = commit_category(session.asked_type_count, block.category)
            working.updated_at = now
            self._store.save(working, expected_version=session.version)
            log_event(
                "question_issued",
                session_id,
                question_number=question_number,
                category=block.category,
                skill=block.skill,
                difficulty=block.difficulty,
                ms=timing["ms"],
            )
            return working.pending

    def submit_answer(
        self,
        session_id: str,
        answer_text: str,
        audio_url: Optional[str] = None,
        question_started_at: Optional[datetime] = None,
    ) -> EvaluationBlock:
        if not isinstance(answer_text, str):
            raise InputValidationError("answer_text must be a string", details={"field": "answer_text"})
        with self._session_lock(session_id):
            session = self._store.get(session_id)
            if session.status != "in_progress":
                raise InvalidTransition(
                    f"Cannot answer while the interview is {session.status}",
                    details={"session_id": session_id, "status": session.status},
                )
            with span("answer_evaluator") as timing:
                turn = self._call(
                    "answer_evaluator",
                    session_id,
                    lambda: evaluate_answer(
                        session,
                        answer_text,
                        audio_url,
                        question_started_at,
                        evaluator=self._answer_evaluator,
                        now=self._now(),
                        min_tokens=self._settings.MIN_ANSWER_TOKENS,
                    ),
                )
            self._store.save(turn.session, expected_version=session.version)
            log_event(
                "answer_evaluated",
                session_id,
                question_number=turn.entry.question_number,
                skill=turn.entry.question.skill,
                difficulty=turn.session.memory.difficulty,
                score=turn.evaluation.overall_score,
                ms=timing["ms"],
            )
            return turn.evaluation

    def request_feedback(self, session_id: str, question_number: int) -> FeedbackBlock:
        with self._session_lock(session_id):
            session = self._store.get(session_id)
            entry = session.find_entry(question_number)
            if entry is None:
                raise NotFound(f"Question {question_number} has not been answered", details={"question_number": question_number})
            if entry.feedback is not None:
                return entry.feedback

            raw = self._call(
                "feedback_generator",
                session_id,
                lambda: self._feedback_generator.generate(entry.question, entry.answer_text, entry.evaluation),
            )
            parsed = parse_feedback(raw)
            if isinstance(parsed, ParseError):
                raise FeedbackGenerationFailed("The feedback generator returned unusable feedback", details={"reason": parsed.reason})

            working = session.model_copy(deep=True)
            target = working.find_entry(question_number)
            assert target is not None
            target.feedback = parsed.data
            working.updated_at = self._now()
            self._store.save(working, expected_version=session.version)
            log_event("feedback_generated", session_id, question_number=question_number)
            return parsed.data

    def pause(self, session_id: str) -> InterviewSession:
        with self._session_lock(session_id):
            session = self._store.get(session_id)
            updated = self._store.save(lifecycle.pause(session, self._now()), expected_version=session.version)
            log_event("paused", session_id, status=updated.status)
            return updated

    def resume(self, session_id: str) -> InterviewSession:
        with self._session_lock(session_id):
            session = self._store.get(session_id)
            updated = self._store.save(lifecycle.resume(session, self._now()), expected_version=session.version)
            log_event(
                "resumed",
                session_id,
                status=updated.status,
                pause_seconds=updated.pause_duration_seconds - session.pause_duration_seconds,
            )
            return updated

    def finalize_report(self, session_id: str) -> FinalReportBlock:
        with self._session_lock(session_id):
            session = self._store.get(session_id)
            if session.final_report is not None:
                return session.final_report
            with span("report_narrator") as timing:
                outcome = self._call(
                    "report_narrator",
                    session_id,
                    lambda: build_report(session, self._report_narrator, self._now()),
                )
            self._store.save(outcome.session, expected_version=session.version)
            log_event(
                "report_generated",
                session_id,
                status=outcome.session.status,
                score=outcome.report.overall_performance,
                ms=timing["ms"],
            )
            return outcome.report

    def bookmark(self, session_id: str, question_number: int, note: Optional[str] = None) -> Bookmark:
        with self._session_lock(session_id):
            session = self._store.get(session_id)
            entry = session.find_entry(question_number)
            if entry is None:
                raise NotFound(f"Question {question_number} has not been answered", details={"question_number": question_number})
            now = self._now()
            working = session.model_copy(deep=True)
            saved = next((item for item in working.bookmarks if item.question_number == question_number), None)
            if saved is None:
                saved = Bookmark(
                    question_number=question_number,
                    question=entry.question.question,
                    answer=entry.answer_text,
                    note=(note or "").strip(),
                    bookmarked_at=now,
                )
                working.bookmarks.append(saved)
            elif note is not None:
                saved.note = note.strip()
            working.updated_at = now
            self._store.save(working, expected_version=session.version)
            log_event("bookmarked", session_id, question_number=question_number)
            return saved

    def unbookmark(self, session_id: str, question_number: int) -> bool:
        with self._session_lock(session_id):
            session = self._store.get(session_id)
            remaining = [item for item in session.bookmarks if item.question_number != question_number]
            if len(remaining) == len(session.bookmarks):
                return False
            working = session.model_copy(deep=True)
            working.bookmarks = remaining
            working.updated_at = self._now()
            self._store.save(working, expected_version=session.version)
            log_event("unbookmarked", session_id, question_number=question_number)
            return True

    def get_session(self, session_id: str) -> InterviewSession:
        return self._store.get(session_id)

    def list_sessions(self, user_id: Optional[str] = None, *, limit: int = 50) -> List[InterviewSession]:
        return self._store.list_for_user(user_id, limit=limit)

    def export_session(self, session_id: str) -> Dict[str, Any]:
        return build_export(self._store.get(session_id), self._now())

    @contextmanager
    def _session_lock(self, session_id: str) -> Iterator[None]:
        # Entries live only while a request holds or waits on them
        with self._locks_guard:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = _LockEntry()
                self._locks[session_id] = entry
            entry.users += 1
        try:
            if not entry.lock.acquire(timeout=self._settings.SESSION_LOCK_TIMEOUT_S):
                log_event("lock_timeout", session_id, level=logging.WARNING)
                raise ConcurrencyConflict("Another request is updating this interview; retry shortly", details={"session_id": session_id})
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    self._locks.pop(session_id, None)

    def _call(self, collaborator: str, session_id: str, action: Callable[[], Any]) -> Any:
        # Failures are logged once here and re-raised unchanged
        try:
            return action()
        except ExternalServiceFailure as exc:
            log_event(
                "collaborator_failed",
                session_id,
                level=logging.WARNING,
                reason=collaborator,
                error=exc.kind,
            )
            raise


def _coerce_role_block(role_block: Union[RoleBlock, Mapping[str, Any]]) -> RoleBlock:
    if isinstance(role_block, RoleBlock):
        return role_block
    try:
        return RoleBlock.model_validate(dict(role_block))
    except ValidationError as exc:
        raise InputValidationError(
            "Invalid role block",
            details={"errors": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()]},
        ) from exc


__all__ = ["InterviewOrchestrator", "utc_now"]
