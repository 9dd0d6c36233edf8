from __future__ import annotations  # Versioned session document stores

from threading import RLock
from typing import Dict, List, Optional

from interview_flow.errors import ConcurrencyConflict, InputValidationError, NotFound
from interview_flow.models import InterviewSession

from .migrate import migrate
from .sqlite import get_conn


class SessionStore:  # SQLite-backed session storage with version compare-and-swap
    def __init__(self, db_path: Optional[str] = None) -> None:
        self._db_path = db_path
        migrate(db_path)

    def create(self, session: InterviewSession) -> None:  # Persist a new session document
        with get_conn(self._db_path) as conn:
            exists = conn.execute(
                "SELECT 1 FROM interview_sessions WHERE session_id = ?",
                (session.session_id,),
            ).fetchone()
            if exists is not None:
                raise InputValidationError(f"Session {session.session_id} already exists")
            conn.execute(
                """
                INSERT INTO interview_sessions
                  (session_id, user_id, status, role_name, answered, total_questions, version, document, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session.session_id,
                    session.user_id,
                    session.status,
                    session.role_block.role_name,
                    session.current_question_number,
                    session.role_block.total_questions,
                    session.version,
                    session.model_dump_json(),
                    session.created_at.isoformat(),
                    session.updated_at.isoformat(),
                ),
            )

    def get(self, session_id: str) -> InterviewSession:
        with get_conn(self._db_path) as conn:
            row = conn.execute(
                "SELECT document FROM interview_sessions WHERE session_id = ?",
                (session_id,),
            ).fetchone()
        if row is None:
            raise NotFound(f"Interview {session_id} not found", details={"session_id": session_id})
        return InterviewSession.model_validate_json(row["document"])

    def save(self, session: InterviewSession, *, expected_version: int) -> InterviewSession:
        """Write ``session`` only if the stored version still equals ``expected_version``."""

        saved = session.model_copy(update={"version": expected_version + 1})
        with get_conn(self._db_path) as conn:
            cursor = conn.execute(
                """
                UPDATE interview_sessions
                SET user_id = ?, status = ?, role_name = ?, answered = ?, total_questions = ?,
                    version = ?, document = ?, updated_at = ?
                WHERE session_id = ? AND version = ?
                """,
                (
                    saved.user_id,
                    saved.status,
                    saved.role_block.role_name,
                    saved.current_question_number,
                    saved.role_block.total_questions,
                    saved.version,
                    saved.model_dump_json(),
                    saved.updated_at.isoformat(),
                    saved.session_id,
                    expected_version,
                ),
            )
            if cursor.rowcount == 0:
                exists = conn.execute(
                    "SELECT version FROM interview_sessions WHERE session_id = ?",
                    (saved.session_id,),
                ).fetchone()
                if exists is None:
                    raise NotFound(f"Interview {saved.session_id} not found", details={"session_id": saved.session_id})
                raise ConcurrencyConflict(
                    "Interview was modified by another request; retry",
                    details={"session_id": saved.session_id, "expected_version": expected_version, "version": exists["version"]},
                )
        return saved

    def list_for_user(self, user_id: Optional[str], *, limit: int = 50) -> List[InterviewSession]:
        query = "SELECT document FROM interview_sessions"
        params: tuple = ()
        if user_id is not None:
            query += " WHERE user_id = ?"
            params = (user_id,)
        query += " ORDER BY created_at DESC LIMIT ?"
        with get_conn(self._db_path) as conn:
            rows = conn.execute(query, params + (limit,)).fetchall()
        return [InterviewSession.model_validate_json(row["document"]) for row in rows]


class InMemorySessionStore:  # Thread-safe in-memory store holding serialized documents
    def __init__(self) -> None:
        self._documents: Dict[str, str] = {}
        self._lock = RLock()

    def create(self, session: InterviewSession) -> None:
        with self._lock:
            if session.session_id in self._documents:
                raise InputValidationError(f"Session {session.session_id} already exists")
            self._documents[session.session_id] = session.model_dump_json()

    def get(self, session_id: str) -> InterviewSession:
        with self._lock:
            document = self._documents.get(session_id)
        if document is None:
            raise NotFound(f"Interview {session_id} not found", details={"session_id": session_id})
        return InterviewSession.model_validate_json(document)

    def save(self, session: InterviewSession, *, expected_version: int) -> InterviewSession:
        with self._lock:
            current = self.get(session.session_id)
            if current.version != expected_version:
                raise ConcurrencyConflict(
                    "Interview was modified by another request; retry",
                    details={"session_id": session.session_id, "expected_version": expected_version, "version": current.version},
                )
            saved = session.model_copy(update={"version": expected_version + 1})
            self._documents[session.session_id] = saved.model_dump_json()
        return saved

    def list_for_user(self, user_id: Optional[str], *, limit: int = 50) -> List[InterviewSession]:
        with self._lock:
            sessions = [InterviewSession.model_validate_json(doc) for doc in self._documents.values()]
        if user_id is not None:
            sessions = [item for item in sessions if item.user_id == user_id]
        sessions.sort(key=lambda item: item.created_at, reverse=True)
        return sessions[:limit]


__all__ = ["InMemorySessionStore", "SessionStore"]
