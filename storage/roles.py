from __future__ import annotations  # Reusable role storage helpers

from datetime import datetime, timezone
from typing import List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel

from interview_flow.errors import InputValidationError, NotFound, PermissionDenied
from interview_flow.models import RoleBlock

from .migrate import migrate
from .sqlite import get_conn

Visibility = Literal["public", "private"]
RoleView = Literal["my", "popular", "recent"]

POPULAR_LIMIT = 20
RECENT_LIMIT = 100


class RoleRecord(BaseModel):  # Stored reusable role entry
    role_id: str
    title: str
    description: str = ""
    role_block: RoleBlock
    creator_id: str
    visibility: Visibility = "public"
    usage_count: int = 0
    created_at: str
    updated_at: str


class RoleStore:  # SQLite-backed reusable role storage
    def __init__(self, db_path: Optional[str] = None) -> None:
        self._db_path = db_path
        migrate(db_path)

    def create(
        self,
        *,
        title: str,
        role_block: RoleBlock,
        creator_id: str,
        description: str = "",
        visibility: Visibility = "public",
    ) -> RoleRecord:  # Persist a new role with a zero usage counter
        if not title.strip() or not creator_id.strip():
            raise InputValidationError("title, role_block, and user_id are required", details={"fields": ["title", "user_id"]})
        now = _timestamp()
        record = RoleRecord(
            role_id=uuid4().hex,
            title=title.strip(),
            description=description.strip(),
            role_block=role_block,
            creator_id=creator_id,
            visibility=visibility,
            created_at=now,
            updated_at=now,
        )
        with get_conn(self._db_path) as conn:
            conn.execute(
                """
                INSERT INTO interview_roles
                  (role_id, title, description, role_block, creator_id, visibility, usage_count, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.role_id,
                    record.title,
                    record.description,
                    record.role_block.model_dump_json(),
                    record.creator_id,
                    record.visibility,
                    record.usage_count,
                    record.created_at,
                    record.updated_at,
                ),
            )
        return record

    def list_roles(
        self,
        *,
        view: Optional[RoleView] = None,
        user_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[RoleRecord]:
        """List roles for a view: the caller's own, the most used public, or the newest public."""

        clauses: List[str] = []
        params: List[object] = []
        if view == "my":
            if not user_id:
                return []
            clauses.append("creator_id = ?")
            params.append(user_id)
        elif view in ("popular", "recent"):
            clauses.append("visibility = 'public'")
        if search and search.strip():
            clauses.append("LOWER(title) LIKE ?")
            params.append(f"%{search.strip().lower()}%")
        query = "SELECT * FROM interview_roles"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        if view == "popular":
            query += " ORDER BY usage_count DESC, created_at DESC LIMIT ?"
            params.append(POPULAR_LIMIT)
        else:
            query += " ORDER BY created_at DESC, role_id DESC LIMIT ?"
            params.append(RECENT_LIMIT)
        with get_conn(self._db_path) as conn:
            rows = conn.execute(query, params).fetchall()
        return [_record(row) for row in rows]

    def get(self, role_id: str) -> RoleRecord:
        with get_conn(self._db_path) as conn:
            row = conn.execute("SELECT * FROM interview_roles WHERE role_id = ?", (role_id,)).fetchone()
        if row is None:
            raise NotFound("Role not found", details={"role_id": role_id})
        return _record(row)

    def update_visibility(self, role_id: str, *, visibility: Visibility, user_id: str) -> RoleRecord:
        if visibility not in ("public", "private"):
            raise InputValidationError('visibility must be either "private" or "public"', details={"field": "visibility"})
        record = self._owned(role_id, user_id, action="update")
        now = _timestamp()
        with get_conn(self._db_path) as conn:
            conn.execute(
                "UPDATE interview_roles SET visibility = ?, updated_at = ? WHERE role_id = ?",
                (visibility, now, role_id),
            )
        return record.model_copy(update={"visibility": visibility, "updated_at": now})

    def delete(self, role_id: str, *, user_id: str) -> None:
        self._owned(role_id, user_id, action="delete")
        with get_conn(self._db_path) as conn:
            conn.execute("DELETE FROM interview_roles WHERE role_id = ?", (role_id,))

    def mark_used(self, role_id: str) -> RoleRecord:  # Increment the usage counter atomically
        with get_conn(self._db_path) as conn:
            cursor = conn.execute(
                "UPDATE interview_roles SET usage_count = usage_count + 1 WHERE role_id = ?",
                (role_id,),
            )
            if cursor.rowcount == 0:
                raise NotFound("Role not found", details={"role_id": role_id})
        return self.get(role_id)

    def _owned(self, role_id: str, user_id: str, *, action: str) -> RoleRecord:
        record = self.get(role_id)
        if record.creator_id != user_id:
            raise PermissionDenied(f"You do not have permission to {action} this role", details={"role_id": role_id})
        return record


def _record(row) -> RoleRecord:
    return RoleRecord(
        role_id=row["role_id"],
        title=row["title"],
        description=row["description"],
        role_block=RoleBlock.model_validate_json(row["role_block"]),
        creator_id=row["creator_id"],
        visibility=row["visibility"],
        usage_count=row["usage_count"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


__all__ = ["RoleRecord", "RoleStore", "RoleView", "Visibility"]
