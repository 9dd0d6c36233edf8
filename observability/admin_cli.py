"""Lightweight CLI helpers for inspecting stored interview sessions."""
from __future__ import annotations

import argparse
import json
import sqlite3

from config.settings import settings


def list_sessions(limit: int = 20) -> None:
    conn = sqlite3.connect(settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT updated_at, session_id, user_id, status, role_name, answered, total_questions, version
            FROM interview_sessions
            ORDER BY updated_at DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, session_id, user_id, status, role_name, answered, total, version = row
            print(f"[{ts}] {session_id} user={user_id or '-'} role={role_name!r} {status} {answered}/{total} v{version}")
    finally:
        conn.close()


def show_session(session_id: str) -> None:
    conn = sqlite3.connect(settings.DB_PATH)
    try:
        row = conn.execute(
            "SELECT document FROM interview_sessions WHERE session_id = ?",
            (session_id,),
        ).fetchone()
    finally:
        conn.close()
    if row is None:
        print(f"session {session_id} not found")
        return
    print(json.dumps(json.loads(row[0]), indent=2))


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--list-sessions", type=int, help="Show the most recently updated sessions")
    parser.add_argument("--show", help="Dump one session document as JSON")
    args = parser.parse_args()

    if args.list_sessions:
        list_sessions(args.list_sessions)
    if args.show:
        show_session(args.show)


if __name__ == "__main__":
    main()
