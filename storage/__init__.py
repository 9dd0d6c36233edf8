"""Persistence layer: SQLite connection helper, migrations, session and role stores."""
from .migrate import migrate
from .roles import RoleRecord, RoleStore
from .sessions import InMemorySessionStore, SessionStore
from .sqlite import get_conn

__all__ = ["InMemorySessionStore", "RoleRecord", "RoleStore", "SessionStore", "get_conn", "migrate"]
