"""Database models, session management and the SQL project store."""

from studio.db.models import Project, ProjectBase
from studio.db.session import (
    close_db,
    create_all_tables,
    get_session_maker,
    init_db,
)
from studio.db.store import SqlProjectStore

__all__ = [
    # Models
    "Project",
    "ProjectBase",
    # Session
    "get_session_maker",
    "create_all_tables",
    "init_db",
    "close_db",
    # Store
    "SqlProjectStore",
]
