"""Database models using SQLModel.

Defines the persisted project record: the template, its state and
timestamps.
"""

import datetime
import uuid
from typing import Any

from sqlalchemy import JSON, Column, DateTime, Text
from sqlmodel import Field, SQLModel


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def new_project_id() -> str:
    """Generate a URL-safe project id."""
    return uuid.uuid4().hex[:12]


# =============================================================================
# Shared Models (for API responses, not database tables)
# =============================================================================


class ProjectBase(SQLModel):
    """Base project fields."""

    html: str = Field(default="", sa_column=Column(Text, nullable=False))
    state: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))


# =============================================================================
# Database Models
# =============================================================================


class Project(ProjectBase, table=True):
    """A project being edited in the studio."""

    __tablename__ = "projects"

    id: str = Field(default_factory=new_project_id, primary_key=True, max_length=32)
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
