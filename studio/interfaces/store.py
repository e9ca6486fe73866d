"""Project store interface.

Persistence of the ``{html, state}`` project record belongs to an external
collaborator; the editor core only relies on this contract.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any


class StoreError(Exception):
    """A load or save against the project store failed."""


class ProjectNotFoundError(StoreError):
    """No project exists with the requested id."""

    def __init__(self, project_id: str) -> None:
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


@dataclass(frozen=True)
class ProjectRecord:
    """The persisted project record.

    Attributes:
        id: Project identifier.
        html: The template.
        state: The key/value state.
        created_at: Creation time.
        updated_at: Time of the last save.
    """

    id: str
    html: str
    state: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class BaseProjectStore(ABC):
    """Abstract base class for project persistence."""

    @abstractmethod
    async def create(self, html: str, state: dict[str, Any]) -> ProjectRecord:
        """Create a new project record.

        Raises:
            StoreError: If the record cannot be written.
        """

    @abstractmethod
    async def get(self, project_id: str) -> ProjectRecord:
        """Load a project record.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
            StoreError: If the store cannot be read.
        """

    @abstractmethod
    async def save(self, project_id: str, html: str, state: dict[str, Any]) -> ProjectRecord:
        """Overwrite a project's template and state.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
            StoreError: If the record cannot be written.
        """

    @abstractmethod
    async def delete(self, project_id: str) -> None:
        """Delete a project record.

        Raises:
            ProjectNotFoundError: If the project doesn't exist.
            StoreError: If the record cannot be removed.
        """
