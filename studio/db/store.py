"""SQL-backed project store."""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from studio.db.models import Project, utcnow
from studio.interfaces.store import (
    BaseProjectStore,
    ProjectNotFoundError,
    ProjectRecord,
    StoreError,
)

logger = logging.getLogger(__name__)


def to_record(project: Project) -> ProjectRecord:
    return ProjectRecord(
        id=project.id,
        html=project.html,
        state=dict(project.state or {}),
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


class SqlProjectStore(BaseProjectStore):
    """Stores project records in the ``projects`` table."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the store.

        Args:
            session_maker: Factory for async sessions bound to the database.
        """
        self._session_maker = session_maker

    async def create(self, html: str, state: dict[str, Any]) -> ProjectRecord:
        try:
            async with self._session_maker() as session:
                project = Project(html=html, state=dict(state))
                session.add(project)
                await session.commit()
                await session.refresh(project)
                logger.info(f"Created project {project.id}")
                return to_record(project)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create project: {e}", exc_info=True)
            raise StoreError(f"Failed to create project: {e}") from e

    async def get(self, project_id: str) -> ProjectRecord:
        try:
            async with self._session_maker() as session:
                project = await session.get(Project, project_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load project {project_id}: {e}", exc_info=True)
            raise StoreError(f"Failed to load project: {e}") from e

        if project is None:
            raise ProjectNotFoundError(project_id)
        return to_record(project)

    async def save(self, project_id: str, html: str, state: dict[str, Any]) -> ProjectRecord:
        try:
            async with self._session_maker() as session:
                project = await session.get(Project, project_id)
                if project is None:
                    raise ProjectNotFoundError(project_id)

                project.html = html
                project.state = dict(state)
                project.updated_at = utcnow()
                session.add(project)
                await session.commit()
                await session.refresh(project)
                logger.info(f"Saved project {project_id}")
                return to_record(project)
        except SQLAlchemyError as e:
            logger.error(f"Failed to save project {project_id}: {e}", exc_info=True)
            raise StoreError(f"Failed to save project: {e}") from e

    async def delete(self, project_id: str) -> None:
        try:
            async with self._session_maker() as session:
                project = await session.get(Project, project_id)
                if project is None:
                    raise ProjectNotFoundError(project_id)
                await session.delete(project)
                await session.commit()
                logger.info(f"Deleted project {project_id}")
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete project {project_id}: {e}", exc_info=True)
            raise StoreError(f"Failed to delete project: {e}") from e
