"""Shared test fixtures."""

from typing import Any

import pytest

from studio.core.config import Settings
from studio.core.factory import ComponentFactory
from studio.db.models import new_project_id, utcnow
from studio.interfaces.store import BaseProjectStore, ProjectNotFoundError, ProjectRecord


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class SequenceRandom:
    """Stand-in for random.Random that returns queued integers."""

    def __init__(self, values: list[int]) -> None:
        self._values = iter(values)

    def randint(self, a: int, b: int) -> int:
        return next(self._values)


class InMemoryProjectStore(BaseProjectStore):
    """Dict-backed project store."""

    def __init__(self) -> None:
        self.records: dict[str, ProjectRecord] = {}

    async def create(self, html: str, state: dict[str, Any]) -> ProjectRecord:
        now = utcnow()
        record = ProjectRecord(
            id=new_project_id(), html=html, state=dict(state), created_at=now, updated_at=now
        )
        self.records[record.id] = record
        return record

    async def get(self, project_id: str) -> ProjectRecord:
        if project_id not in self.records:
            raise ProjectNotFoundError(project_id)
        return self.records[project_id]

    async def save(self, project_id: str, html: str, state: dict[str, Any]) -> ProjectRecord:
        existing = await self.get(project_id)
        record = ProjectRecord(
            id=project_id,
            html=html,
            state=dict(state),
            created_at=existing.created_at,
            updated_at=utcnow(),
        )
        self.records[project_id] = record
        return record

    async def delete(self, project_id: str) -> None:
        await self.get(project_id)
        del self.records[project_id]


@pytest.fixture
def settings(tmp_path):
    """Settings with quick timings and no .env lookups."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'studio.db'}",
        reconcile_debounce_seconds=0.05,
        grouping_debounce_seconds=0.02,
        undo_window_seconds=3.0,
        notice_seconds=2.0,
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def factory(settings):
    return ComponentFactory(settings)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return InMemoryProjectStore()


@pytest.fixture
def sequence_rng():
    """Random stand-in class; call it with the integers to hand out."""
    return SequenceRandom
