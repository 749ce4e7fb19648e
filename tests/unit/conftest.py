"""Shared fixtures for unit tests."""

from typing import Any
from unittest.mock import AsyncMock

import pytest


class FakeUnitOfWork:
    """Fake Unit of Work with all 8 repository mocks for unit testing."""

    def __init__(self) -> None:
        self.tasks = AsyncMock()
        self.projects = AsyncMock()
        self.project_roles = AsyncMock()
        self.users = AsyncMock()
        self.notifications = AsyncMock()
        self.preferences = AsyncMock()
        self.email_logs = AsyncMock()
        self.activity_events = AsyncMock()

        # Lookups find nothing unless a test says otherwise
        self.tasks.find_by_id.return_value = None
        self.projects.find_by_id.return_value = None
        self.project_roles.filter.return_value = []
        self.users.filter.return_value = []
        self.preferences.filter.return_value = []

        # Writes echo back what they were given
        self.notifications.create.side_effect = lambda n: n
        self.email_logs.create.side_effect = lambda log: log
        self.email_logs.update_status.return_value = True
        self.activity_events.create.side_effect = lambda e: e
        self.activity_events.mark_processed.return_value = True

        self.commits = 0
        self.rollbacks = 0

    @property
    def committed(self) -> bool:
        return self.commits > 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()
