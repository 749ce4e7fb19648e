"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.activity_event_repository import IActivityEventRepository
from domain.repositories.entity_repository import (
    IProjectRepository,
    IProjectRoleRepository,
    ITaskRepository,
    IUserRepository,
)
from domain.repositories.notification_repository import (
    IEmailLogRepository,
    INotificationPreferenceRepository,
    INotificationRepository,
)


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    tasks: ITaskRepository
    projects: IProjectRepository
    project_roles: IProjectRoleRepository
    users: IUserRepository
    notifications: INotificationRepository
    preferences: INotificationPreferenceRepository
    email_logs: IEmailLogRepository
    activity_events: IActivityEventRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
