"""SQLAlchemy Unit of Work implementation."""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.repositories.sqlalchemy_activity_event_repo import (
    SQLAlchemyActivityEventRepository,
)
from infrastructure.database.repositories.sqlalchemy_entity_repo import (
    SQLAlchemyProjectRepository,
    SQLAlchemyProjectRoleRepository,
    SQLAlchemyTaskRepository,
    SQLAlchemyUserRepository,
)
from infrastructure.database.repositories.sqlalchemy_notification_repo import (
    SQLAlchemyEmailLogRepository,
    SQLAlchemyNotificationPreferenceRepository,
    SQLAlchemyNotificationRepository,
)


class SQLAlchemyUnitOfWork:
    """Unit of Work implementation using SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

    def _require_session(self) -> AsyncSession:
        if not self._session:
            raise RuntimeError("UnitOfWork not initialized. Use as context manager.")
        return self._session

    @property
    def tasks(self) -> SQLAlchemyTaskRepository:
        """Get task lookup repository."""
        return SQLAlchemyTaskRepository(self._require_session())

    @property
    def projects(self) -> SQLAlchemyProjectRepository:
        """Get project lookup repository."""
        return SQLAlchemyProjectRepository(self._require_session())

    @property
    def project_roles(self) -> SQLAlchemyProjectRoleRepository:
        """Get project role repository."""
        return SQLAlchemyProjectRoleRepository(self._require_session())

    @property
    def users(self) -> SQLAlchemyUserRepository:
        """Get tenant user repository."""
        return SQLAlchemyUserRepository(self._require_session())

    @property
    def notifications(self) -> SQLAlchemyNotificationRepository:
        """Get in-app notification repository."""
        return SQLAlchemyNotificationRepository(self._require_session())

    @property
    def preferences(self) -> SQLAlchemyNotificationPreferenceRepository:
        """Get notification preference repository."""
        return SQLAlchemyNotificationPreferenceRepository(self._require_session())

    @property
    def email_logs(self) -> SQLAlchemyEmailLogRepository:
        """Get email log repository."""
        return SQLAlchemyEmailLogRepository(self._require_session())

    @property
    def activity_events(self) -> SQLAlchemyActivityEventRepository:
        """Get activity event repository."""
        return SQLAlchemyActivityEventRepository(self._require_session())

    async def commit(self) -> None:
        """Commit the current transaction."""
        if self._session:
            await self._session.commit()

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        if self._session:
            await self._session.rollback()

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        """Enter the context manager and create session."""
        self._session = self._session_factory()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[Exception],
        exc_tb: Any,
    ) -> None:
        """Exit the context manager and cleanup."""
        if self._session:
            if exc_type:
                await self.rollback()
            await self._session.close()
            self._session = None
