"""Notification repository protocols."""

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from domain.entities.notification import (
    EmailNotificationLog,
    EmailStatus,
    Notification,
    NotificationPreference,
)


class INotificationRepository(Protocol):
    """Repository interface for in-app Notification records."""

    async def create(self, notification: Notification) -> Notification:
        """Create a new notification."""
        ...


class INotificationPreferenceRepository(Protocol):
    """Repository interface for NotificationPreference records (read-only)."""

    async def filter(
        self, tenant_id: str, emails: Sequence[str]
    ) -> list[NotificationPreference]:
        """Get the stored preferences of several users in one query."""
        ...


class IEmailLogRepository(Protocol):
    """Repository interface for EmailNotificationLog rows."""

    async def create(self, log: EmailNotificationLog) -> EmailNotificationLog:
        """Create a new email log row."""
        ...

    async def update_status(
        self, log_id: UUID, status: EmailStatus, error: str | None = None
    ) -> bool:
        """Record the outcome of a send attempt. Returns False if the row is gone."""
        ...
