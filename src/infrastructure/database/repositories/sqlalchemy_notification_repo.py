"""SQLAlchemy implementations of the notification repositories."""

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.notification import (
    EmailNotificationLog,
    EmailStatus,
    Notification,
    NotificationPreference,
)
from infrastructure.database.models import (
    EmailNotificationLogModel,
    NotificationModel,
    NotificationPreferenceModel,
)


class SQLAlchemyNotificationRepository:
    """SQLAlchemy implementation of INotificationRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, notification: Notification) -> Notification:
        """Create a new notification."""
        model = self._to_model(notification)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    # --- Mappers ---

    @staticmethod
    def _to_model(entity: Notification) -> NotificationModel:
        return NotificationModel(
            id=entity.id,
            tenant_id=entity.tenant_id,
            recipient_email=entity.recipient_email,
            type=entity.type,
            title=entity.title,
            message=entity.message,
            entity_type=entity.entity_type,
            entity_id=entity.entity_id,
            project_id=entity.project_id,
            sender_name=entity.sender_name,
            read=entity.read,
            created_at=entity.created_at,
        )

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            tenant_id=model.tenant_id,
            recipient_email=model.recipient_email,
            type=model.type,
            title=model.title,
            message=model.message,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            project_id=model.project_id,
            sender_name=model.sender_name,
            read=model.read,
            created_at=model.created_at,
        )


class SQLAlchemyNotificationPreferenceRepository:
    """SQLAlchemy implementation of INotificationPreferenceRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def filter(
        self, tenant_id: str, emails: Sequence[str]
    ) -> list[NotificationPreference]:
        """Get the stored preferences of several users in one query.

        Emails are compared case-insensitively.
        """
        if not emails:
            return []
        lowered = list({e.strip().lower() for e in emails})
        stmt = select(NotificationPreferenceModel).where(
            NotificationPreferenceModel.tenant_id == tenant_id,
            func.lower(NotificationPreferenceModel.user_email).in_(lowered),
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(m) for m in result.scalars()]

    @staticmethod
    def _to_entity(model: NotificationPreferenceModel) -> NotificationPreference:
        return NotificationPreference(
            id=model.id,
            tenant_id=model.tenant_id,
            user_email=model.user_email,
            in_app_enabled=model.in_app_enabled,
            email_enabled=model.email_enabled,
            critical_only=model.critical_only,
            task_assigned=model.task_assigned,
            task_completed=model.task_completed,
            comment_added=model.comment_added,
            mention=model.mention,
            project_updated=model.project_updated,
        )


class SQLAlchemyEmailLogRepository:
    """SQLAlchemy implementation of IEmailLogRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, log: EmailNotificationLog) -> EmailNotificationLog:
        """Create a new email log row."""
        model = EmailNotificationLogModel(
            id=log.id,
            tenant_id=log.tenant_id,
            event_id=log.event_id,
            recipient_email=log.recipient_email,
            subject=log.subject,
            status=log.status.value,
            error=log.error,
            created_at=log.created_at,
            updated_at=log.updated_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update_status(
        self, log_id: UUID, status: EmailStatus, error: str | None = None
    ) -> bool:
        """Record the outcome of a send attempt."""
        stmt = (
            update(EmailNotificationLogModel)
            .where(EmailNotificationLogModel.id == log_id)
            .values(status=status.value, error=error, updated_at=datetime.utcnow())
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    @staticmethod
    def _to_entity(model: EmailNotificationLogModel) -> EmailNotificationLog:
        return EmailNotificationLog(
            id=model.id,
            tenant_id=model.tenant_id,
            event_id=model.event_id,
            recipient_email=model.recipient_email,
            subject=model.subject,
            status=EmailStatus(model.status),
            error=model.error,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
