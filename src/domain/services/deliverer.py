"""Deliverer: writes in-app notifications and sends emails.

Delivery is best-effort and isolated per recipient and per channel. No
method here raises; every failure is logged and returned as a ``failed``
outcome so callers can inspect partial failures.
"""

from collections.abc import Callable, Collection
from dataclasses import replace
from datetime import datetime

import structlog

from core.config import settings
from domain.entities.event import ActivityEvent, ChannelKind
from domain.entities.notification import (
    DeliveryOutcome,
    DeliveryStatus,
    EmailNotificationLog,
    EmailStatus,
    Recipient,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.message_builder import MessageBuilder
from infrastructure.email.provider import EmailMessage, IEmailProvider

logger = structlog.get_logger()


class Deliverer:
    """Delivers one event to one recipient on the resolved channels."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        email_provider: IEmailProvider,
        builder: MessageBuilder | None = None,
        from_name: str | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._email_provider = email_provider
        self._builder = builder or MessageBuilder()
        self._from_name = from_name or settings.email_from_name

    async def deliver_to_recipient(
        self,
        event: ActivityEvent,
        recipient: Recipient,
        channels: Collection[ChannelKind],
        project_id: str | None,
    ) -> list[DeliveryOutcome]:
        """Deliver on each channel independently, in-app first."""
        outcomes: list[DeliveryOutcome] = []
        if ChannelKind.IN_APP in channels:
            outcomes.append(await self.deliver_in_app(event, recipient, project_id))
        if ChannelKind.EMAIL in channels:
            outcomes.append(await self.deliver_email(event, recipient, project_id))
        return outcomes

    async def deliver_in_app(
        self, event: ActivityEvent, recipient: Recipient, project_id: str | None
    ) -> DeliveryOutcome:
        try:
            notification = self._builder.build_in_app(event, recipient, project_id)
            async with self._uow_factory() as uow:
                created = await uow.notifications.create(notification)
                await uow.commit()
        except Exception as e:
            logger.error(
                "in_app_notification_failed",
                event_id=str(event.id),
                event_type=str(event.event_type),
                recipient=recipient.email,
                error=str(e),
            )
            return DeliveryOutcome(
                recipient_email=recipient.email,
                channel=ChannelKind.IN_APP,
                status=DeliveryStatus.FAILED,
                error=str(e),
            )

        return DeliveryOutcome(
            recipient_email=recipient.email,
            channel=ChannelKind.IN_APP,
            status=DeliveryStatus.DELIVERED,
            notification=created,
        )

    async def deliver_email(
        self, event: ActivityEvent, recipient: Recipient, project_id: str | None
    ) -> DeliveryOutcome:
        """Log the attempt as pending, send, then record the result.

        The log row is committed before the send so every attempt is
        auditable even if the process dies mid-send.
        """
        try:
            payload = self._builder.build_email(event, recipient, project_id)
            log = EmailNotificationLog(
                tenant_id=event.tenant_id,
                event_id=event.id,
                recipient_email=recipient.email,
                subject=payload.subject,
                status=EmailStatus.PENDING,
            )
            async with self._uow_factory() as uow:
                log = await uow.email_logs.create(log)
                await uow.commit()
        except Exception as e:
            logger.error(
                "email_log_create_failed",
                event_id=str(event.id),
                recipient=recipient.email,
                error=str(e),
            )
            return DeliveryOutcome(
                recipient_email=recipient.email,
                channel=ChannelKind.EMAIL,
                status=DeliveryStatus.FAILED,
                error=str(e),
            )

        try:
            await self._email_provider.send(
                EmailMessage(
                    to=recipient.email,
                    subject=payload.subject,
                    body=payload.body,
                    from_name=self._from_name,
                )
            )
        except Exception as e:
            logger.warning(
                "email_send_failed",
                event_id=str(event.id),
                recipient=recipient.email,
                log_id=str(log.id),
                error=str(e),
            )
            log = await self._record_status(log, EmailStatus.FAILED, str(e))
            return DeliveryOutcome(
                recipient_email=recipient.email,
                channel=ChannelKind.EMAIL,
                status=DeliveryStatus.FAILED,
                error=str(e),
                email_log=log,
            )

        log = await self._record_status(log, EmailStatus.SENT)
        return DeliveryOutcome(
            recipient_email=recipient.email,
            channel=ChannelKind.EMAIL,
            status=DeliveryStatus.DELIVERED,
            email_log=log,
        )

    async def _record_status(
        self, log: EmailNotificationLog, status: EmailStatus, error: str | None = None
    ) -> EmailNotificationLog:
        """Update the log row; a failure here leaves the row as it was."""
        try:
            async with self._uow_factory() as uow:
                await uow.email_logs.update_status(log.id, status, error)
                await uow.commit()
        except Exception as e:
            logger.error(
                "email_log_update_failed",
                log_id=str(log.id),
                status=str(status),
                error=str(e),
            )
            return log
        return replace(log, status=status, error=error, updated_at=datetime.utcnow())
