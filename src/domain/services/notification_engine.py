"""Notification engine: turns one activity event into delivered notifications."""

import asyncio
from collections.abc import Callable

import structlog

from domain.entities.event import ActivityEvent
from domain.entities.notification import (
    DeliveryOutcome,
    DispatchResult,
    Notification,
    NotificationPreference,
    Recipient,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.channel_router import get_channels
from domain.services.context_resolver import ContextResolver
from domain.services.deliverer import Deliverer
from domain.services.message_builder import MessageBuilder
from domain.services.preference_cache import PreferenceCache
from domain.services.preference_gate import PreferenceGate
from infrastructure.email.provider import IEmailProvider

logger = structlog.get_logger()


class NotificationEngine:
    """Resolve, gate, route, build and deliver notifications for an event.

    Holds no per-event state, so one instance can serve concurrent events.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        email_provider: IEmailProvider,
        preference_cache: PreferenceCache | None = None,
        builder: MessageBuilder | None = None,
        resolver: ContextResolver | None = None,
        gate: PreferenceGate | None = None,
        deliverer: Deliverer | None = None,
    ) -> None:
        builder = builder or MessageBuilder()
        self._resolver = resolver or ContextResolver(uow_factory)
        self._gate = gate or PreferenceGate(uow_factory, cache=preference_cache)
        self._deliverer = deliverer or Deliverer(uow_factory, email_provider, builder)

    async def process_event(self, event: ActivityEvent) -> list[Notification]:
        """Run the pipeline and return the in-app notifications created."""
        result = await self.dispatch(event)
        return result.notifications

    async def dispatch(self, event: ActivityEvent) -> DispatchResult:
        """Run the pipeline and return every per-channel outcome.

        Per-stage failures are handled inside the stages. Anything that
        still escapes is logged once here and re-raised to the caller.
        """
        try:
            return await self._run(event)
        except Exception as e:
            logger.error(
                "notification_event_failed",
                event_id=str(event.id),
                event_type=str(event.event_type),
                error=str(e),
                exc_info=True,
            )
            raise

    async def _run(self, event: ActivityEvent) -> DispatchResult:
        log = logger.bind(event_id=str(event.id), event_type=str(event.event_type))
        log.info("notification_event_received", tenant_id=event.tenant_id)

        context = await self._resolver.resolve(event)
        result = DispatchResult(
            event_type=event.event_type,
            recipients=list(context.recipients),
            project_id=context.project_id,
        )

        if not context.recipients:
            log.info("notification_event_no_recipients")
            return result

        preferences = await self._gate.load(event.tenant_id, context.recipients)

        per_recipient = await asyncio.gather(
            *(
                self._process_recipient(
                    event, recipient, preferences.get(recipient.email), context.project_id
                )
                for recipient in context.recipients
            )
        )
        for outcomes in per_recipient:
            result.outcomes.extend(outcomes)

        log.info(
            "notification_event_processed",
            recipient_count=len(result.recipients),
            notification_count=len(result.notifications),
            delivered_count=result.delivered_count,
            failed_count=len(result.failures),
        )
        return result

    async def _process_recipient(
        self,
        event: ActivityEvent,
        recipient: Recipient,
        preference: NotificationPreference | None,
        project_id: str | None,
    ) -> list[DeliveryOutcome]:
        """Gate, route and deliver for one recipient without affecting siblings."""
        try:
            if not self._gate.should_notify(event, preference, recipient):
                logger.debug(
                    "notification_suppressed_by_preference",
                    event_id=str(event.id),
                    recipient=recipient.email,
                )
                return []

            channels = get_channels(event, preference)
            if not channels:
                return []

            return await self._deliverer.deliver_to_recipient(
                event, recipient, channels, project_id
            )
        except Exception as e:
            logger.error(
                "recipient_processing_failed",
                event_id=str(event.id),
                recipient=recipient.email,
                error=str(e),
                exc_info=True,
            )
            return []
