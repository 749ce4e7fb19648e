"""Event emitter: the single way business modules raise notification events.

Modules call the typed helpers (``task_assigned``, ``timesheet_rejected``,
...) instead of creating notifications directly. Each helper builds a
well-formed ``ActivityEvent`` and hands it to ``emit``.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import structlog

from domain.entities.event import ActivityEvent, ChannelKind, EventKind
from domain.entities.notification import Notification
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.notification_engine import NotificationEngine

logger = structlog.get_logger()

ALL_CHANNELS = frozenset({ChannelKind.IN_APP, ChannelKind.EMAIL})
IN_APP_ONLY = frozenset({ChannelKind.IN_APP})

COMMENT_PREVIEW_LENGTH = 100


@dataclass(frozen=True, slots=True)
class Actor:
    """The user who performed the business action."""

    email: str
    name: str | None = None


class EventEmitter:
    """Persists activity events and runs them through the notification engine."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        engine: NotificationEngine,
    ) -> None:
        self._uow_factory = uow_factory
        self._engine = engine

    async def emit(self, event: ActivityEvent) -> ActivityEvent | None:
        """Store an event, process it, and mark it processed.

        Never raises: a notification failure must not fail the business
        action that triggered it.

        Returns:
            The stored event, or None if it could not be stored.
        """
        try:
            async with self._uow_factory() as uow:
                stored = await uow.activity_events.create(event)
                await uow.commit()
        except Exception as e:
            logger.error(
                "activity_event_store_failed",
                event_type=str(event.event_type),
                error=str(e),
            )
            return None

        logger.info(
            "activity_event_emitted",
            event_id=str(stored.id),
            event_type=str(stored.event_type),
        )

        try:
            await self.process(stored)
        except Exception:
            logger.exception("activity_event_processing_failed", event_id=str(stored.id))

        return stored

    async def process(self, event: ActivityEvent) -> list[Notification]:
        """Run the engine on a stored event, then flag it processed."""
        notifications = await self._engine.process_event(event)
        async with self._uow_factory() as uow:
            await uow.activity_events.mark_processed(event.id)
            await uow.commit()
        return notifications

    # --- Typed helpers ---

    async def task_assigned(
        self,
        tenant_id: str,
        task_id: str,
        task_title: str,
        assigned_to: str | Iterable[str],
        assigned_by: Actor,
        project_id: str | None = None,
        project_name: str | None = None,
    ) -> ActivityEvent | None:
        assignees = [assigned_to] if isinstance(assigned_to, str) else list(assigned_to)
        return await self.emit(
            _event(
                EventKind.TASK_ASSIGNED,
                tenant_id,
                assigned_by,
                entity_type="task",
                entity_id=task_id,
                entity_name=task_title,
                metadata={
                    "assigned_to": assignees,
                    "project_id": project_id,
                    "project_name": project_name,
                },
            )
        )

    async def task_completed(
        self,
        tenant_id: str,
        task_id: str,
        task_title: str,
        completed_by: Actor,
        project_id: str | None = None,
        project_name: str | None = None,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.TASK_COMPLETED,
                tenant_id,
                completed_by,
                entity_type="task",
                entity_id=task_id,
                entity_name=task_title,
                metadata={"project_id": project_id, "project_name": project_name},
            )
        )

    async def timesheet_submitted(
        self,
        tenant_id: str,
        timesheet_id: str,
        timesheet_date: str,
        submitted_by: Actor,
        project_id: str | None = None,
        task_id: str | None = None,
        hours: float | None = None,
        total_minutes: int | None = None,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.TIMESHEET_SUBMITTED,
                tenant_id,
                submitted_by,
                entity_type="timesheet",
                entity_id=timesheet_id,
                entity_name=f"Timesheet for {timesheet_date}",
                metadata={
                    "project_id": project_id,
                    "task_id": task_id,
                    "hours": hours,
                    "total_minutes": total_minutes,
                },
            )
        )

    async def timesheet_approved(
        self,
        tenant_id: str,
        timesheet_id: str,
        timesheet_date: str,
        user_email: str,
        approved_by: Actor,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.TIMESHEET_APPROVED,
                tenant_id,
                approved_by,
                entity_type="timesheet",
                entity_id=timesheet_id,
                entity_name=f"Timesheet for {timesheet_date}",
                metadata={"user_email": user_email},
            )
        )

    async def timesheet_rejected(
        self,
        tenant_id: str,
        timesheet_id: str,
        timesheet_date: str,
        user_email: str,
        rejected_by: Actor,
        reason: str | None = None,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.TIMESHEET_REJECTED,
                tenant_id,
                rejected_by,
                entity_type="timesheet",
                entity_id=timesheet_id,
                entity_name=f"Timesheet for {timesheet_date}",
                metadata={"user_email": user_email, "reason": reason},
            )
        )

    async def ticket_created(
        self,
        tenant_id: str,
        ticket_id: str,
        ticket_title: str,
        created_by: Actor,
        ticket_number: str | None = None,
        priority: str | None = None,
        category: str | None = None,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.TICKET_CREATED,
                tenant_id,
                created_by,
                entity_type="ticket",
                entity_id=ticket_id,
                entity_name=ticket_title,
                metadata={
                    "ticket_number": ticket_number,
                    "priority": priority,
                    "category": category,
                },
            )
        )

    async def ticket_assigned(
        self,
        tenant_id: str,
        ticket_id: str,
        ticket_title: str,
        assigned_to: str,
        assigned_by: Actor,
        ticket_number: str | None = None,
        priority: str | None = None,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.TICKET_ASSIGNED,
                tenant_id,
                assigned_by,
                entity_type="ticket",
                entity_id=ticket_id,
                entity_name=ticket_title,
                metadata={
                    "assigned_to": assigned_to,
                    "ticket_number": ticket_number,
                    "priority": priority,
                },
            )
        )

    async def ticket_sla_breached(
        self,
        tenant_id: str,
        ticket_id: str,
        ticket_title: str,
        assigned_to: str | None = None,
        ticket_number: str | None = None,
        sla_due_at: str | None = None,
    ) -> ActivityEvent | None:
        # Raised by the SLA checker, so there is no human actor.
        return await self.emit(
            _event(
                EventKind.TICKET_SLA_BREACHED,
                tenant_id,
                None,
                entity_type="ticket",
                entity_id=ticket_id,
                entity_name=ticket_title,
                metadata={
                    "assigned_to": assigned_to,
                    "ticket_number": ticket_number,
                    "sla_due_at": sla_due_at,
                },
            )
        )

    async def comment_added(
        self,
        tenant_id: str,
        comment_id: str,
        content: str,
        author: Actor,
        entity_type: str,
        entity_id: str,
        entity_name: str | None = None,
        mentions: Iterable[str] = (),
    ) -> ActivityEvent | None:
        """Emit COMMENT_MENTION for the mentioned users, then COMMENT_ADDED."""
        preview = content[:COMMENT_PREVIEW_LENGTH]
        mentioned = list(mentions)

        if mentioned:
            await self.emit(
                _event(
                    EventKind.COMMENT_MENTION,
                    tenant_id,
                    author,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    entity_name=entity_name,
                    metadata={
                        "comment_id": comment_id,
                        "mentions": mentioned,
                        "content": preview,
                    },
                )
            )

        return await self.emit(
            _event(
                EventKind.COMMENT_ADDED,
                tenant_id,
                author,
                entity_type=entity_type,
                entity_id=entity_id,
                entity_name=entity_name,
                metadata={"comment_id": comment_id, "content": preview},
                channels=IN_APP_ONLY,
            )
        )

    async def client_comment_added(
        self,
        tenant_id: str,
        comment_id: str,
        content: str,
        author: Actor,
        project_id: str,
        project_name: str,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.CLIENT_COMMENT_ADDED,
                tenant_id,
                author,
                entity_type="comment",
                entity_id=comment_id,
                entity_name=f"Comment on {project_name}",
                metadata={
                    "project_id": project_id,
                    "project_name": project_name,
                    "content": content[:COMMENT_PREVIEW_LENGTH],
                },
            )
        )

    async def project_updated(
        self,
        tenant_id: str,
        project_id: str,
        project_name: str,
        updated_by: Actor,
        update_type: str | None = None,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.PROJECT_UPDATED,
                tenant_id,
                updated_by,
                entity_type="project",
                entity_id=project_id,
                entity_name=project_name,
                metadata={"update_type": update_type},
                channels=IN_APP_ONLY,
            )
        )

    async def milestone_completed(
        self,
        tenant_id: str,
        milestone_id: str,
        milestone_title: str,
        completed_by: Actor,
        project_id: str,
        project_name: str | None = None,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.MILESTONE_COMPLETED,
                tenant_id,
                completed_by,
                entity_type="milestone",
                entity_id=milestone_id,
                entity_name=milestone_title,
                metadata={"project_id": project_id, "project_name": project_name},
            )
        )

    async def leave_submitted(
        self,
        tenant_id: str,
        leave_id: str,
        requested_by: Actor,
        total_days: float,
        leave_type: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.APPROVAL_REQUESTED,
                tenant_id,
                requested_by,
                entity_type="leave",
                entity_id=leave_id,
                entity_name=f"Leave request for {total_days:g} days",
                metadata={
                    "leave_type": leave_type,
                    "start_date": start_date,
                    "end_date": end_date,
                    "total_days": total_days,
                },
            )
        )

    async def leave_approved(
        self,
        tenant_id: str,
        leave_id: str,
        user_email: str,
        approved_by: Actor,
        leave_type: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> ActivityEvent | None:
        # Leave reviews reuse the timesheet review kinds and their routing.
        return await self.emit(
            _event(
                EventKind.TIMESHEET_APPROVED,
                tenant_id,
                approved_by,
                entity_type="leave",
                entity_id=leave_id,
                entity_name="Leave approved",
                metadata={
                    "user_email": user_email,
                    "leave_type": leave_type,
                    "start_date": start_date,
                    "end_date": end_date,
                },
            )
        )

    async def leave_rejected(
        self,
        tenant_id: str,
        leave_id: str,
        user_email: str,
        rejected_by: Actor,
        reason: str | None = None,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.TIMESHEET_REJECTED,
                tenant_id,
                rejected_by,
                entity_type="leave",
                entity_id=leave_id,
                entity_name="Leave rejected",
                metadata={"user_email": user_email, "reason": reason},
            )
        )

    async def leave_cancelled(
        self,
        tenant_id: str,
        leave_id: str,
        user_email: str,
        cancelled_by: Actor,
        leave_type: str | None = None,
        reason: str | None = None,
        was_approved: bool = False,
    ) -> ActivityEvent | None:
        return await self.emit(
            _event(
                EventKind.LEAVE_CANCELLED,
                tenant_id,
                cancelled_by,
                entity_type="leave",
                entity_id=leave_id,
                entity_name="Leave cancelled",
                metadata={
                    "user_email": user_email,
                    "leave_type": leave_type,
                    "reason": reason,
                    "was_approved": was_approved,
                },
            )
        )


def _event(
    kind: EventKind,
    tenant_id: str,
    actor: Actor | None,
    *,
    entity_type: str,
    entity_id: str,
    entity_name: str | None,
    metadata: dict[str, Any],
    channels: frozenset[ChannelKind] = ALL_CHANNELS,
) -> ActivityEvent:
    return ActivityEvent(
        event_type=kind,
        tenant_id=tenant_id,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_name=entity_name,
        actor_email=actor.email if actor else None,
        actor_name=actor.name if actor else None,
        metadata={k: v for k, v in metadata.items() if v is not None},
        notification_channels=channels,
    )
