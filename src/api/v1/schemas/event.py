"""Pydantic schemas for the Event ingestion API."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from core.exceptions import InvalidEventError
from domain.entities.event import ActivityEvent, ChannelKind, EventKind
from domain.entities.notification import DeliveryOutcome, DispatchResult

# Metadata each kind's resolution rule cannot work without.
REQUIRED_METADATA: dict[EventKind, str] = {
    EventKind.TASK_ASSIGNED: "assigned_to",
    EventKind.TIMESHEET_APPROVED: "user_email",
    EventKind.TIMESHEET_REJECTED: "user_email",
    EventKind.TICKET_ASSIGNED: "assigned_to",
    EventKind.COMMENT_MENTION: "mentions",
    EventKind.CLIENT_COMMENT_ADDED: "project_id",
    EventKind.MILESTONE_COMPLETED: "project_id",
}


class EventCreate(BaseModel):
    """Schema for submitting an activity event."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "event_type": "TIMESHEET_REJECTED",
                "tenant_id": "tenant-1",
                "entity_type": "timesheet",
                "entity_id": "ts-42",
                "entity_name": "Timesheet for 2026-10-16",
                "actor_email": "pm@example.com",
                "actor_name": "Pat Manager",
                "metadata": {"user_email": "u@example.com", "reason": "Missing task"},
                "notification_channels": ["IN_APP", "EMAIL"],
            }
        }
    )

    event_type: EventKind
    tenant_id: str = Field(..., min_length=1, max_length=64)
    entity_type: str = Field(..., min_length=1, max_length=50)
    entity_id: str = Field(..., min_length=1, max_length=64)
    entity_name: str | None = Field(None, max_length=500)
    actor_email: str | None = Field(None, max_length=255)
    actor_name: str | None = Field(None, max_length=200)
    metadata: dict[str, Any] = Field(default_factory=dict)
    notification_channels: list[ChannelKind] = Field(
        default_factory=lambda: [ChannelKind.IN_APP]
    )

    def to_domain(self) -> ActivityEvent:
        """Build the domain event, checking the metadata its rule requires."""
        key = REQUIRED_METADATA.get(self.event_type)
        if key is not None and not self.metadata.get(key):
            raise InvalidEventError(
                f"{self.event_type.value} events require metadata.{key}",
                field=f"metadata.{key}",
            )

        return ActivityEvent(
            event_type=self.event_type,
            tenant_id=self.tenant_id,
            entity_type=self.entity_type,
            entity_id=self.entity_id,
            entity_name=self.entity_name,
            actor_email=self.actor_email,
            actor_name=self.actor_name,
            metadata=dict(self.metadata),
            notification_channels=frozenset(self.notification_channels),
        )


class DeliveryOutcomeResponse(BaseModel):
    """Result of one (recipient, channel) delivery."""

    recipient_email: str
    channel: ChannelKind
    status: str
    error: str | None = None
    notification_id: UUID | None = None
    email_log_id: UUID | None = None
    email_status: str | None = None

    @classmethod
    def from_outcome(cls, outcome: DeliveryOutcome) -> "DeliveryOutcomeResponse":
        return cls(
            recipient_email=outcome.recipient_email,
            channel=outcome.channel,
            status=outcome.status.value,
            error=outcome.error,
            notification_id=outcome.notification.id if outcome.notification else None,
            email_log_id=outcome.email_log.id if outcome.email_log else None,
            email_status=outcome.email_log.status.value if outcome.email_log else None,
        )


class DispatchResponse(BaseModel):
    """Schema for the result of processing an event."""

    event_id: UUID
    event_type: EventKind
    recipients: list[str]
    project_id: str | None = None
    notifications_created: int
    outcomes: list[DeliveryOutcomeResponse]

    @classmethod
    def from_result(cls, event: ActivityEvent, result: DispatchResult) -> "DispatchResponse":
        return cls(
            event_id=event.id,
            event_type=result.event_type,
            recipients=[r.email for r in result.recipients],
            project_id=result.project_id,
            notifications_created=len(result.notifications),
            outcomes=[DeliveryOutcomeResponse.from_outcome(o) for o in result.outcomes],
        )


class EmitResponse(BaseModel):
    """Schema for an event accepted through the emitter."""

    event_id: UUID
    event_type: EventKind
    accepted: bool = True
