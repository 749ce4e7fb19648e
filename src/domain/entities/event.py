"""Activity event domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID, uuid4


class EventKind(StrEnum):
    """Domain events the notification engine knows how to route."""

    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_COMPLETED = "TASK_COMPLETED"
    TIMESHEET_SUBMITTED = "TIMESHEET_SUBMITTED"
    TIMESHEET_APPROVED = "TIMESHEET_APPROVED"
    TIMESHEET_REJECTED = "TIMESHEET_REJECTED"
    TICKET_CREATED = "TICKET_CREATED"
    TICKET_ASSIGNED = "TICKET_ASSIGNED"
    TICKET_SLA_BREACHED = "TICKET_SLA_BREACHED"
    COMMENT_MENTION = "COMMENT_MENTION"
    COMMENT_ADDED = "COMMENT_ADDED"
    CLIENT_COMMENT_ADDED = "CLIENT_COMMENT_ADDED"
    PROJECT_UPDATED = "PROJECT_UPDATED"
    MILESTONE_COMPLETED = "MILESTONE_COMPLETED"
    APPROVAL_REQUESTED = "APPROVAL_REQUESTED"
    LEAVE_CANCELLED = "LEAVE_CANCELLED"


class ChannelKind(StrEnum):
    """Delivery channels."""

    IN_APP = "IN_APP"
    EMAIL = "EMAIL"


@dataclass(frozen=True, slots=True)
class ActivityEvent:
    """Domain entity for a raw activity event.

    Immutable once created. Produced by the module that detected the
    business action and consumed exactly once by the notification engine.
    """

    event_type: EventKind
    tenant_id: str
    entity_type: str
    entity_id: str
    actor_email: str | None = None
    actor_name: str | None = None
    entity_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    notification_channels: frozenset[ChannelKind] = frozenset({ChannelKind.IN_APP})
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Normalize the channel collection so callers may pass any iterable."""
        if not isinstance(self.notification_channels, frozenset):
            object.__setattr__(
                self,
                "notification_channels",
                frozenset(ChannelKind(c) for c in self.notification_channels),
            )

    def declares(self, channel: ChannelKind) -> bool:
        """Check whether the event explicitly asks for a channel."""
        return channel in self.notification_channels
