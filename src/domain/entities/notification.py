"""Notification domain entities and delivery outcome values."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from domain.entities.event import ChannelKind, EventKind


class EmailStatus(StrEnum):
    """Lifecycle of an email delivery log row."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class DeliveryStatus(StrEnum):
    """Result of delivering one channel to one recipient."""

    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class Recipient:
    """A resolved notification recipient, identified by email."""

    email: str


@dataclass(frozen=True, slots=True)
class ResolvedContext:
    """Recipients and deep-link project for one event."""

    recipients: tuple[Recipient, ...] = ()
    project_id: str | None = None

    @property
    def emails(self) -> list[str]:
        return [r.email for r in self.recipients]


@dataclass
class NotificationPreference:
    """A user's notification settings within a tenant.

    Category toggles are tri-state: ``None`` means the user never set
    them, which counts as enabled.
    """

    tenant_id: str
    user_email: str
    in_app_enabled: bool = True
    email_enabled: bool = True
    critical_only: bool = False
    task_assigned: bool | None = None
    task_completed: bool | None = None
    comment_added: bool | None = None
    mention: bool | None = None
    project_updated: bool | None = None
    id: UUID = field(default_factory=uuid4)

    @classmethod
    def default(cls, tenant_id: str, user_email: str) -> "NotificationPreference":
        """The all-enabled preference used when a user has no stored record."""
        return cls(tenant_id=tenant_id, user_email=user_email)

    def category_enabled(self, key: str) -> bool:
        """Return False only when the category was explicitly switched off."""
        return getattr(self, key, None) is not False


@dataclass
class Notification:
    """Domain entity for an in-app notification."""

    tenant_id: str
    recipient_email: str
    type: str
    title: str
    message: str
    entity_type: str
    entity_id: str
    project_id: str | None = None
    sender_name: str = "System"
    read: bool = False
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class EmailNotificationLog:
    """Audit row written before every email send attempt."""

    tenant_id: str
    event_id: UUID
    recipient_email: str
    subject: str
    status: EmailStatus = EmailStatus.PENDING
    error: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    """Read-only value object: what happened on one (recipient, channel)."""

    recipient_email: str
    channel: ChannelKind
    status: DeliveryStatus
    error: str | None = None
    notification: Notification | None = None
    email_log: EmailNotificationLog | None = None

    @property
    def ok(self) -> bool:
        return self.status == DeliveryStatus.DELIVERED


@dataclass
class DispatchResult:
    """Everything the engine did for one event."""

    event_type: EventKind
    recipients: list[Recipient] = field(default_factory=list)
    project_id: str | None = None
    outcomes: list[DeliveryOutcome] = field(default_factory=list)

    @property
    def notifications(self) -> list[Notification]:
        """In-app notifications that were created."""
        return [o.notification for o in self.outcomes if o.ok and o.notification is not None]

    @property
    def failures(self) -> list[DeliveryOutcome]:
        return [o for o in self.outcomes if o.status == DeliveryStatus.FAILED]

    @property
    def delivered_count(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)
