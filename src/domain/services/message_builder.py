"""Message builder: in-app and email payloads for a notification."""

from dataclasses import dataclass
from html import escape

from core.config import settings
from domain.entities.event import ActivityEvent, EventKind
from domain.entities.notification import Notification, Recipient


@dataclass(frozen=True, slots=True)
class NotificationLabel:
    """The stored notification type and its display title."""

    type: str
    title: str


@dataclass(frozen=True, slots=True)
class EmailPayload:
    """Rendered email for one recipient."""

    subject: str
    body: str
    link: str


NOTIFICATION_LABELS: dict[EventKind, NotificationLabel] = {
    EventKind.TASK_ASSIGNED: NotificationLabel("task_assigned", "New Task Assigned"),
    EventKind.TASK_COMPLETED: NotificationLabel("task_completed", "Task Completed"),
    EventKind.TIMESHEET_SUBMITTED: NotificationLabel("timesheet_submitted", "Timesheet Submitted"),
    EventKind.TIMESHEET_APPROVED: NotificationLabel("timesheet_approved", "Timesheet Approved"),
    EventKind.TIMESHEET_REJECTED: NotificationLabel("timesheet_rejected", "Timesheet Rejected"),
    EventKind.TICKET_CREATED: NotificationLabel("ticket_created", "New Support Ticket"),
    EventKind.TICKET_ASSIGNED: NotificationLabel("ticket_assigned", "Support Ticket Assigned"),
    EventKind.TICKET_SLA_BREACHED: NotificationLabel("sla_breach", "⚠️ SLA Breach Alert"),
    EventKind.COMMENT_MENTION: NotificationLabel("mention", "You Were Mentioned"),
    EventKind.COMMENT_ADDED: NotificationLabel("comment_added", "New Comment"),
    EventKind.CLIENT_COMMENT_ADDED: NotificationLabel("client_comment", "Client Comment"),
    EventKind.PROJECT_UPDATED: NotificationLabel("project_updated", "Project Updated"),
    EventKind.MILESTONE_COMPLETED: NotificationLabel("milestone_completed", "Milestone Completed"),
    EventKind.APPROVAL_REQUESTED: NotificationLabel("approval_requested", "Approval Requested"),
    EventKind.LEAVE_CANCELLED: NotificationLabel("leave_cancelled", "Leave Cancelled"),
}

DEFAULT_LABEL = NotificationLabel("system", "Notification")

GENERIC_TEMPLATE = "{actor} performed action on {entity}"

# Placeholders: {actor}, {entity}
MESSAGE_TEMPLATES: dict[EventKind, str] = {
    EventKind.TASK_ASSIGNED: '{actor} assigned you to "{entity}"',
    EventKind.TASK_COMPLETED: '{actor} completed "{entity}"',
    EventKind.TIMESHEET_SUBMITTED: "{actor} submitted {entity} for approval",
    EventKind.TIMESHEET_APPROVED: "{actor} approved {entity}",
    EventKind.TIMESHEET_REJECTED: "{actor} rejected {entity}",
    EventKind.TICKET_CREATED: '{actor} opened support ticket "{entity}"',
    EventKind.TICKET_ASSIGNED: '{actor} assigned you support ticket "{entity}"',
    EventKind.TICKET_SLA_BREACHED: 'Support ticket "{entity}" has breached its SLA',
    EventKind.COMMENT_MENTION: '{actor} mentioned you in a comment on "{entity}"',
    EventKind.COMMENT_ADDED: '{actor} commented on "{entity}"',
    EventKind.CLIENT_COMMENT_ADDED: "{actor} left a client comment: {entity}",
    EventKind.PROJECT_UPDATED: '{actor} updated project "{entity}"',
    EventKind.MILESTONE_COMPLETED: '{actor} completed milestone "{entity}"',
    EventKind.APPROVAL_REQUESTED: "{actor} is waiting for your approval: {entity}",
    EventKind.LEAVE_CANCELLED: "{actor} cancelled a leave request ({entity})",
}

# Kinds whose metadata may carry a free-text reason worth showing.
_REASON_KINDS = frozenset({EventKind.TIMESHEET_REJECTED, EventKind.LEAVE_CANCELLED})


def get_label(event_type: EventKind | str) -> NotificationLabel:
    return NOTIFICATION_LABELS.get(event_type, DEFAULT_LABEL)  # type: ignore[call-overload]


class MessageBuilder:
    """Builds display text, deep links and email bodies for events."""

    def __init__(
        self,
        base_url: str | None = None,
        product_name: str | None = None,
    ) -> None:
        self._base_url = (base_url or settings.app_base_url).rstrip("/")
        self._product_name = product_name or settings.product_name

    def build_message(self, event: ActivityEvent) -> str:
        """Human-readable body text for an event."""
        actor = event.actor_name or "Someone"
        entity = event.entity_name or "item"
        template = MESSAGE_TEMPLATES.get(event.event_type, GENERIC_TEMPLATE)
        message = template.format(actor=actor, entity=entity)

        reason = event.metadata.get("reason")
        if event.event_type in _REASON_KINDS and reason:
            message = f"{message}. Reason: {reason}"
        return message

    def build_in_app(
        self, event: ActivityEvent, recipient: Recipient, project_id: str | None
    ) -> Notification:
        """Unsaved in-app notification for one recipient."""
        label = get_label(event.event_type)
        return Notification(
            tenant_id=event.tenant_id,
            recipient_email=recipient.email,
            type=label.type,
            title=label.title,
            message=self.build_message(event),
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            project_id=project_id,
            sender_name=event.actor_name or "System",
            read=False,
        )

    def build_link(self, event: ActivityEvent, project_id: str | None) -> str:
        """Deep link into the product.

        ``/ProjectDetail?id=<project>`` when the project is known, with
        ``&taskId=<task>`` for task events; the application root otherwise.
        """
        if not project_id:
            return self._base_url
        link = f"{self._base_url}/ProjectDetail?id={project_id}"
        if event.entity_type == "task":
            link += f"&taskId={event.entity_id}"
        return link

    def build_email(
        self, event: ActivityEvent, recipient: Recipient, project_id: str | None
    ) -> EmailPayload:
        label = get_label(event.event_type)
        message = self.build_message(event)
        link = self.build_link(event, project_id)
        subject = f"{label.title} - {self._product_name}"

        body = (
            "<html><body>"
            f"<h2>{escape(label.title)}</h2>"
            f"<p>{escape(message)}</p>"
            f'<a href="{escape(link, quote=True)}" '
            'style="padding: 10px 20px; background: #3b82f6; color: white; '
            'border-radius: 5px; text-decoration: none;">View Details</a>'
            "</body></html>"
        )
        return EmailPayload(subject=subject, body=body, link=link)
