"""Unit tests for the message builder."""

import pytest

from domain.entities.event import EventKind
from domain.entities.notification import Recipient
from domain.services.message_builder import (
    DEFAULT_LABEL,
    NOTIFICATION_LABELS,
    MessageBuilder,
    get_label,
)
from tests.factories import make_event

BASE = "https://app.groona.com"


@pytest.fixture
def builder() -> MessageBuilder:
    return MessageBuilder(base_url=BASE + "/", product_name="Groona")


class TestLabels:
    def test_every_kind_is_labelled(self) -> None:
        assert set(NOTIFICATION_LABELS) == set(EventKind)

    def test_sla_breach_label(self) -> None:
        label = get_label(EventKind.TICKET_SLA_BREACHED)
        assert label.type == "sla_breach"
        assert label.title == "⚠️ SLA Breach Alert"

    def test_unknown_kind_falls_back_to_system(self) -> None:
        assert get_label("SOMETHING_NEW") == DEFAULT_LABEL
        assert DEFAULT_LABEL.type == "system"
        assert DEFAULT_LABEL.title == "Notification"


class TestMessages:
    def test_uses_actor_and_entity_names(self, builder: MessageBuilder) -> None:
        message = builder.build_message(make_event(EventKind.TASK_ASSIGNED))

        assert "Alex Actor" in message
        assert "Write report" in message

    def test_defaults_for_missing_names(self, builder: MessageBuilder) -> None:
        event = make_event(EventKind.TASK_COMPLETED, actor_name=None, entity_name=None)

        message = builder.build_message(event)

        assert message.startswith("Someone")
        assert "item" in message

    def test_rejection_reason_is_appended(self, builder: MessageBuilder) -> None:
        event = make_event(EventKind.TIMESHEET_REJECTED, metadata={"reason": "Missing task"})

        assert builder.build_message(event).endswith("Reason: Missing task")

    def test_in_app_payload(self, builder: MessageBuilder) -> None:
        event = make_event(EventKind.TIMESHEET_REJECTED, actor_name=None)

        notification = builder.build_in_app(event, Recipient("u@example.com"), "proj-1")

        assert notification.type == "timesheet_rejected"
        assert notification.title == "Timesheet Rejected"
        assert notification.recipient_email == "u@example.com"
        assert notification.project_id == "proj-1"
        assert notification.sender_name == "System"
        assert notification.read is False


class TestLinks:
    def test_task_link_includes_task_id(self, builder: MessageBuilder) -> None:
        event = make_event(EventKind.COMMENT_MENTION, entity_id="task-7")

        link = builder.build_link(event, "proj-1")

        assert link == f"{BASE}/ProjectDetail?id=proj-1&taskId=task-7"

    def test_non_task_link_has_project_only(self, builder: MessageBuilder) -> None:
        event = make_event(EventKind.PROJECT_UPDATED, entity_type="project", entity_id="proj-1")

        assert builder.build_link(event, "proj-1") == f"{BASE}/ProjectDetail?id=proj-1"

    def test_no_project_links_to_root(self, builder: MessageBuilder) -> None:
        assert builder.build_link(make_event(EventKind.TICKET_CREATED), None) == BASE


class TestEmail:
    def test_subject_and_body(self, builder: MessageBuilder) -> None:
        event = make_event(EventKind.TASK_ASSIGNED, entity_name="<b>Draft</b>")

        payload = builder.build_email(event, Recipient("u@example.com"), "proj-1")

        assert payload.subject == "New Task Assigned - Groona"
        assert "&lt;b&gt;Draft&lt;/b&gt;" in payload.body
        assert "<b>Draft</b>" not in payload.body
        assert 'href="https://app.groona.com/ProjectDetail?id=proj-1&amp;taskId=task-1"' in (
            payload.body
        )
        assert payload.link == f"{BASE}/ProjectDetail?id=proj-1&taskId=task-1"
