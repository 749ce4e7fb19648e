"""Unit tests for the notification engine pipeline."""

from unittest.mock import AsyncMock

import pytest

from domain.entities.event import ChannelKind, EventKind
from domain.entities.notification import DeliveryStatus, EmailStatus
from domain.services.context_resolver import ContextResolver
from domain.services.message_builder import MessageBuilder
from domain.services.notification_engine import NotificationEngine
from domain.services.preference_gate import PreferenceGate
from tests.factories import (
    RecordingEmailProvider,
    make_event,
    make_preference,
    make_project,
    make_task,
)
from tests.unit.conftest import FakeUnitOfWork

BOTH = (ChannelKind.IN_APP, ChannelKind.EMAIL)
BASE = "https://app.groona.com"


@pytest.fixture
def engine(uow: FakeUnitOfWork, email_provider: RecordingEmailProvider) -> NotificationEngine:
    return NotificationEngine(
        lambda: uow,
        email_provider=email_provider,
        builder=MessageBuilder(BASE, "Groona"),
    )


@pytest.mark.asyncio
async def test_task_assigned_reaches_each_assignee_despite_preferences(
    engine: NotificationEngine, uow: FakeUnitOfWork
) -> None:
    uow.preferences.filter.return_value = [
        make_preference("a@x.com", task_assigned=False),
        make_preference("b@x.com", critical_only=True),
    ]
    event = make_event(
        EventKind.TASK_ASSIGNED,
        metadata={"assigned_to": ["a@x.com", "b@x.com"], "project_id": "proj-1"},
    )

    notifications = await engine.process_event(event)

    assert [n.recipient_email for n in notifications] == ["a@x.com", "b@x.com"]
    assert uow.notifications.create.await_count == 2


@pytest.mark.asyncio
async def test_in_app_disabled_with_in_app_only_event_gets_nothing(
    engine: NotificationEngine, uow: FakeUnitOfWork, email_provider: RecordingEmailProvider
) -> None:
    uow.projects.find_by_id.return_value = make_project(members=("t@x.com",))
    uow.preferences.filter.return_value = [
        make_preference("t@x.com", in_app_enabled=False, email_enabled=True)
    ]
    event = make_event(EventKind.PROJECT_UPDATED, entity_type="project", entity_id="proj-1")

    result = await engine.dispatch(event)

    assert result.outcomes == []
    assert email_provider.sent == []
    uow.notifications.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_critical_only_blocks_comments_but_not_sla_breaches(
    engine: NotificationEngine, uow: FakeUnitOfWork
) -> None:
    uow.tasks.find_by_id.return_value = make_task(assigned_to=("u@x.com",))
    uow.preferences.filter.return_value = [make_preference("u@x.com", critical_only=True)]

    comment = await engine.process_event(make_event(EventKind.COMMENT_ADDED))
    breach = await engine.process_event(
        make_event(
            EventKind.TICKET_SLA_BREACHED,
            entity_type="ticket",
            actor_email=None,
            metadata={"assigned_to": "u@x.com"},
        )
    )

    assert comment == []
    assert [n.type for n in breach] == ["sla_breach"]


@pytest.mark.asyncio
async def test_mention_on_task_links_to_task_project(
    engine: NotificationEngine, uow: FakeUnitOfWork, email_provider: RecordingEmailProvider
) -> None:
    uow.tasks.find_by_id.return_value = make_task(task_id="task-5", project_id="proj-3")
    event = make_event(
        EventKind.COMMENT_MENTION,
        entity_id="task-5",
        metadata={"mentions": ["m@x.com"]},
        channels=BOTH,
    )

    notifications = await engine.process_event(event)

    assert notifications[0].project_id == "proj-3"
    assert f"{BASE}/ProjectDetail?id=proj-3&amp;taskId=task-5" in email_provider.sent[0].body


@pytest.mark.asyncio
async def test_task_lookup_failure_does_not_raise(
    engine: NotificationEngine, uow: FakeUnitOfWork
) -> None:
    uow.tasks.find_by_id.side_effect = RuntimeError("db down")

    notifications = await engine.process_event(make_event(EventKind.COMMENT_ADDED))

    assert notifications == []


@pytest.mark.asyncio
async def test_timesheet_rejected_end_to_end(
    engine: NotificationEngine, uow: FakeUnitOfWork, email_provider: RecordingEmailProvider
) -> None:
    uow.preferences.filter.return_value = [
        make_preference("u@x.com", email_enabled=True, in_app_enabled=True)
    ]
    event = make_event(
        EventKind.TIMESHEET_REJECTED,
        entity_type="timesheet",
        entity_id="ts-1",
        metadata={"user_email": "u@x.com"},
        channels=BOTH,
    )

    notifications = await engine.process_event(event)

    assert len(notifications) == 1
    assert notifications[0].type == "timesheet_rejected"
    uow.email_logs.create.assert_awaited_once()
    log = uow.email_logs.create.await_args.args[0]
    assert log.recipient_email == "u@x.com"
    assert log.status == EmailStatus.PENDING
    assert email_provider.recipients == ["u@x.com"]


@pytest.mark.asyncio
async def test_one_recipient_failure_does_not_affect_others(
    uow: FakeUnitOfWork,
) -> None:
    provider = RecordingEmailProvider(fail_for={"a@x.com"})
    engine = NotificationEngine(lambda: uow, provider)
    event = make_event(
        EventKind.TICKET_ASSIGNED,
        entity_type="ticket",
        metadata={"assigned_to": ["a@x.com", "b@x.com"]},
        channels=BOTH,
    )

    result = await engine.dispatch(event)

    assert len(result.notifications) == 2
    assert [(f.recipient_email, f.channel) for f in result.failures] == [
        ("a@x.com", ChannelKind.EMAIL)
    ]
    assert provider.recipients == ["b@x.com"]
    assert result.delivered_count == 3


@pytest.mark.asyncio
async def test_unexpected_recipient_error_is_contained(
    uow: FakeUnitOfWork, email_provider: RecordingEmailProvider
) -> None:
    def flaky(event, preference, recipient=None):  # type: ignore[no-untyped-def]
        if recipient.email == "a@x.com":
            raise RuntimeError("broken preference")
        return True

    gate = PreferenceGate(lambda: uow)
    gate.should_notify = flaky  # type: ignore[method-assign]
    engine = NotificationEngine(lambda: uow, email_provider, gate=gate)
    event = make_event(
        EventKind.TICKET_ASSIGNED,
        entity_type="ticket",
        metadata={"assigned_to": ["a@x.com", "b@x.com"]},
    )

    notifications = await engine.process_event(event)

    assert [n.recipient_email for n in notifications] == ["b@x.com"]


@pytest.mark.asyncio
async def test_no_recipients_skips_preference_lookup(
    engine: NotificationEngine, uow: FakeUnitOfWork
) -> None:
    result = await engine.dispatch(make_event(EventKind.TICKET_CREATED, entity_type="ticket"))

    assert result.recipients == []
    assert result.outcomes == []
    uow.preferences.filter.assert_not_awaited()


@pytest.mark.asyncio
async def test_top_level_error_is_rethrown(uow: FakeUnitOfWork) -> None:
    gate = AsyncMock()
    gate.load.side_effect = RuntimeError("gate exploded")
    engine = NotificationEngine(lambda: uow, RecordingEmailProvider(), gate=gate)
    event = make_event(EventKind.TIMESHEET_APPROVED, metadata={"user_email": "u@x.com"})

    with pytest.raises(RuntimeError, match="gate exploded"):
        await engine.process_event(event)


@pytest.mark.asyncio
async def test_resolution_is_idempotent(uow: FakeUnitOfWork) -> None:
    uow.tasks.find_by_id.return_value = make_task(assigned_to=("a@x.com", "b@x.com"))
    resolver = ContextResolver(lambda: uow)
    event = make_event(EventKind.COMMENT_ADDED)

    first = await resolver.resolve(event)
    second = await resolver.resolve(event)

    assert first == second
    assert set(first.emails) == {"a@x.com", "b@x.com"}


@pytest.mark.asyncio
async def test_email_outcome_statuses(
    engine: NotificationEngine, uow: FakeUnitOfWork
) -> None:
    event = make_event(
        EventKind.TIMESHEET_APPROVED,
        entity_type="timesheet",
        metadata={"user_email": "u@x.com"},
        channels=BOTH,
    )

    result = await engine.dispatch(event)

    email = next(o for o in result.outcomes if o.channel == ChannelKind.EMAIL)
    assert email.status == DeliveryStatus.DELIVERED
    assert email.email_log is not None
    assert email.email_log.status == EmailStatus.SENT
