"""Unit tests for the deliverer."""

import pytest

from domain.entities.event import ChannelKind, EventKind
from domain.entities.notification import DeliveryStatus, EmailStatus, Recipient
from domain.services.deliverer import Deliverer
from domain.services.message_builder import MessageBuilder
from tests.factories import RecordingEmailProvider, make_event
from tests.unit.conftest import FakeUnitOfWork

BOTH = {ChannelKind.IN_APP, ChannelKind.EMAIL}
RECIPIENT = Recipient("u@example.com")


@pytest.fixture
def deliverer(uow: FakeUnitOfWork, email_provider: RecordingEmailProvider) -> Deliverer:
    return Deliverer(
        lambda: uow,
        email_provider,
        builder=MessageBuilder("https://app.test", "Groona"),
        from_name="Groona Notifications",
    )


@pytest.mark.asyncio
async def test_delivers_in_app_then_email(
    deliverer: Deliverer, uow: FakeUnitOfWork, email_provider: RecordingEmailProvider
) -> None:
    event = make_event(EventKind.TASK_ASSIGNED, channels=tuple(BOTH))

    outcomes = await deliverer.deliver_to_recipient(event, RECIPIENT, BOTH, "proj-1")

    assert [o.channel for o in outcomes] == [ChannelKind.IN_APP, ChannelKind.EMAIL]
    assert all(o.ok for o in outcomes)
    assert outcomes[0].notification is not None
    assert outcomes[0].notification.read is False
    assert outcomes[1].email_log is not None
    assert outcomes[1].email_log.status == EmailStatus.SENT
    assert email_provider.sent[0].from_name == "Groona Notifications"
    assert email_provider.sent[0].subject == "New Task Assigned - Groona"


@pytest.mark.asyncio
async def test_email_log_created_pending_before_send(
    deliverer: Deliverer, uow: FakeUnitOfWork, email_provider: RecordingEmailProvider
) -> None:
    statuses_at_send: list[EmailStatus] = []

    async def send(message):  # type: ignore[no-untyped-def]
        created = uow.email_logs.create.await_args.args[0]
        statuses_at_send.append(created.status)

    email_provider.send = send  # type: ignore[method-assign]
    event = make_event(EventKind.TASK_ASSIGNED, channels=tuple(BOTH))

    await deliverer.deliver_email(event, RECIPIENT, "proj-1")

    assert statuses_at_send == [EmailStatus.PENDING]
    log = uow.email_logs.create.await_args.args[0]
    uow.email_logs.update_status.assert_awaited_once_with(log.id, EmailStatus.SENT, None)


@pytest.mark.asyncio
async def test_send_failure_is_recorded_not_raised(
    uow: FakeUnitOfWork,
) -> None:
    provider = RecordingEmailProvider(fail_for={"u@example.com"})
    deliverer = Deliverer(lambda: uow, provider, builder=MessageBuilder("https://app.test"))
    event = make_event(EventKind.TASK_ASSIGNED, channels=tuple(BOTH))

    outcomes = await deliverer.deliver_to_recipient(event, RECIPIENT, BOTH, None)

    in_app, email = outcomes
    assert in_app.ok
    assert email.status == DeliveryStatus.FAILED
    assert "SMTP refused" in (email.error or "")
    assert email.email_log is not None
    assert email.email_log.status == EmailStatus.FAILED
    log_id = email.email_log.id
    uow.email_logs.update_status.assert_awaited_once_with(
        log_id, EmailStatus.FAILED, email.error
    )


@pytest.mark.asyncio
async def test_in_app_failure_does_not_block_email(
    deliverer: Deliverer, uow: FakeUnitOfWork, email_provider: RecordingEmailProvider
) -> None:
    uow.notifications.create.side_effect = RuntimeError("insert failed")
    event = make_event(EventKind.TASK_ASSIGNED, channels=tuple(BOTH))

    in_app, email = await deliverer.deliver_to_recipient(event, RECIPIENT, BOTH, None)

    assert in_app.status == DeliveryStatus.FAILED
    assert in_app.error == "insert failed"
    assert email.ok
    assert email_provider.recipients == ["u@example.com"]


@pytest.mark.asyncio
async def test_no_send_when_log_cannot_be_created(
    deliverer: Deliverer, uow: FakeUnitOfWork, email_provider: RecordingEmailProvider
) -> None:
    uow.email_logs.create.side_effect = RuntimeError("insert failed")
    event = make_event(EventKind.TASK_ASSIGNED, channels=tuple(BOTH))

    outcome = await deliverer.deliver_email(event, RECIPIENT, None)

    assert outcome.status == DeliveryStatus.FAILED
    assert outcome.email_log is None
    assert email_provider.sent == []


@pytest.mark.asyncio
async def test_status_update_failure_keeps_pending_log(
    deliverer: Deliverer, uow: FakeUnitOfWork
) -> None:
    uow.email_logs.update_status.side_effect = RuntimeError("update failed")
    event = make_event(EventKind.TASK_ASSIGNED, channels=tuple(BOTH))

    outcome = await deliverer.deliver_email(event, RECIPIENT, None)

    assert outcome.ok
    assert outcome.email_log is not None
    assert outcome.email_log.status == EmailStatus.PENDING


@pytest.mark.asyncio
async def test_empty_channel_set_does_nothing(
    deliverer: Deliverer, uow: FakeUnitOfWork, email_provider: RecordingEmailProvider
) -> None:
    outcomes = await deliverer.deliver_to_recipient(
        make_event(EventKind.TASK_ASSIGNED), RECIPIENT, frozenset(), None
    )

    assert outcomes == []
    uow.notifications.create.assert_not_awaited()
    assert email_provider.sent == []
