"""Preference gate: decides whether a recipient hears about an event at all."""

from collections.abc import Callable, Sequence

import structlog

from domain.entities.event import ActivityEvent, EventKind
from domain.entities.notification import NotificationPreference, Recipient
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.preference_cache import PreferenceCache

logger = structlog.get_logger()

# Always delivered, whatever the recipient's settings say.
CRITICAL_EVENTS: frozenset[EventKind] = frozenset(
    {
        EventKind.TICKET_SLA_BREACHED,
        EventKind.TIMESHEET_APPROVED,
        EventKind.TIMESHEET_REJECTED,
        EventKind.TASK_ASSIGNED,
    }
)

PREFERENCE_KEYS: dict[EventKind, str] = {
    EventKind.TASK_ASSIGNED: "task_assigned",
    EventKind.TASK_COMPLETED: "task_completed",
    EventKind.COMMENT_ADDED: "comment_added",
    EventKind.COMMENT_MENTION: "mention",
    EventKind.PROJECT_UPDATED: "project_updated",
}


def should_notify(
    event: ActivityEvent,
    preference: NotificationPreference | None,
    recipient: Recipient | None = None,
) -> bool:
    """Apply the gating rules in order; the first match wins."""
    if preference is None:
        return True

    if event.event_type in CRITICAL_EVENTS:
        return True

    if preference.critical_only:
        return False

    key = PREFERENCE_KEYS.get(event.event_type)
    if key is not None and not preference.category_enabled(key):
        return False

    return True


class PreferenceGate:
    """Loads recipient preferences and applies the gating rules."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        cache: PreferenceCache | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._cache = cache

    async def load(
        self, tenant_id: str, recipients: Sequence[Recipient]
    ) -> dict[str, NotificationPreference]:
        """Get one preference per recipient email, defaulting to all-enabled.

        Emails not in the cache are fetched with a single query. A failed
        query falls back to defaults rather than blocking delivery.
        """
        prefs: dict[str, NotificationPreference] = {}
        missing: list[str] = []

        for recipient in recipients:
            cached = self._cache.get(tenant_id, recipient.email) if self._cache else None
            if cached is not None:
                prefs[recipient.email] = cached
            else:
                missing.append(recipient.email)

        if not missing:
            return prefs

        try:
            async with self._uow_factory() as uow:
                stored = await uow.preferences.filter(tenant_id, missing)
        except Exception as e:
            logger.warning(
                "notification_preferences_lookup_failed",
                tenant_id=tenant_id,
                recipient_count=len(missing),
                error=str(e),
            )
            for email in missing:
                prefs[email] = NotificationPreference.default(tenant_id, email)
            return prefs

        by_email = {p.user_email.casefold(): p for p in stored}
        fetched: list[NotificationPreference] = []
        for email in missing:
            pref = by_email.get(email.casefold())
            if pref is None:
                pref = NotificationPreference.default(tenant_id, email)
            prefs[email] = pref
            fetched.append(pref)

        if self._cache is not None:
            self._cache.put_many(fetched)

        return prefs

    def should_notify(
        self,
        event: ActivityEvent,
        preference: NotificationPreference | None,
        recipient: Recipient | None = None,
    ) -> bool:
        return should_notify(event, preference, recipient)
