"""Context resolver: who hears about an event, and which project it links to.

Every event kind maps to one resolution rule in ``RESOLUTION_RULES``. A rule
is a small async function that reads the event, issues only the entity
lookups it needs, and returns the raw recipients plus the project id. The
resolver then deduplicates recipients and removes the actor.
"""

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

import structlog

from domain.entities.event import ActivityEvent, EventKind
from domain.entities.notification import Recipient, ResolvedContext
from domain.entities.project import Project, ProjectRoles, Task, UserRoles
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class EntityLookups:
    """Entity reads used by resolution rules.

    Each lookup logs and swallows its own failure and returns an empty
    value, so a rule keeps whatever the other lookups produced.
    """

    def __init__(self, uow: IUnitOfWork) -> None:
        self._uow = uow

    async def _guard(
        self, lookup: str, call: Callable[[], Awaitable[Any]], empty: Any, **context: Any
    ) -> Any:
        try:
            return await call()
        except Exception as e:
            logger.warning("entity_lookup_failed", lookup=lookup, error=str(e), **context)
            await self._uow.rollback()
            return empty

    async def task(self, task_id: str) -> Task | None:
        task = await self._guard(
            "task", lambda: self._uow.tasks.find_by_id(task_id), None, task_id=task_id
        )
        if task is None:
            logger.debug("entity_not_found", entity_type="task", entity_id=task_id)
        return task  # type: ignore[no-any-return]

    async def project(self, project_id: str) -> Project | None:
        project = await self._guard(
            "project",
            lambda: self._uow.projects.find_by_id(project_id),
            None,
            project_id=project_id,
        )
        if project is None:
            logger.debug("entity_not_found", entity_type="project", entity_id=project_id)
        return project  # type: ignore[no-any-return]

    async def project_id_of_task(self, task_id: str | None) -> str | None:
        if not task_id:
            return None
        task = await self.task(task_id)
        return task.project_id if task else None

    async def project_managers(self, project_id: str) -> list[Recipient]:
        roles = await self._guard(
            "project_roles",
            lambda: self._uow.project_roles.filter(project_id, ProjectRoles.PROJECT_MANAGER),
            [],
            project_id=project_id,
        )
        return [Recipient(r.user_email) for r in roles]

    async def tenant_admins(self, tenant_id: str) -> list[Recipient]:
        admins = await self._guard(
            "tenant_admins",
            lambda: self._uow.users.filter(tenant_id, UserRoles.ADMIN),
            [],
            tenant_id=tenant_id,
        )
        return [Recipient(u.email) for u in admins]

    async def team_members(self, project_id: str) -> list[Recipient]:
        project = await self.project(project_id)
        if project is None:
            return []
        return [Recipient(m.email) for m in project.team_members]


ResolutionRule = Callable[[ActivityEvent, EntityLookups], Awaitable[ResolvedContext]]


def _as_emails(value: Any) -> list[str]:
    """Accept a single email or a list of emails from event metadata."""
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [v for v in value if isinstance(v, str)]


def _from_metadata(event: ActivityEvent, key: str) -> list[Recipient]:
    return [Recipient(email) for email in _as_emails(event.metadata.get(key))]


def _initial_project_id(event: ActivityEvent) -> str | None:
    project_id = event.metadata.get("project_id")
    if project_id:
        return str(project_id)
    if event.entity_type == "project":
        return event.entity_id
    return None


def _context(recipients: Iterable[Recipient], project_id: str | None) -> ResolvedContext:
    return ResolvedContext(recipients=tuple(recipients), project_id=project_id)


# --- Rules ---


async def resolve_task_assigned(event: ActivityEvent, lookups: EntityLookups) -> ResolvedContext:
    project_id = _initial_project_id(event)
    if not project_id:
        project_id = await lookups.project_id_of_task(event.entity_id)
    return _context(_from_metadata(event, "assigned_to"), project_id)


async def resolve_task_completed(event: ActivityEvent, lookups: EntityLookups) -> ResolvedContext:
    project_id = _initial_project_id(event)
    if not project_id:
        project_id = await lookups.project_id_of_task(event.entity_id)
    if not project_id:
        return _context([], None)

    recipients: list[Recipient] = []
    project = await lookups.project(project_id)
    if project is not None and project.owner:
        recipients.append(Recipient(project.owner))
    recipients.extend(await lookups.project_managers(project_id))
    return _context(recipients, project_id)


async def resolve_timesheet_submitted(
    event: ActivityEvent, lookups: EntityLookups
) -> ResolvedContext:
    project_id = _initial_project_id(event)
    recipients: list[Recipient] = []
    if project_id:
        recipients.extend(await lookups.project_managers(project_id))
    recipients.extend(await lookups.tenant_admins(event.tenant_id))
    return _context(recipients, project_id)


async def resolve_timesheet_reviewed(
    event: ActivityEvent, lookups: EntityLookups
) -> ResolvedContext:
    return _context(_from_metadata(event, "user_email"), _initial_project_id(event))


async def resolve_tenant_admins(event: ActivityEvent, lookups: EntityLookups) -> ResolvedContext:
    return _context(await lookups.tenant_admins(event.tenant_id), _initial_project_id(event))


async def resolve_ticket_assigned(event: ActivityEvent, lookups: EntityLookups) -> ResolvedContext:
    return _context(_from_metadata(event, "assigned_to"), _initial_project_id(event))


async def resolve_ticket_sla_breached(
    event: ActivityEvent, lookups: EntityLookups
) -> ResolvedContext:
    recipients = _from_metadata(event, "assigned_to")
    recipients.extend(await lookups.tenant_admins(event.tenant_id))
    return _context(recipients, _initial_project_id(event))


async def resolve_comment_mention(event: ActivityEvent, lookups: EntityLookups) -> ResolvedContext:
    project_id = _initial_project_id(event)
    if event.entity_type == "task" and not project_id:
        project_id = await lookups.project_id_of_task(event.entity_id)
    elif event.entity_type == "project":
        project_id = event.entity_id
    return _context(_from_metadata(event, "mentions"), project_id)


async def resolve_comment_added(event: ActivityEvent, lookups: EntityLookups) -> ResolvedContext:
    project_id = _initial_project_id(event)
    recipients: list[Recipient] = []

    if event.entity_type == "task":
        task = await lookups.task(event.entity_id)
        if task is not None:
            project_id = task.project_id or project_id
            recipients.extend(Recipient(email) for email in task.assigned_to)
    elif event.entity_type == "project":
        project_id = event.entity_id
        recipients.extend(await lookups.team_members(event.entity_id))

    return _context(recipients, project_id)


async def resolve_client_comment_added(
    event: ActivityEvent, lookups: EntityLookups
) -> ResolvedContext:
    project_id = _initial_project_id(event)
    if not project_id:
        return _context([], None)
    return _context(await lookups.project_managers(project_id), project_id)


async def resolve_project_updated(event: ActivityEvent, lookups: EntityLookups) -> ResolvedContext:
    project_id = event.entity_id
    return _context(await lookups.team_members(project_id), project_id)


async def resolve_milestone_completed(
    event: ActivityEvent, lookups: EntityLookups
) -> ResolvedContext:
    project_id = _initial_project_id(event)
    if not project_id:
        return _context([], None)
    return _context(await lookups.team_members(project_id), project_id)


RESOLUTION_RULES: dict[EventKind, ResolutionRule] = {
    EventKind.TASK_ASSIGNED: resolve_task_assigned,
    EventKind.TASK_COMPLETED: resolve_task_completed,
    EventKind.TIMESHEET_SUBMITTED: resolve_timesheet_submitted,
    EventKind.TIMESHEET_APPROVED: resolve_timesheet_reviewed,
    EventKind.TIMESHEET_REJECTED: resolve_timesheet_reviewed,
    EventKind.TICKET_CREATED: resolve_tenant_admins,
    EventKind.TICKET_ASSIGNED: resolve_ticket_assigned,
    EventKind.TICKET_SLA_BREACHED: resolve_ticket_sla_breached,
    EventKind.COMMENT_MENTION: resolve_comment_mention,
    EventKind.COMMENT_ADDED: resolve_comment_added,
    EventKind.CLIENT_COMMENT_ADDED: resolve_client_comment_added,
    EventKind.PROJECT_UPDATED: resolve_project_updated,
    EventKind.MILESTONE_COMPLETED: resolve_milestone_completed,
    EventKind.APPROVAL_REQUESTED: resolve_tenant_admins,
    EventKind.LEAVE_CANCELLED: resolve_tenant_admins,
}


def finalize_recipients(
    recipients: Iterable[Recipient], actor_email: str | None
) -> tuple[Recipient, ...]:
    """Drop blanks and duplicates (first occurrence wins) and the actor.

    Emails are compared case-insensitively.
    """
    actor = actor_email.strip().casefold() if actor_email else None
    seen: set[str] = set()
    result: list[Recipient] = []

    for recipient in recipients:
        email = recipient.email.strip()
        key = email.casefold()
        if not key or key in seen or key == actor:
            continue
        seen.add(key)
        result.append(Recipient(email))

    return tuple(result)


class ContextResolver:
    """Runs the resolution rule for an event's kind."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        rules: dict[EventKind, ResolutionRule] | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._rules = rules if rules is not None else RESOLUTION_RULES

    async def resolve(self, event: ActivityEvent) -> ResolvedContext:
        """Resolve recipients and project id. Never raises.

        Returns:
            The resolved context, or an empty one when resolution fails.
        """
        rule = self._rules.get(event.event_type)
        if rule is None:
            logger.warning("resolution_rule_missing", event_type=str(event.event_type))
            return ResolvedContext()

        try:
            async with self._uow_factory() as uow:
                raw = await rule(event, EntityLookups(uow))
        except Exception as e:
            logger.error(
                "context_resolution_failed",
                event_type=str(event.event_type),
                event_id=str(event.id),
                error=str(e),
                exc_info=True,
            )
            return ResolvedContext()

        return ResolvedContext(
            recipients=finalize_recipients(raw.recipients, event.actor_email),
            project_id=raw.project_id,
        )
