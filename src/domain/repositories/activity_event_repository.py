"""Activity event repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.event import ActivityEvent


class IActivityEventRepository(Protocol):
    """Repository interface for persisted ActivityEvent entries."""

    async def create(self, event: ActivityEvent) -> ActivityEvent:
        """Persist a new, unprocessed event."""
        ...

    async def mark_processed(self, event_id: UUID) -> bool:
        """Flag an event as handled by the notification engine."""
        ...
