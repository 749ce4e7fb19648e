"""SQLAlchemy implementation of ActivityEvent repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.event import ActivityEvent, ChannelKind, EventKind
from infrastructure.database.models import ActivityEventModel


class SQLAlchemyActivityEventRepository:
    """SQLAlchemy implementation of IActivityEventRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, event: ActivityEvent) -> ActivityEvent:
        """Persist a new, unprocessed event."""
        model = ActivityEventModel(
            id=event.id,
            tenant_id=event.tenant_id,
            event_type=event.event_type.value,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            entity_name=event.entity_name,
            actor_email=event.actor_email,
            actor_name=event.actor_name,
            metadata_=dict(event.metadata),
            notification_channels=sorted(c.value for c in event.notification_channels),
            processed=False,
            created_at=event.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def mark_processed(self, event_id: UUID) -> bool:
        """Flag an event as handled by the notification engine."""
        stmt = (
            update(ActivityEventModel)
            .where(ActivityEventModel.id == event_id)
            .values(processed=True, processed_at=datetime.utcnow())
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0  # type: ignore[attr-defined, no-any-return]

    @staticmethod
    def _to_entity(model: ActivityEventModel) -> ActivityEvent:
        return ActivityEvent(
            id=model.id,
            event_type=EventKind(model.event_type),
            tenant_id=model.tenant_id,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            entity_name=model.entity_name,
            actor_email=model.actor_email,
            actor_name=model.actor_name,
            metadata=dict(model.metadata_ or {}),
            notification_channels=frozenset(
                ChannelKind(c) for c in model.notification_channels or []
            ),
            created_at=model.created_at,
        )
